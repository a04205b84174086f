"""Human-readable rendering of risk assessments for alerts and dashboards"""

from decimal import Decimal, ROUND_HALF_UP

from payroll_sentinel.domain.models import Amount, RiskAssessment, RiskLevel, to_decimal

RISK_LEVEL_EMOJIS = {
    RiskLevel.CRITICAL: "🚨",
    RiskLevel.WARNING: "⚠️",
    RiskLevel.SAFE: "✅",
}

RISK_LEVEL_COLORS = {
    RiskLevel.CRITICAL: "#FF4444",
    RiskLevel.WARNING: "#FFA500",
    RiskLevel.SAFE: "#00AA00",
}

UNKNOWN_EMOJI = "❓"
UNKNOWN_COLOR = "#808080"


def format_currency(amount: Amount, cents: bool = True) -> str:
    """Format as US dollars, e.g. 1234.5 -> "$1,234.50", -20 -> "-$20.00" """
    value = to_decimal(amount)
    places = Decimal("0.01") if cents else Decimal("1")
    value = value.quantize(places, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{2 if cents else 0}f}"


def _as_level(risk_level):
    try:
        return RiskLevel(risk_level)
    except ValueError:
        return None


def get_risk_level_emoji(risk_level: str) -> str:
    return RISK_LEVEL_EMOJIS.get(_as_level(risk_level), UNKNOWN_EMOJI)


def get_risk_level_color(risk_level: str) -> str:
    """Hex colour for dashboards"""
    return RISK_LEVEL_COLORS.get(_as_level(risk_level), UNKNOWN_COLOR)


def generate_risk_summary(assessment: RiskAssessment) -> str:
    """One-line headline for an assessment"""
    balance = format_currency(assessment.current_balance)
    emoji = get_risk_level_emoji(assessment.risk_level)

    messages = {
        RiskLevel.CRITICAL: (
            f"{emoji} CRITICAL: Current balance {balance} is insufficient for upcoming payroll. "
            "Immediate action required."
        ),
        RiskLevel.WARNING: (
            f"{emoji} WARNING: Current balance {balance} is approaching minimum requirements. "
            "Monitor closely."
        ),
        RiskLevel.SAFE: (
            f"{emoji} HEALTHY: Current balance {balance} meets payroll requirements. "
            "Continue monitoring."
        ),
    }
    return messages[RiskLevel(assessment.risk_level)]
