"""Unit tests for risk formatting helpers"""

from payroll_sentinel.domain.models import Obligation
from payroll_sentinel.domain.risk_engine import perform_risk_assessment
from payroll_sentinel.domain.formatting import (
    format_currency,
    generate_risk_summary,
    get_risk_level_color,
    get_risk_level_emoji,
)


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(0) == "$0.00"
    assert format_currency(-20) == "-$20.00"
    assert format_currency("1000000") == "$1,000,000.00"


def test_format_currency_whole_dollars():
    assert format_currency(1234.5, cents=False) == "$1,235"


def test_risk_level_emoji_and_color():
    assert get_risk_level_emoji("critical") == "🚨"
    assert get_risk_level_emoji("warning") == "⚠️"
    assert get_risk_level_emoji("safe") == "✅"
    assert get_risk_level_color("critical") == "#FF4444"
    assert get_risk_level_color("safe") == "#00AA00"


def test_unknown_risk_level_falls_back():
    assert get_risk_level_emoji("unknown") == "❓"
    assert get_risk_level_color(None) == "#808080"


def test_generate_risk_summary_per_level(now):
    critical = perform_risk_assessment("co2", 5000, [Obligation(amount=20000, date="2024-01-15")], now=now)
    warning = perform_risk_assessment("co3", 9000, [Obligation(amount=10000, date="2024-01-15")], now=now)
    safe = perform_risk_assessment("co4", 12000.75, [Obligation(amount=10000, date="2024-01-15")], now=now)

    assert generate_risk_summary(critical) == (
        "🚨 CRITICAL: Current balance $5,000.00 is insufficient for upcoming payroll. Immediate action required."
    )
    assert generate_risk_summary(warning).startswith("⚠️ WARNING: Current balance $9,000.00")
    assert generate_risk_summary(safe).startswith("✅ HEALTHY: Current balance $12,000.75")
