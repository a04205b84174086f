"""Cash flow risk engine - core business logic for payroll risk assessment"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence

from payroll_sentinel.domain.exceptions import InvalidArgumentError
from payroll_sentinel.domain.models import (
    Amount,
    CashFlowEvent,
    Inflow,
    Obligation,
    Projection,
    RiskAssessment,
    RiskLevel,
    to_decimal,
)
from payroll_sentinel.utils.date_utils import DateLike, days_until, utc_now

DEFAULT_SAFETY_MULTIPLIER = Decimal("1.1")

# Coverage ratio thresholds (balance / required float)
SAFE_COVERAGE = Decimal("1.0")
WARNING_COVERAGE = Decimal("0.8")

CENT = Decimal("0.01")

BASE_SCORES = {
    RiskLevel.CRITICAL: 70,
    RiskLevel.WARNING: 40,
    RiskLevel.SAFE: 10,
}

# (max days until payroll, points), checked in order
URGENCY_BUCKETS = [(1, 20), (3, 10), (7, 5)]

FUTURE_RISK_POINTS = 2
FUTURE_RISK_CAP = 10
MAX_SCORE = 100

BASE_RECOMMENDATIONS = {
    RiskLevel.CRITICAL: [
        "🚨 IMMEDIATE ACTION REQUIRED: Insufficient funds for upcoming payroll",
        "💳 Consider emergency credit line or business loan",
        "⏸️ Delay non-essential payments until after cash flow improves",
        "📞 Contact banking partner for expedited credit options",
    ],
    RiskLevel.WARNING: [
        "⚠️ Monitor cash flow closely over the next few days",
        "🔄 Prepare backup funding options (credit line, etc.)",
        "📈 Consider accelerating receivables collection",
        "📋 Review and postpone non-critical expenses",
    ],
    RiskLevel.SAFE: [
        "✅ Cash flow is currently healthy",
        "📊 Continue monitoring for any changes",
    ],
}


def calculate_required_float(
    payroll_amount: Amount,
    safety_multiplier: Amount = DEFAULT_SAFETY_MULTIPLIER,
) -> Decimal:
    """
    Cash needed on hand to cover a payroll run with a safety buffer.

    Result is rounded to cents with ROUND_HALF_UP.

    Raises:
        InvalidArgumentError: payroll_amount is negative or the multiplier is not positive
    """
    amount = to_decimal(payroll_amount)
    multiplier = to_decimal(safety_multiplier)

    if amount < 0:
        raise InvalidArgumentError("Payroll amount cannot be negative")
    if multiplier <= 0:
        raise InvalidArgumentError("Safety multiplier must be positive")

    return (amount * multiplier).quantize(CENT, rounding=ROUND_HALF_UP)


def determine_risk_level(current_balance: Amount, required_float: Amount) -> RiskLevel:
    """
    Classify coverage of the required float by the balance.

    - required float of 0: always safe
    - coverage >= 100%: safe
    - coverage 80-99%: warning
    - coverage < 80%: critical (includes any negative balance)
    """
    required = to_decimal(required_float)
    if required == 0:
        return RiskLevel.SAFE

    coverage = to_decimal(current_balance) / required

    if coverage >= SAFE_COVERAGE:
        return RiskLevel.SAFE
    elif coverage >= WARNING_COVERAGE:
        return RiskLevel.WARNING
    else:
        return RiskLevel.CRITICAL


def calculate_days_until(target_date: DateLike, now: Optional[datetime] = None) -> int:
    """Days from now until target_date (negative when it has passed)"""
    return days_until(target_date, now or utc_now())


def _build_events(
    obligations: Iterable[Obligation],
    inflows: Iterable[Inflow],
) -> List[CashFlowEvent]:
    """Merge obligations and inflows into one list ordered by date"""
    events = [
        CashFlowEvent(
            kind="outflow",
            amount=o.amount,
            date=o.date,
            description=o.description or f"Payroll - {o.employee_count or 'N/A'} employees",
        )
        for o in obligations
    ]
    events += [
        CashFlowEvent(
            kind="inflow",
            amount=i.amount,
            date=i.date,
            description=i.description or "Expected income",
        )
        for i in inflows
    ]

    # sorted() is stable: same-day obligations stay ahead of inflows
    return sorted(events, key=lambda e: e.date)


def generate_cash_flow_projections(
    current_balance: Amount,
    obligations: Sequence[Obligation],
    inflows: Sequence[Inflow] = (),
    safety_multiplier: Amount = DEFAULT_SAFETY_MULTIPLIER,
) -> List[Projection]:
    """
    Simulate the account balance across upcoming payroll runs and inflows.

    Requirements:
    - One projection per obligation and per inflow, none dropped
    - Chronological order, same-day ties keep input order
    - running_balance[i] = running_balance[i-1] + net_flow[i], seeded at current_balance
    - Outflows are classified against their own required float; inflows are always safe
    """
    running_balance = to_decimal(current_balance)
    projections = []

    for event in _build_events(obligations, inflows):
        inflow = event.amount if event.kind == "inflow" else Decimal("0")
        outflow = event.amount if event.kind == "outflow" else Decimal("0")
        net_flow = inflow - outflow
        running_balance += net_flow

        required_float = calculate_required_float(outflow, safety_multiplier)

        projections.append(
            Projection(
                date=event.date,
                expected_inflow=inflow,
                expected_outflow=outflow,
                net_flow=net_flow,
                running_balance=running_balance,
                risk_level=determine_risk_level(running_balance, required_float),
                description=event.description,
            )
        )

    return projections


def generate_recommendations(risk_level: RiskLevel, projections: Sequence[Projection]) -> List[str]:
    """
    Action items for the current risk level, followed by a summary of risks
    found further out in the projection.
    """
    recommendations = list(BASE_RECOMMENDATIONS[RiskLevel(risk_level)])

    future_risks = [p for p in projections if p.risk_level != RiskLevel.SAFE]
    if future_risks:
        recommendations.append(f"⚡ {len(future_risks)} potential future cash flow issues detected")

        critical_count = sum(1 for p in future_risks if p.risk_level == RiskLevel.CRITICAL)
        if critical_count:
            recommendations.append(f"🔴 {critical_count} CRITICAL cash flow issues in projections")

    return recommendations


def perform_risk_assessment(
    company_id: str,
    current_balance: Amount,
    obligations: Sequence[Obligation],
    inflows: Sequence[Inflow] = (),
    now: Optional[datetime] = None,
    safety_multiplier: Amount = DEFAULT_SAFETY_MULTIPLIER,
) -> RiskAssessment:
    """
    Main entry point: assess whether the balance covers upcoming payroll.

    The next payroll is the first obligation as given; callers pass
    obligations sorted by date. The clock is read once so assessment_date
    and days_until_risk agree.
    """
    now = now or utc_now()
    balance = to_decimal(current_balance)

    next_payroll = obligations[0] if obligations else None
    required_float = (
        calculate_required_float(next_payroll.amount, safety_multiplier) if next_payroll else Decimal("0")
    )
    risk_level = determine_risk_level(balance, required_float)
    days_until_risk = calculate_days_until(next_payroll.date, now) if next_payroll else 0

    projections = generate_cash_flow_projections(balance, obligations, inflows, safety_multiplier)
    recommendations = generate_recommendations(risk_level, projections)

    return RiskAssessment(
        company_id=company_id,
        current_balance=balance,
        required_float=required_float,
        risk_level=risk_level,
        days_until_risk=days_until_risk,
        recommendations=recommendations,
        projections=projections,
        assessment_date=now,
        next_payroll_date=next_payroll.date if next_payroll and next_payroll.date else None,
        next_payroll_amount=next_payroll.amount if next_payroll and next_payroll.amount else None,
    )


def calculate_risk_score(assessment: RiskAssessment) -> int:
    """
    Risk score from 0 (no risk) to 100 (highest risk).

    Components:
    - Base by level: critical 70, warning 40, safe 10
    - Urgency: +20 within 1 day, +10 within 3, +5 within 7
    - Future risk: +2 per non-safe projection, capped at 10
    """
    score = BASE_SCORES[RiskLevel(assessment.risk_level)]

    for max_days, points in URGENCY_BUCKETS:
        if assessment.days_until_risk <= max_days:
            score += points
            break

    non_safe = sum(1 for p in assessment.projections if p.risk_level != RiskLevel.SAFE)
    score += min(non_safe * FUTURE_RISK_POINTS, FUTURE_RISK_CAP)

    return min(score, MAX_SCORE)
