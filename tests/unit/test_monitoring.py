"""Unit tests for the risk monitor and the monitoring job"""

import pytest
import httpx
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch
from sqlalchemy.exc import OperationalError
from payroll_sentinel.domain.exceptions import BankAPIError, InvalidArgumentError, PayrollAPIError
from payroll_sentinel.domain.models import Inflow, Obligation, RiskLevel
from payroll_sentinel.infrastructure.clients.slack import SlackNotifier
from payroll_sentinel.infrastructure.database.models import AlertRecord, RiskAssessmentRecord
from payroll_sentinel.infrastructure.database.repositories import AssessmentRepository
from payroll_sentinel.jobs import run_monitoring_cycle
from payroll_sentinel.services.monitoring import RiskMonitor


TODAY = datetime.now(timezone.utc).date()

SNAPSHOTS = {
    "co_safe": (Decimal("50000"), [Obligation(amount=10000, date=TODAY + timedelta(days=10))]),
    "co_critical": (Decimal("5000"), [Obligation(amount=20000, date=TODAY + timedelta(days=1))]),
}


def _monitor(notifier=None, **kwargs):
    bank = MagicMock()
    bank.get_balance = AsyncMock(side_effect=lambda company_id: SNAPSHOTS[company_id][0])
    bank.get_expected_inflows = AsyncMock(return_value=[])
    payroll = MagicMock()
    payroll.get_upcoming_obligations = AsyncMock(side_effect=lambda company_id: SNAPSHOTS[company_id][1])

    if notifier is None:
        notifier = SlackNotifier(webhook_url="http://hooks/alert")
        notifier.send_risk_alert = AsyncMock(return_value=True)
    kwargs.setdefault("safety_multiplier", 1.1)
    return RiskMonitor(bank, payroll, notifier, **kwargs)


async def test_assess_company_combines_sources(now):
    monitor = _monitor()
    monitor.bank_client.get_balance = AsyncMock(return_value=Decimal("20000"))
    monitor.bank_client.get_expected_inflows = AsyncMock(return_value=[Inflow(amount=15000, date="2024-01-20")])
    monitor.payroll_client.get_upcoming_obligations = AsyncMock(
        return_value=[Obligation(amount=10000, date="2024-01-15"), Obligation(amount=12000, date="2024-01-30")]
    )

    assessment = await monitor.assess_company("co1", now=now)

    assert assessment.company_id == "co1"
    assert assessment.required_float == 11000
    assert assessment.risk_level == RiskLevel.SAFE
    assert len(assessment.projections) == 3
    monitor.bank_client.get_balance.assert_awaited_once_with("co1")


async def test_assess_company_propagates_upstream_errors():
    monitor = _monitor()
    monitor.payroll_client.get_upcoming_obligations = AsyncMock(side_effect=PayrollAPIError("down"))

    with pytest.raises(PayrollAPIError):
        await monitor.assess_company("co_safe")


async def test_notify_skips_safe_assessments():
    monitor = _monitor()
    assessment = await monitor.assess_company("co_safe")

    assert await monitor.notify(assessment) is False
    monitor.notifier.send_risk_alert.assert_not_awaited()


async def test_notify_sends_critical_assessments():
    monitor = _monitor()
    assessment = await monitor.assess_company("co_critical")

    assert await monitor.notify(assessment, "Critical Co") is True
    monitor.notifier.send_risk_alert.assert_awaited_once_with(assessment, "Critical Co")


async def test_run_monitoring_cycle_outcomes(session_factory):
    monitor = _monitor()

    results = await run_monitoring_cycle(["co_safe", "co_critical"], monitor=monitor, session_factory=session_factory)

    assert results == {"co_safe": "safe", "co_critical": "alerted"}

    db = session_factory()
    try:
        stored = {r.company_id: r for r in db.query(RiskAssessmentRecord).all()}
    finally:
        db.close()
    assert stored["co_critical"].risk_level == "critical"
    assert stored["co_critical"].risk_score == 70 + 20 + 2


async def test_run_monitoring_cycle_isolates_failures(session_factory):
    monitor = _monitor()

    def balance(company_id):
        if company_id == "co_safe":
            raise BankAPIError("down")
        return SNAPSHOTS[company_id][0]

    monitor.bank_client.get_balance = AsyncMock(side_effect=balance)

    results = await run_monitoring_cycle(["co_safe", "co_critical"], monitor=monitor, session_factory=session_factory)

    assert results == {"co_safe": "failed", "co_critical": "alerted"}


async def test_run_monitoring_cycle_alert_failure_is_logged(session_factory):
    notifier = SlackNotifier(webhook_url="http://hooks/alert")
    notifier.send_risk_alert = AsyncMock(side_effect=httpx.ConnectError("refused"))
    monitor = _monitor(notifier)

    results = await run_monitoring_cycle(["co_critical"], monitor=monitor, session_factory=session_factory)

    assert results == {"co_critical": "critical"}


async def test_explicit_zero_multiplier_is_not_replaced_by_default():
    monitor = _monitor(safety_multiplier=0)

    assert monitor.safety_multiplier == 0
    with pytest.raises(InvalidArgumentError):
        await monitor.assess_company("co_critical")


def _failing_store(error, company_id="co_safe"):
    """create_assessment that raises for one company and stores the rest"""
    original = AssessmentRepository.create_assessment

    def create_assessment(self, assessment, risk_score):
        if assessment.company_id == company_id:
            raise error
        return original(self, assessment, risk_score)

    return patch.object(AssessmentRepository, "create_assessment", autospec=True, side_effect=create_assessment)


async def test_run_monitoring_cycle_isolates_store_failures(session_factory):
    monitor = _monitor()

    with _failing_store(OperationalError("INSERT INTO risk_assessment", {}, Exception("db down"))):
        results = await run_monitoring_cycle(
            ["co_safe", "co_critical"], monitor=monitor, session_factory=session_factory
        )

    assert results == {"co_safe": "failed", "co_critical": "alerted"}

    db = session_factory()
    try:
        stored = [r.company_id for r in db.query(RiskAssessmentRecord).all()]
    finally:
        db.close()
    assert stored == ["co_critical"]


async def test_run_monitoring_cycle_isolates_unexpected_errors(session_factory):
    monitor = _monitor()

    with _failing_store(RuntimeError("db down")):
        results = await run_monitoring_cycle(
            ["co_safe", "co_critical"], monitor=monitor, session_factory=session_factory
        )

    assert results == {"co_safe": "failed", "co_critical": "alerted"}


# Alert throttling

def _alert_count(session_factory, company_id):
    db = session_factory()
    try:
        return db.query(AlertRecord).filter(AlertRecord.company_id == company_id).count()
    finally:
        db.close()


async def test_notify_logs_delivered_alert(session_factory, now):
    monitor = _monitor(session_factory=session_factory)
    assessment = await monitor.assess_company("co_critical", now=now)

    assert await monitor.notify(assessment) is True
    assert _alert_count(session_factory, "co_critical") == 1


async def test_notify_suppressed_during_cooldown(session_factory, now):
    monitor = _monitor(session_factory=session_factory, alert_cooldown_minutes=240)

    first = await monitor.assess_company("co_critical", now=now)
    again = await monitor.assess_company("co_critical", now=now + timedelta(minutes=30))
    later = await monitor.assess_company("co_critical", now=now + timedelta(minutes=241))

    assert await monitor.notify(first) is True
    assert await monitor.notify(again) is False
    assert await monitor.notify(later) is True
    assert monitor.notifier.send_risk_alert.await_count == 2
    assert _alert_count(session_factory, "co_critical") == 2


async def test_notify_cooldown_is_per_company(session_factory, now):
    monitor = _monitor(session_factory=session_factory)
    monitor.bank_client.get_balance = AsyncMock(return_value=Decimal("5000"))
    monitor.payroll_client.get_upcoming_obligations = AsyncMock(return_value=SNAPSHOTS["co_critical"][1])

    assert await monitor.notify(await monitor.assess_company("co_a", now=now)) is True
    assert await monitor.notify(await monitor.assess_company("co_b", now=now)) is True


async def test_notify_daily_limit(session_factory, now):
    monitor = _monitor(session_factory=session_factory, alert_cooldown_minutes=0, max_alerts_per_day=2)

    sent = []
    for minutes in (0, 10, 20):
        assessment = await monitor.assess_company("co_critical", now=now + timedelta(minutes=minutes))
        sent.append(await monitor.notify(assessment))

    assert sent == [True, True, False]

    next_day = await monitor.assess_company("co_critical", now=now + timedelta(days=1, minutes=5))
    assert await monitor.notify(next_day) is True


async def test_notify_failed_delivery_is_not_logged(session_factory, now):
    notifier = SlackNotifier(webhook_url="http://hooks/alert")
    notifier.send_risk_alert = AsyncMock(side_effect=httpx.ConnectError("refused"))
    monitor = _monitor(notifier, session_factory=session_factory)
    assessment = await monitor.assess_company("co_critical", now=now)

    with pytest.raises(httpx.ConnectError):
        await monitor.notify(assessment)

    assert _alert_count(session_factory, "co_critical") == 0


async def test_run_monitoring_cycle_does_not_repeat_alerts(session_factory):
    monitor = _monitor(session_factory=session_factory)

    first = await run_monitoring_cycle(["co_critical"], monitor=monitor, session_factory=session_factory)
    second = await run_monitoring_cycle(["co_critical"], monitor=monitor, session_factory=session_factory)

    assert first == {"co_critical": "alerted"}
    assert second == {"co_critical": "critical"}
    monitor.notifier.send_risk_alert.assert_awaited_once()
