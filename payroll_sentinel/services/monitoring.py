"""Company risk monitoring - gathers a cash snapshot and runs the risk engine"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import sessionmaker

from payroll_sentinel.config import settings
from payroll_sentinel.domain.exceptions import BankAPIError, PayrollAPIError
from payroll_sentinel.domain.models import RiskAssessment
from payroll_sentinel.domain.risk_engine import perform_risk_assessment
from payroll_sentinel.infrastructure.clients.bank import BankClient
from payroll_sentinel.infrastructure.clients.payroll import PayrollClient
from payroll_sentinel.infrastructure.clients.slack import SlackNotifier
from payroll_sentinel.infrastructure.database.repositories import AlertRepository
from payroll_sentinel.infrastructure.observability.metrics import (
    alert_suppressed_counter,
    bank_fetch_failures_counter,
    payroll_fetch_failures_counter,
)

logger = logging.getLogger(__name__)


class RiskMonitor:
    """Ties the balance, inflow and obligation sources to the risk engine"""

    def __init__(
        self,
        bank_client: BankClient,
        payroll_client: PayrollClient,
        notifier: SlackNotifier,
        safety_multiplier: float | None = None,
        session_factory: Optional[sessionmaker] = None,
        alert_cooldown_minutes: int | None = None,
        max_alerts_per_day: int | None = None,
    ):
        self.bank_client = bank_client
        self.payroll_client = payroll_client
        self.notifier = notifier
        if safety_multiplier is None:
            safety_multiplier = settings.float_safety_multiplier
        self.safety_multiplier = safety_multiplier
        self.session_factory = session_factory
        self.alert_cooldown_minutes = (
            settings.alert_cooldown_minutes if alert_cooldown_minutes is None else alert_cooldown_minutes
        )
        self.max_alerts_per_day = settings.max_alerts_per_day if max_alerts_per_day is None else max_alerts_per_day

    async def assess_company(self, company_id: str, now: Optional[datetime] = None) -> RiskAssessment:
        """
        Fetch balance, inflows and payroll runs concurrently, then assess.

        Raises:
            BankAPIError: balance or inflows could not be fetched
            PayrollAPIError: payroll runs could not be fetched
        """
        try:
            balance, inflows, obligations = await asyncio.gather(
                self.bank_client.get_balance(company_id),
                self.bank_client.get_expected_inflows(company_id),
                self.payroll_client.get_upcoming_obligations(company_id),
            )
        except BankAPIError:
            bank_fetch_failures_counter.inc()
            raise
        except PayrollAPIError:
            payroll_fetch_failures_counter.inc()
            raise

        logger.info(
            "Snapshot fetched",
            extra={
                "company_id": company_id,
                "step": "snapshot_fetched",
                "obligation_count": len(obligations),
                "inflow_count": len(inflows),
            },
        )

        return perform_risk_assessment(
            company_id,
            balance,
            obligations,
            inflows,
            now=now,
            safety_multiplier=self.safety_multiplier,
        )

    def _throttle_reason(self, alerts: AlertRepository, company_id: str, now: datetime) -> Optional[str]:
        cooldown_start = now - timedelta(minutes=self.alert_cooldown_minutes)
        if alerts.count_alerts_after(company_id, cooldown_start):
            return "cooldown"
        if alerts.count_alerts_after(company_id, now - timedelta(days=1)) >= self.max_alerts_per_day:
            return "daily_limit"
        return None

    async def notify(self, assessment: RiskAssessment, company_name: Optional[str] = None) -> bool:
        """
        Alert when the assessment is warning or critical; returns whether an alert went out.

        With a session factory, delivered alerts are logged to the database and
        a company is skipped while inside its cooldown window or once it has
        reached the daily cap. Throttle windows are measured from the
        assessment's own timestamp.
        """
        if not self.notifier.should_alert(assessment):
            return False
        if self.session_factory is None:
            return await self.notifier.send_risk_alert(assessment, company_name)

        company_id = assessment.company_id
        now = assessment.assessment_date
        db = self.session_factory()
        try:
            alerts = AlertRepository(db)
            reason = self._throttle_reason(alerts, company_id, now)
            if reason:
                alert_suppressed_counter.labels(reason=reason).inc()
                logger.info(
                    "Alert suppressed",
                    extra={"company_id": company_id, "step": "alert_suppressed", "reason": reason},
                )
                return False

            sent = await self.notifier.send_risk_alert(assessment, company_name)
            if sent:
                alerts.record_alert(company_id, assessment.risk_level.value, now)
                db.commit()
            return sent
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
