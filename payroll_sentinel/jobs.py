"""Periodic monitoring job: assess every configured company and alert on risk"""

import asyncio
import logging
from typing import Dict, Iterable, Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from payroll_sentinel.config import settings
from payroll_sentinel.domain.exceptions import DomainException
from payroll_sentinel.domain.risk_engine import calculate_risk_score
from payroll_sentinel.infrastructure.clients.bank import BankClient
from payroll_sentinel.infrastructure.clients.payroll import PayrollClient
from payroll_sentinel.infrastructure.clients.slack import SlackNotifier
from payroll_sentinel.infrastructure.database.repositories import AssessmentRepository
from payroll_sentinel.infrastructure.database.session import SessionLocal
from payroll_sentinel.infrastructure.observability.logging import setup_logging
from payroll_sentinel.infrastructure.observability.metrics import record_assessment
from payroll_sentinel.services.monitoring import RiskMonitor

logger = logging.getLogger(__name__)


async def _check_company(monitor: RiskMonitor, company_id: str, session_factory: sessionmaker) -> str:
    """Assess, store and alert for one company; returns the outcome label"""
    try:
        assessment = await monitor.assess_company(company_id)
    except DomainException as e:
        logger.error(f"Assessment failed: {e}", extra={"company_id": company_id, "step": "job_assess"})
        return "failed"

    risk_score = calculate_risk_score(assessment)
    db: Session = session_factory()
    try:
        AssessmentRepository(db).create_assessment(assessment, risk_score)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storing assessment failed: {e}", extra={"company_id": company_id, "step": "job_store"})
        return "failed"
    finally:
        db.close()

    record_assessment(assessment.risk_level, risk_score)

    try:
        alerted = await monitor.notify(assessment)
    except (httpx.HTTPError, SQLAlchemyError) as e:
        logger.error(f"Alert failed: {e}", extra={"company_id": company_id, "step": "job_alert"})
        alerted = False

    logger.info(
        "Company checked",
        extra={
            "company_id": company_id,
            "step": "job_company_checked",
            "risk_level": assessment.risk_level.value,
            "risk_score": risk_score,
            "alerted": alerted,
        },
    )
    return "alerted" if alerted else assessment.risk_level.value


async def run_monitoring_cycle(
    company_ids: Iterable[str],
    monitor: Optional[RiskMonitor] = None,
    session_factory: Optional[sessionmaker] = None,
) -> Dict[str, str]:
    """
    Run one monitoring pass over all companies concurrently.

    A failure for one company is logged and reported as "failed"; the
    others still run.

    Returns:
        Mapping of company_id to outcome: safe, warning, critical, alerted or failed
    """
    if session_factory is None:
        session_factory = SessionLocal
    if monitor is None:
        monitor = RiskMonitor(BankClient(), PayrollClient(), SlackNotifier(), session_factory=session_factory)

    company_ids = list(company_ids)
    outcomes = await asyncio.gather(
        *(_check_company(monitor, company_id, session_factory) for company_id in company_ids),
        return_exceptions=True,
    )

    results: Dict[str, str] = {}
    for company_id, outcome in zip(company_ids, outcomes):
        if isinstance(outcome, Exception):
            logger.error(
                f"Unexpected error checking company: {outcome!r}",
                extra={"company_id": company_id, "step": "job_unexpected"},
            )
            outcome = "failed"
        results[company_id] = outcome
    return results


def main() -> None:
    """Console entry point for cron/scheduler invocation"""
    setup_logging(settings.log_level)
    results = asyncio.run(run_monitoring_cycle(settings.monitored_company_ids))
    logger.info("Monitoring cycle complete", extra={"step": "job_complete", "results": results})


if __name__ == "__main__":
    main()
