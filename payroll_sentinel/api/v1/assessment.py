"""POST /v1/risk/assess and /v1/risk/check/{company_id} - payroll risk assessment endpoints"""

import time
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from payroll_sentinel.api.v1.schemas import AssessmentRequest, AssessmentResponse
from payroll_sentinel.api.dependencies import get_request_id, get_risk_monitor
from payroll_sentinel.config import settings
from payroll_sentinel.infrastructure.database.session import get_db
from payroll_sentinel.infrastructure.database.repositories import AssessmentRepository
from payroll_sentinel.domain.models import RiskAssessment
from payroll_sentinel.domain.risk_engine import perform_risk_assessment, calculate_risk_score
from payroll_sentinel.domain.formatting import generate_risk_summary
from payroll_sentinel.domain.exceptions import BankAPIError, PayrollAPIError, InvalidArgumentError
from payroll_sentinel.services.monitoring import RiskMonitor
from payroll_sentinel.infrastructure.observability.metrics import record_assessment
from payroll_sentinel.infrastructure.observability.logging import log_assessment

router = APIRouter()


def _store_and_respond(
    db: Session,
    assessment: RiskAssessment,
    request_id: str,
    start_time: float,
    alert_scheduled: bool = False,
) -> AssessmentResponse:
    """Persist, record metrics and logs, build response"""
    risk_score = calculate_risk_score(assessment)
    record = AssessmentRepository(db).create_assessment(assessment, risk_score)
    db.commit()

    duration_ms = (time.time() - start_time) * 1000
    record_assessment(assessment.risk_level, risk_score)
    log_assessment(
        request_id,
        assessment.company_id,
        assessment.risk_level.value,
        risk_score,
        assessment.days_until_risk,
        duration_ms,
    )

    return AssessmentResponse.from_domain(
        assessment,
        risk_score=risk_score,
        summary=generate_risk_summary(assessment),
        assessment_id=str(record.id),
        alert_scheduled=alert_scheduled,
    )


async def _deliver_alert(
    monitor: RiskMonitor,
    assessment: RiskAssessment,
    request_id: str,
    company_name: Optional[str] = None,
) -> None:
    """Background alert delivery; failures are logged, the assessment is already stored"""
    try:
        await monitor.notify(assessment, company_name)
    except (httpx.HTTPError, SQLAlchemyError) as e:
        logging.error(f"Slack alert delivery failed: {e}", extra={"request_id": request_id})


@router.post("/risk/assess", response_model=AssessmentResponse)
def create_assessment(
    request_body: AssessmentRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Assess a caller-supplied cash snapshot.

    Obligations must be sorted soonest first; the first one drives the
    headline risk level and days until risk.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        assessment = perform_risk_assessment(
            request_body.company_id,
            request_body.current_balance,
            [o.to_domain() for o in request_body.obligations],
            [i.to_domain() for i in request_body.inflows],
            safety_multiplier=settings.float_safety_multiplier,
        )
        return _store_and_respond(db, assessment, request_id, start_time)

    except InvalidArgumentError as e:
        db.rollback()
        logging.warning(f"Invalid assessment input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/risk/check/{company_id}", response_model=AssessmentResponse)
async def check_company(
    company_id: str,
    background_tasks: BackgroundTasks,
    request: Request,
    company_name: Optional[str] = None,
    db: Session = Depends(get_db),
    monitor: RiskMonitor = Depends(get_risk_monitor),
):
    """
    Assess a company from live bank and payroll data.

    Flow:
    1. Fetch balance, expected inflows and payroll runs
    2. Run the risk engine
    3. Persist assessment
    4. Schedule a Slack alert for warning/critical results (cooldown and daily cap apply)
    5. Return assessment with score
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        assessment = await monitor.assess_company(company_id)

        alert_scheduled = monitor.notifier.should_alert(assessment)
        if alert_scheduled:
            background_tasks.add_task(_deliver_alert, monitor, assessment, request_id, company_name)

        return _store_and_respond(db, assessment, request_id, start_time, alert_scheduled)

    except (BankAPIError, PayrollAPIError) as e:
        db.rollback()
        logging.error(f"Upstream API error: {e}", extra={"request_id": request_id, "company_id": company_id})
        raise HTTPException(status_code=503, detail="Bank or payroll service unavailable")

    except InvalidArgumentError as e:
        db.rollback()
        logging.warning(f"Invalid upstream data: {e}", extra={"request_id": request_id, "company_id": company_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
