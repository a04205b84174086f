"""GET /v1/risk/history and /v1/risk/assessments/{assessment_id} - stored assessments"""

import uuid
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from payroll_sentinel.api.v1.schemas import HistoryResponse, HistoryItem, StoredAssessmentResponse
from payroll_sentinel.infrastructure.database.session import get_db
from payroll_sentinel.infrastructure.database.repositories import AssessmentRepository

router = APIRouter()


@router.get("/risk/history", response_model=HistoryResponse)
def get_assessment_history(
    company_id: str = Query(..., description="Company identifier"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent risk assessments for a company, newest first.
    """
    records = AssessmentRepository(db).get_assessments_by_company(company_id, limit=limit)

    history_items = [
        HistoryItem(
            assessment_id=str(r.id),
            risk_level=r.risk_level,
            risk_score=r.risk_score,
            current_balance=float(r.current_balance),
            required_float=float(r.required_float),
            days_until_risk=r.days_until_risk,
            assessment_date=r.assessment_date.isoformat(),
        )
        for r in records
    ]

    return HistoryResponse(company_id=company_id, assessments=history_items)


@router.get("/risk/assessments/{assessment_id}", response_model=StoredAssessmentResponse)
def get_assessment(assessment_id: str, db: Session = Depends(get_db)):
    try:
        assessment_uuid = uuid.UUID(assessment_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid assessment ID format")

    record = AssessmentRepository(db).get_assessment_by_id(assessment_uuid)

    if not record:
        raise HTTPException(status_code=404, detail="Assessment not found")

    return StoredAssessmentResponse(
        assessment_id=str(record.id),
        company_id=record.company_id,
        current_balance=float(record.current_balance),
        required_float=float(record.required_float),
        risk_level=record.risk_level,
        risk_score=record.risk_score,
        days_until_risk=record.days_until_risk,
        recommendations=record.recommendations,
        projections=record.projections,
        assessment_date=record.assessment_date.isoformat(),
        next_payroll_date=record.next_payroll_date,
        next_payroll_amount=float(record.next_payroll_amount) if record.next_payroll_amount is not None else None,
    )
