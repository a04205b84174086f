"""Data access layer for risk assessments and delivered alerts"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from payroll_sentinel.infrastructure.database.models import AlertRecord, RiskAssessmentRecord
from payroll_sentinel.domain.models import Projection, RiskAssessment


def projection_to_dict(projection: Projection) -> Dict[str, Any]:
    """JSON-safe projection; amounts kept as strings to preserve cents"""
    return {
        "date": projection.date.isoformat(),
        "expected_inflow": str(projection.expected_inflow),
        "expected_outflow": str(projection.expected_outflow),
        "net_flow": str(projection.net_flow),
        "running_balance": str(projection.running_balance),
        "risk_level": projection.risk_level.value,
        "description": projection.description,
    }


class AssessmentRepository:
    """Repository for risk assessments"""

    def __init__(self, db: Session):
        self.db = db

    def create_assessment(self, assessment: RiskAssessment, risk_score: int) -> RiskAssessmentRecord:
        """Persist a risk assessment to database"""
        record = RiskAssessmentRecord(
            company_id=assessment.company_id,
            current_balance=assessment.current_balance,
            required_float=assessment.required_float,
            risk_level=assessment.risk_level.value,
            risk_score=risk_score,
            days_until_risk=assessment.days_until_risk,
            recommendations=list(assessment.recommendations),
            projections=[projection_to_dict(p) for p in assessment.projections],
            next_payroll_date=assessment.next_payroll_date,
            next_payroll_amount=assessment.next_payroll_amount,
            assessment_date=assessment.assessment_date,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def get_assessments_by_company(self, company_id: str, limit: int = 10) -> List[RiskAssessmentRecord]:
        """Fetch recent assessments for a company"""
        return (
            self.db.query(RiskAssessmentRecord)
            .filter(RiskAssessmentRecord.company_id == company_id)
            .order_by(RiskAssessmentRecord.assessment_date.desc())
            .limit(limit)
            .all()
        )

    def get_assessment_by_id(self, assessment_id: uuid.UUID) -> Optional[RiskAssessmentRecord]:
        return (
            self.db.query(RiskAssessmentRecord)
            .filter(RiskAssessmentRecord.id == assessment_id)
            .first()
        )


class AlertRepository:
    """Repository for delivered Slack alerts"""

    def __init__(self, db: Session):
        self.db = db

    def record_alert(self, company_id: str, risk_level: str, sent_at: datetime) -> AlertRecord:
        record = AlertRecord(company_id=company_id, risk_level=risk_level, sent_at=sent_at)
        self.db.add(record)
        self.db.flush()
        return record

    def count_alerts_after(self, company_id: str, since: datetime) -> int:
        """Alerts sent to a company strictly after `since`"""
        return (
            self.db.query(AlertRecord)
            .filter(AlertRecord.company_id == company_id, AlertRecord.sent_at > since)
            .count()
        )
