"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from payroll_sentinel.domain.models import Confidence, Inflow, Obligation, Projection, RiskAssessment, RiskLevel


class ObligationSchema(BaseModel):
    """Upcoming payroll run"""

    amount: Decimal = Field(..., ge=0, description="Payroll amount in dollars")
    date: date
    description: Optional[str] = None
    employee_count: Optional[int] = Field(None, ge=0)

    def to_domain(self) -> Obligation:
        return Obligation(
            amount=self.amount,
            date=self.date,
            description=self.description,
            employee_count=self.employee_count,
        )


class InflowSchema(BaseModel):
    """Expected incoming payment"""

    amount: Decimal = Field(..., ge=0, description="Expected amount in dollars")
    date: date
    description: Optional[str] = None
    confidence: Optional[Confidence] = None

    def to_domain(self) -> Inflow:
        return Inflow(
            amount=self.amount,
            date=self.date,
            description=self.description,
            confidence=self.confidence,
        )


class AssessmentRequest(BaseModel):
    """Request body for POST /v1/risk/assess"""

    company_id: str = Field(..., min_length=1, description="Company identifier")
    current_balance: Decimal
    obligations: List[ObligationSchema] = Field(
        default_factory=list,
        description="Payroll runs, soonest first; the first one is treated as the next payroll",
    )
    inflows: List[InflowSchema] = Field(default_factory=list)


class ProjectionSchema(BaseModel):
    """Single point in the cash flow projection"""

    date: date
    expected_inflow: float
    expected_outflow: float
    net_flow: float
    running_balance: float
    risk_level: RiskLevel
    description: Optional[str] = None

    @classmethod
    def from_domain(cls, projection: Projection) -> "ProjectionSchema":
        return cls(
            date=projection.date,
            expected_inflow=float(projection.expected_inflow),
            expected_outflow=float(projection.expected_outflow),
            net_flow=float(projection.net_flow),
            running_balance=float(projection.running_balance),
            risk_level=projection.risk_level,
            description=projection.description,
        )


class AssessmentResponse(BaseModel):
    """Risk assessment with score and headline"""

    assessment_id: Optional[str] = None
    company_id: str
    current_balance: float
    required_float: float
    risk_level: RiskLevel
    risk_score: int
    days_until_risk: int
    summary: str
    recommendations: List[str]
    projections: List[ProjectionSchema]
    assessment_date: datetime
    next_payroll_date: Optional[date] = None
    next_payroll_amount: Optional[float] = None
    alert_scheduled: bool = False

    @classmethod
    def from_domain(
        cls,
        assessment: RiskAssessment,
        risk_score: int,
        summary: str,
        assessment_id: Optional[str] = None,
        alert_scheduled: bool = False,
    ) -> "AssessmentResponse":
        return cls(
            assessment_id=assessment_id,
            company_id=assessment.company_id,
            current_balance=float(assessment.current_balance),
            required_float=float(assessment.required_float),
            risk_level=assessment.risk_level,
            risk_score=risk_score,
            days_until_risk=assessment.days_until_risk,
            summary=summary,
            recommendations=assessment.recommendations,
            projections=[ProjectionSchema.from_domain(p) for p in assessment.projections],
            assessment_date=assessment.assessment_date,
            next_payroll_date=assessment.next_payroll_date,
            next_payroll_amount=(
                float(assessment.next_payroll_amount) if assessment.next_payroll_amount is not None else None
            ),
            alert_scheduled=alert_scheduled,
        )


class StoredAssessmentResponse(BaseModel):
    """Response for GET /v1/risk/assessments/{assessment_id}"""

    assessment_id: str
    company_id: str
    current_balance: float
    required_float: float
    risk_level: RiskLevel
    risk_score: int
    days_until_risk: int
    recommendations: List[str]
    projections: List[ProjectionSchema]
    assessment_date: str
    next_payroll_date: Optional[date] = None
    next_payroll_amount: Optional[float] = None


class HistoryItem(BaseModel):
    """Single assessment in history"""

    assessment_id: str
    risk_level: RiskLevel
    risk_score: int
    current_balance: float
    required_float: float
    days_until_risk: int
    assessment_date: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/risk/history"""

    company_id: str
    assessments: List[HistoryItem]
