"""SQLAlchemy ORM models for stored risk assessments"""

import uuid
from sqlalchemy import Column, Date, DateTime, Integer, Numeric, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class RiskAssessmentRecord(Base):
    """Payroll risk assessment snapshot"""

    __tablename__ = "risk_assessment"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(Text, nullable=False, index=True)
    current_balance = Column(Numeric(14, 2), nullable=False)
    required_float = Column(Numeric(14, 2), nullable=False)
    risk_level = Column(Text, nullable=False)
    risk_score = Column(Integer, nullable=False)
    days_until_risk = Column(Integer, nullable=False)
    recommendations = Column(JSON, nullable=False)
    projections = Column(JSON, nullable=False)
    next_payroll_date = Column(Date, nullable=True)
    next_payroll_amount = Column(Numeric(14, 2), nullable=True)
    assessment_date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AlertRecord(Base):
    """Slack alert delivered for a company, used for cooldown and daily caps"""

    __tablename__ = "alert_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(Text, nullable=False, index=True)
    risk_level = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=False, index=True)
