"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from payroll_sentinel.utils.date_utils import parse_date

Amount = Union[Decimal, int, float, str]


def to_decimal(value: Amount) -> Decimal:
    """Convert a numeric input to Decimal without picking up float noise"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class RiskLevel(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    CRITICAL = "critical"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Obligation:
    """Scheduled payroll disbursement"""

    amount: Decimal
    date: date
    description: Optional[str] = None
    employee_count: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "date", parse_date(self.date))


@dataclass(frozen=True)
class Inflow:
    """Expected incoming payment"""

    amount: Decimal
    date: date
    description: Optional[str] = None
    confidence: Optional[Confidence] = None

    def __post_init__(self):
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "date", parse_date(self.date))
        if self.confidence is not None:
            object.__setattr__(self, "confidence", Confidence(self.confidence))


@dataclass(frozen=True)
class CashFlowEvent:
    """Obligation or inflow tagged with its direction, used while projecting"""

    kind: str  # "outflow" or "inflow"
    amount: Decimal
    date: date
    description: str


@dataclass
class Projection:
    """Simulated balance after one cash flow event"""

    date: date
    expected_inflow: Decimal
    expected_outflow: Decimal
    net_flow: Decimal
    running_balance: Decimal
    risk_level: RiskLevel
    description: Optional[str] = None


@dataclass
class RiskAssessment:
    """Output of a payroll risk assessment"""

    company_id: str
    current_balance: Decimal
    required_float: Decimal
    risk_level: RiskLevel
    days_until_risk: int
    recommendations: List[str]
    projections: List[Projection]
    assessment_date: datetime
    next_payroll_date: Optional[date] = None
    next_payroll_amount: Optional[Decimal] = None
