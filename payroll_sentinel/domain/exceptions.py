"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidArgumentError(DomainException, ValueError):
    """Input to the risk engine is outside its domain (negative payroll, bad date)"""

    pass


class BankAPIError(DomainException):
    """Bank API returned an error or is unavailable"""

    pass


class PayrollAPIError(DomainException):
    """Payroll API returned an error or is unavailable"""

    pass
