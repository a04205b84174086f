"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker
from payroll_sentinel.infrastructure.clients.bank import BankClient
from payroll_sentinel.infrastructure.clients.payroll import PayrollClient
from payroll_sentinel.infrastructure.clients.slack import SlackNotifier
from payroll_sentinel.infrastructure.database.session import get_session_factory
from payroll_sentinel.services.monitoring import RiskMonitor


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_bank_client() -> BankClient:
    return BankClient()


def get_payroll_client() -> PayrollClient:
    return PayrollClient()


def get_notifier() -> SlackNotifier:
    return SlackNotifier()


def get_risk_monitor(
    bank_client: BankClient = Depends(get_bank_client),
    payroll_client: PayrollClient = Depends(get_payroll_client),
    notifier: SlackNotifier = Depends(get_notifier),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> RiskMonitor:
    """Provide a monitor wired to the configured collaborators and alert log"""
    return RiskMonitor(bank_client, payroll_client, notifier, session_factory=session_factory)
