"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timezone
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from payroll_sentinel.api.main import create_app
from payroll_sentinel.infrastructure.database.models import Base
from payroll_sentinel.infrastructure.database.session import get_db, get_session_factory
from payroll_sentinel.domain.models import Inflow, Obligation


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Session factory bound to the test database (tables already created)"""
    return TestingSessionLocal


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    """Frozen clock: mid-afternoon UTC, five days before the first sample payroll"""
    return datetime(2024, 1, 10, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def sample_obligations() -> list[Obligation]:
    """Two payroll runs in January, soonest first"""
    return [
        Obligation(amount=10000, date=date(2024, 1, 15), employee_count=8),
        Obligation(amount=12000, date=date(2024, 1, 30), employee_count=9),
    ]


@pytest.fixture
def sample_inflows() -> list[Inflow]:
    """Customer payment landing between the two payroll runs"""
    return [Inflow(amount=15000, date=date(2024, 1, 20), description="Invoice #1042", confidence="high")]
