"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real database. Tables are created before and dropped after
every test, so no test data persists.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from club_ledger.main import app
from club_ledger.models import Base
from club_ledger.models.base import get_db
from club_ledger.models.enums import AdjustType, Category
from club_ledger.schemas.member import MemberCreate
from club_ledger.schemas.transaction import AdjustmentCreate
from club_ledger.services.member_service import MemberService


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client wired to the test database by
    overriding the get_db dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Builders shared by the service tests ---

@pytest.fixture
def make_member(db_session):
    """Factory: create and commit a member, optionally with seed balances."""
    def _make(name="Test Member", **seeds):
        member = MemberService(db_session).create_member(
            MemberCreate(name=name, **seeds)
        )
        db_session.commit()
        return member
    return _make


def build_adjustment(
    category=Category.CASH,
    adjust_type=AdjustType.INCREASE,
    magnitude=Decimal("100"),
    transaction_date=date(2025, 1, 1),
    description="adjustment",
    notes=None,
):
    return AdjustmentCreate(
        category=category,
        adjust_type=adjust_type,
        magnitude=magnitude,
        transaction_date=transaction_date,
        description=description,
        notes=notes,
    )


@pytest.fixture
def adjustment():
    """Factory for AdjustmentCreate requests with sensible defaults."""
    return build_adjustment
