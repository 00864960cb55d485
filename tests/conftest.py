"""Pytest configuration and shared fixtures for DebtSage tests.

This module provides database fixtures, debt factories, and helper utilities
for testing the payoff engine, repositories, and services without touching a
real data directory.
"""

from __future__ import annotations

import tempfile
from decimal import Decimal
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from debtsage.models import Debt, DebtPayment, DebtPlan  # noqa: F401
from debtsage.infra.repositories import SQLModelDebtRepository
from debtsage.services.debts import DebtSnapshot
from debtsage.services.planner import DebtPlanner

# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point configuration at a throwaway data directory for every test."""

    monkeypatch.setenv("DEBTSAGE_DATA_DIR", str(tmp_path / "instance"))
    for name in (
        "DEBTSAGE_DATABASE_URL",
        "DEBTSAGE_DEV_MODE",
        "DEBTSAGE_MAX_PAYOFF_MONTHS",
        "DEBTSAGE_DEFAULT_STRATEGY",
    ):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what repositories expect (Callable[[], Session])."""

    def factory():
        """Create a new Session with expire_on_commit disabled."""
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def debt_repository(session_factory):
    return SQLModelDebtRepository(session_factory)


@pytest.fixture
def planner(debt_repository):
    return DebtPlanner(debt_repository)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def debt_factory(debt_repository):
    """Factory for creating persisted debts.

    Returns:
        Callable: Function that creates and persists Debt instances
    """

    def _create_debt(
        name: str = "Test Debt",
        balance: float = 1000.00,
        interest_rate: float = 18.0,
        min_payment: float = 25.00,
        original_balance: float | None = None,
    ) -> Debt:
        """Create a test debt with sensible defaults.

        Args:
            name: Debt name/description
            balance: Current outstanding balance
            interest_rate: Annual percentage rate (e.g., 18.0 for 18%)
            min_payment: Minimum monthly payment
            original_balance: Defaults to ``balance``

        Returns:
            Debt: Persisted debt instance
        """
        debt = Debt(
            name=name,
            balance=balance,
            original_balance=balance if original_balance is None else original_balance,
            interest_rate=interest_rate,
            min_payment=min_payment,
        )
        return debt_repository.create(debt)

    return _create_debt


@pytest.fixture
def three_debts() -> list[DebtSnapshot]:
    """Card A, Card B and Card C from the reference payoff scenario."""

    return [
        DebtSnapshot(id=1, name="Card A", balance="5000", interest_rate="19.99", min_payment="150"),
        DebtSnapshot(id=2, name="Card B", balance="3000", interest_rate="15.50", min_payment="90"),
        DebtSnapshot(id=3, name="Card C", balance="2000", interest_rate="22.00", min_payment="75"),
    ]


# =============================================================================
# Helpers
# =============================================================================


def assert_float_equal(actual, expected, tolerance: float = 0.01):
    """Assert that two amounts are equal within a tolerance.

    Args:
        actual: Actual value (float or Decimal)
        expected: Expected value (float or Decimal)
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)

    Raises:
        AssertionError: If values differ by more than tolerance
    """
    difference = abs(Decimal(str(actual)) - Decimal(str(expected)))
    assert difference < Decimal(str(tolerance)), (
        f"Expected {expected}, got {actual} (difference: {difference})"
    )
