"""Debt, payment and plan entities."""

from __future__ import annotations

import datetime as dt
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Debt(SQLModel, table=True):
    """Installment or revolving debt with its live balance."""

    __tablename__: ClassVar[str] = "debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    balance: float = Field(nullable=False, ge=0)
    original_balance: float = Field(nullable=False, ge=0)
    interest_rate: float = Field(default=0.0, nullable=False, description="Annual percentage")
    min_payment: float = Field(default=0.0, nullable=False, ge=0)
    created_at: dt.datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: dt.datetime = Field(default_factory=_utcnow, nullable=False)


class DebtPayment(SQLModel, table=True):
    """A real payment applied against a debt's balance."""

    __tablename__: ClassVar[str] = "debt_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    debt_id: int = Field(foreign_key="debt.id", nullable=False, index=True)
    amount: float = Field(nullable=False)
    date: dt.date = Field(nullable=False, index=True)
    plan_id: Optional[int] = Field(default=None, foreign_key="debt_plan.id")
    created_at: dt.datetime = Field(default_factory=_utcnow, nullable=False)


class DebtPlan(SQLModel, table=True):
    """Metadata for a calculated payoff plan; schedules are recomputed on load."""

    __tablename__: ClassVar[str] = "debt_plan"

    id: Optional[int] = Field(default=None, primary_key=True)
    strategy: str = Field(nullable=False, max_length=32)
    monthly_amount: float = Field(nullable=False)
    start_date: dt.date = Field(nullable=False)
    created_at: dt.datetime = Field(default_factory=_utcnow, nullable=False)
