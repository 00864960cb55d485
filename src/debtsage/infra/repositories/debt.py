"""SQLModel implementation of the debt repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from sqlmodel import Session, select

from ...errors import DebtNotFoundError
from ...models.debt import Debt, DebtPayment, DebtPlan


class SQLModelDebtRepository:
    """SQLModel-based debt repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, debt_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        with self.session_factory() as session:
            return session.get(Debt, debt_id)

    def list_all(self) -> list[Debt]:
        """List all debts, largest balance first."""
        with self.session_factory() as session:
            statement = select(Debt).order_by(Debt.balance.desc(), Debt.id)  # type: ignore
            return list(session.exec(statement).all())

    def list_open(self) -> list[Debt]:
        """List debts with a balance above zero."""
        with self.session_factory() as session:
            statement = (
                select(Debt)
                .where(Debt.balance > 0)
                .order_by(Debt.id)  # type: ignore
            )
            return list(session.exec(statement).all())

    def create(self, debt: Debt) -> Debt:
        """Create a new debt."""
        with self.session_factory() as session:
            session.add(debt)
            session.commit()
            session.refresh(debt)
            return debt

    def update(self, debt: Debt) -> Debt:
        """Update an existing debt."""
        with self.session_factory() as session:
            debt.updated_at = datetime.now(timezone.utc)
            debt = session.merge(debt)
            session.commit()
            session.refresh(debt)
            return debt

    def delete(self, debt_id: int) -> None:
        """Delete a debt and its payments."""
        with self.session_factory() as session:
            debt = session.get(Debt, debt_id)
            if debt is None:
                return
            payments = session.exec(select(DebtPayment).where(DebtPayment.debt_id == debt_id)).all()
            for payment in payments:
                session.delete(payment)
            session.delete(debt)
            session.commit()

    def add_payment(
        self, payment: DebtPayment, *, settle: Callable[[Debt], Decimal]
    ) -> tuple[DebtPayment, Decimal]:
        """Store a payment and the resulting balance in one transaction.

        ``settle`` receives the debt row as loaded in this transaction and
        returns its new balance; anything it raises aborts the write.
        """
        with self.session_factory() as session:
            debt = session.get(Debt, payment.debt_id, with_for_update=True)
            if debt is None:
                raise DebtNotFoundError(payment.debt_id)
            updated = settle(debt)
            debt.balance = float(updated)
            debt.updated_at = datetime.now(timezone.utc)
            session.add(debt)
            session.add(payment)
            session.commit()
            session.refresh(payment)
            return payment, updated

    def list_payments(
        self, debt_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[DebtPayment]:
        """List payments for a debt, newest first, within an inclusive date range."""
        with self.session_factory() as session:
            statement = select(DebtPayment).where(DebtPayment.debt_id == debt_id)
            if start is not None:
                statement = statement.where(DebtPayment.date >= start)
            if end is not None:
                statement = statement.where(DebtPayment.date <= end)
            statement = statement.order_by(DebtPayment.date.desc(), DebtPayment.id.desc())  # type: ignore
            return list(session.exec(statement).all())

    def create_plan(self, plan: DebtPlan) -> DebtPlan:
        """Store plan metadata."""
        with self.session_factory() as session:
            session.add(plan)
            session.commit()
            session.refresh(plan)
            return plan

    def get_plan(self, plan_id: int) -> Optional[DebtPlan]:
        """Retrieve plan metadata by ID."""
        with self.session_factory() as session:
            return session.get(DebtPlan, plan_id)
