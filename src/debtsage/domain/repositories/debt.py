"""Debt repository protocol."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable, Optional, Protocol

from ...models.debt import Debt, DebtPayment, DebtPlan


class DebtRepository(Protocol):
    """Storage for debts, their payments and saved plan metadata."""

    def get_by_id(self, debt_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        ...

    def list_all(self) -> list[Debt]:
        """List all debts."""
        ...

    def list_open(self) -> list[Debt]:
        """List debts with a balance above zero."""
        ...

    def create(self, debt: Debt) -> Debt:
        """Create a new debt."""
        ...

    def update(self, debt: Debt) -> Debt:
        """Update an existing debt."""
        ...

    def delete(self, debt_id: int) -> None:
        """Delete a debt and its payments."""
        ...

    def add_payment(
        self, payment: DebtPayment, *, settle: Callable[[Debt], Decimal]
    ) -> tuple[DebtPayment, Decimal]:
        """Store a payment and the balance ``settle`` derives from the current row, atomically."""
        ...

    def list_payments(
        self, debt_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[DebtPayment]:
        """List payments for a debt, optionally within an inclusive date range."""
        ...

    def create_plan(self, plan: DebtPlan) -> DebtPlan:
        """Store plan metadata."""
        ...

    def get_plan(self, plan_id: int) -> Optional[DebtPlan]:
        """Retrieve plan metadata by ID."""
        ...
