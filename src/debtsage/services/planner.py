"""Debt planning workflows that combine the engine with a repository."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from ..constants import MAX_PAYOFF_MONTHS
from ..domain.repositories.debt import DebtRepository
from ..errors import DebtNotFoundError, InvalidDebtDataError, NoDebtsError, PlanNotFoundError
from ..logging_config import get_logger
from ..models.debt import Debt, DebtPayment, DebtPlan
from .debts import (
    DebtSnapshot,
    PayoffPlan,
    StrategyComparison,
    calculate_payoff_plan,
    check_debt,
    compare_strategies,
)
from .liabilities import DebtProgress, build_debt_payment, debt_progress, record_payment
from .money import Amount, quantize
from .strategies import PayoffStrategy

logger = get_logger("services.planner")


def _check_new_values(
    *, balance: Amount, interest_rate: Amount, min_payment: Amount, debt_id: int = 0
) -> DebtSnapshot:
    """Run engine validation on prospective debt values."""

    snapshot = DebtSnapshot(
        id=debt_id, balance=balance, interest_rate=interest_rate, min_payment=min_payment
    )
    check_debt(snapshot)
    return snapshot


class DebtPlanner:
    """Entry point used by the CLI and any other presentation layer."""

    def __init__(self, repository: DebtRepository, *, max_months: int = MAX_PAYOFF_MONTHS):
        self.repository = repository
        self.max_months = max_months

    # Debts -------------------------------------------------------------

    def add_debt(
        self, *, name: str, balance: Amount, interest_rate: Amount, min_payment: Amount
    ) -> Debt:
        name = (name or "").strip()
        if not name:
            raise InvalidDebtDataError("Debt name is required")
        snapshot = _check_new_values(
            balance=balance, interest_rate=interest_rate, min_payment=min_payment
        )
        debt = Debt(
            name=name,
            balance=float(quantize(snapshot.balance)),
            original_balance=float(quantize(snapshot.balance)),
            interest_rate=float(snapshot.interest_rate),
            min_payment=float(quantize(snapshot.min_payment)),
        )
        created = self.repository.create(debt)
        logger.info("Debt created", extra={"debt_id": created.id, "debt_name": created.name})
        return created

    def update_debt(
        self,
        debt_id: int,
        *,
        balance: Optional[Amount] = None,
        interest_rate: Optional[Amount] = None,
        min_payment: Optional[Amount] = None,
    ) -> Debt:
        debt = self._require_debt(debt_id)
        snapshot = _check_new_values(
            debt_id=debt_id,
            balance=debt.balance if balance is None else balance,
            interest_rate=debt.interest_rate if interest_rate is None else interest_rate,
            min_payment=debt.min_payment if min_payment is None else min_payment,
        )
        debt.balance = float(quantize(snapshot.balance))
        debt.interest_rate = float(snapshot.interest_rate)
        debt.min_payment = float(quantize(snapshot.min_payment))
        return self.repository.update(debt)

    def list_debts(self) -> list[Debt]:
        return self.repository.list_all()

    def _require_debt(self, debt_id: int) -> Debt:
        debt = self.repository.get_by_id(debt_id)
        if debt is None:
            raise DebtNotFoundError(debt_id)
        return debt

    def _open_snapshots(self) -> list[DebtSnapshot]:
        snapshots = [DebtSnapshot.from_debt(debt) for debt in self.repository.list_open()]
        if not snapshots:
            raise NoDebtsError()
        return snapshots

    # Plans -------------------------------------------------------------

    def calculate_plan(
        self, strategy: PayoffStrategy | str, monthly_amount: Amount, start_date: date
    ) -> tuple[int, PayoffPlan]:
        """Plan against the current open debts and store the plan's metadata."""

        plan = calculate_payoff_plan(
            self._open_snapshots(), strategy, monthly_amount, start_date, max_months=self.max_months
        )
        record = self.repository.create_plan(
            DebtPlan(
                strategy=plan.strategy.value,
                monthly_amount=float(plan.monthly_amount),
                start_date=start_date,
            )
        )
        return record.id, plan

    def get_plan(self, plan_id: int, *, start_date: date | None = None) -> PayoffPlan:
        """Recompute a stored plan against today's balances."""

        record = self.repository.get_plan(plan_id)
        if record is None:
            raise PlanNotFoundError(plan_id)
        return calculate_payoff_plan(
            self._open_snapshots(),
            record.strategy,
            record.monthly_amount,
            start_date or record.start_date,
            max_months=self.max_months,
        )

    def compare(self, monthly_amount: Amount, start_date: date) -> StrategyComparison:
        return compare_strategies(
            self._open_snapshots(), monthly_amount, start_date, max_months=self.max_months
        )

    # Payments ----------------------------------------------------------

    def record_debt_payment(
        self,
        debt_id: int,
        amount: Amount,
        payment_date: date | str,
        *,
        plan_id: int | None = None,
        now: date | None = None,
    ) -> tuple[DebtPayment, Decimal]:
        """Store a payment with the new balance.

        The overpayment and date checks run against the debt row read inside
        the write transaction.
        """

        if plan_id is not None and self.repository.get_plan(plan_id) is None:
            raise PlanNotFoundError(plan_id)
        payment = build_debt_payment(
            debt_id=debt_id, amount=amount, payment_date=payment_date, plan_id=plan_id
        )
        return self.repository.add_payment(
            payment, settle=lambda debt: record_payment(debt, amount, payment_date, now=now)
        )

    def progress(
        self, debt_id: int, *, start: date | None = None, end: date | None = None
    ) -> DebtProgress:
        debt = self._require_debt(debt_id)
        return debt_progress(debt, self.repository.list_payments(debt_id, start=start, end=end))


__all__ = ["DebtPlanner"]
