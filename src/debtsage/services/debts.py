"""Debt payoff calculators.

The simulator walks month by month over a private integer-cent copy of the
input snapshots:

1. accrue interest on every open debt (rounded half-up to the cent),
2. pay each open debt's minimum, capped at its balance,
3. cascade what is left of the budget along the strategy's ordering,
4. retire debts that reached zero.

Minimums are re-derived from the open debts every month, so a retired debt's
minimum rolls into the extra pool without any bookkeeping.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from ..constants import MAX_INTEREST_RATE, MAX_PAYOFF_MONTHS, MIN_INTEREST_RATE
from ..errors import (
    InsufficientFundsError,
    InvalidAmountError,
    InvalidDebtDataError,
    NoConvergenceError,
    NoDebtsError,
)
from ..logging_config import get_logger
from .money import (
    Amount,
    floor_cents,
    from_cents,
    monthly_interest_cents,
    to_cents,
    to_decimal,
)
from .strategies import PayoffStrategy

logger = get_logger("services.debts")


@dataclass(frozen=True, slots=True)
class DebtSnapshot:
    """A debt as it stands when a simulation run starts."""

    id: int
    balance: Decimal
    interest_rate: Decimal  # annual percentage, e.g. 19.99
    min_payment: Decimal
    name: str = ""

    def __post_init__(self) -> None:
        for attr in ("balance", "interest_rate", "min_payment"):
            object.__setattr__(self, attr, to_decimal(getattr(self, attr)))

    @classmethod
    def from_debt(cls, debt: Any) -> "DebtSnapshot":
        """Capture a persisted ``Debt`` row (or anything shaped like one)."""

        if getattr(debt, "id", None) is None:
            raise InvalidDebtDataError("Debt must have an id before it can be planned")
        return cls(
            id=debt.id,
            balance=debt.balance,
            interest_rate=debt.interest_rate,
            min_payment=debt.min_payment,
            name=getattr(debt, "name", "") or "",
        )


@dataclass(frozen=True, slots=True)
class PaymentAllocation:
    debt_id: int
    amount: Decimal


@dataclass(frozen=True, slots=True)
class MonthlyPayment:
    """One simulated month."""

    month: int
    date: date
    payments: tuple[PaymentAllocation, ...]
    interest: Decimal
    total_balance_remaining: Decimal
    balances: tuple[tuple[int, Decimal], ...]  # (debt_id, balance) ordered by id

    @property
    def total_paid(self) -> Decimal:
        return sum((p.amount for p in self.payments), Decimal("0.00"))

    def balance_for(self, debt_id: int) -> Decimal:
        for candidate, balance in self.balances:
            if candidate == debt_id:
                return balance
        raise KeyError(debt_id)

    def payment_for(self, debt_id: int) -> Decimal:
        """Amount paid toward ``debt_id`` this month, zero when it got nothing."""
        for payment in self.payments:
            if payment.debt_id == debt_id:
                return payment.amount
        return Decimal("0.00")


@dataclass(frozen=True, slots=True)
class DebtSummary:
    debt_id: int
    name: str
    payoff_month: int
    total_interest_paid: Decimal


@dataclass(frozen=True, slots=True)
class PayoffPlan:
    """Complete payoff schedule for one strategy."""

    strategy: PayoffStrategy
    monthly_amount: Decimal
    start_date: date
    payoff_date: date
    total_interest: Decimal
    monthly_breakdown: tuple[MonthlyPayment, ...]
    debt_summaries: tuple[DebtSummary, ...]

    @property
    def months(self) -> int:
        return len(self.monthly_breakdown)

    @property
    def total_paid(self) -> Decimal:
        return sum((m.total_paid for m in self.monthly_breakdown), Decimal("0.00"))

    def payoff_order(self) -> list[int]:
        """Debt ids in the order their balances reached zero."""

        ranked = sorted(self.debt_summaries, key=lambda s: (s.payoff_month, s.debt_id))
        return [summary.debt_id for summary in ranked]

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation; amounts are two-place strings."""

        return {
            "strategy": self.strategy.value,
            "monthly_amount": str(self.monthly_amount),
            "start_date": self.start_date.isoformat(),
            "payoff_date": self.payoff_date.isoformat(),
            "months": self.months,
            "total_interest": str(self.total_interest),
            "total_paid": str(self.total_paid),
            "monthly_breakdown": [
                {
                    "month": m.month,
                    "date": m.date.isoformat(),
                    "payments": [
                        {"debt_id": p.debt_id, "amount": str(p.amount)} for p in m.payments
                    ],
                    "interest": str(m.interest),
                    "total_paid": str(m.total_paid),
                    "total_balance_remaining": str(m.total_balance_remaining),
                }
                for m in self.monthly_breakdown
            ],
            "debt_summaries": [
                {
                    "debt_id": s.debt_id,
                    "name": s.name,
                    "payoff_month": s.payoff_month,
                    "total_interest_paid": str(s.total_interest_paid),
                }
                for s in self.debt_summaries
            ],
        }


@dataclass(frozen=True, slots=True)
class StrategyComparison:
    avalanche: PayoffPlan
    snowball: PayoffPlan

    @property
    def interest_saved(self) -> Decimal:
        """Interest avalanche saves over snowball (negative if it costs more)."""
        return self.snowball.total_interest - self.avalanche.total_interest

    @property
    def months_saved(self) -> int:
        return self.snowball.months - self.avalanche.months

    @property
    def recommended(self) -> PayoffStrategy:
        if self.snowball.total_interest < self.avalanche.total_interest:
            return PayoffStrategy.SNOWBALL
        return PayoffStrategy.AVALANCHE

    def to_dict(self) -> dict[str, Any]:
        return {
            "avalanche": self.avalanche.to_dict(),
            "snowball": self.snowball.to_dict(),
            "interest_saved": str(self.interest_saved),
            "months_saved": self.months_saved,
            "recommended": self.recommended.value,
        }


@dataclass(slots=True)
class _DebtState:
    """Mutable per-run copy of a snapshot, in cents."""

    id: int
    interest_rate: Decimal
    balance: int
    min_payment: int
    interest_paid: int = 0

    @property
    def active(self) -> bool:
        return self.balance > 0


@dataclass(frozen=True, slots=True)
class SimulatedMonth:
    month: int
    payments: dict[int, int]
    interest: int
    balances: dict[int, int]


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Raw simulator output in cents, consumed by :func:`build_plan`."""

    strategy: PayoffStrategy
    monthly_amount: int
    months: tuple[SimulatedMonth, ...]
    interest_by_debt: dict[int, int] = field(default_factory=dict)
    total_interest: int = 0


def add_months(value: date, months: int) -> date:
    """Return ``value`` shifted by ``months``, clamping the day to the month's end."""

    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def check_debt(debt: DebtSnapshot) -> None:
    """Raise ``InvalidDebtDataError`` for out-of-range or non-finite values."""

    rate = debt.interest_rate
    if not rate.is_finite() or not (MIN_INTEREST_RATE <= rate <= MAX_INTEREST_RATE):
        raise InvalidDebtDataError(
            f"Debt {debt.id}: interest rate must be between {MIN_INTEREST_RATE} and "
            f"{MAX_INTEREST_RATE}, got {rate}"
        )
    if not debt.balance.is_finite() or debt.balance < 0:
        raise InvalidDebtDataError(f"Debt {debt.id}: balance must be non-negative, got {debt.balance}")
    if not debt.min_payment.is_finite() or debt.min_payment < 0:
        raise InvalidDebtDataError(
            f"Debt {debt.id}: minimum payment must be non-negative, got {debt.min_payment}"
        )


def validate_debts(
    debts: Iterable[DebtSnapshot | Any], monthly_amount: Amount
) -> tuple[list[DebtSnapshot], Decimal]:
    """Check inputs before any simulation runs.

    Returns the captured snapshots and the monthly amount truncated (never
    rounded up) to whole cents.
    Minimums only count for debts that still carry at least a cent.
    """

    snapshots = [d if isinstance(d, DebtSnapshot) else DebtSnapshot.from_debt(d) for d in debts]
    if not snapshots:
        raise NoDebtsError()

    seen: set[int] = set()
    for snapshot in snapshots:
        if snapshot.id in seen:
            raise InvalidDebtDataError(f"Duplicate debt id {snapshot.id}")
        seen.add(snapshot.id)
        check_debt(snapshot)

    amount = to_decimal(monthly_amount)
    if not amount.is_finite() or amount < 0:
        raise InvalidAmountError(f"Monthly amount must be a non-negative number, got {monthly_amount!r}")

    # Same per-debt cent rounding the simulator applies to each minimum.
    required = from_cents(
        sum(to_cents(s.min_payment) for s in snapshots if to_cents(s.balance) > 0)
    )
    if amount < required:
        raise InsufficientFundsError(amount, required)
    return snapshots, from_cents(floor_cents(amount))


def simulate(
    debts: Iterable[DebtSnapshot],
    strategy: PayoffStrategy | str,
    monthly_amount: Amount,
    *,
    max_months: int = MAX_PAYOFF_MONTHS,
) -> SimulationResult:
    """Run the month loop on already-validated snapshots."""

    strategy = PayoffStrategy.parse(strategy)
    if max_months <= 0:
        raise ValueError(f"max_months must be positive, got {max_months}")

    budget = floor_cents(monthly_amount)
    states = [
        _DebtState(
            id=d.id,
            interest_rate=d.interest_rate,
            balance=to_cents(d.balance),
            min_payment=to_cents(d.min_payment),
        )
        for d in debts
    ]
    by_id = {state.id: state for state in states}
    months: list[SimulatedMonth] = []
    total_interest = 0

    while any(state.active for state in states):
        if len(months) >= max_months:
            remaining = from_cents(sum(state.balance for state in states))
            logger.warning(
                "Payoff simulation did not converge",
                extra={"strategy": strategy.value, "max_months": max_months, "remaining": remaining},
            )
            raise NoConvergenceError(max_months, remaining)

        active = [state for state in states if state.active]
        month_interest = 0
        for state in active:
            accrued = monthly_interest_cents(state.balance, state.interest_rate)
            state.balance += accrued
            state.interest_paid += accrued
            month_interest += accrued
        total_interest += month_interest

        order = strategy.order(active)
        payments: dict[int, int] = {}
        extra = budget
        for state in active:
            minimum = min(state.min_payment, state.balance)
            if minimum > 0:
                state.balance -= minimum
                payments[state.id] = minimum
                extra -= minimum

        for debt_id in order:
            if extra <= 0:
                break
            state = by_id[debt_id]
            amount = min(extra, state.balance)
            if amount <= 0:
                continue
            state.balance -= amount
            payments[debt_id] = payments.get(debt_id, 0) + amount
            extra -= amount

        months.append(
            SimulatedMonth(
                month=len(months) + 1,
                payments=payments,
                interest=month_interest,
                balances={state.id: state.balance for state in states},
            )
        )

    return SimulationResult(
        strategy=strategy,
        monthly_amount=budget,
        months=tuple(months),
        interest_by_debt={state.id: state.interest_paid for state in states},
        total_interest=total_interest,
    )


def _first_zero_month(breakdown: Iterable[MonthlyPayment], debt_id: int) -> int:
    for month in breakdown:
        if month.balance_for(debt_id) <= 0:
            return month.month
    return 0


def build_plan(
    result: SimulationResult, debts: Iterable[DebtSnapshot], start_date: date
) -> PayoffPlan:
    """Assemble the caller-facing plan from raw simulator output."""

    breakdown = tuple(
        MonthlyPayment(
            month=m.month,
            date=add_months(start_date, m.month),
            payments=tuple(
                PaymentAllocation(debt_id=debt_id, amount=from_cents(cents))
                for debt_id, cents in sorted(m.payments.items(), key=lambda item: (-item[1], item[0]))
            ),
            interest=from_cents(m.interest),
            total_balance_remaining=from_cents(sum(m.balances.values())),
            balances=tuple(
                (debt_id, from_cents(cents)) for debt_id, cents in sorted(m.balances.items())
            ),
        )
        for m in result.months
    )

    summaries = tuple(
        DebtSummary(
            debt_id=debt.id,
            name=debt.name,
            payoff_month=0 if to_cents(debt.balance) <= 0 else _first_zero_month(breakdown, debt.id),
            total_interest_paid=from_cents(result.interest_by_debt.get(debt.id, 0)),
        )
        for debt in debts
    )

    return PayoffPlan(
        strategy=result.strategy,
        monthly_amount=from_cents(result.monthly_amount),
        start_date=start_date,
        payoff_date=add_months(start_date, len(breakdown)),
        total_interest=from_cents(result.total_interest),
        monthly_breakdown=breakdown,
        debt_summaries=summaries,
    )


def calculate_payoff_plan(
    debts: Iterable[DebtSnapshot | Any],
    strategy: PayoffStrategy | str,
    monthly_amount: Amount,
    start_date: date,
    *,
    max_months: int | None = None,
) -> PayoffPlan:
    """Validate, simulate and return the payoff plan for one strategy."""

    strategy = PayoffStrategy.parse(strategy)
    snapshots, amount = validate_debts(debts, monthly_amount)
    result = simulate(
        snapshots,
        strategy,
        amount,
        max_months=MAX_PAYOFF_MONTHS if max_months is None else max_months,
    )
    plan = build_plan(result, snapshots, start_date)
    logger.info(
        "Payoff plan calculated",
        extra={
            "strategy": strategy.value,
            "debts": len(snapshots),
            "months": plan.months,
            "total_interest": plan.total_interest,
        },
    )
    return plan


def compare_strategies(
    debts: Iterable[DebtSnapshot | Any],
    monthly_amount: Amount,
    start_date: date,
    *,
    max_months: int | None = None,
) -> StrategyComparison:
    """Run avalanche and snowball on the same snapshots."""

    snapshots, amount = validate_debts(debts, monthly_amount)
    plans = {
        strategy: calculate_payoff_plan(
            snapshots, strategy, amount, start_date, max_months=max_months
        )
        for strategy in PayoffStrategy
    }
    return StrategyComparison(
        avalanche=plans[PayoffStrategy.AVALANCHE], snowball=plans[PayoffStrategy.SNOWBALL]
    )


__all__ = [
    "DebtSnapshot",
    "DebtSummary",
    "MonthlyPayment",
    "PaymentAllocation",
    "PayoffPlan",
    "SimulationResult",
    "StrategyComparison",
    "add_months",
    "build_plan",
    "calculate_payoff_plan",
    "check_debt",
    "compare_strategies",
    "simulate",
    "validate_debts",
]
