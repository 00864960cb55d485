"""Utilities for real payments against live debt balances."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from ..constants import DEFAULT_DUE_DAY, MAX_DUE_DAY
from ..errors import InvalidAmountError, InvalidDateError
from ..logging_config import get_logger
from ..models.debt import DebtPayment
from .debts import add_months
from .money import Amount, from_cents, to_cents, to_decimal

logger = get_logger("services.liabilities")


@dataclass(slots=True)
class BalancePoint:
    date: date
    balance: Decimal


@dataclass(slots=True)
class DebtProgress:
    """Payments made against a debt and the balance after each one."""

    debt_id: int
    original_balance: Decimal
    current_balance: Decimal
    total_paid: Decimal
    balance_history: list[BalancePoint]

    @property
    def percent_paid(self) -> float:
        if self.original_balance <= 0:
            return 100.0
        paid = self.original_balance - self.current_balance
        return round(float(paid / self.original_balance * 100), 2)


@dataclass(slots=True)
class ScheduledPayment:
    debt_id: int
    debt_name: str
    amount: Decimal
    due_date: date
    is_minimum: bool = True


@dataclass(slots=True)
class ScheduledMonth:
    month: str  # YYYY-MM
    payments: list[ScheduledPayment]

    @property
    def total_amount(self) -> Decimal:
        return sum((p.amount for p in self.payments), Decimal("0.00"))


def parse_payment_date(value: date | str) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidDateError(f"Invalid payment date {value!r}; expected YYYY-MM-DD") from exc
    raise InvalidDateError(f"Invalid payment date {value!r}")


def _payment_cents(amount: Amount) -> int:
    value = to_decimal(amount)
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(f"Payment amount must be positive, got {amount!r}")
    cents = to_cents(value)
    if cents <= 0:
        raise InvalidAmountError(f"Payment amount must be at least one cent, got {amount!r}")
    return cents


def record_payment(
    debt: Any, amount: Amount, payment_date: date | str, *, now: date | None = None
) -> Decimal:
    """Validate a real payment and return the balance the store should persist.

    ``debt`` is anything with a ``balance`` (a ``Debt`` row or a snapshot).
    Nothing is written here; persistence belongs to the caller.
    """

    amount_cents = _payment_cents(amount)
    balance_cents = to_cents(debt.balance)
    if amount_cents > balance_cents:
        raise InvalidAmountError(
            f"Payment {from_cents(amount_cents)} exceeds balance {from_cents(balance_cents)}"
        )

    when = parse_payment_date(payment_date)
    today = now or date.today()
    if when > today:
        raise InvalidDateError(f"Payment date {when.isoformat()} is in the future")

    updated = from_cents(max(0, balance_cents - amount_cents))
    logger.info(
        "Payment accepted",
        extra={
            "debt_id": getattr(debt, "id", None),
            "amount": from_cents(amount_cents),
            "updated_balance": updated,
        },
    )
    return updated


def build_debt_payment(
    *, debt_id: int, amount: Amount, payment_date: date | str, plan_id: int | None = None
) -> DebtPayment:
    """Construct the payment record handed to the store."""

    return DebtPayment(
        debt_id=debt_id,
        amount=float(from_cents(_payment_cents(amount))),
        date=parse_payment_date(payment_date),
        plan_id=plan_id,
    )


def debt_progress(debt: Any, payments: Iterable[DebtPayment]) -> DebtProgress:
    """Replay recorded payments in date order from the original balance."""

    ordered = sorted(payments, key=lambda p: (p.date, p.id or 0))
    original = to_cents(debt.original_balance)
    running = original
    total_paid = 0
    history: list[BalancePoint] = []
    for payment in ordered:
        paid = to_cents(payment.amount)
        total_paid += paid
        running = max(0, running - paid)
        history.append(BalancePoint(date=payment.date, balance=from_cents(running)))

    return DebtProgress(
        debt_id=debt.id,
        original_balance=from_cents(original),
        current_balance=from_cents(to_cents(debt.balance)),
        total_paid=from_cents(total_paid),
        balance_history=history,
    )


def _check_due_day(due_day: int) -> int:
    if not 1 <= due_day <= MAX_DUE_DAY:
        raise ValueError(f"due_day must be between 1 and {MAX_DUE_DAY}, got {due_day}")
    return due_day


def next_due_date(*, today: date, due_day: int = DEFAULT_DUE_DAY) -> date:
    """Return the first due date on or after *today*."""

    due_day = _check_due_day(due_day)
    if today.day > due_day:
        return add_months(today.replace(day=due_day), 1)
    return today.replace(day=due_day)


def upcoming_minimums(
    debts: Iterable[Any],
    *,
    months_ahead: int,
    today: date,
    due_day: int = DEFAULT_DUE_DAY,
) -> list[ScheduledMonth]:
    """Minimum payments due on each open debt for the next ``months_ahead`` months."""

    due_day = _check_due_day(due_day)
    open_debts = [d for d in debts if to_cents(d.balance) > 0]
    first_month = today.replace(day=due_day)

    schedule: list[ScheduledMonth] = []
    for offset in range(max(months_ahead, 0)):
        due = add_months(first_month, offset)
        schedule.append(
            ScheduledMonth(
                month=f"{due.year:04d}-{due.month:02d}",
                payments=[
                    ScheduledPayment(
                        debt_id=d.id,
                        debt_name=getattr(d, "name", "") or "",
                        amount=from_cents(min(to_cents(d.min_payment), to_cents(d.balance))),
                        due_date=due,
                    )
                    for d in open_debts
                ],
            )
        )
    return schedule


__all__ = [
    "BalancePoint",
    "DebtProgress",
    "ScheduledMonth",
    "ScheduledPayment",
    "build_debt_payment",
    "debt_progress",
    "next_due_date",
    "parse_payment_date",
    "record_payment",
    "upcoming_minimums",
]
