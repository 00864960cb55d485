"""Typed failures raised by the payoff engine and planner service."""

from __future__ import annotations

from decimal import Decimal


class DebtError(ValueError):
    """Base class for every debt planning failure.

    Subclasses ``ValueError`` so callers that already guard input validation
    with ``except ValueError`` keep working.
    """

    user_message = "Unable to complete the debt calculation."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class NoDebtsError(DebtError):
    user_message = "No debts to plan. Add at least one debt first."


class InsufficientFundsError(DebtError):
    """Monthly budget does not cover the sum of minimum payments."""

    user_message = "Insufficient funds: monthly amount must cover all minimum payments."

    def __init__(self, monthly_amount: Decimal, min_payments: Decimal) -> None:
        self.monthly_amount = monthly_amount
        self.min_payments = min_payments
        super().__init__(
            f"Insufficient funds: monthly amount {monthly_amount} is less than "
            f"total minimum payments {min_payments}"
        )


class InvalidDebtDataError(DebtError):
    user_message = "Debt data is invalid. Check balances, rates and minimum payments."


class InvalidAmountError(DebtError):
    user_message = "Payment amount is invalid."


class InvalidDateError(DebtError):
    user_message = "Payment date is invalid."


class InvalidStrategyError(DebtError):
    user_message = "Unknown payoff strategy. Use 'avalanche' or 'snowball'."

    def __init__(self, strategy: object) -> None:
        self.strategy = strategy
        super().__init__(f"Invalid debt payoff strategy: {strategy!r}")


class NoConvergenceError(DebtError):
    """Simulation hit the month cap with balances still outstanding."""

    user_message = "These debts will not be paid off with this monthly amount."

    def __init__(self, max_months: int, remaining_balance: Decimal) -> None:
        self.max_months = max_months
        self.remaining_balance = remaining_balance
        super().__init__(
            f"Payoff schedule did not converge within {max_months} months; "
            f"{remaining_balance} still outstanding"
        )


class DebtNotFoundError(DebtError):
    user_message = "Debt not found."

    def __init__(self, debt_id: int) -> None:
        self.debt_id = debt_id
        super().__init__(f"Debt {debt_id} not found")


class PlanNotFoundError(DebtError):
    user_message = "Payoff plan not found."

    def __init__(self, plan_id: int) -> None:
        self.plan_id = plan_id
        super().__init__(f"Payoff plan {plan_id} not found")


__all__ = [
    "DebtError",
    "DebtNotFoundError",
    "InsufficientFundsError",
    "InvalidAmountError",
    "InvalidDateError",
    "InvalidDebtDataError",
    "InvalidStrategyError",
    "NoConvergenceError",
    "NoDebtsError",
    "PlanNotFoundError",
]
