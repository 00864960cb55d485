"""SQLModel table exports."""

from .debt import Debt, DebtPayment, DebtPlan

__all__ = ["Debt", "DebtPayment", "DebtPlan"]
