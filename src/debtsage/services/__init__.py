"""Service module exports."""

from . import debts, liabilities, money, planner, strategies

__all__ = ["debts", "liabilities", "money", "planner", "strategies"]
