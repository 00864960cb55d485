"""DebtSage debt payoff planning package."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, MemoryConfig
from .services.debts import (
    DebtSnapshot,
    PayoffPlan,
    StrategyComparison,
    calculate_payoff_plan,
    compare_strategies,
)
from .services.liabilities import record_payment
from .services.strategies import PayoffStrategy

__all__ = [
    "BaseConfig",
    "DebtSnapshot",
    "DevConfig",
    "MemoryConfig",
    "PayoffPlan",
    "PayoffStrategy",
    "StrategyComparison",
    "calculate_payoff_plan",
    "compare_strategies",
    "record_payment",
]
