"""Allocation orderings deciding which debt receives extra payment each month."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Protocol

from ..constants import STRATEGY_AVALANCHE, STRATEGY_SNOWBALL
from ..errors import InvalidStrategyError

# Rank given to a rate that is not a finite number, below every valid rate.
_RATE_FLOOR = Decimal(-1)


class RankedDebt(Protocol):
    """Anything carrying the fields the orderings compare."""

    id: int
    balance: Decimal | int
    interest_rate: Decimal


class PayoffStrategy(str, Enum):
    """Named allocation strategies."""

    AVALANCHE = STRATEGY_AVALANCHE
    SNOWBALL = STRATEGY_SNOWBALL

    @classmethod
    def parse(cls, value: "PayoffStrategy | str") -> "PayoffStrategy":
        """Return the strategy for ``value``, ignoring case and whitespace."""

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidStrategyError(value)

    def order(self, debts: Iterable[RankedDebt]) -> list[int]:
        """Return debt ids in the order this strategy pays them."""

        return _ORDERINGS[self](debts)


def _finite(value: Decimal | int) -> Decimal | int:
    """Map NaN/infinity onto a fixed floor so comparisons never raise."""

    if isinstance(value, Decimal) and not value.is_finite():
        return _RATE_FLOOR
    return value


def avalanche_order(debts: Iterable[RankedDebt]) -> list[int]:
    """Highest interest rate first, then larger balance, then lower id."""

    ranked = sorted(debts, key=lambda d: (-_finite(d.interest_rate), -_finite(d.balance), d.id))
    return [debt.id for debt in ranked]


def snowball_order(debts: Iterable[RankedDebt]) -> list[int]:
    """Smallest balance first, then higher interest rate, then lower id."""

    ranked = sorted(debts, key=lambda d: (_finite(d.balance), -_finite(d.interest_rate), d.id))
    return [debt.id for debt in ranked]


_ORDERINGS: dict[PayoffStrategy, Callable[[Iterable[RankedDebt]], list[int]]] = {
    PayoffStrategy.AVALANCHE: avalanche_order,
    PayoffStrategy.SNOWBALL: snowball_order,
}


__all__ = ["PayoffStrategy", "RankedDebt", "avalanche_order", "snowball_order"]
