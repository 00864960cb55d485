"""Shared numeric limits for payoff calculations and debt validation."""

from __future__ import annotations

from decimal import Decimal

MONTHS_PER_YEAR = 12
PERCENT_DIVISOR = 100

# Annual interest rate bounds, inclusive, in percent.
MIN_INTEREST_RATE = Decimal("0")
MAX_INTEREST_RATE = Decimal("100")

# 50 years of monthly periods.
MAX_PAYOFF_MONTHS = 600

# Statement due dates are constrained to 1..28 so every month is valid.
DEFAULT_DUE_DAY = 15
MAX_DUE_DAY = 28

STRATEGY_AVALANCHE = "avalanche"
STRATEGY_SNOWBALL = "snowball"
