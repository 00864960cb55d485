"""Tests for currency conversion and the cent rounding rule.

The engine keeps every amount in integer cents while simulating and converts
back to two-place Decimals at the boundary. These tests pin down the
half-up rounding rule and float handling that the rest of the engine relies on.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from debtsage.services.money import (
    floor_cents,
    format_currency,
    from_cents,
    monthly_interest_cents,
    quantize,
    to_cents,
    to_decimal,
)


class TestConversions:
    """Decimal <-> cents conversions."""

    def test_float_input_uses_shortest_repr(self):
        """19.99 should not pick up binary noise on the way to Decimal."""
        assert to_decimal(19.99) == Decimal("19.99")

    def test_to_cents_rounds_half_up(self):
        assert to_cents("19.995") == 2000
        assert to_cents(0.125) == 13
        assert to_cents("19.994") == 1999

    def test_to_cents_accepts_ints_and_strings(self):
        assert to_cents(500) == 50000
        assert to_cents(" 75.5 ") == 7550

    def test_float_sum_noise_is_absorbed(self):
        assert to_cents(0.1 + 0.2) == 30

    def test_from_cents_is_two_place_decimal(self):
        assert from_cents(26000) == Decimal("260.00")
        assert str(from_cents(26000)) == "260.00"
        assert str(from_cents(5)) == "0.05"

    def test_quantize(self):
        assert quantize("10.005") == Decimal("10.01")

    def test_garbage_becomes_nan(self):
        assert to_decimal("abc").is_nan()
        assert to_decimal(True).is_nan()

    def test_floor_cents_never_rounds_up(self):
        assert floor_cents("314.995") == 31499
        assert floor_cents("500.009") == 50000
        assert floor_cents(500) == 50000
        assert floor_cents(0.1 + 0.2) == 30

    def test_floor_cents_rejects_non_finite(self):
        with pytest.raises(ValueError):
            floor_cents("abc")

    def test_to_cents_rejects_non_finite(self):
        with pytest.raises(ValueError):
            to_cents("abc")
        with pytest.raises(ValueError):
            to_cents(float("inf"))


class TestMonthlyInterest:
    """Interest accrual rounding."""

    def test_reference_balances(self):
        # 5000 * 19.99% / 12 = 83.2916...
        assert monthly_interest_cents(500000, Decimal("19.99")) == 8329
        # 2000 * 22% / 12 = 36.666...
        assert monthly_interest_cents(200000, Decimal("22")) == 3667
        # 3000 * 15.5% / 12 = 38.75
        assert monthly_interest_cents(300000, Decimal("15.50")) == 3875

    def test_exact_half_cent_rounds_up(self):
        # 1.00 at 6% is half a cent
        assert monthly_interest_cents(100, Decimal("6")) == 1

    def test_zero_balance_or_rate(self):
        assert monthly_interest_cents(0, Decimal("20")) == 0
        assert monthly_interest_cents(100000, Decimal("0")) == 0


class TestFormatting:
    def test_thousands_separator(self):
        assert format_currency(1234.5) == "$1,234.50"

    def test_negative(self):
        assert format_currency(-5) == "-$5.00"

    def test_decimal_input(self):
        assert format_currency(Decimal("0.3")) == "$0.30"
