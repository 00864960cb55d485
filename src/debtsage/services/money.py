"""Currency helpers: decimal amounts at the edges, integer cents inside."""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

from ..constants import MONTHS_PER_YEAR, PERCENT_DIVISOR

CENT = Decimal("0.01")
_ONE = Decimal(1)
_INTEREST_DIVISOR = Decimal(PERCENT_DIVISOR * MONTHS_PER_YEAR)

Amount = Decimal | float | int | str


def to_decimal(value: Amount) -> Decimal:
    """Coerce a numeric input to ``Decimal`` without rounding.

    Floats go through ``str`` so ``19.99`` stays ``Decimal("19.99")`` instead
    of its binary expansion. Unparseable input becomes ``Decimal("NaN")`` so
    validation can reject it in one place.
    """

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal("NaN")
    text = value.strip() if isinstance(value, str) else str(value)
    try:
        return Decimal(text)
    except (InvalidOperation, ValueError):
        return Decimal("NaN")


def round_cents(value: Decimal) -> int:
    """Round a fractional cent count to a whole cent, half-up."""

    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def to_cents(value: Amount) -> int:
    """Convert a currency amount to integer cents, rounding half-up."""

    amount = to_decimal(value)
    if not amount.is_finite():
        raise ValueError(f"Cannot convert non-finite amount {value!r} to cents")
    return round_cents(amount * 100)


def floor_cents(value: Amount) -> int:
    """Convert a currency amount to integer cents, dropping any fraction of a cent."""

    amount = to_decimal(value)
    if not amount.is_finite():
        raise ValueError(f"Cannot convert non-finite amount {value!r} to cents")
    return int((amount * 100).to_integral_value(rounding=ROUND_FLOOR))


def from_cents(cents: int) -> Decimal:
    """Return an exact two-place ``Decimal`` for a cent count."""

    return Decimal(cents).scaleb(-2)


def quantize(value: Amount) -> Decimal:
    """Round a currency amount to cents, half-up."""

    return from_cents(to_cents(value))


def monthly_interest_cents(balance_cents: int, annual_rate: Decimal) -> int:
    """Interest accrued in one month on ``balance_cents`` at ``annual_rate`` percent."""

    if balance_cents <= 0 or annual_rate <= 0:
        return 0
    return round_cents(Decimal(balance_cents) * annual_rate / _INTEREST_DIVISOR)


def format_currency(value: Amount) -> str:
    """Render an amount as ``$1,234.56`` (negative as ``-$1,234.56``)."""

    amount = quantize(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


__all__ = [
    "CENT",
    "floor_cents",
    "format_currency",
    "from_cents",
    "monthly_interest_cents",
    "quantize",
    "round_cents",
    "to_cents",
    "to_decimal",
]
