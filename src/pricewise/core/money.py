"""Integer-cents helpers.

All engine arithmetic happens on ``int`` cents. Decimal currency values only
enter through ``to_cents``/``cents_for`` and leave through ``from_cents``.
Per-unit tax rates are stored as ``int`` micros (millionths of a unit) so a
sub-cent rate is only rounded once it is multiplied into a line total.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation

Number = int | float | Decimal | str

_ONE = Decimal("1")
_HUNDRED = Decimal("100")
_MILLION = Decimal("1000000")


def to_decimal(value: Number) -> Decimal:
    """Convert a caller-supplied number to ``Decimal`` without float noise.

    Floats go through ``str`` so that ``0.6`` becomes ``Decimal("0.6")``
    rather than its binary expansion.

    Raises:
        ValueError: The value is not a finite number.
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value) if isinstance(value, float) else value)
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def floor_int(value: Decimal) -> int:
    return int(value.quantize(_ONE, rounding=ROUND_FLOOR))


def to_cents(amount: Number) -> int:
    """Convert a decimal currency amount to cents (half-up)."""
    return round_half_up(to_decimal(amount) * _HUNDRED)


def cents_for(unit_amount: Number, quantity: Number) -> int:
    """``round(unit_amount * quantity * 100)`` computed exactly."""
    return round_half_up(to_decimal(unit_amount) * to_decimal(quantity) * _HUNDRED)


def from_cents(cents: int) -> Decimal:
    """Convert cents to a two-place ``Decimal`` currency amount."""
    return (Decimal(cents) / _HUNDRED).quantize(Decimal("0.01"))


def format_cents(cents: int) -> str:
    """Render cents as ``$1,234.56`` (negative as ``-$1.00``)."""
    sign = "-" if cents < 0 else ""
    return f"{sign}${from_cents(abs(cents)):,.2f}"


def to_micros(amount: Number) -> int:
    """Convert a per-unit amount to integer micros (half-up)."""
    return round_half_up(to_decimal(amount) * _MILLION)


def from_micros(micros: int) -> Decimal:
    return Decimal(micros) / _MILLION


def format_micros(micros: int) -> str:
    """Render a per-unit rate, keeping sub-cent digits (``$0.125``)."""
    value = from_micros(micros)
    if value == value.quantize(Decimal("0.01")):
        return f"${value:,.2f}"
    return f"${value.normalize():,f}"
