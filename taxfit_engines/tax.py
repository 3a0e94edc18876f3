"""
Tax Engine - Round a single tax rate onto an integer amount.

Amounts are integers in the smallest currency unit (cents, yen).  The tax
is computed exactly with ``Decimal`` and rounded to a whole unit with one
of three rounding modes.

Pure functions with no I/O.

Usage:
    from decimal import Decimal
    from taxfit_engines.tax import RoundMode, apply_tax

    apply_tax(105, Decimal("0.1"), RoundMode.FLOOR)    # 10
    apply_tax(105, Decimal("0.1"), RoundMode.CEIL)     # 11
    apply_tax(105, Decimal("0.1"), RoundMode.NEAREST)  # 11
"""

from __future__ import annotations

from decimal import (
    ROUND_CEILING,
    ROUND_FLOOR,
    ROUND_HALF_UP,
    Decimal,
    InvalidOperation,
    localcontext,
)
from enum import Enum


class RoundMode(str, Enum):
    """How a fractional tax amount becomes a whole unit."""

    FLOOR = "floor"  # Largest integer <= raw
    CEIL = "ceil"  # Smallest integer >= raw
    NEAREST = "nearest"  # Half rounds up (10.5 -> 11)

    @classmethod
    def parse(cls, value: RoundMode | str) -> RoundMode:
        """Coerce an enum member or its string value.

        ``"round"`` is accepted as an alias of ``nearest``.

        Raises:
            ValueError: If the value names no rounding mode.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "round":
                return cls.NEAREST
            for mode in cls:
                if mode.value == key:
                    return mode
        raise ValueError(
            f"Unknown round mode: {value!r} "
            f"(expected one of {[m.value for m in cls]})"
        )

    @property
    def decimal_rounding(self) -> str:
        """The ``decimal`` module rounding constant for this mode."""
        return _DECIMAL_ROUNDING[self]


_DECIMAL_ROUNDING: dict[RoundMode, str] = {
    RoundMode.FLOOR: ROUND_FLOOR,
    RoundMode.CEIL: ROUND_CEILING,
    RoundMode.NEAREST: ROUND_HALF_UP,
}


def as_rate(value: Decimal | int | float | str) -> Decimal:
    """Convert a tax rate to ``Decimal``.

    Floats go through ``str`` so that ``0.1`` means exactly one tenth.
    Values that are not numbers become ``Decimal("NaN")``; range checks
    belong to the caller.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("NaN")


def apply_tax(
    amount: int,
    rate: Decimal | int | float | str,
    round_mode: RoundMode | str = RoundMode.FLOOR,
) -> int:
    """Tax on ``amount`` at ``rate``, rounded to a whole unit.

    Callers guarantee ``amount >= 0`` and ``0 <= rate <= 1``; no
    validation happens here.  The result is non-decreasing in ``amount``
    for every rounding mode.

    The product is exact at any magnitude: the working precision grows to
    fit every digit of ``amount * rate`` before the single rounding step.
    """
    mode = RoundMode.parse(round_mode)
    dec_rate = as_rate(rate)
    with localcontext() as ctx:
        ctx.prec = max(
            ctx.prec,
            len(str(abs(amount))) + len(dec_rate.as_tuple().digits),
        )
        raw = Decimal(amount) * dec_rate
        return int(raw.to_integral_value(rounding=mode.decimal_rounding))


def total_with_tax(
    amount: int,
    rate: Decimal | int | float | str,
    round_mode: RoundMode | str = RoundMode.FLOOR,
) -> int:
    """Tax-inclusive total: ``amount + apply_tax(amount, rate, round_mode)``."""
    return amount + apply_tax(amount, rate, round_mode)
