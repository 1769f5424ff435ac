"""Decimal helpers shared across the invoice modules."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def is_number(value: Any) -> bool:
    """Return ``True`` for finite ``int``/``float``/``Decimal`` values (not ``bool``)."""

    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return False


def parse_decimal(value: Any, *, default: Decimal = Decimal("0")) -> Decimal:
    """Convert the provided value to :class:`~decimal.Decimal`.

    Floats go through ``str`` so that ``10.345`` stays ``10.345`` instead of
    its binary approximation. ``None``, blank strings and invalid values
    return ``default``.
    """

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value

    text = str(value).strip()
    if not text:
        return default

    try:
        result = Decimal(text)
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def round_money(value: Decimal) -> Decimal:
    """Round to two decimals, halves away from zero.

    The precision is widened for the call so that amounts with more than the
    default 28 significant digits still quantize.
    """

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Format a monetary amount with exactly two decimals."""

    return f"{round_money(value):f}"


def format_quantity(value: Decimal) -> str:
    """Format a quantity without exponent or trailing zeros."""

    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


__all__ = [
    "CENT",
    "ZERO",
    "format_amount",
    "format_quantity",
    "is_number",
    "parse_decimal",
    "round_money",
]
