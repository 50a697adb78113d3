"""
dashboard/formatting.py

Display formatting for widget values.

The convention is fixed (en-US grouping, half-up rounding) so output does not
depend on the host locale.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_MILLION = 1_000_000
_THOUSAND = 1_000


def is_numeric(value: Any) -> bool:
    """
    Return True for finite int/float values, excluding bools.
    """

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _fixed(value: float, digits: int) -> str:
    """
    Render ``value`` with exactly ``digits`` fraction digits, rounding half-up.
    """

    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    return f"{rounded:f}"


def _grouped(value: float) -> str:
    """
    Comma-grouped rendering with at most three fraction digits.
    """

    text = _fixed(value, 3)
    integer_part, _, fraction = text.partition(".")
    sign = ""
    if integer_part.startswith("-"):
        sign, integer_part = "-", integer_part[1:]
    grouped = f"{int(integer_part):,}"
    fraction = fraction.rstrip("0")
    result = f"{sign}{grouped}.{fraction}" if fraction else f"{sign}{grouped}"
    return "0" if result == "-0" else result


def _abbreviated(value: float) -> str | None:
    magnitude = abs(value)
    if magnitude >= _MILLION:
        return f"{_fixed(value / _MILLION, 1)}M"
    if magnitude >= _THOUSAND:
        return f"{_fixed(value / _THOUSAND, 1)}K"
    return None


def format_value(value: Any, kind: str | None = None) -> Any:
    """
    Format one cell or axis value for display.

    Non-numeric values are returned unchanged. ``currency`` abbreviates to
    ``$1.5M`` / ``$2.5K`` and otherwise rounds to whole units, ``percent``
    renders one decimal place, ``number`` is always comma-grouped, and any
    other kind (``string`` or unset) abbreviates large magnitudes and groups
    the rest.
    """

    if not is_numeric(value):
        return value

    if kind == "percent":
        return f"{_fixed(value, 1)}%"

    if kind == "currency":
        sign = "-" if value < 0 else ""
        magnitude = abs(value)
        abbreviated = _abbreviated(magnitude)
        if abbreviated is None:
            body = _fixed(magnitude, 0)
            if body == "0":
                sign = ""
            return f"{sign}${body}"
        return f"{sign}${abbreviated}"

    if kind == "number":
        return _grouped(value)

    abbreviated = _abbreviated(value)
    if abbreviated is not None:
        return abbreviated
    return _grouped(value)
