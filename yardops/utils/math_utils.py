# File: utils/math_utils.py
"""Money and hours arithmetic for YardOps.

Pure Python math functions, unit tested without any store or manager.

Functions:
    - round_money: Consistent rounding to cents (also used for hours)
    - safe_divide: Division returning a default on a zero/negative divisor
    - to_float: Lenient numeric coercion for record fields
"""

from __future__ import annotations

import logging
from typing import Any

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# Default float precision for money and hours
DATA_FLOAT_PRECISION = 2


def round_money(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a monetary or hour value to the configured precision.

    Prevents float drift (e.g., 27.499999999999996 -> 27.5).

    Examples:
        round_money(10.456) -> 10.46
        round_money(2.5) -> 2.5
    """
    return round(value, precision)


def safe_divide(
    numerator: float,
    denominator: float,
    default: float = 0.0,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Divide and round, returning `default` when the denominator is not positive.

    Examples:
        safe_divide(75, 2.5) -> 30.0
        safe_divide(75, 0) -> 0.0
    """
    if denominator <= 0:
        return default
    return round_money(numerator / denominator, precision)


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce a stored field to float, falling back to `default`.

    Handles None, numeric strings ("42.5"), and numbers. Anything else is
    logged and replaced by the default.
    """
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        _LOGGER.debug("to_float: Non-numeric value %r, using %s", value, default)
        return default
