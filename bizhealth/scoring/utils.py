"""
Utility functions for safe metric access in health score calculations.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional


def to_metric_value(value: Any) -> Optional[float]:
    """
    Coerce a raw metric value to a float.

    Missing and malformed values (None, booleans, NaN, infinities,
    non-numeric strings) all become None, meaning "no data".

    Args:
        value: Raw value from the metrics mapping

    Returns:
        Float value, or None if the value is not usable
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, (int, float, Decimal)):
            number = float(value)
        elif isinstance(value, str):
            # Remove commas and whitespace
            cleaned = value.replace(",", "").strip()
            if not cleaned:
                return None
            number = float(cleaned)
        else:
            return None
    except (ValueError, TypeError, OverflowError, ArithmeticError):
        return None

    if not math.isfinite(number):
        return None
    return number


def get_metric(metrics: Mapping[str, Any], name: str, default: Optional[float] = None) -> Optional[float]:
    """
    Get a coerced metric value from a raw metrics mapping.

    Args:
        metrics: Raw metrics mapping
        name: Metric name
        default: Returned when the metric is missing or malformed

    Returns:
        Float value, or default
    """
    if not isinstance(metrics, Mapping):
        return default

    value = to_metric_value(metrics.get(name))
    return default if value is None else value


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float, digits: int = 2) -> float:
    """
    Round half away from zero for positive values.

    Python's round() uses banker's rounding on the binary representation;
    scores are rounded the conventional way instead.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
