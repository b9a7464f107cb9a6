"""Value coercion helpers for numeric metrics."""

import numbers
import time
from decimal import Decimal
from typing import Any

from hawkularpy.core.errors import ConversionError


def convert_to_float(value: Any) -> float:
    """Convert a metric value to a float.

    Accepts integers of any size, floats, other real numbers (Fraction,
    NumPy scalars), Decimal, and strings in Python's float syntax.
    Booleans are rejected even though bool subclasses int.

    Args:
        value: The value to convert.

    Returns:
        The value as a float.

    Raises:
        ConversionError: If the value is of an unsupported kind, is a string
            that does not parse, or is an integer too large for a float.
    """
    if isinstance(value, bool):
        raise ConversionError(f"Cannot convert {value!r} to float")
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as e:
            raise ConversionError(f"Cannot parse {value!r} as float") from e
    if isinstance(value, (numbers.Real, Decimal)):
        try:
            return float(value)
        except (OverflowError, ValueError) as e:
            raise ConversionError(f"{value!r} is not representable as float") from e
    raise ConversionError(f"Cannot convert {value!r} to float")


def unix_milli() -> int:
    """Return the current time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000
