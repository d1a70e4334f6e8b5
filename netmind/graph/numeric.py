import math
from typing import Any


def as_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce an optional numeric snapshot field into a finite float.

    Missing values, strings, booleans, NaN and infinities all fall back to
    `default`, so aggregate statistics can never turn non-finite.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    value = float(value)
    if not math.isfinite(value):
        return default
    return value


def tidy(value: float) -> float:
    """Render whole floats as ints so JSON output stays stable (e.g. 10 not 10.0)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
