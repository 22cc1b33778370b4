from __future__ import annotations

import math
from typing import Any, Iterable, List

from . import config
from .errors import ConfigurationError


def flatten(items: Any) -> List[Any]:
    """Flattens nested lists/tuples into a flat list. A non-sequence becomes a one-item list."""
    if not isinstance(items, (list, tuple)):
        return [items]
    out: List[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            out.extend(flatten(item))
        else:
            out.append(item)
    return out


def flatten_filter(items: Any) -> List[Any]:
    return [item for item in flatten(items) if item is not None]


def as_number(value: Any, what: str) -> float:
    """Converts a user-supplied number, raising ``ConfigurationError`` for anything else."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Bad number for {what}: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Bad number for {what}: {value!r}") from None


def almost_equal(a: float, b: float, tolerance: float | None = None) -> bool:
    tol = config.ALMOST_EQUAL_TOL if tolerance is None else tolerance
    diff = a - b
    return -tol <= diff <= tol


def round_reasonably(value: float, significant_digits: int | None = None) -> str:
    digits = config.SIGNIFICANT_DIGITS if significant_digits is None else significant_digits
    if not math.isfinite(value):
        return str(value)
    if abs(value) <= config.ZERO_TOLERANCE:
        return "0"
    rounded = float(f"{value:.{digits}g}")
    if rounded.is_integer():
        return str(int(rounded))
    return repr(rounded)


def join_numbers(values: Iterable[float]) -> str:
    return " ".join(round_reasonably(float(v)) for v in values)
