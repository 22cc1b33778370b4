from __future__ import annotations

import itertools
import math
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Tuple

from . import config
from .errors import ConfigurationError
from .utils import flatten


@dataclass(frozen=True)
class Count:
    """Arithmetic sequence ``start, start + step, ...`` with ``count`` values."""

    start: float = 0
    step: float = 1
    count: int = 0

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ConfigurationError(f"Negative count: {self.count}")

    @classmethod
    def from_range(cls, start: float, stop: float, step: float = 1) -> "Count":
        """Values from ``start`` up to and including ``stop`` (when it lies on the step grid)."""
        if not step:
            raise ConfigurationError(f"Zero step for range {start}..{stop}")
        n = math.floor((stop - start) / step + config.COUNT_EPS) + 1
        return cls(start, step, max(n, 0))

    def value(self, n: int) -> float:
        return self.start + n * self.step

    def __iter__(self) -> Iterator[float]:
        return (self.value(n) for n in range(self.count))

    def __len__(self) -> int:
        return self.count


_COUNT_KEYS = ("from", "start", "to", "stop", "step", "count")


def count_from(raw: Any) -> Count:
    if isinstance(raw, Count):
        return raw
    if isinstance(raw, bool):
        raise ConfigurationError(f"Bad count: {raw!r}")
    if isinstance(raw, int):
        return Count(0, 1, max(raw, 0))
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Bad count: {raw!r}")
    unknown = set(raw) - set(_COUNT_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown count keys: {sorted(unknown)}")
    start = raw.get("from", raw.get("start", 0))
    step = raw.get("step", 1)
    stop = raw.get("to", raw.get("stop"))
    if "count" in raw:
        if stop is not None:
            raise ConfigurationError(f"Count given both an explicit count and an end: {dict(raw)!r}")
        count = raw["count"]
        if isinstance(count, float) and count.is_integer():
            count = int(count)
        if isinstance(count, bool) or not isinstance(count, int):
            raise ConfigurationError(f"Count must be a whole number: {count!r}")
        return Count(start, step, count)
    if stop is None:
        raise ConfigurationError(f"Count needs either 'count' or 'to': {dict(raw)!r}")
    return Count.from_range(start, stop, step)


class MultiIndex:
    """Cartesian product of count specs in odometer order (last dimension fastest).

    Iterating again restarts from the first index. Empty when any count is zero.
    """

    def __init__(self, counts: Any):
        self.counts: Tuple[Count, ...] = tuple(count_from(c) for c in flatten(counts))

    def __iter__(self) -> Iterator[Tuple[float, ...]]:
        for ns in itertools.product(*(range(c.count) for c in self.counts)):
            yield tuple(c.value(n) for c, n in zip(self.counts, ns))

    def __len__(self) -> int:
        return math.prod(c.count for c in self.counts)
