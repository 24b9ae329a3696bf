"""Running statistics: count, sum, min, max, last value and mean."""

from __future__ import annotations

import sys


class Stats:
    """Aggregated statistics of a stream of values.

    ``zero`` is the additive identity of the value type, ``lowest`` the
    smallest and ``highest`` the largest representable value. Minimum starts
    at ``highest`` and maximum at ``lowest`` so that the first value added
    replaces both.
    """

    def __init__(
        self,
        zero=0.0,
        lowest=-sys.float_info.max,
        highest=sys.float_info.max,
    ):
        self._zero = zero
        self._lowest = lowest
        self._highest = highest
        self._count = 0
        self._sum = zero
        self._min = highest
        self._max = lowest
        self._last = zero

    def add(self, value) -> None:
        """Record one value."""
        self._count += 1
        self._sum += value
        self._min = min(self._min, value)
        self._max = max(self._max, value)
        self._last = value

    def ok(self) -> bool:
        """Whether at least one value was recorded."""
        return self._count > 0

    def count(self) -> int:
        return self._count

    def sum(self):
        return self._sum

    def min(self):
        return self._min

    def max(self):
        return self._max

    def last(self):
        return self._last

    def mean(self):
        """Mean of the recorded values, or zero if there are none."""
        if self._count == 0:
            return self._zero
        if isinstance(self._sum, int):
            return self._sum // self._count
        return self._sum / self._count

    def _copy(self) -> Stats:
        other = Stats(self._zero, self._lowest, self._highest)
        other._count = self._count
        other._sum = self._sum
        other._min = self._min
        other._max = self._max
        other._last = self._last
        return other

    def __iadd__(self, other: Stats) -> Stats:
        if other.count() > 0:
            self._count += other.count()
            self._sum += other.sum()
            self._min = min(self._min, other.min())
            self._max = max(self._max, other.max())
            self._last = other.last()
        return self

    def __add__(self, other: Stats) -> Stats:
        result = self._copy()
        result += other
        return result

    def __repr__(self) -> str:
        return (
            f"Stats(count={self._count}, sum={self._sum!r}, min={self._min!r}, "
            f"max={self._max!r}, last={self._last!r})"
        )