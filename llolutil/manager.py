"""Named collections of statistics, including timing statistics."""

from __future__ import annotations

import functools
import math
import sys
import threading
from abc import ABC, abstractmethod

from llolutil.stats import Stats
from llolutil.timer import Timer

_CYAN = (0, 255, 255)
_LIGHT_SKY_BLUE = (135, 206, 250)

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN


def _colored(text: str, rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"\x1b[38;2;{r};{g};{b}m{text}\x1b[0m"


def _format_unit(ns: int, unit_ns: int, suffix: str) -> str:
    whole, frac = divmod(ns, unit_ns)
    digits = len(str(unit_ns)) - 1
    frac_str = f"{frac:0{digits}d}".rstrip("0") if digits else ""
    return f"{whole}.{frac_str}{suffix}" if frac_str else f"{whole}{suffix}"


def _format_duration(ns) -> str:
    """Format nanoseconds the way durations are conventionally printed."""
    if ns == math.inf:
        return "inf"
    if ns == -math.inf:
        return "-inf"
    ns = int(ns)
    if ns == 0:
        return "0"
    if ns < 0:
        return "-" + _format_duration(-ns)
    if ns < _NS_PER_S:
        if ns < _NS_PER_US:
            return f"{ns}ns"
        if ns < _NS_PER_MS:
            return _format_unit(ns, _NS_PER_US, "us")
        return _format_unit(ns, _NS_PER_MS, "ms")
    parts = []
    hours, ns = divmod(ns, _NS_PER_HOUR)
    if hours:
        parts.append(f"{hours}h")
    minutes, ns = divmod(ns, _NS_PER_MIN)
    if minutes:
        parts.append(f"{minutes}m")
    if ns:
        parts.append(_format_unit(ns, _NS_PER_S, "s"))
    return "".join(parts)


class StatsManagerBase(ABC):
    """Thread-safe dictionary of named statistics."""

    _DEFAULT_NAME = "stats"
    _STATS_LIMITS: tuple = (0.0, -sys.float_info.max, sys.float_info.max)

    def __init__(self, name: str | None = None) -> None:
        self.name = self._DEFAULT_NAME if name is None else name
        self._stats: dict[str, Stats] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._stats)

    def items(self) -> list[tuple[str, Stats]]:
        """Snapshot of (name, stats) pairs."""
        with self._lock:
            return list(self._stats.items())

    def new_stats(self) -> Stats:
        """Empty stats of the value type this manager holds."""
        return Stats(*self._STATS_LIMITS)

    def update(self, name: str, stats: Stats) -> None:
        """Aggregate ``stats`` into the entry ``name``; empty stats are ignored."""
        if not stats.ok():
            return
        with self._lock:
            entry = self._stats.get(name)
            if entry is None:
                entry = self.new_stats()
                self._stats[name] = entry
            entry += stats

    def get_stats(self, name: str) -> Stats:
        """A copy of the stats under ``name``, or empty stats if not found."""
        with self._lock:
            entry = self._stats.get(name)
            if entry is None:
                return self.new_stats()
            return self.new_stats() + entry

    def report_all(self, sort: bool = False) -> str:
        lines = [f"Manager: {self.name}"]
        entries = self.items()
        if sort:
            entries.sort(key=lambda kv: kv[0])
        lines.extend(self.report_stats(key, stats) for key, stats in entries)
        return "\n".join(lines)

    def report(self, name: str) -> str:
        return self.report_stats(f"{self.name}/{name}", self.get_stats(name))

    @abstractmethod
    def report_stats(self, name: str, stats: Stats) -> str:
        """Format one named entry."""


class StatsManager(StatsManagerBase):
    """Manager of floating point statistics."""

    def get_ref(self, name: str) -> Stats:
        """The live stats under ``name``, created if missing."""
        with self._lock:
            entry = self._stats.get(name)
            if entry is None:
                entry = self.new_stats()
                self._stats[name] = entry
            return entry

    def report_stats(self, name: str, stats: Stats) -> str:
        head = _colored(f"[{name:<16}]", _CYAN)
        return head + (
            f" n: {stats.count():<16} | sum: {stats.sum():<14.4e} | "
            f"min: {stats.min():<14.4f} | max: {stats.max():<14.4f} | "
            f"mean: {stats.mean():<14.4f} | last: {stats.last():<14.4f} |"
        )


class ManualTimer:
    """Timer whose elapsed time is recorded on stop and sent to a manager on commit."""

    def __init__(self, name: str, manager: TimerManager, start: bool = True) -> None:
        if manager is None:
            raise ValueError("timer needs a manager")
        self._name = name
        self._manager = manager
        self._timer = Timer()
        self._stats = manager.new_stats()
        if start:
            self._timer.start()
        else:
            self._timer.reset()

    def start(self) -> None:
        self._timer.start()

    def stop(self, record: bool = True) -> None:
        """Stop, and record the elapsed time if ``record``."""
        self._timer.stop()
        if record:
            self._stats.add(self._timer.elapsed())

    def resume(self) -> None:
        self._timer.resume()

    def commit(self) -> None:
        """Stop, record and hand the collected stats to the manager."""
        self.stop(True)
        if not self._stats.ok():
            return
        self._manager.update(self._name, self._stats)
        self._stats = self._manager.new_stats()


class ScopedTimer(ManualTimer):
    """Started timer that commits when its ``with`` block ends."""

    def __enter__(self) -> ScopedTimer:
        return self

    def __exit__(self, *args) -> None:
        self.commit()


class TimerManager(StatsManagerBase):
    """Manager of durations in nanoseconds."""

    _DEFAULT_NAME = "timers"
    _STATS_LIMITS = (0, 0, math.inf)

    def manual(self, name: str, start: bool = True) -> ManualTimer:
        return ManualTimer(name, self, start)

    def scoped(self, name: str) -> ScopedTimer:
        return ScopedTimer(name, self)

    def report_stats(self, name: str, stats: Stats) -> str:
        head = _colored(f"[{name:<16}]", _LIGHT_SKY_BLUE)
        return head + (
            f" n: {stats.count():<16} | sum: {_format_duration(stats.sum()):<14} | "
            f"min: {_format_duration(stats.min()):<14} | "
            f"max: {_format_duration(stats.max()):<14} | "
            f"mean: {_format_duration(stats.mean()):<14} | "
            f"last: {_format_duration(stats.last()):<14} |"
        )


@functools.cache
def global_stats_manager() -> StatsManager:
    return StatsManager()


@functools.cache
def global_timer_manager() -> TimerManager:
    return TimerManager()