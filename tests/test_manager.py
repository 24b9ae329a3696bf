from unittest.mock import patch

import pytest

from llolutil.manager import (
    ManualTimer,
    StatsManager,
    TimerManager,
    global_stats_manager,
    global_timer_manager,
)


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


def test_default_names():
    assert StatsManager().name == "stats"
    assert TimerManager().name == "timers"


def test_get_ref_creates_live_entry():
    sm = StatsManager("llol")
    assert len(sm) == 0
    ref = sm.get_ref("grid.matches")
    ref.add(4.0)
    ref.add(8.0)
    assert sm.get_ref("grid.matches") is ref
    assert len(sm) == 1
    stats = sm.get_stats("grid.matches")
    assert stats.count() == 2
    assert stats.last() == 8.0


def test_get_stats_returns_copy():
    sm = StatsManager()
    sm.get_ref("a").add(1.0)
    copy = sm.get_stats("a")
    copy.add(5.0)
    assert sm.get_stats("a").count() == 1


def test_get_stats_missing_is_empty():
    sm = StatsManager()
    assert not sm.get_stats("missing").ok()
    assert len(sm) == 0


def test_update_aggregates_and_ignores_empty():
    sm = StatsManager()
    sm.update("x", sm.new_stats())
    assert len(sm) == 0
    first = sm.new_stats()
    first.add(2.0)
    second = sm.new_stats()
    second.add(-3.0)
    sm.update("x", first)
    sm.update("x", second)
    merged = sm.get_stats("x")
    assert merged.count() == 2
    assert merged.min() == -3.0
    assert merged.max() == 2.0
    assert merged.last() == -3.0


def test_items_snapshot():
    sm = StatsManager()
    sm.get_ref("a").add(1.0)
    sm.get_ref("b").add(2.0)
    assert sorted(name for name, _ in sm.items()) == ["a", "b"]


def test_report_all_sorted():
    sm = StatsManager("llol")
    for name in ("zeta", "alpha", "mid"):
        sm.get_ref(name).add(1.0)
    lines = sm.report_all(sort=True).split("\n")
    assert lines[0] == "Manager: llol"
    order = [next(n for n in ("alpha", "mid", "zeta") if n in line) for line in lines[1:]]
    assert order == ["alpha", "mid", "zeta"]


def test_report_stats_fields():
    sm = StatsManager()
    values = [1.0, 3.0]
    for v in values:
        sm.get_ref("pano.add").add(v)
    report = sm.report_stats("pano.add", sm.get_stats("pano.add"))
    assert f"[{'pano.add':<16}]" in report
    assert " n: " + str(len(values)).ljust(16) + " |" in report
    assert report.endswith("|")


def test_report_prefixes_manager_name():
    sm = StatsManager("llol")
    sm.get_ref("a").add(1.0)
    assert "llol/a" in sm.report("a")


def test_scoped_timer_commits_on_exit():
    clock = FakeClock(1000)
    tm = TimerManager("llol")
    with patch("time.monotonic_ns", new=clock):
        with tm.scoped("1.Pano.Add"):
            clock.now += 1_500_000
    stats = tm.get_stats("1.Pano.Add")
    assert stats.count() == 1
    assert stats.last() == 1_500_000
    assert "1.5ms" in tm.report("1.Pano.Add")


def test_manual_timer_accumulates_resumes():
    clock = FakeClock(0)
    tm = TimerManager()
    with patch("time.monotonic_ns", new=clock):
        timer = tm.manual("match", start=False)
        clock.now = 100
        timer.resume()
        clock.now = 300
        timer.stop(False)
        clock.now = 1000
        timer.resume()
        clock.now = 1400
        timer.stop(False)
        timer.commit()
    stats = tm.get_stats("match")
    assert stats.count() == 1
    assert stats.last() == (300 - 100) + (1400 - 1000)


def test_manual_timer_records_each_stop():
    clock = FakeClock(0)
    tm = TimerManager()
    with patch("time.monotonic_ns", new=clock):
        timer = tm.manual("t")
        clock.now = 50
        timer.stop()
        timer.start()
        clock.now = 80
        timer.stop()
        timer.commit()
    stats = tm.get_stats("t")
    assert stats.count() == 3
    assert stats.min() == 80 - 50
    assert stats.max() == 50


def test_empty_timer_stats_report_infinite_min():
    tm = TimerManager()
    report = tm.report_stats("x", tm.get_stats("x"))
    assert "min: inf" in report


def test_manual_timer_requires_manager():
    with pytest.raises(ValueError):
        ManualTimer("x", None)


def test_global_managers_are_singletons():
    assert global_stats_manager() is global_stats_manager()
    assert global_timer_manager() is global_timer_manager()
    assert global_timer_manager().name == "timers"