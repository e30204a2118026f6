from __future__ import annotations

import pytest

from simon.scheduler import Scheduler


def test_callbacks_run_when_due():
    sched = Scheduler()
    calls = []
    sched.call_later(1.0, calls.append, "a")
    sched.call_later(0.5, calls.append, "b")

    assert sched.advance(0.4) == 0
    assert sched.advance(0.2) == 1
    assert calls == ["b"]
    assert sched.advance(0.4) == 1
    assert calls == ["b", "a"]
    assert sched.now == pytest.approx(1.0)


def test_same_instant_runs_in_scheduling_order():
    sched = Scheduler()
    calls = []
    for name in "xyz":
        sched.call_later(0.25, calls.append, name)
    sched.advance(0.25)
    assert calls == ["x", "y", "z"]


def test_callbacks_scheduled_inside_window_run_in_same_advance():
    sched = Scheduler()
    calls = []

    def first():
        calls.append(("first", sched.now))
        sched.call_later(0.3, lambda: calls.append(("second", sched.now)))

    sched.call_later(0.2, first)
    sched.advance(1.0)
    assert [name for name, _ in calls] == ["first", "second"]
    assert calls[1][1] == pytest.approx(0.5)


def test_cancelled_timer_does_not_run():
    sched = Scheduler()
    calls = []
    handle = sched.call_later(0.1, calls.append, 1)
    assert sched.pending == 1
    handle.cancel()
    assert sched.pending == 0
    sched.advance(1.0)
    assert calls == []


def test_run_pending_jumps_through_time():
    sched = Scheduler()
    calls = []
    sched.call_later(3.0, calls.append, 3)
    sched.call_soon(calls.append, 0)
    assert sched.run_pending() == 2
    assert calls == [0, 3]
    assert sched.now == pytest.approx(3.0)


def test_cancel_all_clears_queue():
    sched = Scheduler()
    calls = []
    sched.call_later(0.1, calls.append, 1)
    sched.call_later(0.2, calls.append, 2)
    sched.cancel_all()
    sched.advance(1.0)
    assert calls == []
    assert sched.pending == 0


def test_failing_callback_is_logged_and_loop_continues():
    sched = Scheduler()
    calls = []

    def boom():
        raise RuntimeError("bad timer")

    sched.call_later(0.1, boom)
    sched.call_later(0.2, calls.append, "after")
    sched.advance(1.0)
    assert calls == ["after"]


def test_negative_delays_are_rejected():
    sched = Scheduler()
    with pytest.raises(ValueError):
        sched.call_later(-0.1, lambda: None)
    with pytest.raises(ValueError):
        sched.advance(-1.0)
