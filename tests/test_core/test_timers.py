import pytest
from narrator.core.timers import Scheduler


def test_timer_fires_when_due(scheduler):
    fired = []
    scheduler.schedule(1500, lambda: fired.append(scheduler.now_ms))

    scheduler.advance(1499)
    assert fired == []

    scheduler.advance(1)
    assert fired == [1500]

def test_timers_fire_in_due_order(scheduler):
    order = []
    scheduler.schedule(300, lambda: order.append("c"))
    scheduler.schedule(100, lambda: order.append("a"))
    scheduler.schedule(200, lambda: order.append("b"))
    scheduler.schedule(100, lambda: order.append("a2"))

    scheduler.advance(1000)

    assert order == ["a", "a2", "b", "c"]

def test_nested_timer_fires_within_same_advance(scheduler):
    fired = []

    def first():
        fired.append(("first", scheduler.now_ms))
        scheduler.schedule(50, lambda: fired.append(("second", scheduler.now_ms)))

    scheduler.schedule(100, first)
    scheduler.advance(200)

    assert fired == [("first", 100), ("second", 150)]
    assert scheduler.now_ms == 200

def test_cancelled_timer_does_not_fire(scheduler):
    fired = []
    handle = scheduler.schedule(100, lambda: fired.append(1))

    handle.cancel()
    scheduler.advance(500)

    assert fired == []
    assert not handle.active
    assert scheduler.pending == 0

def test_update_uses_seconds(scheduler):
    fired = []
    scheduler.schedule(500, lambda: fired.append(1))

    scheduler.update(0.25)
    assert fired == []
    scheduler.update(0.25)
    assert fired == [1]

def test_negative_delay_rejected(scheduler):
    with pytest.raises(ValueError):
        scheduler.schedule(-1, lambda: None)
    with pytest.raises(ValueError):
        scheduler.advance(-5)

def test_callback_errors_propagate(scheduler):
    def broken():
        raise RuntimeError("boom")

    scheduler.schedule(10, broken)
    with pytest.raises(RuntimeError):
        scheduler.advance(10)

def test_clock_reaches_target_when_callback_raises(scheduler):
    later = []
    def broken():
        raise RuntimeError("boom")

    scheduler.schedule(10, broken)
    scheduler.schedule(20, lambda: later.append(scheduler.now_ms))

    with pytest.raises(RuntimeError):
        scheduler.advance(1000)

    assert scheduler.now_ms == 1000
    assert later == []
    assert scheduler.pending == 1

    scheduler.advance(0)
    assert later == [1000]

def test_clear(scheduler):
    handles = [scheduler.schedule(10, lambda: None) for _ in range(3)]
    assert scheduler.pending == 3

    scheduler.clear()

    assert scheduler.pending == 0
    assert all(not h.active for h in handles)
