from __future__ import annotations

import gc
import logging
import threading
import time
import weakref

import pytest

from aquafloc.twin.clock import SimulationClock
from aquafloc.twin.noise import FixedNoise
from aquafloc.twin.state import SimulationState


def _wait_until(predicate, timeout_s: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_transitions_replace_snapshot_and_broadcast() -> None:
    clock = SimulationClock(noise=FixedNoise(0.0))
    seen: list[SimulationState] = []
    clock.subscribe(seen.append)

    ticked = clock.tick()
    edited = clock.apply_user_edit("dosage", 1.5)
    toggled = clock.toggle_auto_dosing()

    assert seen == [ticked, edited, toggled]
    assert clock.get_snapshot() is toggled
    assert edited.is_auto_dosing is False
    assert toggled.is_auto_dosing is True
    assert toggled.dosage == 1.5
    assert clock.tick_count == 1


def test_ticks_only_subscribers_skip_operator_input() -> None:
    clock = SimulationClock(noise=FixedNoise(0.0))
    ticks: list[SimulationState] = []
    clock.subscribe(ticks.append, ticks_only=True)

    clock.apply_user_edit("ph", 6.8)
    clock.tick()
    clock.toggle_auto_dosing()

    assert len(ticks) == 1
    assert ticks[0].ph == 6.8


def test_unsubscribe_stops_notifications() -> None:
    clock = SimulationClock(noise=FixedNoise(0.0))
    seen: list[SimulationState] = []
    unsubscribe = clock.subscribe(seen.append)

    clock.tick()
    unsubscribe()
    clock.tick()

    assert len(seen) == 1


def test_subscriber_errors_propagate_on_direct_calls() -> None:
    clock = SimulationClock(noise=FixedNoise(0.0))

    def _boom(state: SimulationState) -> None:
        raise RuntimeError("render failed")

    clock.subscribe(_boom)

    with pytest.raises(RuntimeError, match="render failed"):
        clock.tick()


def test_timer_ticks_until_stopped() -> None:
    clock = SimulationClock(noise=FixedNoise(0.0), period_s=0.01)
    reached = threading.Event()

    def _count(state: SimulationState) -> None:
        if clock.tick_count >= 3:
            reached.set()

    clock.subscribe(_count)
    clock.start()
    try:
        assert reached.wait(5.0)
        assert clock.is_running
    finally:
        clock.stop()

    stopped_at = clock.tick_count
    time.sleep(0.05)
    assert not clock.is_running
    assert clock.tick_count == stopped_at


def test_context_manager_always_stops() -> None:
    clock = SimulationClock(noise=FixedNoise(0.0), period_s=0.01)

    with pytest.raises(KeyError), clock:
        assert clock.is_running
        raise KeyError("operator closed the console")

    assert not clock.is_running


def test_double_start_is_rejected_and_stop_is_idempotent() -> None:
    clock = SimulationClock(period_s=0.5)
    clock.stop()

    clock.start()
    try:
        with pytest.raises(RuntimeError, match="already running"):
            clock.start()
    finally:
        clock.stop()
        clock.stop()

    assert not clock.is_running


def test_stop_after_failed_start(monkeypatch: pytest.MonkeyPatch) -> None:
    clock = SimulationClock(period_s=0.01)

    def _refuse(self: threading.Thread) -> None:
        raise RuntimeError("can't start new thread")

    monkeypatch.setattr(threading.Thread, "start", _refuse)
    with pytest.raises(RuntimeError, match="can't start"):
        clock.start()
    monkeypatch.undo()

    assert not clock.is_running
    clock.stop()
    clock.start()
    clock.stop()


def test_failing_tick_on_timer_is_logged_and_stops_clock(
    caplog: pytest.LogCaptureFixture,
) -> None:
    clock = SimulationClock(noise=FixedNoise(0.0), period_s=0.01)

    def _boom(state: SimulationState) -> None:
        raise ValueError("subscriber exploded")

    clock.subscribe(_boom)
    with caplog.at_level(logging.ERROR, logger="aquafloc.twin.clock"):
        clock.start()
        try:
            assert _wait_until(lambda: not clock.is_running)
        finally:
            clock.stop()

    assert "Simulation tick failed" in caplog.text
    assert clock.tick_count == 1


def test_transitions_never_overlap() -> None:
    clock = SimulationClock(period_s=0.001)
    active = {"count": 0}
    overlaps: list[int] = []

    def _guard(state: SimulationState) -> None:
        active["count"] += 1
        if active["count"] > 1:
            overlaps.append(active["count"])
        time.sleep(0.0005)
        active["count"] -= 1

    clock.subscribe(_guard)
    clock.start()
    try:
        for idx in range(60):
            clock.apply_user_edit("pollutant_load", float(idx % 100))
            clock.apply_user_edit("flow_rate", 50.0 + idx)
    finally:
        clock.stop()

    assert overlaps == []
    assert clock.get_snapshot().flow_rate == 109.0


def test_invalid_period_is_rejected() -> None:
    with pytest.raises(ValueError, match="period_s"):
        SimulationClock(period_s=0.0)


def test_stop_from_subscriber_during_operator_edit_returns() -> None:
    clock = SimulationClock(noise=FixedNoise(0.0), period_s=0.001)

    def _stop_on_manual(state: SimulationState) -> None:
        if not state.is_auto_dosing:
            clock.stop()

    clock.subscribe(_stop_on_manual)
    clock.start()
    timer = clock._thread
    assert _wait_until(lambda: clock.tick_count >= 2)

    worker = threading.Thread(
        target=clock.apply_user_edit, args=("dosage", 1.5), daemon=True
    )
    worker.start()
    worker.join(3.0)
    try:
        assert not worker.is_alive()
        assert not clock.is_running
        assert _wait_until(lambda: not timer.is_alive())
    finally:
        clock.stop()

    stopped_at = clock.tick_count
    time.sleep(0.05)
    assert clock.tick_count == stopped_at
    assert clock.get_snapshot().dosage == 1.5


def test_discarded_running_clock_is_collected() -> None:
    clock = SimulationClock(noise=FixedNoise(0.0), period_s=0.005)
    clock.start()
    timer = clock._thread
    ref = weakref.ref(clock)
    assert _wait_until(lambda: ref().tick_count >= 2)
    del clock

    def _collected() -> bool:
        gc.collect()
        return ref() is None

    assert _wait_until(_collected)
    assert _wait_until(lambda: not timer.is_alive())
