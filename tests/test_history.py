from __future__ import annotations

import threading

import pytest

from aquafloc.analytics.history import TREND_FIELDS, TickHistory
from aquafloc.twin.clock import SimulationClock
from aquafloc.twin.noise import FixedNoise
from aquafloc.twin.state import SimulationState


def test_history_keeps_only_the_latest_ticks() -> None:
    history = TickHistory(maxlen=3)
    for load in (10.0, 20.0, 30.0, 40.0, 50.0):
        history.record(SimulationState(pollutant_load=load, dosage=load / 50))

    frame = history.frame()

    assert len(history) == 3
    assert list(frame.columns) == list(TREND_FIELDS)
    assert frame.index.name == "tick"
    assert list(frame["dosage"]) == pytest.approx([0.6, 0.8, 1.0])


def test_empty_history_has_trend_columns() -> None:
    frame = TickHistory().frame()

    assert frame.empty
    assert list(frame.columns) == list(TREND_FIELDS)


def test_frame_reads_while_timer_records() -> None:
    history = TickHistory(maxlen=5)
    clock = SimulationClock(noise=FixedNoise(0.0), period_s=0.001)
    clock.subscribe(history.record, ticks_only=True)
    errors: list[BaseException] = []
    done = threading.Event()

    def _read() -> None:
        try:
            while not done.is_set():
                frame = history.frame()
                assert len(frame) <= 5
        except BaseException as exc:
            errors.append(exc)

    reader = threading.Thread(target=_read, daemon=True)
    with clock:
        reader.start()
        done.wait(0.2)
        done.set()
        reader.join(3.0)

    assert errors == []
    assert clock.tick_count > 0
    assert len(history) == min(clock.tick_count, 5)


def test_invalid_length_is_rejected() -> None:
    with pytest.raises(ValueError, match="maxlen"):
        TickHistory(maxlen=0)
