from __future__ import annotations

import logging
import threading
import time
import weakref
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from aquafloc.twin import updater
from aquafloc.twin.config import DosingConfig
from aquafloc.twin.noise import NoiseSource, make_noise
from aquafloc.twin.state import SimulationState

logger = logging.getLogger(__name__)

Subscriber = Callable[[SimulationState], None]


class SimulationClock:
    """Owns the process-wide twin state and advances it on a fixed cadence.

    Every transition (timer tick or operator input) runs under one lock and
    broadcasts the new snapshot before the next transition may start, so
    subscribers observe snapshots strictly in transition order.
    """

    def __init__(
        self,
        initial_state: SimulationState | None = None,
        *,
        noise: NoiseSource | None = None,
        config: DosingConfig | None = None,
        period_s: float = 1.0,
    ) -> None:
        if period_s <= 0:
            msg = "period_s must be positive"
            raise ValueError(msg)
        self._state = initial_state or SimulationState()
        self._noise = noise if noise is not None else make_noise()
        self._config = config or DosingConfig()
        self.period_s = float(period_s)

        self._lock = threading.RLock()
        self._subscribers: list[tuple[Subscriber, bool]] = []
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._finalizer: weakref.finalize | None = None
        self._owner: int | None = None
        self.tick_count = 0

    def get_snapshot(self) -> SimulationState:
        with self._lock:
            return self._state

    def subscribe(self, callback: Subscriber, *, ticks_only: bool = False) -> Callable[[], None]:
        """Register ``callback(state)`` for every new snapshot.

        With ``ticks_only`` the callback skips snapshots produced by operator
        edits and toggles. Returns a callable that unsubscribes.
        """
        with self._lock:
            self._subscribers.append((callback, ticks_only))

        def _unsubscribe() -> None:
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers = [
                entry for entry in self._subscribers if entry[0] != callback
            ]

    @contextmanager
    def _transition(self) -> Iterator[None]:
        with self._lock:
            outer = self._owner
            self._owner = threading.get_ident()
            try:
                yield
            finally:
                self._owner = outer

    def _commit(self, next_state: SimulationState, *, from_tick: bool = False) -> SimulationState:
        self._state = next_state
        for callback, ticks_only in list(self._subscribers):
            if ticks_only and not from_tick:
                continue
            callback(next_state)
        return next_state

    def _advance(self) -> SimulationState:
        next_state = updater.tick(self._state, noise=self._noise, config=self._config)
        self.tick_count += 1
        return self._commit(next_state, from_tick=True)

    def tick(self) -> SimulationState:
        with self._transition():
            return self._advance()

    def _timer_tick(self, stop_event: threading.Event) -> None:
        with self._transition():
            # stop() may have been requested while this thread waited for the lock.
            if stop_event.is_set():
                return
            self._advance()

    def apply_user_edit(self, field: str, value: float) -> SimulationState:
        with self._transition():
            return self._commit(updater.apply_user_edit(self._state, field, value))

    def toggle_auto_dosing(self) -> SimulationState:
        with self._transition():
            return self._commit(updater.toggle_auto_dosing(self._state))

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start the timer thread.

        The thread only holds a weak reference to the clock, so a clock that
        is dropped without ``stop()`` is collected and its timer exits.
        """
        if self.is_running:
            msg = "simulation clock is already running"
            raise RuntimeError(msg)
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=_run_clock,
            args=(weakref.ref(self), stop_event, self.period_s),
            name="aquafloc-simulation-clock",
            daemon=True,
        )
        try:
            self._thread.start()
        except BaseException:
            self.stop()
            raise
        self._finalizer = weakref.finalize(self, stop_event.set)
        logger.info("Simulation clock started (period %.3fs)", self.period_s)

    def stop(self) -> None:
        """Stop the timer thread.

        Joins the thread unless the caller is the timer itself or is inside a
        transition, where joining would wait on the lock this thread holds.
        """
        self._stop_event.set()
        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None
        thread = self._thread
        self._thread = None
        if thread is None:
            return
        in_transition = self._owner == threading.get_ident()
        if thread.is_alive() and thread is not threading.current_thread() and not in_transition:
            thread.join()
        logger.info("Simulation clock stopped after %d ticks", self.tick_count)

    def __enter__(self) -> SimulationClock:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def _run_clock(
    clock_ref: weakref.ref[SimulationClock], stop_event: threading.Event, period_s: float
) -> None:
    next_deadline = time.monotonic() + period_s
    while not stop_event.wait(max(0.0, next_deadline - time.monotonic())):
        clock = clock_ref()
        if clock is None:
            logger.debug("Simulation clock was discarded; timer exiting")
            return
        try:
            clock._timer_tick(stop_event)
        except Exception:
            logger.exception("Simulation tick failed; stopping clock")
            stop_event.set()
            return
        finally:
            # Drop the strong reference before waiting.
            del clock
        next_deadline += period_s
        now = time.monotonic()
        if next_deadline < now:
            # Skip missed periods instead of bursting to catch up.
            logger.debug("Simulation clock overran by %.3fs", now - next_deadline)
            next_deadline = now + period_s


__all__ = ["SimulationClock", "Subscriber"]
