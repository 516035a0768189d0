from __future__ import annotations

import threading
from collections import deque

import pandas as pd

from aquafloc.twin.state import SimulationState

TREND_FIELDS = ("turbidity", "dissolved_oxygen", "dosage", "recovery_rate")


class TickHistory:
    """Bounded rolling window of tick snapshots for trend charts.

    ``record`` runs on the clock's timer thread while ``frame`` is read from
    the dashboard thread, so both go through one lock.
    """

    def __init__(self, maxlen: int = 120) -> None:
        if maxlen <= 0:
            msg = "maxlen must be positive"
            raise ValueError(msg)
        self.maxlen = maxlen
        self._rows: deque[dict[str, float]] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)

    def record(self, state: SimulationState) -> None:
        row = {name: float(getattr(state, name)) for name in TREND_FIELDS}
        with self._lock:
            self._rows.append(row)

    def frame(self) -> pd.DataFrame:
        with self._lock:
            rows = list(self._rows)
        frame = pd.DataFrame(rows, columns=list(TREND_FIELDS))
        frame.index.name = "tick"
        return frame


__all__ = ["TREND_FIELDS", "TickHistory"]
