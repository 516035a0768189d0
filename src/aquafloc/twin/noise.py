from __future__ import annotations

from typing import Protocol

import numpy as np

from aquafloc.twin.state import clamp


class NoiseSource(Protocol):
    """Anything that draws a uniform sample from ``[low, high)``.

    ``numpy.random.Generator`` satisfies this directly.
    """

    def uniform(self, low: float, high: float) -> float: ...


class FixedNoise:
    """Deterministic stand-in that always returns ``offset`` inside the range."""

    def __init__(self, offset: float = 0.0) -> None:
        self.offset = float(offset)

    def uniform(self, low: float, high: float) -> float:
        return clamp(self.offset, low, high)


def make_noise(seed: int | None = None) -> np.random.Generator:
    return np.random.default_rng(seed)


__all__ = ["NoiseSource", "FixedNoise", "make_noise"]
