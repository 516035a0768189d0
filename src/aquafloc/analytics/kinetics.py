from __future__ import annotations

import numpy as np
import pandas as pd

RATE_PER_UNIT_DOSAGE = 0.15
TIME_SCALE_MIN = 10.0


def adsorption_rate_constant(dosage: float) -> float:
    if dosage < 0:
        msg = "dosage must be non-negative"
        raise ValueError(msg)
    return dosage * RATE_PER_UNIT_DOSAGE


def kinetic_curve(
    pollutant_load: float,
    dosage: float,
    *,
    horizon_min: float = 60.0,
    step_min: float = 5.0,
) -> pd.DataFrame:
    """First-order adsorption decay ``C(t) = C0 * exp(-k t / 10)`` with ``k = 0.15 * dosage``."""
    if pollutant_load < 0:
        msg = "pollutant_load must be non-negative"
        raise ValueError(msg)
    if horizon_min < 0:
        msg = "horizon_min must be non-negative"
        raise ValueError(msg)
    if step_min <= 0:
        msg = "step_min must be positive"
        raise ValueError(msg)

    k = adsorption_rate_constant(dosage)
    n_points = int(np.floor(horizon_min / step_min + 1e-9)) + 1
    times = np.arange(n_points, dtype=float) * step_min
    concentration = pollutant_load * np.exp(-k * (times / TIME_SCALE_MIN))
    return pd.DataFrame({"time_min": times, "concentration": concentration})


def recovery_split(recovery_rate: float) -> dict[str, float]:
    if not 0 <= recovery_rate <= 100:
        msg = "recovery_rate must be between 0 and 100"
        raise ValueError(msg)
    return {"recovered_pct": recovery_rate, "lost_pct": 100.0 - recovery_rate}


__all__ = ["kinetic_curve", "recovery_split", "adsorption_rate_constant"]
