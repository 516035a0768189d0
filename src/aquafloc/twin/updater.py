from __future__ import annotations

from dataclasses import replace

from aquafloc.twin.config import HIGH_CONTAMINATION_ALERT, DosingConfig
from aquafloc.twin.noise import NoiseSource, make_noise
from aquafloc.twin.state import (
    DISSOLVED_OXYGEN_BOUNDS,
    DOSAGE_BOUNDS,
    RECOVERY_RATE_BOUNDS,
    USER_EDITABLE_FIELDS,
    SimulationState,
    clamp,
)

_DEFAULT_CONFIG = DosingConfig()


def required_dosage(pollutant_load: float, config: DosingConfig | None = None) -> float:
    cfg = config or _DEFAULT_CONFIG
    return pollutant_load / cfg.load_per_unit_dosage


def turbidity_excess_ntu(
    pollutant_load: float,
    dosage: float,
    config: DosingConfig | None = None,
) -> float:
    """Turbidity above baseline left by under-dosing.

    With no pollutant load the dosage ratio saturates and the excess is zero.
    """
    cfg = config or _DEFAULT_CONFIG
    target = required_dosage(pollutant_load, cfg)
    if target <= 0:
        return 0.0
    dosage_ratio = dosage / target
    return (pollutant_load * cfg.turbidity_per_load_pct) * max(0.0, 1.0 - dosage_ratio)


def _control_dosage(state: SimulationState, cfg: DosingConfig) -> tuple[float, list[str]]:
    alerts: list[str] = []
    if not state.is_auto_dosing:
        return state.dosage, alerts

    target = required_dosage(state.pollutant_load, cfg)
    next_dosage = state.dosage
    if abs(state.dosage - target) > cfg.deadband_g_per_l:
        next_dosage = state.dosage + cfg.smoothing_factor * (target - state.dosage)
        if state.pollutant_load > cfg.high_contamination_pct:
            alerts.append(HIGH_CONTAMINATION_ALERT)
    return next_dosage, alerts


def tick(
    state: SimulationState,
    noise: NoiseSource | None = None,
    config: DosingConfig | None = None,
) -> SimulationState:
    """Advance the twin by one 1 Hz step.

    Noise is drawn twice per tick, turbidity first and recovery second, so a
    seeded generator reproduces the same trajectory.
    """
    cfg = config or _DEFAULT_CONFIG
    source = noise if noise is not None else make_noise()

    next_dosage, alerts = _control_dosage(state, cfg)
    next_dosage = clamp(next_dosage, *DOSAGE_BOUNDS)

    turbidity = cfg.base_turbidity_ntu + turbidity_excess_ntu(
        state.pollutant_load, next_dosage, cfg
    )
    turbidity += float(source.uniform(-cfg.turbidity_noise_ntu, cfg.turbidity_noise_ntu))
    turbidity = max(0.0, turbidity)

    dissolved_oxygen = clamp(
        cfg.saturated_oxygen_mg_per_l - (turbidity / cfg.turbidity_per_oxygen_mg),
        *DISSOLVED_OXYGEN_BOUNDS,
    )

    flow_factor = max(
        0.0, (state.flow_rate - cfg.recovery_flow_threshold_lpm) * cfg.recovery_loss_per_lpm
    )
    recovery_rate = cfg.nominal_recovery_pct - flow_factor
    recovery_rate += float(source.uniform(-cfg.recovery_noise_pct, cfg.recovery_noise_pct))
    recovery_rate = clamp(recovery_rate, *RECOVERY_RATE_BOUNDS)

    return replace(
        state,
        dosage=next_dosage,
        turbidity=turbidity,
        dissolved_oxygen=dissolved_oxygen,
        recovery_rate=recovery_rate,
        alerts=tuple(alerts),
    )


def apply_user_edit(state: SimulationState, field: str, value: float) -> SimulationState:
    """Set one operator-controlled field; a dosage edit switches to manual mode."""
    if field not in USER_EDITABLE_FIELDS:
        msg = f"{field!r} is not user-editable; expected one of {USER_EDITABLE_FIELDS}"
        raise ValueError(msg)
    changes: dict[str, object] = {field: float(value)}
    if field == "dosage":
        changes["is_auto_dosing"] = False
    return replace(state, **changes)


def toggle_auto_dosing(state: SimulationState) -> SimulationState:
    return replace(state, is_auto_dosing=not state.is_auto_dosing)


__all__ = [
    "tick",
    "apply_user_edit",
    "toggle_auto_dosing",
    "required_dosage",
    "turbidity_excess_ntu",
]
