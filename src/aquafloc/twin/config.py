from __future__ import annotations

from dataclasses import dataclass

HIGH_CONTAMINATION_ALERT = "High Contamination: Increasing Dosage"


@dataclass(frozen=True)
class DosingConfig:
    """Controller and sensor-model constants for one simulation tick."""

    load_per_unit_dosage: float = 50.0
    deadband_g_per_l: float = 0.1
    smoothing_factor: float = 0.1
    high_contamination_pct: float = 70.0

    base_turbidity_ntu: float = 5.0
    turbidity_per_load_pct: float = 0.5
    turbidity_noise_ntu: float = 0.5

    saturated_oxygen_mg_per_l: float = 8.5
    turbidity_per_oxygen_mg: float = 20.0

    nominal_recovery_pct: float = 99.0
    recovery_flow_threshold_lpm: float = 150.0
    recovery_loss_per_lpm: float = 0.05
    recovery_noise_pct: float = 0.1

    def __post_init__(self) -> None:
        positive = {
            "load_per_unit_dosage": self.load_per_unit_dosage,
            "turbidity_per_oxygen_mg": self.turbidity_per_oxygen_mg,
        }
        for name, value in positive.items():
            if value <= 0:
                msg = f"{name} must be positive"
                raise ValueError(msg)
        non_negative = {
            "deadband_g_per_l": self.deadband_g_per_l,
            "high_contamination_pct": self.high_contamination_pct,
            "base_turbidity_ntu": self.base_turbidity_ntu,
            "turbidity_per_load_pct": self.turbidity_per_load_pct,
            "turbidity_noise_ntu": self.turbidity_noise_ntu,
            "recovery_loss_per_lpm": self.recovery_loss_per_lpm,
            "recovery_noise_pct": self.recovery_noise_pct,
        }
        for name, value in non_negative.items():
            if value < 0:
                msg = f"{name} must be non-negative"
                raise ValueError(msg)
        if not 0 < self.smoothing_factor <= 1:
            msg = "smoothing_factor must be in (0, 1]"
            raise ValueError(msg)


__all__ = ["DosingConfig", "HIGH_CONTAMINATION_ALERT"]
