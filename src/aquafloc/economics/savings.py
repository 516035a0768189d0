from __future__ import annotations

from dataclasses import dataclass

from aquafloc.twin.noise import NoiseSource, make_noise
from aquafloc.twin.state import SimulationState


@dataclass(frozen=True)
class EconInputs:
    conventional_cost_idr_per_m3: float = 5000.0
    magna_baseline_idr_per_m3: float = 200.0
    reagent_saving_factor: float = 0.8
    opening_savings_idr: float = 1_450_000.0
    savings_per_lpm_idr: float = 0.5
    savings_jitter_idr: float = 50.0
    roi_per_recovery_pct: float = 0.45
    recovered_value_usd_per_lpm: float = 0.05

    def __post_init__(self) -> None:
        values = {
            "conventional_cost_idr_per_m3": self.conventional_cost_idr_per_m3,
            "magna_baseline_idr_per_m3": self.magna_baseline_idr_per_m3,
            "reagent_saving_factor": self.reagent_saving_factor,
            "opening_savings_idr": self.opening_savings_idr,
            "savings_per_lpm_idr": self.savings_per_lpm_idr,
            "savings_jitter_idr": self.savings_jitter_idr,
            "roi_per_recovery_pct": self.roi_per_recovery_pct,
            "recovered_value_usd_per_lpm": self.recovered_value_usd_per_lpm,
        }
        for name, value in values.items():
            if value < 0:
                msg = f"{name} must be non-negative"
                raise ValueError(msg)
        if self.reagent_saving_factor > 1:
            msg = "reagent_saving_factor must not exceed 1"
            raise ValueError(msg)


_DEFAULT_ECON = EconInputs()


def _check_recovery(recovery_rate: float) -> None:
    if not 0 <= recovery_rate <= 100:
        msg = "recovery_rate must be between 0 and 100"
        raise ValueError(msg)


def unit_costs(recovery_rate: float, econ_inputs: EconInputs | None = None) -> dict[str, float]:
    """Treatment cost per cubic metre, conventional plant versus magnetic flocculation."""
    _check_recovery(recovery_rate)
    econ = econ_inputs or _DEFAULT_ECON
    conventional = econ.conventional_cost_idr_per_m3
    magna = (
        conventional * (1.0 - (recovery_rate / 100.0) * econ.reagent_saving_factor)
        + econ.magna_baseline_idr_per_m3
    )
    return {
        "conventional_cost_idr_per_m3": conventional,
        "magna_cost_idr_per_m3": magna,
        "cost_reduction_idr_per_m3": conventional - magna,
    }


def roi_percent(recovery_rate: float, econ_inputs: EconInputs | None = None) -> float:
    _check_recovery(recovery_rate)
    econ = econ_inputs or _DEFAULT_ECON
    return recovery_rate * econ.roi_per_recovery_pct


def recovered_value_per_hr(
    flow_rate: float,
    recovery_rate: float,
    econ_inputs: EconInputs | None = None,
) -> float:
    _check_recovery(recovery_rate)
    if flow_rate < 0:
        msg = "flow_rate must be non-negative"
        raise ValueError(msg)
    econ = econ_inputs or _DEFAULT_ECON
    return (recovery_rate * flow_rate * econ.recovered_value_usd_per_lpm) / 100.0


def savings_increment(
    *,
    flow_rate: float,
    recovery_rate: float,
    noise: NoiseSource,
    econ_inputs: EconInputs | None = None,
) -> float:
    """OPEX saved during one tick: treated volume weighted by recovery, plus jitter."""
    _check_recovery(recovery_rate)
    if flow_rate < 0:
        msg = "flow_rate must be non-negative"
        raise ValueError(msg)
    econ = econ_inputs or _DEFAULT_ECON
    efficiency = recovery_rate / 100.0
    jitter = float(noise.uniform(0.0, econ.savings_jitter_idr))
    return (flow_rate * econ.savings_per_lpm_idr) * efficiency + jitter


class SavingsLedger:
    """Running OPEX savings total, advanced once per simulation tick.

    Subscribe ``ledger.record`` to a clock with ``ticks_only=True``.
    """

    def __init__(
        self,
        econ_inputs: EconInputs | None = None,
        *,
        noise: NoiseSource | None = None,
    ) -> None:
        self.econ_inputs = econ_inputs or _DEFAULT_ECON
        self._noise = noise if noise is not None else make_noise()
        self.total_idr = self.econ_inputs.opening_savings_idr
        self.ticks_recorded = 0

    def record(self, state: SimulationState) -> float:
        self.total_idr += savings_increment(
            flow_rate=state.flow_rate,
            recovery_rate=state.recovery_rate,
            noise=self._noise,
            econ_inputs=self.econ_inputs,
        )
        self.ticks_recorded += 1
        return self.total_idr

    def summary(self, state: SimulationState) -> dict[str, float]:
        costs = unit_costs(state.recovery_rate, self.econ_inputs)
        return {
            "savings_idr": self.total_idr,
            "roi_pct": roi_percent(state.recovery_rate, self.econ_inputs),
            "recovered_value_usd_per_hr": recovered_value_per_hr(
                state.flow_rate, state.recovery_rate, self.econ_inputs
            ),
            **costs,
        }


__all__ = [
    "EconInputs",
    "SavingsLedger",
    "unit_costs",
    "roi_percent",
    "recovered_value_per_hr",
    "savings_increment",
]
