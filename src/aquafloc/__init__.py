"""AquaFloc public API for the magnetic flocculation twin."""

from aquafloc.analytics.kinetics import kinetic_curve, recovery_split
from aquafloc.economics.savings import (
    EconInputs,
    SavingsLedger,
    recovered_value_per_hr,
    roi_percent,
    unit_costs,
)
from aquafloc.twin.clock import SimulationClock
from aquafloc.twin.config import DosingConfig
from aquafloc.twin.noise import FixedNoise, make_noise
from aquafloc.twin.simulator import build_simulation_context, build_visual_frame, run_simulation
from aquafloc.twin.state import SimulationState
from aquafloc.twin.updater import apply_user_edit, tick, toggle_auto_dosing

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "SimulationState",
    "SimulationClock",
    "DosingConfig",
    "FixedNoise",
    "make_noise",
    "tick",
    "apply_user_edit",
    "toggle_auto_dosing",
    "run_simulation",
    "build_simulation_context",
    "build_visual_frame",
    "kinetic_curve",
    "recovery_split",
    "EconInputs",
    "SavingsLedger",
    "unit_costs",
    "roi_percent",
    "recovered_value_per_hr",
]
