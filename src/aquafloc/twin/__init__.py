from aquafloc.twin.clock import SimulationClock
from aquafloc.twin.config import HIGH_CONTAMINATION_ALERT, DosingConfig
from aquafloc.twin.noise import FixedNoise, NoiseSource, make_noise
from aquafloc.twin.state import USER_EDITABLE_FIELDS, SimulationState
from aquafloc.twin.updater import apply_user_edit, tick, toggle_auto_dosing

__all__ = [
    "SimulationClock",
    "SimulationState",
    "DosingConfig",
    "HIGH_CONTAMINATION_ALERT",
    "USER_EDITABLE_FIELDS",
    "NoiseSource",
    "FixedNoise",
    "make_noise",
    "tick",
    "apply_user_edit",
    "toggle_auto_dosing",
]
