from __future__ import annotations

from dataclasses import asdict, dataclass, field

POLLUTANT_LOAD_BOUNDS = (0.0, 100.0)
DOSAGE_BOUNDS = (0.1, 3.0)
FLOW_RATE_BOUNDS = (50.0, 200.0)
PH_BOUNDS = (0.0, 14.0)
DISSOLVED_OXYGEN_BOUNDS = (0.0, 10.0)
RECOVERY_RATE_BOUNDS = (0.0, 100.0)

FIELD_BOUNDS: dict[str, tuple[float, float]] = {
    "pollutant_load": POLLUTANT_LOAD_BOUNDS,
    "dosage": DOSAGE_BOUNDS,
    "flow_rate": FLOW_RATE_BOUNDS,
    "ph": PH_BOUNDS,
    "dissolved_oxygen": DISSOLVED_OXYGEN_BOUNDS,
    "recovery_rate": RECOVERY_RATE_BOUNDS,
}

# Fields the operator may set directly from the console.
USER_EDITABLE_FIELDS = ("pollutant_load", "dosage", "flow_rate", "ph")


def clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(value, max_value))


@dataclass(frozen=True)
class SimulationState:
    pollutant_load: float = 50.0
    dosage: float = 0.8
    flow_rate: float = 120.0
    ph: float = 7.2
    turbidity: float = 15.0
    dissolved_oxygen: float = 6.5
    recovery_rate: float = 98.2
    is_auto_dosing: bool = True
    alerts: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for name, (min_value, max_value) in FIELD_BOUNDS.items():
            value = getattr(self, name)
            if value != value or not min_value <= value <= max_value:
                msg = f"{name} must be between {min_value} and {max_value}"
                raise ValueError(msg)
        if self.turbidity != self.turbidity or self.turbidity < 0:
            msg = "turbidity must be non-negative"
            raise ValueError(msg)
        if not isinstance(self.alerts, tuple):
            # Lists are accepted at the boundary but stored immutably.
            object.__setattr__(self, "alerts", tuple(self.alerts))

    @property
    def mode(self) -> str:
        return "AUTO" if self.is_auto_dosing else "MANUAL"

    def to_dict(self) -> dict[str, object]:
        payload = asdict(self)
        payload["alerts"] = list(self.alerts)
        return payload


__all__ = [
    "SimulationState",
    "clamp",
    "FIELD_BOUNDS",
    "USER_EDITABLE_FIELDS",
    "POLLUTANT_LOAD_BOUNDS",
    "DOSAGE_BOUNDS",
    "FLOW_RATE_BOUNDS",
    "PH_BOUNDS",
    "DISSOLVED_OXYGEN_BOUNDS",
    "RECOVERY_RATE_BOUNDS",
]
