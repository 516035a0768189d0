from __future__ import annotations

import pytest

from aquafloc.twin.state import SimulationState


def test_defaults_start_in_auto_mode_with_no_alerts() -> None:
    state = SimulationState()

    assert state.pollutant_load == 50.0
    assert state.dosage == 0.8
    assert state.flow_rate == 120.0
    assert state.ph == 7.2
    assert state.is_auto_dosing is True
    assert state.mode == "AUTO"
    assert state.alerts == ()


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("pollutant_load", 101.0),
        ("dosage", 0.05),
        ("dosage", 3.5),
        ("flow_rate", 40.0),
        ("ph", 14.5),
        ("dissolved_oxygen", 10.5),
        ("recovery_rate", -1.0),
        ("turbidity", -0.1),
        ("pollutant_load", float("nan")),
    ],
)
def test_out_of_domain_fields_are_rejected(field: str, value: float) -> None:
    with pytest.raises(ValueError, match=field):
        SimulationState(**{field: value})


def test_alert_lists_are_stored_as_tuples() -> None:
    state = SimulationState(alerts=["a", "b"])  # type: ignore[arg-type]

    assert state.alerts == ("a", "b")
    assert state.to_dict()["alerts"] == ["a", "b"]


def test_state_is_immutable() -> None:
    state = SimulationState()

    with pytest.raises(AttributeError):
        state.dosage = 1.0  # type: ignore[misc]
