def test_import():
    import aquafloc

    assert aquafloc.__version__ == "0.1.0"


def test_public_api_imports() -> None:
    from aquafloc.analytics.history import TickHistory
    from aquafloc.analytics.kinetics import kinetic_curve, recovery_split
    from aquafloc.economics.savings import EconInputs, SavingsLedger, unit_costs
    from aquafloc.twin.clock import SimulationClock
    from aquafloc.twin.noise import FixedNoise, make_noise
    from aquafloc.twin.simulator import build_visual_frame, run_simulation
    from aquafloc.twin.state import SimulationState
    from aquafloc.twin.updater import apply_user_edit, tick, toggle_auto_dosing

    assert SimulationState is not None
    assert SimulationClock is not None
    assert tick is not None
    assert apply_user_edit is not None
    assert toggle_auto_dosing is not None
    assert FixedNoise is not None
    assert make_noise is not None
    assert run_simulation is not None
    assert build_visual_frame is not None
    assert kinetic_curve is not None
    assert recovery_split is not None
    assert EconInputs is not None
    assert SavingsLedger is not None
    assert TickHistory is not None
    assert unit_costs is not None
