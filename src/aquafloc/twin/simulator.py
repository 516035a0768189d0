from __future__ import annotations

import argparse
from collections.abc import Mapping, Sequence
from dataclasses import replace
from pathlib import Path

import pandas as pd

from aquafloc.economics.savings import EconInputs, SavingsLedger
from aquafloc.twin.clock import SimulationClock
from aquafloc.twin.config import DosingConfig
from aquafloc.twin.noise import NoiseSource, make_noise
from aquafloc.twin.state import SimulationState
from aquafloc.twin.updater import required_dosage

TURBIDITY_WARNING_NTU = 10.0
SPEED_REFERENCE_LPM = 100.0

EditAction = tuple[str, float] | str


def build_visual_frame(state: SimulationState) -> dict[str, float | bool | str | list[str]]:
    """Map one snapshot into the payload the 3D scene and sensor tiles read."""
    return {
        "pollutant_load": state.pollutant_load,
        "dosage": state.dosage,
        "flow_rate": state.flow_rate,
        "speed_multiplier": state.flow_rate / SPEED_REFERENCE_LPM,
        # Flocs form once the dose clears half the load-proportional demand.
        "is_flocculating": state.dosage > (state.pollutant_load / 100.0) * 0.5,
        "turbidity": state.turbidity,
        "turbidity_status": "warning" if state.turbidity > TURBIDITY_WARNING_NTU else "normal",
        "dissolved_oxygen": state.dissolved_oxygen,
        "recovery_rate": state.recovery_rate,
        "mode": state.mode,
        "alerts": list(state.alerts),
    }


def _apply_edits(clock: SimulationClock, actions: Sequence[EditAction]) -> None:
    for action in actions:
        if action == "toggle":
            clock.toggle_auto_dosing()
            continue
        if isinstance(action, str):
            msg = f"unknown edit action {action!r}"
            raise ValueError(msg)
        field, value = action
        clock.apply_user_edit(field, value)


def run_simulation(
    *,
    ticks: int,
    initial_state: SimulationState | None = None,
    noise: NoiseSource | None = None,
    seed: int | None = None,
    edits: Mapping[int, Sequence[EditAction]] | None = None,
    config: DosingConfig | None = None,
    econ_inputs: EconInputs | None = None,
) -> pd.DataFrame:
    """Advance a private clock ``ticks`` times and return one row per tick.

    ``edits`` maps a tick index to operator actions applied just before that
    tick: ``(field, value)`` pairs or the string ``"toggle"``.
    """
    if ticks <= 0:
        msg = "ticks must be positive"
        raise ValueError(msg)
    if noise is not None and seed is not None:
        msg = "pass either noise or seed, not both"
        raise ValueError(msg)
    scheduled = dict(edits or {})
    outside = sorted(index for index in scheduled if not 0 <= index < ticks)
    if outside:
        msg = f"edit ticks {outside} are outside 0..{ticks - 1}"
        raise ValueError(msg)

    cfg = config or DosingConfig()
    source = noise if noise is not None else make_noise(seed)
    clock = SimulationClock(initial_state, noise=source, config=cfg)
    ledger = SavingsLedger(econ_inputs, noise=source)
    clock.subscribe(ledger.record, ticks_only=True)

    rows: list[dict[str, object]] = []
    for tick in range(ticks):
        if tick in scheduled:
            _apply_edits(clock, scheduled[tick])
        state = clock.tick()
        row: dict[str, object] = {
            "tick": tick,
            "time_s": (tick + 1) * clock.period_s,
            **state.to_dict(),
            "mode": state.mode,
            "required_dosage": required_dosage(state.pollutant_load, cfg),
            "alert_count": len(state.alerts),
        }
        summary = ledger.summary(state)
        row.update(
            {
                "magna_cost_idr_per_m3": summary["magna_cost_idr_per_m3"],
                "savings_idr": summary["savings_idr"],
                "roi_pct": summary["roi_pct"],
                "recovered_value_usd_per_hr": summary["recovered_value_usd_per_hr"],
            }
        )
        rows.append(row)

    return pd.DataFrame(rows)


def build_simulation_context(
    *,
    ticks: int,
    initial_state: SimulationState | None = None,
    seed: int | None = None,
    econ_inputs: EconInputs | None = None,
) -> dict[str, object]:
    frames = run_simulation(
        ticks=ticks,
        initial_state=initial_state,
        seed=seed,
        econ_inputs=econ_inputs,
    )
    latest = frames.iloc[-1].to_dict() if not frames.empty else {}
    return {"frames": frames, "latest": latest, "ticks": ticks}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the magnetic flocculation twin headless and summarise the trajectory."
    )
    parser.add_argument("--ticks", type=int, default=120, help="Number of 1 s ticks to simulate.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for sensor noise.")
    parser.add_argument(
        "--pollutant-load", type=float, default=50.0, help="Inlet pollutant load (%%)."
    )
    parser.add_argument("--flow-rate", type=float, default=120.0, help="River flow (L/min).")
    parser.add_argument("--dosage", type=float, default=0.8, help="Starting dosage (g/L).")
    parser.add_argument(
        "--manual",
        action="store_true",
        help="Hold dosage fixed instead of letting the controller adjust it.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Optional CSV path for the per-tick trajectory.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    initial_state = replace(
        SimulationState(),
        pollutant_load=args.pollutant_load,
        flow_rate=args.flow_rate,
        dosage=args.dosage,
        is_auto_dosing=not args.manual,
    )
    frames = run_simulation(ticks=args.ticks, initial_state=initial_state, seed=args.seed)
    latest = frames.iloc[-1]

    print(f"Simulated {len(frames)} ticks ({latest['mode']} dosing)")
    print(f"  dosage: {latest['dosage']:.3f} g/L (target {latest['required_dosage']:.3f})")
    print(f"  turbidity: {latest['turbidity']:.2f} NTU")
    print(f"  dissolved oxygen: {latest['dissolved_oxygen']:.2f} mg/L")
    print(f"  recovery: {latest['recovery_rate']:.2f} %")
    print(f"  cumulative savings: IDR {latest['savings_idr']:,.0f}")
    print(f"  ticks with alerts: {int((frames['alert_count'] > 0).sum())}")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        frames.drop(columns=["alerts"]).to_csv(output_path, index=False)
        print(f"Wrote trajectory to: {output_path}")


__all__ = ["run_simulation", "build_simulation_context", "build_visual_frame", "main"]


if __name__ == "__main__":
    main()
