from __future__ import annotations

import plotly.graph_objects as go
import streamlit as st
from streamlit_autorefresh import st_autorefresh

from aquafloc.analytics.history import TickHistory
from aquafloc.analytics.kinetics import kinetic_curve, recovery_split
from aquafloc.economics.savings import SavingsLedger
from aquafloc.twin.clock import SimulationClock
from aquafloc.twin.simulator import build_visual_frame
from aquafloc.twin.state import (
    DOSAGE_BOUNDS,
    FLOW_RATE_BOUNDS,
    PH_BOUNDS,
    POLLUTANT_LOAD_BOUNDS,
)

st.set_page_config(page_title="AquaFloc Magna Twin Console", layout="wide")

st.markdown(
    """
<style>
.stApp {
    background-color: #0f172a;
    color: #e2e8f0;
    font-family: "JetBrains Mono", "SFMono-Regular", monospace;
}
[data-testid="stSidebar"] {
    background-color: #111c33;
    border-right: 1px solid rgba(6, 182, 212, 0.3);
}
[data-testid="stMetric"] {
    background-color: rgba(15, 23, 42, 0.7);
    border: 1px solid rgba(6, 182, 212, 0.3);
    border-radius: 8px;
    padding: 10px 12px;
}
h1, h2, h3 {
    color: #cffafe;
}
</style>
""",
    unsafe_allow_html=True,
)

PLOT_TEMPLATE = "plotly_dark"
ACCENT_CYAN = "#06b6d4"
ACCENT_GREEN = "#10b981"
ACCENT_AMBER = "#f59e0b"
ACCENT_SLATE = "#94a3b8"
HISTORY_LENGTH = 120
REFRESH_MS = 1000


def _ensure_session() -> tuple[SimulationClock, SavingsLedger, TickHistory]:
    if "clock" not in st.session_state:
        clock = SimulationClock()
        ledger = SavingsLedger()
        history = TickHistory(HISTORY_LENGTH)
        clock.subscribe(ledger.record, ticks_only=True)
        clock.subscribe(history.record, ticks_only=True)
        # The timer only holds a weak reference, so an expired session stops its clock.
        clock.start()
        st.session_state["clock"] = clock
        st.session_state["ledger"] = ledger
        st.session_state["history"] = history
    return st.session_state["clock"], st.session_state["ledger"], st.session_state["history"]


def _on_slider(field: str) -> None:
    clock: SimulationClock = st.session_state["clock"]
    clock.apply_user_edit(field, float(st.session_state[f"slider_{field}"]))


def _on_toggle() -> None:
    clock: SimulationClock = st.session_state["clock"]
    clock.toggle_auto_dosing()


clock, ledger, history = _ensure_session()
st_autorefresh(interval=REFRESH_MS, key="__twin_refresh__")
snapshot = clock.get_snapshot()
frame = build_visual_frame(snapshot)

with st.sidebar:
    st.header("Control Parameters")
    st.slider(
        "Inlet pollutant load (%)",
        min_value=POLLUTANT_LOAD_BOUNDS[0],
        max_value=POLLUTANT_LOAD_BOUNDS[1],
        value=float(snapshot.pollutant_load),
        step=1.0,
        key="slider_pollutant_load",
        on_change=_on_slider,
        args=("pollutant_load",),
    )
    st.slider(
        "River flow rate (L/min)",
        min_value=FLOW_RATE_BOUNDS[0],
        max_value=FLOW_RATE_BOUNDS[1],
        value=float(snapshot.flow_rate),
        step=5.0,
        key="slider_flow_rate",
        on_change=_on_slider,
        args=("flow_rate",),
    )
    st.slider(
        "pH level",
        min_value=PH_BOUNDS[0],
        max_value=PH_BOUNDS[1],
        value=float(snapshot.ph),
        step=0.1,
        key="slider_ph",
        on_change=_on_slider,
        args=("ph",),
    )

    st.header("Smart Dosing System")
    st.session_state["toggle_auto_dosing"] = snapshot.is_auto_dosing
    st.toggle(
        "Auto-adjust mode",
        key="toggle_auto_dosing",
        on_change=_on_toggle,
    )
    if snapshot.is_auto_dosing or "slider_dosage" not in st.session_state:
        # The controller owns the value; keep the disabled slider in step with it.
        st.session_state["slider_dosage"] = round(snapshot.dosage, 1)
    st.slider(
        "Adsorbent dosage (g/L)",
        min_value=DOSAGE_BOUNDS[0],
        max_value=DOSAGE_BOUNDS[1],
        step=0.1,
        key="slider_dosage",
        on_change=_on_slider,
        args=("dosage",),
        disabled=snapshot.is_auto_dosing,
    )

    if snapshot.alerts:
        for alert in snapshot.alerts:
            st.warning(alert)
    else:
        st.success("System nominal. Optimal dosing maintained.")
    if snapshot.is_auto_dosing:
        st.caption("> Auto-adjusting adsorbent dosage to maintain <5 NTU...")

st.title("AquaFloc Magna Digital Twin")
st.caption(f"Magnetic flocculation twin | {frame['mode']} dosing | tick {clock.tick_count}")

sensor_cols = st.columns(4)
sensor_cols[0].metric(
    "Turbidity (NTU)",
    f"{snapshot.turbidity:.2f}",
    delta="above 10 NTU" if frame["turbidity_status"] == "warning" else None,
    delta_color="inverse",
)
sensor_cols[1].metric("Dissolved O2 (mg/L)", f"{snapshot.dissolved_oxygen:.2f}")
sensor_cols[2].metric("Dosage (g/L)", f"{snapshot.dosage:.2f}")
sensor_cols[3].metric("Recovery (%)", f"{snapshot.recovery_rate:.1f}")

tab_process, tab_economics = st.tabs(["Process", "Techno-Economics"])

with tab_process:
    chart_cols = st.columns(2)

    kinetics = kinetic_curve(snapshot.pollutant_load, snapshot.dosage)
    kinetic_fig = go.Figure()
    kinetic_fig.add_trace(
        go.Scatter(
            x=kinetics["time_min"],
            y=kinetics["concentration"],
            mode="lines",
            fill="tozeroy",
            name="Concentration",
            line=dict(color=ACCENT_CYAN, width=2.5),
        )
    )
    kinetic_fig.update_layout(
        template=PLOT_TEMPLATE,
        title="Kinetic Adsorption",
        xaxis_title="Time (min)",
        yaxis_title="Concentration",
    )
    chart_cols[0].plotly_chart(kinetic_fig, width="stretch")

    split = recovery_split(snapshot.recovery_rate)
    recovery_fig = go.Figure(
        data=go.Bar(
            x=["Recovered", "Lost"],
            y=[split["recovered_pct"], split["lost_pct"]],
            marker_color=[ACCENT_GREEN, "#334155"],
        )
    )
    recovery_fig.update_layout(
        template=PLOT_TEMPLATE,
        title=f"Magnetic Recovery Yield ({snapshot.recovery_rate:.1f}%)",
        yaxis=dict(title="%", range=[0, 100]),
    )
    chart_cols[1].plotly_chart(recovery_fig, width="stretch")

    trend = history.frame()
    if not trend.empty:
        trend_fig = go.Figure()
        trend_fig.add_trace(
            go.Scatter(
                x=trend.index,
                y=trend["turbidity"],
                mode="lines",
                name="Turbidity (NTU)",
                line=dict(color=ACCENT_AMBER, width=2.2),
            )
        )
        trend_fig.add_trace(
            go.Scatter(
                x=trend.index,
                y=trend["dosage"],
                mode="lines",
                name="Dosage (g/L)",
                line=dict(color=ACCENT_CYAN, width=2.0, dash="dot"),
                yaxis="y2",
            )
        )
        trend_fig.update_layout(
            template=PLOT_TEMPLATE,
            title="Sensor Trend",
            xaxis_title="Tick",
            yaxis=dict(title="Turbidity (NTU)"),
            yaxis2=dict(title="Dosage (g/L)", overlaying="y", side="right"),
        )
        st.plotly_chart(trend_fig, width="stretch")

with tab_economics:
    summary = ledger.summary(snapshot)
    econ_cols = st.columns(3)
    econ_cols[0].metric("Cumulative OPEX savings", f"IDR {summary['savings_idr']:,.0f}")
    econ_cols[1].metric("Est. ROI", f"+{summary['roi_pct']:.1f}%")
    econ_cols[2].metric("Recovered value", f"${summary['recovered_value_usd_per_hr']:.2f}/h")

    cost_fig = go.Figure(
        data=go.Bar(
            x=["Conventional", "Magna"],
            y=[summary["conventional_cost_idr_per_m3"], summary["magna_cost_idr_per_m3"]],
            marker_color=[ACCENT_SLATE, ACCENT_GREEN],
        )
    )
    cost_fig.update_layout(
        template=PLOT_TEMPLATE,
        title="Cost Analysis (IDR/m3)",
        yaxis_title="IDR/m3",
    )
    st.plotly_chart(cost_fig, width="stretch")
