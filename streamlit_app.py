"""Streamlit frontend for DashSmart: upload a CSV, preview it, get a dashboard."""

from __future__ import annotations

import logging
import os
from typing import Any

import pandas as pd
import streamlit as st

from app.services.analysis_session import (
    STEP_DASHBOARD,
    STEP_PREVIEW,
    AnalysisSession,
)
from app.services.csv_sniffer import SniffResult, get_csv_sniffer
from dashboard import customizer
from dashboard.plotting import build_figure
from dashboard.renderer import ChartRender, TableRender, WidgetRender, render_tab
from dashboard.schema import WIDGET_TYPES, ChartWidget, KpiCard, Series, is_hex_color
from dashboard.store import DashboardStore
from llm_analysis.gateway import AnalysisError, AnalysisGateway, build_adapter
from llm_analysis.prompt_builder import APP_NAME

TREND_ARROWS = {"up": "▲", "down": "▼", "neutral": "■"}
INSIGHT_ICONS = {"positive": "✅", "negative": "⚠️", "neutral": "ℹ️"}


@st.cache_resource(show_spinner=False)
def _configure_logging() -> None:
    """Configure root logging once per server process."""
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@st.cache_resource(show_spinner=False)
def _load_gateway() -> AnalysisGateway:
    """Build the analysis gateway once per server process."""
    return AnalysisGateway(build_adapter())


def _reset_uploader() -> None:
    """Give the file uploader a fresh key so a cancelled file is not re-selected."""
    st.session_state.uploader_generation = st.session_state.get("uploader_generation", 0) + 1


def _get_session() -> AnalysisSession:
    if "analysis_session" not in st.session_state:
        st.session_state.analysis_session = AnalysisSession(_load_gateway(), DashboardStore())
    return st.session_state.analysis_session


def layout_rows(renders: list[WidgetRender]) -> list[list[WidgetRender]]:
    """Pack widget renders into rows of a two-slot grid.

    A span-2 widget takes a row of its own; span-1 widgets pair up in order.
    """
    rows: list[list[WidgetRender]] = []
    pending: list[WidgetRender] = []
    for render in renders:
        if render.span >= 2:
            if pending:
                rows.append(pending)
                pending = []
            rows.append([render])
            continue
        pending.append(render)
        if len(pending) == 2:
            rows.append(pending)
            pending = []
    if pending:
        rows.append(pending)
    return rows


def kpi_delta(kpi: KpiCard) -> str | None:
    """Return the st.metric delta text for a KPI card."""
    if not kpi.trend_value and not kpi.trend:
        return None
    arrow = TREND_ARROWS.get(kpi.trend or "neutral", "")
    return f"{arrow} {kpi.trend_value or ''}".strip()


def picker_color(series: Series, index: int) -> str:
    """Return a colour st.color_picker accepts, falling back to the palette."""
    if is_hex_color(series.color):
        return series.color
    return customizer.palette_color(index)


def _delta_color(kpi: KpiCard) -> str:
    if kpi.trend == "down":
        return "inverse"
    if kpi.trend == "up":
        return "normal"
    return "off"


def _preview_frame(result: SniffResult) -> pd.DataFrame:
    width = len(result.headers)
    rows = [(row + [""] * width)[:width] for row in result.sample_rows]
    return pd.DataFrame(rows, columns=result.headers)


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------


def _render_error(session: AnalysisSession) -> None:
    if not session.error:
        return
    col_message, col_dismiss = st.columns([6, 1])
    col_message.error(session.error)
    if col_dismiss.button("Dismiss", key="dismiss_error"):
        session.dismiss_error()
        st.rerun()


def _render_upload(session: AnalysisSession) -> None:
    st.subheader("Upload your data")
    st.caption("Upload a CSV file and we will build a dashboard from it.")
    generation = st.session_state.get("uploader_generation", 0)
    uploaded_file = st.file_uploader("Upload CSV", type=["csv"], key=f"uploader_{generation}")
    if uploaded_file is not None:
        if session.select_file(uploaded_file.name, uploaded_file.type, uploaded_file.getvalue()):
            st.rerun()


def _render_preview(session: AnalysisSession) -> None:
    st.subheader("Data Preview")
    st.caption(f"Review your data structure before analysis: {session.file_name}")

    result = get_csv_sniffer().sniff(session.csv_text or "")
    st.markdown("**Variable Detection**")
    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Variable": profile.name,
                    "Detected Type": profile.inferred_type,
                    "Sample Values": ", ".join(profile.sample_values),
                }
                for profile in result.column_types
            ]
        ),
        use_container_width=True,
        hide_index=True,
    )
    st.markdown("**Sample Rows**")
    st.dataframe(_preview_frame(result), use_container_width=True, hide_index=True)

    col_back, col_go = st.columns(2)
    if col_back.button("Back", use_container_width=True, disabled=session.loading):
        session.cancel_preview()
        _reset_uploader()
        st.rerun()
    if col_go.button("Analyze", type="primary", use_container_width=True, disabled=session.loading):
        with st.spinner("Analyzing your data..."):
            session.confirm_analysis()
        st.rerun()


def _render_kpis(kpis: list[KpiCard]) -> None:
    if not kpis:
        return
    columns = st.columns(min(4, len(kpis)))
    for index, kpi in enumerate(kpis):
        with columns[index % len(columns)]:
            st.metric(
                label=kpi.label,
                value=str(kpi.value),
                delta=kpi_delta(kpi),
                delta_color=_delta_color(kpi),
                help=kpi.sub_value,
            )


def _render_table(body: TableRender) -> None:
    frame = pd.DataFrame(body.rows, columns=body.headers)
    st.dataframe(frame, use_container_width=True, hide_index=True)


def _render_customizer(store: DashboardStore, widget_id: str) -> None:
    widget = store.get_widget(widget_id)
    if widget is None:
        return

    def _apply(updated: Any) -> None:
        if updated is not widget:
            store.update_widget(updated)
            st.rerun()

    with st.container(border=True):
        st.markdown("**Customize widget**")
        new_type = st.selectbox(
            "Chart type",
            options=list(WIDGET_TYPES),
            index=list(WIDGET_TYPES).index(widget.type),
            key=f"type_{widget.id}",
        )
        if new_type != widget.type:
            _apply(customizer.change_type(widget, new_type))

        if not isinstance(widget, ChartWidget):
            return

        keys = customizer.data_keys(widget)
        if keys:
            x_options = keys if widget.x_axis_key in keys else [widget.x_axis_key, *keys]
            x_axis = st.selectbox(
                "X axis",
                options=x_options,
                index=x_options.index(widget.x_axis_key),
                key=f"x_{widget.id}",
            )
            if x_axis != widget.x_axis_key:
                _apply(customizer.change_x_axis(widget, x_axis))

        for index, series in enumerate(widget.series):
            col_key, col_name, col_color, col_remove = st.columns([3, 3, 1, 1])
            key_options = keys if series.key in keys else [series.key, *keys]
            new_key = col_key.selectbox(
                "Data key",
                options=key_options,
                index=key_options.index(series.key),
                key=f"series_key_{widget.id}_{index}",
            )
            if new_key != series.key:
                _apply(customizer.update_series_field(widget, index, "key", new_key))
            new_name = col_name.text_input("Label", value=series.name, key=f"series_name_{widget.id}_{index}")
            if new_name != series.name:
                _apply(customizer.update_series_field(widget, index, "name", new_name))
            current_color = picker_color(series, index)
            new_color = col_color.color_picker("Color", value=current_color, key=f"series_color_{widget.id}_{index}")
            if new_color != current_color:
                _apply(customizer.update_series_field(widget, index, "color", new_color))
            if col_remove.button("✕", key=f"series_remove_{widget.id}_{index}", disabled=len(widget.series) <= 1):
                _apply(customizer.remove_series(widget, index))

        if st.button("Add series", key=f"series_add_{widget.id}"):
            _apply(customizer.add_series(widget))


def _render_widget(store: DashboardStore, render: WidgetRender) -> None:
    with st.container(border=True):
        col_title, col_edit = st.columns([6, 1])
        col_title.markdown(f"**{render.title}**")
        if render.description:
            col_title.caption(render.description)
        if render.editable:
            label = "Done" if render.editing else "Edit"
            if col_edit.button(label, key=f"edit_{render.widget_id}"):
                store.toggle_edit(render.widget_id)
                st.rerun()

        if render.editing:
            _render_customizer(store, render.widget_id)

        if isinstance(render.body, ChartRender):
            if render.body.traces:
                st.plotly_chart(build_figure(render.body), use_container_width=True)
            else:
                st.info("No metric selected for this chart.")
        elif isinstance(render.body, TableRender):
            _render_table(render.body)


def _render_dashboard(session: AnalysisSession) -> None:
    store = session.store
    payload = store.payload
    if payload is None:
        return

    col_heading, col_reset = st.columns([5, 1])
    col_heading.header(payload.title or APP_NAME)
    col_heading.caption(payload.summary or f"Analysis of {session.file_name}")
    if col_reset.button("New analysis", use_container_width=True):
        session.reset()
        _reset_uploader()
        st.rerun()

    tabs = store.tabs
    if tabs:
        selected = st.radio(
            "Tabs",
            options=tabs,
            index=tabs.index(store.active_tab) if store.active_tab in tabs else 0,
            horizontal=True,
            label_visibility="collapsed",
        )
        if selected != store.active_tab:
            store.set_active_tab(selected)
            st.rerun()

    _render_kpis(payload.kpis)

    for row in layout_rows(render_tab(store)):
        if len(row) == 1 and row[0].span >= 2:
            _render_widget(store, row[0])
            continue
        columns = st.columns(2)
        for column, render in zip(columns, row):
            with column:
                _render_widget(store, render)

    if payload.insights:
        st.subheader("Key Insights")
        for insight in payload.insights:
            icon = INSIGHT_ICONS.get(insight.type, "")
            st.markdown(f"{icon} **{insight.title}**")
            if insight.description:
                st.caption(insight.description)


def main() -> None:
    st.set_page_config(page_title=APP_NAME, page_icon="DS", layout="wide")
    _configure_logging()
    st.title(APP_NAME)

    try:
        session = _get_session()
    except AnalysisError as exc:
        st.error(exc.user_message)
        return
    _render_error(session)

    if session.step == STEP_DASHBOARD:
        _render_dashboard(session)
    elif session.step == STEP_PREVIEW:
        _render_preview(session)
    else:
        _render_upload(session)


if __name__ == "__main__":
    main()
