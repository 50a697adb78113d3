"""
Chart render instructions -> Plotly figures.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

import plotly.graph_objects as go
from plotly.basedatatypes import BaseTraceType

from dashboard.formatting import format_value, is_numeric
from dashboard.renderer import ChartRender, TraceRender

AXIS_TICK_COLOR = "#94a3b8"
GRID_COLOR = "rgba(128,128,128,0.15)"
DEFAULT_HEIGHT = 320
TICK_COUNT = 5
CARTESIAN_HOVER = "%{x}: %{customdata}<extra>%{fullData.name}</extra>"
PIE_HOVER = "%{label}: %{customdata} (%{percent})<extra></extra>"


def _nice_step(span: float, count: int) -> float:
    raw = span / count
    magnitude = 10 ** math.floor(math.log10(raw))
    for factor in (1, 2, 5):
        if raw <= factor * magnitude:
            return factor * magnitude
    return 10 * magnitude


def value_ticks(values: Sequence[Any], count: int = TICK_COUNT) -> list[float]:
    """
    Evenly spaced y-axis tick positions covering zero and every numeric value.

    Steps are 1, 2 or 5 times a power of ten. Non-numeric values are ignored;
    no numeric values means no ticks.
    """
    numbers = [value for value in values if is_numeric(value)]
    if not numbers:
        return []
    low = min(0, min(numbers))
    high = max(0, max(numbers))
    if high == low:
        return [low]
    step = _nice_step(high - low, count)
    first = math.floor(low / step)
    last = math.ceil(high / step)
    return [index * step for index in range(first, last + 1)]


def _hover_values(values: Sequence[Any]) -> list[Any]:
    return [format_value(value) for value in values]


def _empty_figure(message: str, height: int) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        xref="paper", yref="paper",
        x=0.5, y=0.5, showarrow=False,
    )
    fig.update_layout(
        height=height,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
    )
    return fig


def _cartesian_trace(trace: TraceRender, categories: list) -> BaseTraceType:
    if trace.kind == "bar":
        return go.Bar(
            x=categories,
            y=trace.values,
            name=trace.name,
            marker_color=trace.color,
            customdata=_hover_values(trace.values),
            hovertemplate=CARTESIAN_HOVER,
        )
    if trace.kind == "area":
        return go.Scatter(
            x=categories,
            y=trace.values,
            name=trace.name,
            mode="lines",
            fill="tozeroy",
            line=dict(color=trace.color, width=2),
            connectgaps=False,
            customdata=_hover_values(trace.values),
            hovertemplate=CARTESIAN_HOVER,
        )
    return go.Scatter(
        x=categories,
        y=trace.values,
        name=trace.name,
        mode="lines+markers",
        line=dict(color=trace.color, width=2),
        marker=dict(size=6),
        connectgaps=False,
        customdata=_hover_values(trace.values),
        hovertemplate=CARTESIAN_HOVER,
    )


def build_figure(chart: ChartRender, height: int = DEFAULT_HEIGHT) -> go.Figure:
    """
    Build a Plotly figure from chart render instructions.

    Args:
        chart: Output of ``dashboard.renderer.render_chart``.
        height: Figure height in pixels.

    Returns:
        Plotly Figure object. A chart without traces gets a placeholder
        annotation instead of axes.
    """
    if not chart.traces:
        return _empty_figure("No metric selected for this chart", height)

    if chart.chart_type == "pie":
        trace = chart.traces[0]
        fig = go.Figure(
            go.Pie(
                labels=chart.categories,
                values=trace.values,
                name=trace.name,
                marker=dict(colors=trace.slice_colors),
                hole=0.0,
                sort=False,
                customdata=_hover_values(trace.values),
                hovertemplate=PIE_HOVER,
            )
        )
        fig.update_layout(
            height=height,
            margin=dict(t=20, b=20, l=20, r=20),
            paper_bgcolor="rgba(0,0,0,0)",
            legend=dict(orientation="h", yanchor="bottom", y=-0.2, xanchor="center", x=0.5),
        )
        return fig

    fig = go.Figure()
    for trace in chart.traces:
        fig.add_trace(_cartesian_trace(trace, chart.categories))

    ticks = value_ticks([value for trace in chart.traces for value in trace.values])

    fig.update_layout(
        showlegend=len(chart.traces) > 1,
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="center", x=0.5),
        height=height,
        margin=dict(t=40, b=40, l=40, r=20),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        yaxis=dict(
            showgrid=True,
            gridcolor=GRID_COLOR,
            tickfont=dict(color=AXIS_TICK_COLOR),
            tickmode="array" if ticks else "auto",
            tickvals=ticks or None,
            ticktext=[format_value(tick) for tick in ticks] or None,
        ),
        xaxis=dict(
            showgrid=False,
            type="category",
            tickfont=dict(color=AXIS_TICK_COLOR),
        ),
        barmode="group",
    )
    return fig
