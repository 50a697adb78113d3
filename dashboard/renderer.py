"""
dashboard/renderer.py

Pure mapping from a widget and the current view state to render instructions.

Nothing here touches a UI toolkit; ``dashboard.plotting`` turns a
``ChartRender`` into a Plotly figure and the Streamlit app lays out spans.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from dashboard.formatting import format_value
from dashboard.schema import ChartWidget, TableWidget
from dashboard.store import DashboardStore

PRIMARY_COLOR = "#3B82F6"
SECONDARY_LINE_COLOR = "#8B5CF6"
PIE_COLORS: tuple[str, ...] = (
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
)
WIDE_TYPES = frozenset({"area", "composed"})

AnyWidget = ChartWidget | TableWidget


@dataclass(frozen=True)
class TraceRender:
    """
    One drawable series: ``kind`` is ``area``, ``bar``, ``line`` or ``pie``.
    """

    kind: str
    key: str
    name: str
    color: str
    values: list[Any]
    slice_colors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ChartRender:
    chart_type: str
    x_axis_key: str
    categories: list[Any]
    traces: list[TraceRender]

    @property
    def has_metric(self) -> bool:
        return bool(self.traces)


@dataclass(frozen=True)
class TableRender:
    headers: list[str]
    rows: list[list[str]]


@dataclass(frozen=True)
class WidgetRender:
    """
    Everything the UI needs to draw one widget card.
    """

    widget_id: str
    title: str
    description: str | None
    span: int
    editable: bool
    editing: bool
    body: ChartRender | TableRender


def layout_span(widget: AnyWidget, active_widgets: Sequence[AnyWidget]) -> int:
    """
    Double width when the widget is alone in its tab or is an area/composed chart.
    """

    if len(active_widgets) == 1 or widget.type in WIDE_TYPES:
        return 2
    return 1


def _column_values(rows: Sequence[dict[str, Any]], key: str) -> list[Any]:
    return [row.get(key) for row in rows]


def _chart_traces(widget: ChartWidget) -> list[TraceRender]:
    if not widget.series:
        return []

    if widget.type == "pie":
        first = widget.series[0]
        return [
            TraceRender(
                kind="pie",
                key=first.key,
                name=first.name,
                color=first.color or PRIMARY_COLOR,
                values=_column_values(widget.data, first.key),
                slice_colors=[PIE_COLORS[index % len(PIE_COLORS)] for index in range(len(widget.data))],
            )
        ]

    traces: list[TraceRender] = []
    for index, series in enumerate(widget.series):
        if widget.type == "composed":
            kind = "bar" if index == 0 else "line"
            fallback = PRIMARY_COLOR if index == 0 else SECONDARY_LINE_COLOR
        else:
            kind = widget.type
            fallback = PRIMARY_COLOR
        traces.append(
            TraceRender(
                kind=kind,
                key=series.key,
                name=series.name,
                color=series.color or fallback,
                values=_column_values(widget.data, series.key),
            )
        )
    return traces


def render_chart(widget: ChartWidget) -> ChartRender:
    return ChartRender(
        chart_type=widget.type,
        x_axis_key=widget.x_axis_key,
        categories=_column_values(widget.data, widget.x_axis_key),
        traces=_chart_traces(widget),
    )


def render_table(widget: TableWidget) -> TableRender:
    rows: list[list[str]] = []
    for row in widget.data:
        cells = []
        for column in widget.columns:
            value = format_value(row.get(column.key), column.format)
            cells.append("" if value is None else str(value))
        rows.append(cells)
    return TableRender(
        headers=[column.label for column in widget.columns],
        rows=rows,
    )


def render_widget(
    widget: AnyWidget,
    *,
    active_widgets: Sequence[AnyWidget],
    edit_target: str | None,
) -> WidgetRender:
    """
    Build render instructions for one widget of the active tab.
    """

    if isinstance(widget, ChartWidget):
        body: ChartRender | TableRender = render_chart(widget)
        editable = True
    elif isinstance(widget, TableWidget):
        body = render_table(widget)
        editable = False
    else:
        raise TypeError(f"Unsupported widget type: {type(widget).__name__}")

    return WidgetRender(
        widget_id=widget.id,
        title=widget.title,
        description=widget.description,
        span=layout_span(widget, active_widgets),
        editable=editable,
        editing=edit_target == widget.id,
        body=body,
    )


def render_tab(store: DashboardStore) -> list[WidgetRender]:
    """
    Render every widget of the store's active tab, in payload order.
    """

    active_widgets = store.active_widgets
    return [
        render_widget(widget, active_widgets=active_widgets, edit_target=store.edit_target)
        for widget in active_widgets
    ]
