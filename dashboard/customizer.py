"""
dashboard/customizer.py

Edit operations behind the widget customizer panel.

Every operation returns a new widget and never raises: a request that cannot
be honoured (unknown type, out-of-range index, removing the last series, adding a
series to a chart without data) returns the input widget unchanged. Callers hand the
result to ``DashboardStore.update_widget``.
"""

from __future__ import annotations

import logging
from typing import Any

from dashboard.formatting import is_numeric
from dashboard.schema import (
    CHART_TYPES,
    DEFAULT_X_AXIS_KEY,
    ChartWidget,
    Column,
    Row,
    Series,
    TableWidget,
)

logger = logging.getLogger(__name__)

PRESET_COLORS: tuple[str, ...] = (
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#06B6D4",
    "#6366F1",
)

SERIES_FIELDS = ("key", "name", "color")
_NUMERIC_FORMATS = ("currency", "number", "percent")

AnyWidget = ChartWidget | TableWidget


def _sample_row(widget: AnyWidget) -> Row:
    return widget.data[0] if widget.data else {}


def data_keys(widget: AnyWidget) -> list[str]:
    """
    Field names offered by the customizer, taken from the first data row.
    """

    return list(_sample_row(widget).keys())


def numeric_keys(widget: AnyWidget) -> list[str]:
    row = _sample_row(widget)
    return [key for key, value in row.items() if is_numeric(value)]


def palette_color(position: int) -> str:
    return PRESET_COLORS[position % len(PRESET_COLORS)]


def _common_fields(widget: AnyWidget) -> dict[str, Any]:
    return {
        "id": widget.id,
        "title": widget.title,
        "description": widget.description,
        "tab": widget.tab,
        "data": widget.data,
    }


def _table_to_chart(widget: TableWidget, new_type: str) -> AnyWidget:
    labels = {column.key: column.label for column in widget.columns}
    keys = data_keys(widget)
    if keys:
        numeric = numeric_keys(widget)
        series_key = numeric[0] if numeric else keys[0]
    else:
        # No rows: pick fields from the column definitions instead.
        keys = [column.key for column in widget.columns]
        numeric = [column.key for column in widget.columns if column.format in _NUMERIC_FORMATS]
        series_key = numeric[0] if numeric else keys[0]

    x_axis_key = next(
        (key for key in keys if key != series_key and key not in numeric),
        DEFAULT_X_AXIS_KEY,
    )
    return ChartWidget(
        type=new_type,
        x_axis_key=x_axis_key,
        series=[
            Series(
                key=series_key,
                name=labels.get(series_key, series_key),
                color=palette_color(0),
            )
        ],
        **_common_fields(widget),
    )


def _chart_to_table(widget: ChartWidget) -> AnyWidget:
    keys = data_keys(widget)
    if not keys:
        keys = list(dict.fromkeys([widget.x_axis_key, *(series.key for series in widget.series)]))

    names = {series.key: series.name for series in widget.series}
    return TableWidget(
        type="table",
        columns=[Column(key=key, label=names.get(key, key), format="string") for key in keys],
        **_common_fields(widget),
    )


def change_type(widget: AnyWidget, new_type: str) -> AnyWidget:
    """
    Switch the widget variant, synthesizing series or columns when needed.
    """

    if new_type == widget.type:
        return widget
    if new_type == "table":
        if isinstance(widget, ChartWidget):
            return _chart_to_table(widget)
        return widget
    if new_type not in CHART_TYPES:
        return widget
    if isinstance(widget, TableWidget):
        return _table_to_chart(widget, new_type)
    return widget.model_copy(update={"type": new_type})


def change_x_axis(widget: AnyWidget, field_name: str) -> AnyWidget:
    if not isinstance(widget, ChartWidget) or not field_name:
        return widget
    return widget.model_copy(update={"x_axis_key": field_name})


def _next_series_key(widget: ChartWidget) -> str | None:
    numeric = numeric_keys(widget)
    plotted = {series.key for series in widget.series} | {widget.x_axis_key}
    for key in numeric:
        if key not in plotted:
            return key
    if numeric:
        return numeric[0]
    keys = data_keys(widget)
    return keys[0] if keys else None


def add_series(widget: AnyWidget) -> AnyWidget:
    """
    Append a series for the next unplotted numeric field.

    The color is ``PRESET_COLORS[len(series) % len(PRESET_COLORS)]`` at append
    time, so removing the newest series and adding again yields the same color.
    """

    if not isinstance(widget, ChartWidget):
        return widget
    key = _next_series_key(widget)
    if key is None:
        return widget
    new_series = Series(key=key, name=key, color=palette_color(len(widget.series)))
    return widget.model_copy(update={"series": [*widget.series, new_series]})


def remove_series(widget: AnyWidget, index: int) -> AnyWidget:
    """
    Remove the series at ``index``; a chart always keeps at least one series.
    """

    if not isinstance(widget, ChartWidget):
        return widget
    if len(widget.series) <= 1 or not 0 <= index < len(widget.series):
        return widget
    remaining = [series for position, series in enumerate(widget.series) if position != index]
    return widget.model_copy(update={"series": remaining})


def update_series_field(
    widget: AnyWidget,
    index: int,
    field: str,
    value: str,
) -> AnyWidget:
    """
    Set ``key``, ``name`` or ``color`` on one series.
    """

    if not isinstance(widget, ChartWidget):
        return widget
    if field not in SERIES_FIELDS or not 0 <= index < len(widget.series):
        return widget
    if field == "key" and not value:
        return widget

    if field == "color":
        value = value or None
    series = list(widget.series)
    series[index] = series[index].model_copy(update={field: value})
    return widget.model_copy(update={"series": series})
