"""
dashboard/validator.py

Decode-and-validate boundary between the model's JSON and the typed payload.

A single malformed widget is dropped with a warning instead of failing the
whole dashboard. Only a payload that cannot yield any usable widget is
rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from dashboard.schema import (
    DEFAULT_TAB,
    DEFAULT_X_AXIS_KEY,
    WIDGET_TYPES,
    ChartWidget,
    Column,
    DashboardPayload,
    Insight,
    KpiCard,
    Row,
    Series,
    TableWidget,
    is_hex_color,
)

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (str, int, float, bool)


@dataclass(frozen=True)
class PayloadIssue:
    """
    One problem found while validating a payload.
    """

    code: str
    message: str
    path: str


class PayloadValidationError(ValueError):
    """
    Raised when a decoded payload is structurally unusable.
    """

    def __init__(self, message: str, issues: Sequence[PayloadIssue] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.issues = tuple(issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "issues": [
                {"code": issue.code, "message": issue.message, "path": issue.path}
                for issue in self.issues
            ],
        }


def _text(value: Any) -> str | None:
    """
    Stripped text of a scalar; None only when the value is missing or not text.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    return value.strip()


def _clean_str(value: Any) -> str | None:
    return _text(value) or None


def _or_default(value: str | None, default: str) -> str:
    return default if value is None else value


def _normalize_rows(raw_rows: Any) -> list[Row]:
    """
    Keep mapping rows only; nested values become absent (None).
    """

    if not isinstance(raw_rows, list):
        return []
    rows: list[Row] = []
    for raw_row in raw_rows:
        if not isinstance(raw_row, Mapping):
            continue
        rows.append(
            {
                str(key): value if value is None or isinstance(value, _SCALAR_TYPES) else None
                for key, value in raw_row.items()
            }
        )
    return rows


def infer_columns(rows: Sequence[Row]) -> list[Column]:
    """
    Build one ``string`` column per key of the first data row.
    """

    if not rows:
        return []
    return [Column(key=key, label=key, format="string") for key in rows[0] if key]


def _normalize_series(raw_series: Any, path: str, issues: list[PayloadIssue]) -> list[Series]:
    if not isinstance(raw_series, list):
        return []
    series: list[Series] = []
    for index, entry in enumerate(raw_series):
        key = _clean_str(entry.get("key")) if isinstance(entry, Mapping) else None
        if key is None:
            issues.append(
                PayloadIssue(
                    code="series_dropped",
                    message="series entry has no key",
                    path=f"{path}.series[{index}]",
                )
            )
            continue
        color = _clean_str(entry.get("color"))
        if color is not None and not is_hex_color(color):
            issues.append(
                PayloadIssue(
                    code="color_dropped",
                    message=f"series color {color!r} is not a hex color",
                    path=f"{path}.series[{index}]",
                )
            )
            color = None
        series.append(
            Series(
                key=key,
                name=_or_default(_text(entry.get("name")), key),
                color=color,
            )
        )
    return series


def _normalize_columns(raw_columns: Any, path: str, issues: list[PayloadIssue]) -> list[Column]:
    if not isinstance(raw_columns, list):
        return []
    columns: list[Column] = []
    for index, entry in enumerate(raw_columns):
        key = _clean_str(entry.get("key")) if isinstance(entry, Mapping) else None
        if key is None:
            issues.append(
                PayloadIssue(
                    code="column_dropped",
                    message="column entry has no key",
                    path=f"{path}.columns[{index}]",
                )
            )
            continue
        columns.append(
            Column(
                key=key,
                label=_or_default(_text(entry.get("label")), key),
                format=entry.get("format"),
            )
        )
    return columns


def _normalize_widget(
    raw: Any,
    index: int,
    issues: list[PayloadIssue],
) -> ChartWidget | TableWidget | None:
    path = f"widgets[{index}]"
    if not isinstance(raw, Mapping):
        issues.append(PayloadIssue("widget_dropped", "widget is not an object", path))
        return None

    widget_type = _clean_str(raw.get("type"))
    widget_type = widget_type.lower() if widget_type else None
    if widget_type not in WIDGET_TYPES:
        issues.append(
            PayloadIssue("widget_dropped", f"unknown widget type {raw.get('type')!r}", path)
        )
        return None

    widget_id = _clean_str(raw.get("id"))
    if widget_id is None:
        issues.append(PayloadIssue("widget_dropped", "widget has no id", path))
        return None

    rows = _normalize_rows(raw.get("data"))
    common: dict[str, Any] = {
        "id": widget_id,
        "title": _or_default(_text(raw.get("title")), widget_id),
        "description": _text(raw.get("description")),
        "tab": _clean_str(raw.get("tab")) or DEFAULT_TAB,
        "data": rows,
    }

    try:
        if widget_type == "table":
            columns = _normalize_columns(raw.get("columns"), path, issues)
            if not columns:
                columns = infer_columns(rows)
                if columns:
                    issues.append(
                        PayloadIssue("columns_inferred", "columns inferred from first row", path)
                    )
            if not columns:
                issues.append(
                    PayloadIssue("widget_dropped", "table has no columns and no data", path)
                )
                return None
            return TableWidget(type="table", columns=columns, **common)

        if "series" not in raw:
            issues.append(PayloadIssue("series_missing", "chart has no series", path))
        x_axis_key = _clean_str(raw.get("xAxisKey", raw.get("x_axis_key")))
        return ChartWidget(
            type=widget_type,
            x_axis_key=x_axis_key or DEFAULT_X_AXIS_KEY,
            series=_normalize_series(raw.get("series"), path, issues),
            **common,
        )
    except ValidationError as exc:
        issues.append(PayloadIssue("widget_dropped", str(exc), path))
        return None


def _normalize_kpis(raw_kpis: Any, issues: list[PayloadIssue]) -> list[KpiCard]:
    if not isinstance(raw_kpis, list):
        return []
    kpis: list[KpiCard] = []
    for index, entry in enumerate(raw_kpis):
        if not isinstance(entry, Mapping):
            issues.append(PayloadIssue("kpi_dropped", "kpi is not an object", f"kpis[{index}]"))
            continue
        candidate = dict(entry)
        candidate["id"] = _clean_str(entry.get("id")) or f"kpi_{index + 1}"
        try:
            kpis.append(KpiCard.model_validate(candidate))
        except ValidationError as exc:
            issues.append(PayloadIssue("kpi_dropped", str(exc), f"kpis[{index}]"))
    return kpis


def _normalize_insights(raw_insights: Any, issues: list[PayloadIssue]) -> list[Insight]:
    if not isinstance(raw_insights, list):
        return []
    insights: list[Insight] = []
    for index, entry in enumerate(raw_insights):
        if not isinstance(entry, Mapping):
            issues.append(
                PayloadIssue("insight_dropped", "insight is not an object", f"insights[{index}]")
            )
            continue
        try:
            insights.append(Insight.model_validate(entry))
        except ValidationError as exc:
            issues.append(PayloadIssue("insight_dropped", str(exc), f"insights[{index}]"))
    return insights


def validate_payload(raw: Any) -> DashboardPayload:
    """
    Validate and normalize a decoded model response into a DashboardPayload.

    Raises:
        PayloadValidationError: If ``raw`` is not an object, has no ``widgets``
            list, or none of its widgets is usable.
    """

    if not isinstance(raw, Mapping):
        raise PayloadValidationError(
            "Dashboard payload must be a JSON object.",
            [PayloadIssue("not_an_object", f"got {type(raw).__name__}", "$")],
        )

    raw_widgets = raw.get("widgets")
    if not isinstance(raw_widgets, list):
        raise PayloadValidationError(
            "Dashboard payload has no widgets list.",
            [PayloadIssue("widgets_missing", "widgets is absent or not a list", "widgets")],
        )

    issues: list[PayloadIssue] = []
    widgets: list[ChartWidget | TableWidget] = []
    seen_ids: set[str] = set()
    for index, raw_widget in enumerate(raw_widgets):
        widget = _normalize_widget(raw_widget, index, issues)
        if widget is None:
            continue
        if widget.id in seen_ids:
            issues.append(
                PayloadIssue("widget_dropped", f"duplicate widget id {widget.id!r}", f"widgets[{index}]")
            )
            continue
        seen_ids.add(widget.id)
        widgets.append(widget)

    if not widgets:
        for issue in issues:
            logger.warning("Payload issue at %s (%s): %s", issue.path, issue.code, issue.message)
        raise PayloadValidationError("Dashboard payload has no usable widgets.", issues)

    kpis = _normalize_kpis(raw.get("kpis"), issues)
    insights = _normalize_insights(raw.get("insights"), issues)
    for issue in issues:
        logger.warning("Payload issue at %s (%s): %s", issue.path, issue.code, issue.message)

    title = _clean_str(raw.get("title")) or _clean_str(raw.get("dataset_title")) or ""
    summary = _clean_str(raw.get("summary")) or _clean_str(raw.get("dataset_summary")) or ""

    return DashboardPayload(
        title=title,
        summary=summary,
        kpis=kpis,
        widgets=widgets,
        insights=insights,
    )


validate = validate_payload


__all__ = [
    "PayloadIssue",
    "PayloadValidationError",
    "infer_columns",
    "validate",
    "validate_payload",
]
