"""Typed dashboard payload produced by the analysis model.

Widgets form a tagged union on ``type``: the five chart variants share
``ChartWidget`` and ``table`` maps to ``TableWidget``. Field names follow
Python conventions; the JSON wire names (``xAxisKey``, ``subValue``, ...) are
kept as aliases so payloads serialize back to the shape the model emits.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ChartType = Literal["area", "bar", "line", "pie", "composed"]
ColumnFormat = Literal["currency", "number", "percent", "string"]
Trend = Literal["up", "down", "neutral"]
IconHint = Literal["money", "users", "box", "activity", "time", "chart", "alert"]
InsightType = Literal["positive", "negative", "neutral"]

CHART_TYPES: tuple[str, ...] = ("area", "bar", "line", "pie", "composed")
WIDGET_TYPES: tuple[str, ...] = CHART_TYPES + ("table",)
COLUMN_FORMATS: tuple[str, ...] = ("currency", "number", "percent", "string")
TRENDS: tuple[str, ...] = ("up", "down", "neutral")
ICON_HINTS: tuple[str, ...] = ("money", "users", "box", "activity", "time", "chart", "alert")
INSIGHT_TYPES: tuple[str, ...] = ("positive", "negative", "neutral")

DEFAULT_X_AXIS_KEY = "name"
DEFAULT_TAB = "Overview"

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")

Row = dict[str, Any]


class _PayloadModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


def is_hex_color(value: Any) -> bool:
    """Return True for `#rgb` or `#rrggbb` strings."""
    return isinstance(value, str) and bool(_HEX_COLOR.fullmatch(value))


def _one_of(value: Any, allowed: tuple[str, ...]) -> str | None:
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in allowed:
            return candidate
    return None


class KpiCard(_PayloadModel):
    """Headline metric shown above the tabs."""

    id: str = Field(min_length=1)
    label: str
    value: str | int | float
    sub_value: str | None = Field(default=None, alias="subValue")
    trend: Trend | None = None
    trend_value: str | None = Field(default=None, alias="trendValue")
    icon_hint: IconHint | None = Field(default=None, alias="iconHint")

    @field_validator("trend", mode="before")
    @classmethod
    def _known_trend(cls, value: Any) -> str | None:
        return _one_of(value, TRENDS)

    @field_validator("icon_hint", mode="before")
    @classmethod
    def _known_icon(cls, value: Any) -> str | None:
        return _one_of(value, ICON_HINTS)


class Series(_PayloadModel):
    """One plotted metric, keyed into every data row."""

    key: str = Field(min_length=1)
    name: str
    color: str | None = None


class Column(_PayloadModel):
    """One table column and the display rule for its cells."""

    key: str = Field(min_length=1)
    label: str
    format: ColumnFormat | None = None

    @field_validator("format", mode="before")
    @classmethod
    def _known_format(cls, value: Any) -> str | None:
        return _one_of(value, COLUMN_FORMATS)


class WidgetBase(_PayloadModel):
    id: str = Field(min_length=1)
    title: str
    description: str | None = None
    tab: str = DEFAULT_TAB
    data: list[Row] = Field(default_factory=list)


class ChartWidget(WidgetBase):
    """Area, bar, line, pie or composed chart."""

    type: ChartType
    x_axis_key: str = Field(default=DEFAULT_X_AXIS_KEY, alias="xAxisKey")
    series: list[Series] = Field(default_factory=list)


class TableWidget(WidgetBase):
    """Tabular widget; every cell is rendered through its column format."""

    type: Literal["table"]
    columns: list[Column] = Field(min_length=1)


Widget = Annotated[Union[ChartWidget, TableWidget], Field(discriminator="type")]


class Insight(_PayloadModel):
    """Narrative finding shown under the widgets."""

    title: str
    description: str = ""
    type: InsightType = "neutral"

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value: Any) -> str:
        return _one_of(value, INSIGHT_TYPES) or "neutral"


class DashboardPayload(_PayloadModel):
    """Root artifact of one analysis run."""

    title: str = Field(default="", validation_alias=AliasChoices("title", "dataset_title"))
    summary: str = Field(default="", validation_alias=AliasChoices("summary", "dataset_summary"))
    kpis: list[KpiCard] = Field(default_factory=list)
    widgets: list[Widget] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)


def serialize_payload(payload: DashboardPayload) -> dict[str, Any]:
    """Return the JSON-compatible wire form of ``payload``."""
    return payload.model_dump(mode="json", by_alias=True)
