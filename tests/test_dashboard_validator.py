from __future__ import annotations

import logging

import pytest

from dashboard.schema import ChartWidget, DashboardPayload, TableWidget, serialize_payload
from dashboard.validator import PayloadValidationError, infer_columns, validate


def _raw_payload() -> dict:
    return {
        "title": "Sales Dashboard",
        "summary": "Revenue grew steadily.",
        "kpis": [
            {
                "id": "kpi_1",
                "label": "Revenue",
                "value": "$42K",
                "subValue": "Q1",
                "trend": "up",
                "trendValue": "+8%",
                "iconHint": "money",
            }
        ],
        "widgets": [
            {
                "id": "w1",
                "tab": "Overview",
                "title": "Monthly Sales",
                "type": "area",
                "xAxisKey": "month",
                "data": [{"month": "Jan", "sales": 100}, {"month": "Feb", "sales": None}],
                "series": [{"key": "sales", "name": "Sales", "color": "#3B82F6"}],
            },
            {
                "id": "w2",
                "tab": "Details",
                "title": "Top Products",
                "type": "table",
                "columns": [
                    {"key": "name", "label": "Product", "format": "string"},
                    {"key": "revenue", "label": "Revenue", "format": "currency"},
                ],
                "data": [{"name": "Item A", "revenue": 5000}],
            },
        ],
        "insights": [{"title": "Growth", "description": "Up and to the right.", "type": "positive"}],
    }


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestValidPayload:
    def test_builds_typed_widgets(self) -> None:
        payload = validate(_raw_payload())

        assert isinstance(payload, DashboardPayload)
        chart, table = payload.widgets
        assert isinstance(chart, ChartWidget)
        assert chart.x_axis_key == "month"
        assert chart.series[0].key == "sales"
        assert chart.data[1]["sales"] is None
        assert isinstance(table, TableWidget)
        assert [column.format for column in table.columns] == ["string", "currency"]
        assert payload.kpis[0].trend == "up"
        assert payload.kpis[0].icon_hint == "money"
        assert payload.insights[0].type == "positive"

    def test_round_trip_through_serialize(self) -> None:
        payload = validate(_raw_payload())

        assert validate(serialize_payload(payload)) == payload

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda raw: raw["widgets"][0]["series"][0].update(name=""),
            lambda raw: raw["widgets"][1]["columns"][0].update(label=""),
            lambda raw: raw["widgets"][0].update(title=""),
            lambda raw: raw["widgets"][0].update(description=""),
            lambda raw: raw["widgets"][0].update(description=None),
            lambda raw: raw["widgets"][0]["series"][0].update(color="blue"),
            lambda raw: raw["widgets"][1]["data"].append({"name": None, "revenue": None}),
            lambda raw: raw.update(title="", summary=""),
        ],
        ids=[
            "empty-series-name",
            "empty-column-label",
            "empty-title",
            "empty-description",
            "null-description",
            "named-color",
            "null-cells",
            "empty-heading",
        ],
    )
    def test_round_trip_edge_payloads(self, mutate) -> None:
        raw = _raw_payload()
        mutate(raw)

        payload = validate(raw)

        assert validate(serialize_payload(payload)) == payload

    def test_empty_strings_are_kept(self) -> None:
        raw = _raw_payload()
        raw["widgets"][0]["title"] = ""
        raw["widgets"][0]["description"] = ""
        raw["widgets"][0]["series"][0]["name"] = ""
        raw["widgets"][1]["columns"][0]["label"] = ""

        chart, table = validate(raw).widgets

        assert chart.title == ""
        assert chart.description == ""
        assert chart.series[0].name == ""
        assert table.columns[0].label == ""

    def test_serialized_form_uses_wire_names(self) -> None:
        serialized = serialize_payload(validate(_raw_payload()))

        assert serialized["widgets"][0]["xAxisKey"] == "month"
        assert serialized["kpis"][0]["subValue"] == "Q1"
        assert "x_axis_key" not in serialized["widgets"][0]

    def test_accepts_dataset_title_keys(self) -> None:
        raw = _raw_payload()
        raw["dataset_title"] = raw.pop("title")
        raw["dataset_summary"] = raw.pop("summary")

        payload = validate(raw)

        assert payload.title == "Sales Dashboard"
        assert payload.summary == "Revenue grew steadily."


# ---------------------------------------------------------------------------
# Repairs and per-widget degradation
# ---------------------------------------------------------------------------


class TestRepairs:
    def test_chart_without_series_gets_empty_list(self) -> None:
        raw = _raw_payload()
        del raw["widgets"][0]["series"]

        payload = validate(raw)

        assert payload.widgets[0].series == []

    def test_chart_without_x_axis_defaults_to_name(self) -> None:
        raw = _raw_payload()
        del raw["widgets"][0]["xAxisKey"]

        assert validate(raw).widgets[0].x_axis_key == "name"

    def test_table_without_columns_infers_from_first_row(self) -> None:
        raw = _raw_payload()
        del raw["widgets"][1]["columns"]

        table = validate(raw).widgets[1]

        assert [(c.key, c.label, c.format) for c in table.columns] == [
            ("name", "name", "string"),
            ("revenue", "revenue", "string"),
        ]

    def test_missing_tab_and_title_are_filled(self) -> None:
        raw = _raw_payload()
        del raw["widgets"][0]["tab"]
        del raw["widgets"][0]["title"]

        chart = validate(raw).widgets[0]

        assert chart.tab == "Overview"
        assert chart.title == "w1"

    def test_missing_series_name_and_column_label_use_key(self) -> None:
        raw = _raw_payload()
        del raw["widgets"][0]["series"][0]["name"]
        del raw["widgets"][1]["columns"][1]["label"]

        chart, table = validate(raw).widgets

        assert chart.series[0].name == "sales"
        assert table.columns[1].label == "revenue"

    @pytest.mark.parametrize("color", ["blue", "rgb(59, 130, 246)", "#12345", "#3B82F6AA"])
    def test_non_hex_series_color_is_dropped(self, color, caplog) -> None:
        raw = _raw_payload()
        raw["widgets"][0]["series"][0]["color"] = color

        with caplog.at_level(logging.WARNING, logger="dashboard.validator"):
            chart = validate(raw).widgets[0]

        assert chart.series[0].color is None
        assert "color_dropped" in caplog.text

    @pytest.mark.parametrize("color", ["#3B82F6", "#abc"])
    def test_hex_series_color_is_kept(self, color) -> None:
        raw = _raw_payload()
        raw["widgets"][0]["series"][0]["color"] = color

        assert validate(raw).widgets[0].series[0].color == color

    def test_unknown_widget_type_is_dropped_with_warning(self, caplog) -> None:
        raw = _raw_payload()
        raw["widgets"].append({"id": "w3", "type": "scatter", "data": []})

        with caplog.at_level(logging.WARNING, logger="dashboard.validator"):
            payload = validate(raw)

        assert [widget.id for widget in payload.widgets] == ["w1", "w2"]
        assert "scatter" in caplog.text

    def test_duplicate_id_keeps_first_occurrence(self) -> None:
        raw = _raw_payload()
        raw["widgets"][1]["id"] = "w1"

        payload = validate(raw)

        assert len(payload.widgets) == 1
        assert payload.widgets[0].type == "area"

    def test_table_without_columns_or_data_is_dropped(self) -> None:
        raw = _raw_payload()
        raw["widgets"].append({"id": "w3", "type": "table"})

        assert [widget.id for widget in validate(raw).widgets] == ["w1", "w2"]

    def test_unknown_enum_values_are_neutralized(self) -> None:
        raw = _raw_payload()
        raw["kpis"][0]["trend"] = "sideways"
        raw["kpis"][0]["iconHint"] = "rocket"
        raw["insights"][0]["type"] = "mixed"

        payload = validate(raw)

        assert payload.kpis[0].trend is None
        assert payload.kpis[0].icon_hint is None
        assert payload.insights[0].type == "neutral"

    def test_non_list_kpis_and_insights_become_empty(self) -> None:
        raw = _raw_payload()
        raw["kpis"] = "oops"
        raw["insights"] = None

        payload = validate(raw)

        assert payload.kpis == []
        assert payload.insights == []


# ---------------------------------------------------------------------------
# Hard failures
# ---------------------------------------------------------------------------


class TestHardFailures:
    @pytest.mark.parametrize("raw", [None, [], "text", 3])
    def test_rejects_non_object(self, raw) -> None:
        with pytest.raises(PayloadValidationError):
            validate(raw)

    @pytest.mark.parametrize("widgets", [None, "w1", {"id": "w1"}])
    def test_rejects_missing_or_non_list_widgets(self, widgets) -> None:
        raw = _raw_payload()
        raw["widgets"] = widgets

        with pytest.raises(PayloadValidationError) as exc_info:
            validate(raw)

        assert exc_info.value.issues[0].code == "widgets_missing"

    def test_rejects_when_no_widget_survives(self) -> None:
        raw = _raw_payload()
        raw["widgets"] = [{"id": "x", "type": "scatter"}, "not a widget"]

        with pytest.raises(PayloadValidationError) as exc_info:
            validate(raw)

        codes = [issue["code"] for issue in exc_info.value.to_dict()["issues"]]
        assert codes == ["widget_dropped", "widget_dropped"]


def test_infer_columns_from_empty_rows() -> None:
    assert infer_columns([]) == []
