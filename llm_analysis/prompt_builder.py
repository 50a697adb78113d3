"""Fixed instruction prompt and user message for dashboard analysis."""

import json

APP_NAME = "DashSmart"

ANALYSIS_COLORS = {
    "Blue": "#3B82F6",
    "Emerald": "#10B981",
    "Amber": "#F59E0B",
    "Red": "#EF4444",
    "Purple": "#8B5CF6",
}

USER_CONTENT_PREFIX = "Here is the CSV data to analyze:"

_EXAMPLE_OUTPUT = json.dumps(
    {
        "dataset_title": "<Professional Dashboard Title>",
        "dataset_summary": "<Executive summary string>",
        "kpis": [
            {
                "id": "kpi_1",
                "label": "<Metric Name>",
                "value": "<Formatted Value>",
                "subValue": "<Context>",
                "trend": "up|down|neutral",
                "trendValue": "<% change>",
                "iconHint": "money|users|box|activity|time|chart|alert",
            }
        ],
        "widgets": [
            {
                "id": "w1",
                "tab": "Overview",
                "title": "<Chart Title>",
                "description": "<Subtitle>",
                "type": "area",
                "xAxisKey": "month",
                "data": [{"month": "Jan", "sales": 100}],
                "series": [{"key": "sales", "name": "Sales", "color": "#3B82F6"}],
            },
            {
                "id": "w2",
                "tab": "Details",
                "title": "Top Performers",
                "type": "table",
                "columns": [
                    {"key": "name", "label": "Product", "format": "string"},
                    {"key": "revenue", "label": "Revenue", "format": "currency"},
                    {"key": "margin", "label": "Margin", "format": "percent"},
                ],
                "data": [{"name": "Item A", "revenue": 5000, "margin": 12.5}],
            },
        ],
        "insights": [
            {"title": "<Insight Title>", "description": "<Text>", "type": "positive|negative|neutral"}
        ],
    },
    indent=2,
)

_COLOR_LIST = ", ".join(f"{code} ({name})" for name, code in ANALYSIS_COLORS.items())

SYSTEM_PROMPT = f"""\
You are {APP_NAME}, an expert data analyst.
Your goal is to analyze any given CSV dataset and generate a rich, multi-tab dashboard configuration.

## DYNAMIC CONTEXT ANALYSIS
1. Infer the domain: decide whether the data is "E-commerce", "Healthcare", "Finance", etc.
2. Organize into tabs: group visualizations into logical tabs. Common patterns:
   - "Overview": top-level KPIs and aggregate charts.
   - "Trends": time-series analysis.
   - "Breakdown": categorical distribution (products, regions, departments).
   - "Details": granular tables.

## RESPONSE FORMAT (strict JSON)
Return a single JSON object shaped like this example:

```json
{_EXAMPLE_OUTPUT}
```

## RULES
- Widget types: use 'area' for trends, 'bar' for comparisons, 'line' for simple series, 'pie' for distribution, 'composed' for multi-metric trends (first series drawn as bars, the rest as lines), 'table' for detailed lists.
- Colors: use {_COLOR_LIST}.
- Data limits: limit chart arrays to ~20 points. Limit table rows to the top 10 items.
- Nulls: filter or zero-fill null values.
- Do NOT include any text outside the JSON object.
"""


class DashboardPromptBuilder:
    """Pairs the fixed system prompt with the CSV-bearing user message."""

    system_prompt = SYSTEM_PROMPT

    def build_user_content(self, csv_text: str) -> str:
        return f"{USER_CONTENT_PREFIX}\n{csv_text}"
