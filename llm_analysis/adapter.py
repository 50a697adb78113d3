"""LLM adapters for dashboard analysis.

Provides a base interface and concrete adapters for OpenAI-compatible
APIs and a deterministic mock for local runs and tests.
"""

import json
import os
from abc import ABC, abstractmethod
from typing import Optional


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, system_prompt: str, user_content: str) -> str:
        """Send one request to the LLM and return the raw response text.

        Args:
            system_prompt: Fixed instruction prompt.
            user_content: The user message carrying the CSV text.

        Returns:
            Raw string response from the model (expected to be JSON).
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Requests JSON output, never retries, and applies an explicit timeout so a
    hung request surfaces as an error instead of an endless loading state.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 8192,
        temperature: float = 0.2,
        timeout_seconds: float = 120.0,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            max_tokens: Maximum tokens in the completion.
            temperature: Sampling temperature.
            timeout_seconds: Per-request timeout.
            api_key: API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional base URL for OpenAI-compatible endpoints.
        """
        from openai import OpenAI

        resolved_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        client_kwargs: dict = {
            "api_key": resolved_key,
            "timeout": timeout_seconds,
            "max_retries": 0,
        }
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    def generate(self, system_prompt: str, user_content: str) -> str:
        """Call the chat completion API once.

        Returns:
            Raw string content from the model response ("" when absent).
        """
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            response_format={"type": "json_object"},
            stream=False,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock response used for local runs without an API key.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = {
    "dataset_title": "Sample Sales Dashboard",
    "dataset_summary": "Mock analysis: revenue grew steadily through the quarter.",
    "kpis": [
        {
            "id": "kpi_1",
            "label": "Total Revenue",
            "value": "$42.5K",
            "subValue": "Q1",
            "trend": "up",
            "trendValue": "+8.2%",
            "iconHint": "money",
        },
        {
            "id": "kpi_2",
            "label": "Orders",
            "value": 1280,
            "trend": "neutral",
            "iconHint": "box",
        },
    ],
    "widgets": [
        {
            "id": "w1",
            "tab": "Overview",
            "title": "Monthly Revenue",
            "description": "Revenue and orders by month",
            "type": "composed",
            "xAxisKey": "month",
            "data": [
                {"month": "Jan", "revenue": 12000, "orders": 380},
                {"month": "Feb", "revenue": 14000, "orders": 420},
                {"month": "Mar", "revenue": 16500, "orders": 480},
            ],
            "series": [
                {"key": "revenue", "name": "Revenue", "color": "#3B82F6"},
                {"key": "orders", "name": "Orders", "color": "#10B981"},
            ],
        },
        {
            "id": "w2",
            "tab": "Breakdown",
            "title": "Revenue by Region",
            "type": "pie",
            "xAxisKey": "region",
            "data": [
                {"region": "North", "revenue": 18000},
                {"region": "South", "revenue": 14500},
                {"region": "West", "revenue": 10000},
            ],
            "series": [{"key": "revenue", "name": "Revenue"}],
        },
        {
            "id": "w3",
            "tab": "Details",
            "title": "Top Products",
            "type": "table",
            "columns": [
                {"key": "name", "label": "Product", "format": "string"},
                {"key": "revenue", "label": "Revenue", "format": "currency"},
                {"key": "margin", "label": "Margin", "format": "percent"},
            ],
            "data": [
                {"name": "Item A", "revenue": 5000, "margin": 12.5},
                {"name": "Item B", "revenue": 3200, "margin": 9.1},
            ],
        },
    ],
    "insights": [
        {
            "title": "Steady growth",
            "description": "Revenue rose every month of the quarter.",
            "type": "positive",
        }
    ],
}

_MOCK_RESPONSE_JSON = json.dumps(_MOCK_RESPONSE, indent=2)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed valid dashboard.

    Used for local runs and CI pipelines where no LLM API is available.
    """

    def generate(self, system_prompt: str, user_content: str) -> str:
        """Return a fixed JSON string regardless of input."""
        return _MOCK_RESPONSE_JSON
