"""
llm_analysis/gateway.py

Single entry point from CSV text to a validated dashboard payload.

One adapter call per analysis, no retries. Every failure is raised as an
``AnalysisError`` subclass whose ``user_message`` is safe to show in the UI;
raw model text only ever goes to the log.
"""

from __future__ import annotations

import logging
import time

from app.config import LLMSettings, get_llm_settings
from app.logging_utils import log_event, preview_text
from dashboard.schema import DashboardPayload
from dashboard.validator import PayloadValidationError, validate_payload
from llm_analysis.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter
from llm_analysis.prompt_builder import DashboardPromptBuilder
from llm_analysis.response_parser import LLMOutputFormatError, parse_llm_output

logger = logging.getLogger(__name__)

FORMAT_USER_MESSAGE = "The analysis service returned a response that could not be read. Please try again."
SCHEMA_USER_MESSAGE = "The analysis service returned a dashboard that could not be displayed. Please try again."
CONFIG_USER_MESSAGE = "The analysis service is not configured correctly. Check the LLM settings and restart the app."


class AnalysisError(Exception):
    """
    Base class for every analysis failure.

    Attributes:
        stage: Which step failed.
        errors: Human-readable diagnostics (never shown to the user).
        user_message: Message safe to surface in the UI.
    """

    stage = "analysis"

    def __init__(
        self,
        user_message: str,
        *,
        stage: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        if stage is not None:
            self.stage = stage
        self.errors = list(errors or [])


class AnalysisTransportError(AnalysisError):
    """The model call itself failed (network, auth, timeout, quota)."""

    stage = "transport"


class AnalysisFormatError(AnalysisError):
    """The model answered with empty or undecodable content."""

    def __init__(
        self,
        user_message: str,
        *,
        stage: str,
        errors: list[str] | None = None,
        raw_response: str = "",
    ) -> None:
        super().__init__(user_message, stage=stage, errors=errors)
        self.raw_response = raw_response


class AnalysisSchemaError(AnalysisError):
    """The decoded JSON did not yield a usable dashboard."""

    stage = "schema"

    def __init__(self, user_message: str, *, validation_error: PayloadValidationError) -> None:
        super().__init__(
            user_message,
            errors=[f"{issue.path}: {issue.message}" for issue in validation_error.issues],
        )
        self.validation_error = validation_error


def build_adapter(settings: LLMSettings | None = None) -> BaseLLMAdapter:
    """
    Construct the adapter named by ``LLM_ADAPTER``.

    Raises:
        AnalysisTransportError: With stage ``configuration`` when the settings
            are invalid or the client cannot be created.
    """

    try:
        settings = settings or get_llm_settings()
        if settings.adapter == "mock":
            return MockLLMAdapter()
        return OpenAILLMAdapter(
            model=settings.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            timeout_seconds=settings.timeout_seconds,
            api_key=settings.api_key,
            base_url=settings.base_url,
        )
    except Exception as exc:
        logger.error("LLM adapter could not be built: %s", exc)
        raise AnalysisTransportError(
            CONFIG_USER_MESSAGE,
            stage="configuration",
            errors=[str(exc)],
        ) from exc


class AnalysisGateway:
    """
    Sends CSV text to the model and returns a validated DashboardPayload.
    """

    def __init__(
        self,
        adapter: BaseLLMAdapter,
        prompt_builder: DashboardPromptBuilder | None = None,
    ) -> None:
        self._adapter = adapter
        self._prompt_builder = prompt_builder or DashboardPromptBuilder()

    def analyze(self, csv_text: str) -> DashboardPayload:
        """
        Run one analysis.

        Raises:
            AnalysisTransportError: The adapter raised.
            AnalysisFormatError: Empty, non-JSON or non-object response.
            AnalysisSchemaError: The payload had no usable widgets.
        """

        user_content = self._prompt_builder.build_user_content(csv_text)
        started = time.perf_counter()
        try:
            raw_response = self._adapter.generate(self._prompt_builder.system_prompt, user_content)
        except Exception as exc:
            logger.error(
                "Analysis request failed: %s",
                exc,
                extra={"adapter": type(self._adapter).__name__, "csv_chars": len(csv_text)},
            )
            raise AnalysisTransportError(
                str(exc) or type(exc).__name__,
                errors=[repr(exc)],
            ) from exc

        log_event(
            logger,
            logging.INFO,
            "analysis_response_received",
            adapter=type(self._adapter).__name__,
            csv_chars=len(csv_text),
            response_chars=len(raw_response or ""),
            elapsed_ms=round((time.perf_counter() - started) * 1000),
        )

        try:
            raw_payload = parse_llm_output(raw_response)
        except LLMOutputFormatError as exc:
            logger.error(
                "Analysis response could not be decoded at stage '%s': %s\nRaw response: %s",
                exc.stage,
                "; ".join(exc.errors),
                preview_text(exc.raw_response),
            )
            raise AnalysisFormatError(
                FORMAT_USER_MESSAGE,
                stage=exc.stage,
                errors=exc.errors,
                raw_response=exc.raw_response,
            ) from exc

        try:
            payload = validate_payload(raw_payload)
        except PayloadValidationError as exc:
            logger.error(
                "Analysis payload rejected: %s",
                exc.message,
                extra={"issues": [issue.code for issue in exc.issues]},
            )
            raise AnalysisSchemaError(SCHEMA_USER_MESSAGE, validation_error=exc) from exc

        log_event(
            logger,
            logging.INFO,
            "analysis_completed",
            widgets=len(payload.widgets),
            kpis=len(payload.kpis),
            insights=len(payload.insights),
        )
        return payload


def analyze(csv_text: str) -> DashboardPayload:
    """
    Analyze ``csv_text`` with the adapter configured in the environment.
    """

    return AnalysisGateway(build_adapter()).analyze(csv_text)
