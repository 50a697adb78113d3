"""
app/services/analysis_session.py

Upload -> preview -> dashboard flow for one interactive session.
"""

from __future__ import annotations

import logging
from typing import Protocol

from app.validators.upload_validator import InvalidFileError, validate_upload
from dashboard.schema import DashboardPayload
from dashboard.store import DashboardStore
from llm_analysis.gateway import AnalysisError

logger = logging.getLogger(__name__)

STEP_UPLOAD = "upload"
STEP_PREVIEW = "preview"
STEP_DASHBOARD = "dashboard"


class SupportsAnalyze(Protocol):
    def analyze(self, csv_text: str) -> DashboardPayload: ...


class AnalysisSession:
    """
    Owns the current step, the cached CSV text and the dashboard store.

    ``loading`` is the only concurrency guard: a confirmation while a request
    is in flight is refused, not queued. After a failure the CSV text stays
    cached so confirming again retries with the same input.
    """

    def __init__(self, gateway: SupportsAnalyze, store: DashboardStore | None = None) -> None:
        self._gateway = gateway
        self.store = store or DashboardStore()
        self.step = STEP_UPLOAD
        self.csv_text: str | None = None
        self.file_name: str | None = None
        self.loading = False
        self.error: str | None = None

    def select_file(self, filename: str | None, content_type: str | None, data: bytes) -> bool:
        """
        Validate an upload and move to the preview step.

        Returns False, with ``error`` set, when the file is rejected.
        """

        try:
            text = validate_upload(filename, content_type, data)
        except InvalidFileError as exc:
            logger.warning("Rejected upload filename=%r: %s", filename, exc.message)
            self.error = exc.message
            return False

        self.csv_text = text
        self.file_name = filename
        self.error = None
        self.store.clear()
        self.step = STEP_PREVIEW
        logger.info("Loaded file filename=%r chars=%d", filename, len(text))
        return True

    def cancel_preview(self) -> None:
        self.csv_text = None
        self.file_name = None
        self.error = None
        self.step = STEP_UPLOAD

    def confirm_analysis(self) -> bool:
        """
        Send the cached CSV text for analysis.

        Returns True when a dashboard was loaded. Returns False when the call
        was refused (already loading, nothing to analyze) or failed; failures
        leave the step unchanged and set ``error``.
        """

        if self.loading:
            logger.info("Ignoring analysis request while another is in flight")
            return False
        if not self.csv_text:
            return False

        self.loading = True
        self.error = None
        try:
            payload = self._gateway.analyze(self.csv_text)
        except AnalysisError as exc:
            logger.warning("Analysis failed at stage '%s': %s", exc.stage, exc.user_message)
            self.error = exc.user_message
            return False
        finally:
            self.loading = False

        self.store.load(payload)
        self.step = STEP_DASHBOARD
        return True

    def dismiss_error(self) -> None:
        self.error = None

    def reset(self) -> None:
        """
        Discard the file, the dashboard and any error; back to upload.
        """

        self.store.clear()
        self.csv_text = None
        self.file_name = None
        self.error = None
        self.loading = False
        self.step = STEP_UPLOAD
