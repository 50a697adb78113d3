"""
Structured logging helpers for the analysis workflow.

Model responses can be large; diagnostic lines carry a bounded preview of the
raw text plus its full length instead of the whole body.
"""

from __future__ import annotations

import json
import logging
from typing import Any

RAW_PREVIEW_CHARS = 2000


def preview_text(text: str | None, limit: int = RAW_PREVIEW_CHARS) -> str:
    """
    Return at most ``limit`` characters of ``text`` with a truncation marker.
    """

    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... [truncated {len(text) - limit} chars]"


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
