"""Decoding layer for raw LLM analysis output.

Strips markdown fences and parses the remaining text as a JSON object.
Schema validation is left to ``dashboard.validator``.
"""

import json
import re
from typing import Any, Dict, List

_FENCE_PATTERN = re.compile(r"```(?:json)?")


class LLMOutputFormatError(Exception):
    """Raised when LLM output cannot be decoded into a JSON object.

    Attributes:
        stage: Which decoding step failed ("empty_response", "json_parse"
            or "json_shape").
        errors: List of human-readable error descriptions.
        raw_response: The original string that failed decoding.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: str,
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        message = (
            f"LLM output decoding failed at stage '{stage}': "
            + "; ".join(errors)
        )
        super().__init__(message)


def _strip_markdown_fences(text: str) -> str:
    """Remove every ```json and ``` delimiter from the response.

    Models sometimes wrap output in fences despite a JSON response format,
    occasionally with prose before or after. All delimiters are removed, not
    only a single leading/trailing pair.

    Args:
        text: Raw LLM response string.

    Returns:
        The text with all fence markers removed and outer whitespace trimmed.
    """
    return _FENCE_PATTERN.sub("", text).strip()


def parse_llm_output(raw_response: str) -> Dict[str, Any]:
    """Decode a raw LLM response string into a JSON object.

    Steps:
        1. Reject empty or whitespace-only responses.
        2. Strip markdown fences.
        3. Parse as JSON.
        4. Require a top-level object.

    Raises:
        LLMOutputFormatError: If any step fails.
    """
    if raw_response is None or not raw_response.strip():
        raise LLMOutputFormatError(
            stage="empty_response",
            errors=["model returned no content"],
            raw_response=raw_response or "",
        )

    cleaned = _strip_markdown_fences(raw_response)

    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as exc:
        raise LLMOutputFormatError(
            stage="json_parse",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc

    if not isinstance(data, dict):
        raise LLMOutputFormatError(
            stage="json_shape",
            errors=[f"top-level JSON must be an object, got {type(data).__name__}"],
            raw_response=raw_response,
        )

    return data
