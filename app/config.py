"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Callable, TypeVar

_ALLOWED_LLM_ADAPTERS = {"openai", "mock"}
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_FILES = (".env", ".env.local")

T = TypeVar("T", int, float)


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    """
    Split one `KEY=VALUE` line; comments, blanks and malformed lines give None.
    """

    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = (part.strip() for part in line.split("=", 1))
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return (key, value) if key else None


def load_env_files(root: Path = _PROJECT_ROOT) -> None:
    """
    Copy `.env` then `.env.local` entries from ``root`` into the environment.

    Variables already set in the process win over both files.
    """

    for filename in _ENV_FILES:
        env_path = root / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            entry = _parse_env_line(raw_line)
            if entry is not None:
                os.environ.setdefault(*entry)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _env_text(name: str) -> str | None:
    """
    Stripped value of ``name``; unset and blank both read as None.
    """

    _load_env_once()
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_number(name: str, cast: Callable[[str], T], default: T) -> T:
    """
    Parse ``name`` with ``cast``; unset or unparsable values give ``default``.
    """

    raw_value = _env_text(name)
    if raw_value is None:
        return default
    try:
        return cast(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class LLMSettings:
    """
    Settings for the dashboard analysis model call.
    """

    adapter: str = "openai"
    model: str = "gpt-4o-mini"
    api_key: str | None = None
    base_url: str | None = None
    max_tokens: int = 8192
    temperature: float = 0.2
    timeout_seconds: float = 120.0


@dataclass(frozen=True)
class UploadSettings:
    """
    Settings for the CSV preview step.
    """

    preview_rows: int = 5
    max_sample_values: int = 3


def _resolve_adapter_name() -> str:
    adapter = (_env_text("LLM_ADAPTER") or "openai").lower()
    if adapter not in _ALLOWED_LLM_ADAPTERS:
        raise RuntimeError(
            f"LLM_ADAPTER '{adapter}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_LLM_ADAPTERS)}."
        )
    return adapter


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return cached LLM settings from environment variables.

    Raises RuntimeError if LLM_ADAPTER names an unknown adapter.
    """

    return LLMSettings(
        adapter=_resolve_adapter_name(),
        model=_env_text("LLM_MODEL") or "gpt-4o-mini",
        api_key=_env_text("LLM_API_KEY") or _env_text("OPENAI_API_KEY"),
        base_url=_env_text("LLM_BASE_URL"),
        max_tokens=max(1, _env_number("LLM_MAX_TOKENS", int, 8192)),
        temperature=min(2.0, max(0.0, _env_number("LLM_TEMPERATURE", float, 0.2))),
        timeout_seconds=max(1.0, _env_number("LLM_TIMEOUT_SECONDS", float, 120.0)),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached CSV preview settings from environment variables.
    """

    return UploadSettings(
        preview_rows=max(1, _env_number("UPLOAD_PREVIEW_ROWS", int, 5)),
        max_sample_values=max(1, _env_number("UPLOAD_MAX_SAMPLE_VALUES", int, 3)),
    )
