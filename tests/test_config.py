from __future__ import annotations

import os

import pytest

from app import config


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch):
    for name in (
        "LLM_ADAPTER",
        "LLM_MODEL",
        "LLM_API_KEY",
        "OPENAI_API_KEY",
        "LLM_BASE_URL",
        "LLM_MAX_TOKENS",
        "LLM_TEMPERATURE",
        "LLM_TIMEOUT_SECONDS",
        "UPLOAD_PREVIEW_ROWS",
        "UPLOAD_MAX_SAMPLE_VALUES",
    ):
        monkeypatch.delenv(name, raising=False)
    config.get_llm_settings.cache_clear()
    config.get_upload_settings.cache_clear()
    yield
    config.get_llm_settings.cache_clear()
    config.get_upload_settings.cache_clear()


def test_llm_defaults() -> None:
    settings = config.get_llm_settings()

    assert settings.adapter == "openai"
    assert settings.model == "gpt-4o-mini"
    assert settings.max_tokens == 8192
    assert settings.temperature == pytest.approx(0.2)
    assert settings.timeout_seconds == pytest.approx(120.0)
    assert settings.api_key is None


def test_llm_overrides_and_clamping(monkeypatch) -> None:
    monkeypatch.setenv("LLM_ADAPTER", " MOCK ")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_TEMPERATURE", "5")
    monkeypatch.setenv("LLM_MAX_TOKENS", "not-a-number")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "0")

    settings = config.get_llm_settings()

    assert settings.adapter == "mock"
    assert settings.api_key == "sk-test"
    assert settings.temperature == 2.0
    assert settings.max_tokens == 8192
    assert settings.timeout_seconds == 1.0


def test_unknown_adapter_raises(monkeypatch) -> None:
    monkeypatch.setenv("LLM_ADAPTER", "gemini")

    with pytest.raises(RuntimeError, match="LLM_ADAPTER"):
        config.get_llm_settings()


def test_upload_settings(monkeypatch) -> None:
    monkeypatch.setenv("UPLOAD_PREVIEW_ROWS", "10")

    settings = config.get_upload_settings()

    assert settings.preview_rows == 10
    assert settings.max_sample_values == 3


def test_load_env_files_keeps_process_values(tmp_path, monkeypatch) -> None:
    (tmp_path / ".env").write_text(
        "# comment\n"
        "LLM_MODEL=gpt-from-env\n"
        "export LLM_BASE_URL='http://localhost:8000'\n"
        "LLM_API_KEY=\"from-file\"\n"
        "not a pair\n",
        encoding="utf-8",
    )
    (tmp_path / ".env.local").write_text("LLM_MODEL=gpt-from-local\n", encoding="utf-8")
    monkeypatch.setenv("LLM_API_KEY", "from-process")
    for name in ("LLM_MODEL", "LLM_BASE_URL"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)

    config.load_env_files(tmp_path)

    assert os.environ["LLM_MODEL"] == "gpt-from-env"
    assert os.environ["LLM_BASE_URL"] == "http://localhost:8000"
    assert os.environ["LLM_API_KEY"] == "from-process"


def test_blank_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("LLM_MODEL", "   ")
    monkeypatch.setenv("LLM_API_KEY", "")
    monkeypatch.setenv("UPLOAD_PREVIEW_ROWS", " ")

    assert config.get_llm_settings().model == "gpt-4o-mini"
    assert config.get_llm_settings().api_key is None
    assert config.get_upload_settings().preview_rows == 5
