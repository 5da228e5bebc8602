"""Tests for settings models and cached loaders."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from dynamic_query.core.settings import (
    LoggingSettings,
    PaginationSettings,
    clear_settings_cache,
    get_logging_settings,
    get_pagination_settings,
)


def test_pagination_defaults() -> None:
    settings = PaginationSettings()

    assert settings.default_page_size == 20
    assert settings.max_page_size == 100
    assert settings.include_total is False
    assert settings.null_safe_sort is True


def test_pagination_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PAGINATION_MAX_PAGE_SIZE", "500")
    monkeypatch.setenv("PAGINATION_INCLUDE_TOTAL", "true")

    settings = PaginationSettings()

    assert settings.max_page_size == 500
    assert settings.include_total is True


def test_default_cannot_exceed_max() -> None:
    with pytest.raises(ValidationError, match="default_page_size"):
        PaginationSettings(default_page_size=50, max_page_size=10)


def test_settings_are_frozen() -> None:
    settings = PaginationSettings()

    with pytest.raises(ValidationError):
        settings.max_page_size = 5


def test_loader_caches_until_cleared(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_pagination_settings()
    assert get_pagination_settings() is first

    monkeypatch.setenv("PAGINATION_DEFAULT_PAGE_SIZE", "7")
    assert get_pagination_settings().default_page_size == 20

    clear_settings_cache()
    assert get_pagination_settings().default_page_size == 7


def test_log_level_normalized(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_JSON_FORMAT", "false")
    clear_settings_cache()

    settings = get_logging_settings()

    assert settings.level == "DEBUG"
    assert settings.json_format is False


def test_invalid_log_level() -> None:
    with pytest.raises(ValidationError):
        LoggingSettings(level="LOUD")
