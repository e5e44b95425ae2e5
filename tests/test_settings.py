from __future__ import annotations

import os

import pytest

from docblocks import __version__
from docblocks.settings import DEFAULT_LOG_LEVEL, load_settings


def test_defaults_follow_cpu_count() -> None:
    settings = load_settings()

    assert settings.jobs == (os.cpu_count() or 1)
    assert settings.log_level == DEFAULT_LOG_LEVEL
    assert settings.cli_version == __version__


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCBLOCKS_JOBS", "7")
    monkeypatch.setenv("DOCBLOCKS_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.jobs == 7
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("jobs", ["0", "-2", "many"])
def test_invalid_values_fall_back(monkeypatch: pytest.MonkeyPatch, jobs: str) -> None:
    monkeypatch.setenv("DOCBLOCKS_JOBS", jobs)
    monkeypatch.setenv("DOCBLOCKS_LOG_LEVEL", "chatty")

    settings = load_settings()

    assert settings.jobs == (os.cpu_count() or 1)
    assert settings.log_level == DEFAULT_LOG_LEVEL
