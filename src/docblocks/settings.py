"""Runtime settings for docblocks read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from docblocks import __version__

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class RuntimeSettings:
    jobs: int
    log_level: str = DEFAULT_LOG_LEVEL
    cli_version: str = __version__


def _default_jobs() -> int:
    raw = os.environ.get("DOCBLOCKS_JOBS", "").strip()
    if raw.isdigit() and int(raw) > 0:
        return int(raw)
    return os.cpu_count() or 1


def _default_log_level() -> str:
    value = os.environ.get("DOCBLOCKS_LOG_LEVEL", "").strip().upper()
    return value if value in LOG_LEVELS else DEFAULT_LOG_LEVEL


def load_settings() -> RuntimeSettings:
    return RuntimeSettings(jobs=_default_jobs(), log_level=_default_log_level())
