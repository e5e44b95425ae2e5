"""Configuration loading: YAML file, JSON schema validation, value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import jsonschema
import yaml

from docblocks.domain.blocks.errors import SyncConfigError
from docblocks.domain.blocks.value_objects import MarkerSyntax
from docblocks.resources import load_config_schema

DEFAULT_VERSION = 1


@dataclass(frozen=True)
class CollectorFilters:
    """Glob patterns matched against POSIX paths relative to the walk root."""

    includes: Tuple[str, ...] = ()
    excludes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SyncConfig:
    """Aggregate value object describing one run's configuration."""

    version: int = DEFAULT_VERSION
    filters: CollectorFilters = field(default_factory=CollectorFilters)
    syntax: MarkerSyntax = field(default_factory=MarkerSyntax.default)
    jobs: Optional[int] = None

    @classmethod
    def default(cls) -> "SyncConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, config_path: Path) -> "SyncConfig":
        """Build config from a raw mapping already validated against the schema."""

        if not isinstance(data, Mapping):
            raise SyncConfigError(f"Configuration in {config_path} must be a mapping")
        version = int(data.get("version", DEFAULT_VERSION))
        if version != DEFAULT_VERSION:
            raise SyncConfigError(f"Unsupported config version {version} in {config_path}")

        collector = data.get("collector") or {}
        filters = CollectorFilters(
            includes=tuple(collector.get("includes") or ()),
            excludes=tuple(collector.get("excludes") or ()),
        )
        syntax = MarkerSyntax.from_dict(data.get("parser"), data.get("regions"))
        jobs = data.get("jobs")
        return cls(version=version, filters=filters, syntax=syntax, jobs=int(jobs) if jobs is not None else None)


def load_config(path: Path | None) -> SyncConfig:
    """Load configuration from disk, or return the defaults when no path is given."""

    if path is None:
        return SyncConfig.default()
    config_path = path.expanduser().resolve()
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SyncConfigError(f"could not read config file {config_path}: {exc}") from exc
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise SyncConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    errors = validate_config(raw)
    if errors:
        details = "; ".join(f"{'/'.join(map(str, item['path'])) or '<root>'}: {item['message']}" for item in errors)
        raise SyncConfigError(f"Invalid configuration in {config_path}: {details}")
    return SyncConfig.from_dict(raw, config_path=config_path)


def validate_config(raw: Any) -> List[Dict[str, Any]]:
    """Return schema violations for a raw configuration mapping."""

    validator = jsonschema.Draft202012Validator(load_config_schema())
    errors: List[Dict[str, Any]] = []
    for error in sorted(validator.iter_errors(raw), key=lambda e: list(map(str, e.path))):
        errors.append(
            {
                "code": "CONFIG_SCHEMA_VIOLATION",
                "message": error.message,
                "path": list(error.path),
            }
        )
    return errors


__all__ = ["CollectorFilters", "SyncConfig", "load_config", "validate_config"]
