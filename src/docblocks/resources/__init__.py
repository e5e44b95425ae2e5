"""Packaged resources for docblocks."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

__all__ = ["CONFIG_SCHEMA_RESOURCE", "load_config_schema"]

CONFIG_SCHEMA_RESOURCE = "config.schema.json"


@lru_cache(maxsize=1)
def load_config_schema() -> Dict[str, Any]:
    """Return the JSON schema describing the YAML configuration file."""

    resource = resources.files(__name__) / CONFIG_SCHEMA_RESOURCE
    return json.loads(resource.read_text(encoding="utf-8"))
