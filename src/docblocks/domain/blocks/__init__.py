"""Domain primitives for block extraction and region substitution."""

from __future__ import annotations

from .registry import BlockRegistry
from .value_objects import DocRegion, MarkerSyntax, Origin, SourceBlock

__all__ = [
    "BlockRegistry",
    "DocRegion",
    "MarkerSyntax",
    "Origin",
    "SourceBlock",
]
