"""Rendering of collected blocks to stdout or files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, TextIO

import yaml

from docblocks.domain.blocks.errors import SourceIOError
from docblocks.domain.blocks.registry import BlockRegistry
from docblocks.domain.blocks.value_objects import SourceBlock

DEFAULT_FILE_NAME = "docblocks"
FORMATS = ("json", "yaml")


def render_registry(registry: BlockRegistry, fmt: str) -> str:
    """Serialise every block (id, content, origin) as JSON or YAML."""

    payload = [block.as_dict() for block in registry.blocks()]
    if fmt == "json":
        return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported output format '{fmt}'")


def export_registry(
    registry: BlockRegistry,
    *,
    fmt: Optional[str],
    output: Optional[Path],
    stream: TextIO,
) -> List[Path]:
    """Write the registry where the CLI asked; returns the files written.

    Without a format only block contents are exported: printed to ``stream``
    or, with ``output``, stored as one file per identifier under that folder.
    """

    written: List[Path] = []
    if fmt is None:
        if output is None:
            stream.write("\n\n".join(block.content for block in registry.blocks()) + "\n")
            return written
        targets = [(block, _block_target(output, block)) for block in registry.blocks()]
        for block, target in targets:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(block.content + "\n", encoding="utf-8")
            written.append(target)
        return written

    content = render_registry(registry, fmt)
    if output is None:
        stream.write(content)
        return written
    target = output if output.suffix else (output / DEFAULT_FILE_NAME).with_suffix(f".{fmt}")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    written.append(target)
    return written


def _block_target(output: Path, block: SourceBlock) -> Path:
    """Map a block id to a file directly under ``output``."""

    name = block.id
    if name in (".", "..") or "/" in name or "\\" in name or Path(name).is_absolute():
        raise SourceIOError(
            f"block identifier '{name}' cannot be used as a file name under {output}",
            path=block.origin.path,
            line=block.origin.start_line,
        )
    return output / name


__all__ = ["DEFAULT_FILE_NAME", "FORMATS", "export_registry", "render_registry"]
