"""Conflict-checked registry of source blocks."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List

from .errors import DuplicateIdAcrossFilesError, DuplicateIdInFileError
from .value_objects import SourceBlock


class BlockRegistry(Mapping):
    """Read-only ``id -> SourceBlock`` mapping for one run."""

    def __init__(self, blocks: Mapping[str, SourceBlock] | None = None) -> None:
        self._blocks = MappingProxyType(dict(blocks or {}))

    @classmethod
    def merge(cls, blocks: Iterable[SourceBlock]) -> "BlockRegistry":
        """Fold parsed blocks into a registry, failing on the second use of an id.

        Blocks are ordered by origin before insertion so the reported
        conflict never depends on file traversal order.
        """

        ordered = sorted(blocks, key=lambda block: (block.origin.path.as_posix(), block.origin.start_line))
        entries: Dict[str, SourceBlock] = {}
        for block in ordered:
            first = entries.get(block.id)
            if first is None:
                entries[block.id] = block
                continue
            if first.origin.path == block.origin.path:
                raise DuplicateIdInFileError(
                    block.id,
                    path=block.origin.path,
                    line=block.origin.start_line,
                    first_line=first.origin.start_line,
                )
            raise DuplicateIdAcrossFilesError(block.id, first.origin, block.origin)
        return cls(entries)

    def __getitem__(self, block_id: str) -> SourceBlock:
        return self._blocks[block_id]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._blocks))

    def __len__(self) -> int:
        return len(self._blocks)

    def blocks(self) -> List[SourceBlock]:
        return [self._blocks[block_id] for block_id in self]

    def __repr__(self) -> str:
        return f"BlockRegistry({sorted(self._blocks)!r})"


__all__ = ["BlockRegistry"]
