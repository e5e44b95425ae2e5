"""Block marker parser: find identifier-tagged blocks in one source file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Sequence

from .errors import DuplicateIdInFileError, NestedBlockError, UnterminatedBlockError
from .value_objects import BlockPattern, MarkerSyntax, Origin, SourceBlock, extract_id, split_lines

logger = logging.getLogger(__name__)


def parse_blocks(text: str, syntax: MarkerSyntax, *, path: Path) -> List[SourceBlock]:
    """Return the blocks declared in ``text`` ordered by start line.

    Every configured pattern is scanned on its own, so blocks of different
    patterns may overlap. Identifiers must still be unique within the file.
    """

    lines = split_lines(text)
    blocks: List[SourceBlock] = []
    for pattern in syntax.block_patterns:
        blocks.extend(_scan(lines, pattern, path))
    blocks.sort(key=lambda block: block.origin.start_line)

    seen: Dict[str, SourceBlock] = {}
    for block in blocks:
        first = seen.get(block.id)
        if first is not None:
            raise DuplicateIdInFileError(
                block.id,
                path=path,
                line=block.origin.start_line,
                first_line=first.origin.start_line,
            )
        seen[block.id] = block
    return blocks


def _scan(lines: Sequence[str], pattern: BlockPattern, path: Path) -> Iterator[SourceBlock]:
    open_id: str | None = None
    open_line = 0
    body: List[str] = []

    for number, line in enumerate(lines, start=1):
        if pattern.is_start(line):
            block_id = extract_id(line)
            if block_id is None:
                logger.warning("%s:%d: start marker without <id:...> token, treated as text", path, number)
            elif open_id is not None:
                raise NestedBlockError(
                    f"block '{block_id}' starts before block '{open_id}' (line {open_line}) is closed",
                    path=path,
                    line=number,
                )
            else:
                open_id, open_line, body = block_id, number, []
                continue

        if pattern.is_end(line):
            if open_id is not None:
                yield SourceBlock(
                    id=open_id,
                    content=pattern.render(body),
                    origin=Origin(path=path, start_line=open_line, end_line=number),
                )
                open_id = None
                continue
            logger.debug("%s:%d: end marker without an open block ignored", path, number)

        if open_id is not None:
            body.append(line)

    if open_id is not None:
        raise UnterminatedBlockError(
            f"block '{open_id}' has no end marker",
            path=path,
            line=open_line,
        )
