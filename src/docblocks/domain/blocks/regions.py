"""Region marker parser: find identifier-tagged regions in one document."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from .errors import DuplicateIdInFileError, RegionIdMismatchError, UnterminatedRegionError
from .value_objects import DocRegion, MarkerSyntax, RegionSpan, split_lines


def parse_regions(text: str, syntax: MarkerSyntax, *, path: Path) -> List[DocRegion]:
    """Return the regions of ``text`` in document order."""

    pattern = syntax.region
    lines = split_lines(text, keepends=True)
    regions: List[DocRegion] = []
    seen: Dict[str, int] = {}

    open_id: str | None = None
    open_index = 0

    for index, raw in enumerate(lines):
        line = raw.rstrip("\r\n")
        if open_id is None:
            region_id = pattern.match_start(line)
            if region_id is None:
                continue
            if region_id in seen:
                raise DuplicateIdInFileError(region_id, path=path, line=index + 1, first_line=seen[region_id])
            open_id, open_index = region_id, index
            continue

        closing = pattern.match_end(line)
        if closing is None and not pattern.symmetric:
            stray = pattern.match_start(line)
            if stray is not None:
                raise RegionIdMismatchError(
                    f"region '{stray}' opens before region '{open_id}' (line {open_index + 1}) is closed",
                    path=path,
                    line=index + 1,
                )
        if closing is None:
            continue
        if closing != open_id:
            raise RegionIdMismatchError(
                f"region '{open_id}' (line {open_index + 1}) closed by marker '{closing}'",
                path=path,
                line=index + 1,
            )
        opener = lines[open_index]
        regions.append(
            DocRegion(
                id=open_id,
                path=path,
                span=RegionSpan(start=open_index + 1, end=index),
                existing_content="".join(lines[open_index + 1 : index]),
                open_line=open_index + 1,
                close_line=index + 1,
                newline="\r\n" if opener.endswith("\r\n") else "\n",
            )
        )
        seen[open_id] = open_index + 1
        open_id = None

    if open_id is not None:
        raise UnterminatedRegionError(
            f"region '{open_id}' is never closed",
            path=path,
            line=open_index + 1,
        )
    return regions
