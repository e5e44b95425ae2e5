"""Substitution engine: rewrite or diff documentation regions atomically."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from .errors import BlockSyncError, SourceIOError
from .events import DocumentReport, RegionOutcome, RegionStatus
from .regions import parse_regions
from .value_objects import DocRegion, MarkerSyntax, SourceBlock, normalize_block, split_lines

logger = logging.getLogger(__name__)

BOM = "\ufeff"


@dataclass(frozen=True)
class SubstitutionResult:
    text: str
    outcomes: List[RegionOutcome]

    @property
    def resolved(self) -> bool:
        return all(outcome.status is not RegionStatus.UNKNOWN_ID for outcome in self.outcomes)


def substitute(
    text: str,
    regions: Sequence[DocRegion],
    registry: Mapping[str, SourceBlock],
    *,
    check: bool = False,
) -> SubstitutionResult:
    """Compute the rewritten document and one outcome per region.

    ``text`` in the result is the candidate document; callers must not persist
    it unless ``resolved`` is true.
    """

    lines = split_lines(text, keepends=True)
    pieces: List[str] = []
    outcomes: List[RegionOutcome] = []
    cursor = 0

    for region in sorted(regions, key=lambda item: item.span.start):
        block = registry.get(region.id)
        if block is None:
            outcomes.append(
                RegionOutcome(id=region.id, path=region.path, line=region.open_line, status=RegionStatus.UNKNOWN_ID)
            )
            continue
        current = normalize_block(region.existing_content)
        if current == block.content:
            outcomes.append(
                RegionOutcome(id=region.id, path=region.path, line=region.open_line, status=RegionStatus.UNCHANGED)
            )
            continue
        outcomes.append(
            RegionOutcome(
                id=region.id,
                path=region.path,
                line=region.open_line,
                status=RegionStatus.WOULD_CHANGE if check else RegionStatus.REPLACED,
                expected=block.content,
                actual=current,
            )
        )
        pieces.extend(lines[cursor : region.span.start])
        pieces.append(_interior(block.content, region.newline))
        cursor = region.span.end

    pieces.extend(lines[cursor:])
    return SubstitutionResult(text="".join(pieces), outcomes=outcomes)


class SubstitutionEngine:
    """Applies the registry to documentation files, one file at a time."""

    def process(
        self,
        path: Path,
        registry: Mapping[str, SourceBlock],
        syntax: MarkerSyntax,
        *,
        check: bool = False,
    ) -> Optional[DocumentReport]:
        """Return the report for ``path`` or None when it is not a text file."""

        try:
            text = read_text_file(path)
        except SourceIOError as exc:
            return DocumentReport(path=path, error=exc)
        if text is None:
            return None
        bom, text = split_bom(text)
        try:
            regions = parse_regions(text, syntax, path=path)
        except BlockSyncError as exc:
            logger.error("%s", exc)
            return DocumentReport(path=path, error=exc)
        if not regions:
            return None

        result = substitute(text, regions, registry, check=check)
        outcomes = tuple(result.outcomes)
        if check or result.text == text:
            return DocumentReport(path=path, outcomes=outcomes)
        if not result.resolved:
            logger.warning("%s: unresolved regions, document left untouched", path)
            return DocumentReport(path=path, outcomes=tuple(_skipped(outcome) for outcome in outcomes))
        try:
            atomic_write(path, bom + result.text)
        except OSError as exc:
            error = SourceIOError(f"could not write document: {exc}", path=path)
            return DocumentReport(path=path, outcomes=outcomes, error=error)
        logger.info("%s: rewritten", path)
        return DocumentReport(path=path, outcomes=outcomes, written=True)


def read_text_file(path: Path) -> Optional[str]:
    """Read ``path`` byte-exactly as UTF-8; None means the file is binary."""

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise SourceIOError(f"could not read file: {exc}", path=path) from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("%s: not UTF-8 text, skipped", path)
        return None


def split_bom(text: str) -> Tuple[str, str]:
    """Return ``(bom, rest)``; markers never see a leading byte-order mark."""

    if text.startswith(BOM):
        return BOM, text[len(BOM) :]
    return "", text


def _skipped(outcome: RegionOutcome) -> RegionOutcome:
    if outcome.status is not RegionStatus.REPLACED:
        return outcome
    return replace(outcome, status=RegionStatus.SKIPPED)


def atomic_write(path: Path, data: str) -> None:
    fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data.encode("utf-8", errors="surrogatepass"))
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def _interior(content: str, newline: str) -> str:
    if not content:
        return ""
    return newline.join(content.split("\n")) + newline


ENGINE = SubstitutionEngine()
