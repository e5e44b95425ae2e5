"""Application service orchestrating block collection and region replacement."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from docblocks.app.sync.walker import iter_candidate_files
from docblocks.domain.blocks.editor import ENGINE, read_text_file, split_bom
from docblocks.domain.blocks.errors import BlockSyncError, DriftDetectedError, SourceIOError, UnknownIdError
from docblocks.domain.blocks.events import DocumentReport, RegionOutcome, RegionStatus
from docblocks.domain.blocks.parser import parse_blocks
from docblocks.domain.blocks.registry import BlockRegistry
from docblocks.domain.blocks.value_objects import SourceBlock
from docblocks.utils.config import SyncConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SourceScan:
    path: Path
    blocks: Tuple[SourceBlock, ...] = ()
    error: Optional[BlockSyncError] = None


@dataclass(frozen=True)
class CollectResult:
    """Registry built from a source tree plus every per-file error met on the way."""

    registry: BlockRegistry
    errors: Tuple[BlockSyncError, ...]
    files_scanned: int

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class SyncReport:
    """Aggregated outcome of a replace (or check) run."""

    check: bool
    documents: Tuple[DocumentReport, ...] = ()
    source_errors: Tuple[BlockSyncError, ...] = ()

    @property
    def failed(self) -> bool:
        return bool(self.source_errors) or any(document.failed for document in self.documents)

    @property
    def outcomes(self) -> List[RegionOutcome]:
        return [outcome for document in self.documents for outcome in document.outcomes]

    @property
    def errors(self) -> List[BlockSyncError]:
        errors = list(self.source_errors)
        errors.extend(document.error for document in self.documents if document.error is not None)
        errors.extend(
            UnknownIdError(outcome.id, path=outcome.path, line=outcome.line)
            for outcome in self.outcomes
            if outcome.status is RegionStatus.UNKNOWN_ID
        )
        drifted = [outcome for outcome in self.outcomes if outcome.status is RegionStatus.WOULD_CHANGE]
        if self.check and drifted:
            errors.append(
                DriftDetectedError(f"{len(drifted)} region(s) out of sync with their source blocks")
            )
        return errors

    def summary(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in RegionStatus}
        for outcome in self.outcomes:
            counts[outcome.status.value] += 1
        counts["documents"] = len(self.documents)
        counts["written"] = sum(1 for document in self.documents if document.written)
        return counts

    def as_dict(self) -> Dict[str, object]:
        return {
            "mode": "check" if self.check else "replace",
            "status": "error" if self.failed else "ok",
            "summary": self.summary(),
            "documents": [document.as_dict() for document in self.documents],
            "errors": [error.as_dict() for error in self.errors],
        }


class BlockSyncService:
    """High-level API behind the ``collect`` and ``replace`` commands."""

    def __init__(self, config: SyncConfig | None = None, *, jobs: int | None = None) -> None:
        self._config = config or SyncConfig.default()
        self._jobs = max(1, jobs or self._config.jobs or 1)

    @property
    def config(self) -> SyncConfig:
        return self._config

    def collect(self, root: Path) -> CollectResult:
        """Scan ``root`` for blocks and merge them into a registry.

        Per-file errors are collected; identifier conflicts between files
        raise ``DuplicateIdAcrossFilesError`` since no registry can be built.
        """

        files = iter_candidate_files(root, self._config.filters)
        scans = self._run_parallel(self._scan_source, files)
        errors = tuple(scan.error for scan in scans if scan.error is not None)
        blocks = [block for scan in scans for block in scan.blocks]
        registry = BlockRegistry.merge(blocks)
        logger.info("collected %d block(s) from %d file(s) under %s", len(registry), len(files), root)
        return CollectResult(registry=registry, errors=errors, files_scanned=len(files))

    def replace(self, collect_root: Path, doc_root: Path, *, check: bool = False) -> SyncReport:
        """Substitute registry content into regions under ``doc_root``.

        Source-side errors abort before any document is touched.
        """

        collected = self.collect(collect_root)
        if not collected.ok:
            return SyncReport(check=check, source_errors=collected.errors)
        if not collected.registry:
            logger.warning("no source blocks found under %s", collect_root)

        registry = collected.registry
        syntax = self._config.syntax
        documents = iter_candidate_files(doc_root, self._config.filters)
        reports = self._run_parallel(
            lambda path: ENGINE.process(path, registry, syntax, check=check),
            documents,
        )
        processed = tuple(report for report in reports if report is not None)
        if not processed:
            logger.warning("no documentation regions found under %s", doc_root)
        return SyncReport(check=check, documents=processed)

    def _scan_source(self, path: Path) -> SourceScan:
        try:
            text = read_text_file(path)
        except SourceIOError as exc:
            logger.error("%s", exc)
            return SourceScan(path=path, error=exc)
        if text is None:
            return SourceScan(path=path)
        _, text = split_bom(text)
        try:
            blocks = parse_blocks(text, self._config.syntax, path=path)
        except BlockSyncError as exc:
            logger.error("%s", exc)
            return SourceScan(path=path, error=exc)
        return SourceScan(path=path, blocks=tuple(blocks))

    def _run_parallel(self, func: Callable[[Path], T], paths: Sequence[Path]) -> List[T]:
        """Apply ``func`` to every path on the pool; results come back in path order."""

        if not paths:
            return []
        results: Dict[Path, T] = {}
        with ThreadPoolExecutor(max_workers=min(self._jobs, len(paths))) as executor:
            futures = {executor.submit(func, path): path for path in paths}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        return [results[path] for path in sorted(results)]


__all__ = ["BlockSyncService", "CollectResult", "SourceScan", "SyncReport"]
