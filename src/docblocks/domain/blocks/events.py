"""Outcomes emitted while substituting documentation regions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

from .errors import BlockSyncError


class RegionStatus(str, Enum):
    UNCHANGED = "unchanged"
    REPLACED = "replaced"
    WOULD_CHANGE = "would_change"
    UNKNOWN_ID = "unknown_id"
    SKIPPED = "skipped"


FAILED_STATUSES = frozenset({RegionStatus.WOULD_CHANGE, RegionStatus.UNKNOWN_ID})


@dataclass(frozen=True)
class RegionOutcome:
    """Result of comparing one region with its source block."""

    id: str
    path: Path
    line: int
    status: RegionStatus
    expected: Optional[str] = None
    actual: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status in FAILED_STATUSES

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "id": self.id,
            "path": str(self.path),
            "line": self.line,
            "status": self.status.value,
        }
        if self.expected is not None:
            payload["expected"] = self.expected
        if self.actual is not None:
            payload["actual"] = self.actual
        return payload


@dataclass(frozen=True)
class DocumentReport:
    """Everything that happened to one documentation file."""

    path: Path
    outcomes: Tuple[RegionOutcome, ...] = ()
    error: Optional[BlockSyncError] = None
    written: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None or any(outcome.failed for outcome in self.outcomes)

    def as_dict(self) -> Dict[str, object]:
        return {
            "path": str(self.path),
            "written": self.written,
            "failed": self.failed,
            "regions": [outcome.as_dict() for outcome in self.outcomes],
            "error": self.error.as_dict() if self.error is not None else None,
        }
