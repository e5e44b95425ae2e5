"""Error taxonomy for block extraction and region substitution."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional

from .constants import remediation_for

if TYPE_CHECKING:  # pragma: no cover
    from .value_objects import Origin


class BlockSyncError(RuntimeError):
    """Base class for every error attributed to a file (and optionally a line)."""

    code = "BLOCK_SYNC_ERROR"

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Path] = None,
        line: Optional[int] = None,
        remediation: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.line = line
        self.remediation = remediation if remediation is not None else remediation_for(self.code)

    @property
    def location(self) -> str:
        if self.path is None:
            return "<unknown>"
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"

    def as_dict(self) -> Dict[str, object]:
        return {
            "code": self.code,
            "message": self.message,
            "path": str(self.path) if self.path is not None else None,
            "line": self.line,
            "remediation": self.remediation,
        }

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


class UnterminatedBlockError(BlockSyncError):
    """A start marker was never closed by an end marker."""

    code = "BLOCK_UNTERMINATED"


class NestedBlockError(BlockSyncError):
    """A start marker appeared while another block was still open."""

    code = "BLOCK_NESTED"


class DuplicateIdInFileError(BlockSyncError):
    """The same identifier is declared twice inside one file."""

    code = "DUPLICATE_ID_IN_FILE"

    def __init__(self, block_id: str, *, path: Path, line: int, first_line: int) -> None:
        self.block_id = block_id
        self.first_line = first_line
        super().__init__(
            f"identifier '{block_id}' already declared at line {first_line}",
            path=path,
            line=line,
        )


class DuplicateIdAcrossFilesError(BlockSyncError):
    """Two source files declare blocks with the same identifier."""

    code = "DUPLICATE_ID_ACROSS_FILES"

    def __init__(self, block_id: str, first: "Origin", second: "Origin") -> None:
        self.block_id = block_id
        self.first = first
        self.second = second
        super().__init__(
            f"identifier '{block_id}' declared in both {first} and {second}",
            path=second.path,
            line=second.start_line,
        )

    def as_dict(self) -> Dict[str, object]:
        payload = super().as_dict()
        payload["origins"] = [self.first.as_dict(), self.second.as_dict()]
        return payload


class UnterminatedRegionError(BlockSyncError):
    """A region marker was opened but never repeated to close it."""

    code = "REGION_UNTERMINATED"


class RegionIdMismatchError(BlockSyncError):
    """A region was closed (or interrupted) by a marker with another identifier."""

    code = "REGION_ID_MISMATCH"


class UnknownIdError(BlockSyncError):
    """A documentation region references an identifier with no source block."""

    code = "UNKNOWN_ID"

    def __init__(self, block_id: str, *, path: Path, line: int) -> None:
        self.block_id = block_id
        super().__init__(f"no source block with identifier '{block_id}'", path=path, line=line)


class DriftDetectedError(BlockSyncError):
    """Check mode found documentation regions out of sync with their blocks."""

    code = "DRIFT_DETECTED"


class SourceIOError(BlockSyncError):
    """A path could not be read or written."""

    code = "IO_ERROR"


class SyncConfigError(ValueError):
    """Raised when the configuration file or marker syntax is invalid."""

    def __init__(self, message: str, *, code: str = "CONFIG_INVALID", remediation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.remediation = remediation if remediation is not None else remediation_for(code)


__all__ = [
    "BlockSyncError",
    "UnterminatedBlockError",
    "NestedBlockError",
    "DuplicateIdInFileError",
    "DuplicateIdAcrossFilesError",
    "UnterminatedRegionError",
    "RegionIdMismatchError",
    "UnknownIdError",
    "DriftDetectedError",
    "SourceIOError",
    "SyncConfigError",
]
