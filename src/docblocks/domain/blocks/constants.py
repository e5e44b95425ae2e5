"""Constants for the block synchronisation domain."""

from __future__ import annotations

ERROR_REMEDIATIONS = {
    "BLOCK_UNTERMINATED": "Close the block with an end marker before the end of the file.",
    "BLOCK_NESTED": "Close the open block before starting another one; nested blocks are not supported.",
    "DUPLICATE_ID_IN_FILE": "Rename one of the identifiers so each appears once per file.",
    "DUPLICATE_ID_ACROSS_FILES": "Block identifiers must be unique across the scanned tree; rename one of them.",
    "REGION_UNTERMINATED": "Repeat the region marker after the region body to close it.",
    "REGION_ID_MISMATCH": "Make the closing region marker repeat the identifier of the opening marker.",
    "UNKNOWN_ID": "Tag a source block with this identifier or remove the region from the document.",
    "DRIFT_DETECTED": "Run `docblocks replace` without --check to refresh the documentation.",
    "IO_ERROR": "Check that the path exists and is readable/writable.",
    "CONFIG_INVALID": "Fix the configuration file to match config.schema.json.",
}


def remediation_for(code: str) -> str | None:
    """Return default remediation text for a given error code."""

    return ERROR_REMEDIATIONS.get(code)
