"""Application services for collecting blocks and replacing documentation regions."""

from .output import export_registry, render_registry
from .service import BlockSyncService, CollectResult, SyncReport
from .walker import iter_candidate_files

__all__ = [
    "BlockSyncService",
    "CollectResult",
    "SyncReport",
    "export_registry",
    "render_registry",
    "iter_candidate_files",
]
