from .pipeline import PipelineResult, fetch_current_list, reconcile, run_once
from .snapshot import SnapshotError, SnapshotStore, find_new_movies
from .sync import SyncError, SyncService

__all__ = [
    "PipelineResult",
    "SnapshotError",
    "SnapshotStore",
    "SyncError",
    "SyncService",
    "fetch_current_list",
    "find_new_movies",
    "reconcile",
    "run_once",
]
