from .movie import (
    ListType,
    MovieRecord,
    Snapshot,
    SyncPreferences,
    SyncSummary,
    TakeStrategy,
)

__all__ = [
    "ListType",
    "MovieRecord",
    "Snapshot",
    "SyncPreferences",
    "SyncSummary",
    "TakeStrategy",
]
