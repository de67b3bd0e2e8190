"""Backing store access."""

from playstats.services.snapshot_store import (
    GAMES_PATH,
    USERS_PATH,
    WEBSITES_PATH,
    FirebaseSnapshotStore,
    close_store,
    get_store,
    normalize_snapshot,
)

__all__ = [
    "FirebaseSnapshotStore",
    "get_store",
    "close_store",
    "normalize_snapshot",
    # Collection paths
    "USERS_PATH",
    "GAMES_PATH",
    "WEBSITES_PATH",
]
