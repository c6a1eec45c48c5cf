"""Collection persistence: atomic file I/O, cache, store and watcher."""

from taskvault.core.storage.cache import CacheStats, CollectionCache
from taskvault.core.storage.io import (
    backup_file,
    backup_path_for,
    read_bytes,
    serialize_collection,
    utc_now_iso,
    write_atomic,
)
from taskvault.core.storage.store import CollectionStore, empty_collection
from taskvault.core.storage.watcher import CollectionWatcher

__all__ = [
    "CacheStats",
    "CollectionCache",
    "CollectionStore",
    "CollectionWatcher",
    "backup_file",
    "backup_path_for",
    "empty_collection",
    "read_bytes",
    "serialize_collection",
    "utc_now_iso",
    "write_atomic",
]
