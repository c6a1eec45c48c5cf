"""
In-memory cache of validated collections.

Entries are keyed by resolved file path and gated twice: an entry is only
served while it is younger than the TTL *and* the file's current content
checksum matches the one recorded when it was cached. Everything going in
or out is deep-copied so no caller can alias another caller's view.

Not thread-safe: a multi-threaded host should hold one cache per worker or
serialize access externally.
"""

import copy
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from taskvault.core.models import TasksCollection

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_CACHE_CAPACITY = 10


@dataclass
class CacheEntry:
    collection: TasksCollection
    checksum: str
    stored_at: float


@dataclass
class CacheStats:
    """Counters describing cache effectiveness."""

    entries: int
    capacity: int
    hits: int
    misses: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "entries": self.entries,
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": round(self.hit_rate, 4),
        }


class CollectionCache:
    """
    Bounded TTL + checksum cache for loaded collections.

    Attributes:
        ttl_seconds: Maximum entry age before it is ignored
        capacity: Maximum number of entries; the oldest is evicted first
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.capacity = capacity
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @staticmethod
    def key_for(path: Union[str, Path]) -> str:
        return str(Path(path).resolve())

    def get(self, path: Union[str, Path], checksum: str) -> Optional[TasksCollection]:
        """
        Return a copy of the cached collection if it is fresh and unchanged.

        A stale or mismatched entry is left in place so that a failed reload
        does not lose the last good value.
        """
        key = self.key_for(path)
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            logger.debug("Cache entry expired for %s", key)
            self._misses += 1
            return None
        if entry.checksum != checksum:
            logger.debug("Cache checksum mismatch for %s", key)
            self._misses += 1
            return None
        self._hits += 1
        logger.debug("Cache hit for %s", key)
        return copy.deepcopy(entry.collection)

    def put(self, path: Union[str, Path], collection: TasksCollection, checksum: str) -> None:
        """Store a copy of ``collection``, evicting the oldest entry when full."""
        key = self.key_for(path)
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug("Evicted cache entry for %s", evicted)
        self._entries[key] = CacheEntry(
            collection=copy.deepcopy(collection),
            checksum=checksum,
            stored_at=self._clock(),
        )

    def invalidate(self, path: Union[str, Path]) -> bool:
        """Drop the entry for ``path``; returns whether one existed."""
        return self._entries.pop(self.key_for(path), None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._entries),
            capacity=self.capacity,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return self.key_for(path) in self._entries
