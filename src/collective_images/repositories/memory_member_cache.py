"""In-memory implementation of MemberStore.

Note: Each uvicorn worker has its own cache instance. With several
workers a member list may be fetched once per worker; entries are small
and short-lived, so this is acceptable.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable

from collective_images.config import settings
from collective_images.entities import Member


class MemoryMemberCache:
    """Bounded LRU cache with a per-entry time-to-live.

    This class satisfies the MemberStore protocol through structural
    typing. Reads refresh recency; once more than ``max_entries`` keys
    are stored, the least recently used ones are evicted. A lock guards
    the bookkeeping so the cache can be shared across threads.
    """

    def __init__(
        self,
        max_entries: int | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_entries: Capacity. Defaults to settings.
            ttl_seconds: Time-to-live of an entry. Defaults to settings.
            clock: Monotonic time source, replaceable in tests.
        """
        self._max_entries = max_entries or settings.member_cache_max_entries
        self._ttl = ttl_seconds or settings.member_cache_ttl
        self._clock = clock
        self._store: OrderedDict[str, tuple[float, tuple[Member, ...]]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @classmethod
    def create(
        cls,
        max_entries: int | None = None,
        ttl_seconds: float | None = None,
    ) -> "MemoryMemberCache":
        """Factory method to create MemoryMemberCache with defaults from settings."""
        return cls(max_entries=max_entries, ttl_seconds=ttl_seconds)

    def get(self, key: str) -> tuple[Member, ...] | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            expires_at, members = entry
            if self._clock() >= expires_at:
                del self._store[key]
                self._misses += 1
                return None

            self._store.move_to_end(key)
            self._hits += 1
            return members

    def set(self, key: str, members: tuple[Member, ...]) -> None:
        with self._lock:
            self._store[key] = (self._clock() + self._ttl, tuple(members))
            self._store.move_to_end(key)
            while len(self._store) > self._max_entries:
                self._store.popitem(last=False)

    def clear(self) -> int:
        with self._lock:
            count = len(self._store)
            self._store.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._store

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "total_entries": len(self._store),
                "max_entries": self._max_entries,
                "ttl": self._ttl,
                "hits": self._hits,
                "misses": self._misses,
            }
