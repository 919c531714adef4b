"""Generic in-memory store with time-based expiry.

Every higher-level cache is built on ``TTLCache``. An entry older than the
TTL is treated exactly like a miss and is dropped on access.

Each key carries a version that changes on invalidation (and a clear bumps
every key). A fetch records the version before awaiting the backend and
stores its result with ``set_if_version``, so data fetched before an
invalidation never repopulates the key.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], float]

# 5 minutes
DEFAULT_TTL = 300.0

Version = tuple[int, int]


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    """Cached value with the time it was stored."""

    value: V
    timestamp: float

    def is_valid(self, now: float, ttl: float) -> bool:
        return now - self.timestamp < ttl


class TTLCache(Generic[K, V]):
    """Key/value store whose entries expire ``ttl`` seconds after being set.

    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Clock = time.monotonic) -> None:
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}
        self._versions: dict[K, int] = {}
        self._epoch = 0

    def get_entry(self, key: K) -> CacheEntry[V] | None:
        """Return the entry for ``key`` if it is still valid."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self.clock(), self.ttl):
            del self._entries[key]
            return None
        return entry

    def get(self, key: K) -> V | None:
        """Return the cached value, or None on miss or expiry."""
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def set(self, key: K, value: V, *, timestamp: float | None = None) -> CacheEntry[V]:
        """Store ``value`` with a fresh timestamp (or the one given)."""
        entry = CacheEntry(value=value, timestamp=self.clock() if timestamp is None else timestamp)
        self._entries[key] = entry
        return entry

    def version(self, key: K) -> Version:
        return (self._epoch, self._versions.get(key, 0))

    def set_if_version(self, key: K, value: V, version: Version) -> bool:
        """Store ``value`` only if ``key`` was not invalidated since ``version``."""
        if self.version(key) != version:
            return False
        self.set(key, value)
        return True

    def invalidate(self, key: K) -> bool:
        """Drop ``key``. Returns True if a (possibly expired) entry existed."""
        self._versions[key] = self._versions.get(key, 0) + 1
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        self._versions.clear()
        self._epoch += 1

    def keys(self) -> list[K]:
        """Keys with valid entries."""
        return [key for key in list(self._entries) if self.get_entry(key) is not None]

    def __contains__(self, key: object) -> bool:
        return key in self._entries and self.get_entry(key) is not None  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())
