"""Tag collection cache plus per-tag tagged-events caches."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from tasklane.cache.inflight import InFlight
from tasklane.cache.invalidation import InvalidationCoordinator
from tasklane.cache.keys import CacheKeys
from tasklane.cache.ttl import DEFAULT_TTL, Clock, TTLCache
from tasklane.models import Event, Tag, TagColor
from tasklane.rpc.client import BackendClient

logger = logging.getLogger(__name__)

_KEY = "tags"


class TagCache:
    """Read-through cache over the backend's tags."""

    def __init__(
        self,
        client: BackendClient,
        coordinator: InvalidationCoordinator,
        *,
        ttl: float = DEFAULT_TTL,
        clock: Clock = time.monotonic,
        inflight: InFlight | None = None,
    ) -> None:
        self.client = client
        self.coordinator = coordinator
        self._tags: TTLCache[str, tuple[Tag, ...]] = TTLCache(ttl=ttl, clock=clock)
        self._content: TTLCache[str, tuple[Event, ...]] = TTLCache(ttl=ttl, clock=clock)
        self._inflight = inflight if inflight is not None else InFlight()

    async def fetch_tags(self) -> list[Tag]:
        entry = self._tags.get_entry(_KEY)
        if entry is not None:
            return list(entry.value)
        return list(await self._inflight.run(CacheKeys.tags(), self._load_tags))

    async def _load_tags(self) -> tuple[Tag, ...]:
        version = self._tags.version(_KEY)
        tags = tuple(await self.client.get_tags())
        self._tags.set_if_version(_KEY, tags, version)
        logger.debug(f"Fetched {len(tags)} tags")
        return tags

    async def get_tag_content(self, name: str) -> list[Event]:
        """Events carrying the tag ``name``."""
        entry = self._content.get_entry(name)
        if entry is not None:
            return list(entry.value)
        events = await self._inflight.run(
            CacheKeys.tag_content(name), lambda: self._load_content(name)
        )
        return list(events)

    async def _load_content(self, name: str) -> tuple[Event, ...]:
        version = self._content.version(name)
        events = tuple(await self.client.tag_content(name))
        self._content.set_if_version(name, events, version)
        return events

    async def add_tag(self, name: str, color: TagColor) -> None:
        await self.client.add_tag(name, color)
        logger.info(f"Added tag {name}")
        await self.coordinator.tags_changed()

    async def delete_tag(self, name: str) -> None:
        await self.client.delete_tag(name)
        logger.info(f"Deleted tag {name}")
        await self.coordinator.tag_deleted(name)

    def cached_tag_names(self) -> list[str]:
        """Tags whose tagged events are currently cached."""
        return self._content.keys()

    def invalidate_collection(self) -> None:
        self._tags.invalidate(_KEY)
        self._inflight.forget(CacheKeys.tags())

    def invalidate_tag_content(self, names: Iterable[str] | None) -> int:
        """Drop tagged-events caches for ``names``, or all of them for None.

        Returns the number of cached entries dropped.
        """
        if names is None:
            dropped = len(self._content)
            self._content.clear()
            self._inflight.forget_prefix(f"{CacheKeys.PREFIX}:tag:")
            return dropped

        dropped = 0
        for name in names:
            self._inflight.forget(CacheKeys.tag_content(name))
            if self._content.invalidate(name):
                dropped += 1
        return dropped

    def clear(self) -> None:
        self._tags.clear()
        self._content.clear()
        self._inflight.forget(CacheKeys.tags())
        self._inflight.forget_prefix(f"{CacheKeys.PREFIX}:tag:")
