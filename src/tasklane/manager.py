"""Wiring of caches, coordinator and stores.

``CacheManager`` owns one instance of every cache, shares a single
in-flight map between them and registers the local invalidator with the
coordinator. Stores are built on top and exposed as attributes.

Example:
    async with CacheManager.from_settings() as manager:
        lists = await manager.list_store.fetch_lists()
        await manager.timeline_store.fetch_events()
"""

from __future__ import annotations

import logging
import time
from types import TracebackType

from tasklane.cache.events import ContentCache, EventCache
from tasklane.cache.inflight import InFlight
from tasklane.cache.invalidation import InvalidationCoordinator, LocalCacheInvalidator
from tasklane.cache.lists import ListCache
from tasklane.cache.tags import TagCache
from tasklane.cache.ttl import Clock
from tasklane.config import Settings
from tasklane.config import settings as default_settings
from tasklane.rpc.client import BackendClient
from tasklane.rpc.transport import HttpTransport
from tasklane.stores import EventStore, ListStore, TagStore, TimelineStore
from tasklane.timeline import TimelineAggregator

logger = logging.getLogger(__name__)


class CacheManager:
    """Explicitly constructed container for the cache layer."""

    def __init__(
        self,
        client: BackendClient,
        settings: Settings | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.settings = settings or default_settings
        self.client = client
        ttl = self.settings.cache_ttl_seconds

        self.inflight = InFlight()
        self.coordinator = InvalidationCoordinator()

        self.lists = ListCache(
            client, self.coordinator, ttl=ttl, clock=clock, inflight=self.inflight
        )
        self.events = EventCache(
            client,
            self.coordinator,
            page_size=self.settings.page_size,
            ttl=ttl,
            clock=clock,
            inflight=self.inflight,
        )
        self.content = ContentCache(client, ttl=ttl, clock=clock, inflight=self.inflight)
        self.tags = TagCache(client, self.coordinator, ttl=ttl, clock=clock, inflight=self.inflight)
        self.timeline = TimelineAggregator(client, self.coordinator, inflight=self.inflight)

        self.invalidator = LocalCacheInvalidator(
            self.lists, self.events, self.content, self.tags, self.timeline
        )
        self.coordinator.add_handler(self.invalidator.handle_invalidation)

        self.list_store = ListStore(self.lists)
        self.event_store = EventStore(self.events, self.content, self.lists)
        self.tag_store = TagStore(self.tags)
        self.timeline_store = TimelineStore(self.timeline)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> CacheManager:
        """Build a manager talking HTTP to ``settings.backend_url``."""
        settings = settings or default_settings
        transport = HttpTransport(settings.backend_url, timeout=settings.rpc_timeout)
        logger.debug(f"Using backend at {settings.backend_url}")
        return cls(BackendClient(transport), settings=settings)

    def clear(self) -> None:
        """Reset every store and cache."""
        self.list_store.clear_cache()
        self.event_store.clear_cache()
        self.tag_store.clear_cache()
        self.timeline_store.clear_cache()
        self.inflight.clear()

    async def aclose(self) -> None:
        # Handlers registered by callers learn that every cache is gone
        await self.coordinator.invalidate_all()
        self.clear()
        await self.client.aclose()

    async def __aenter__(self) -> CacheManager:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
