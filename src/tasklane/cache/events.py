"""Per-list paginated event cache and per-event content cache.

Event pages are cached per list id as one ``PagedEvents`` entry holding the
contiguous pages ``1..current_page``. Pages already fetched are served by
slicing; a "load more" request appends the next page without refetching
the earlier ones.

Event mutations never patch cached pages: the backend decides where an
event sorts, so the affected lists are invalidated and refetched instead.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from tasklane.cache.inflight import InFlight
from tasklane.cache.invalidation import InvalidationCoordinator
from tasklane.cache.keys import CacheKeys
from tasklane.cache.ttl import DEFAULT_TTL, Clock, TTLCache
from tasklane.errors import PaginationError
from tasklane.models import Event, Priority, now_ms
from tasklane.rpc.client import BackendClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True, slots=True)
class PagedEvents:
    """Cached pages ``1..current_page`` of one list's events."""

    data: tuple[Event, ...]
    has_more: bool
    page_size: int
    current_page: int

    def page(self, page: int) -> tuple[Event, ...]:
        start = (page - 1) * self.page_size
        return self.data[start : start + self.page_size]


@dataclass(frozen=True, slots=True)
class Page:
    """One page of events as returned to callers."""

    events: list[Event]
    has_more: bool


@dataclass(frozen=True, slots=True)
class PageInfo:
    """Pagination cursor for a list."""

    current_page: int = 0
    has_more: bool = True


class EventCache:
    """Paginated cache of events keyed by list id."""

    def __init__(
        self,
        client: BackendClient,
        coordinator: InvalidationCoordinator,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        ttl: float = DEFAULT_TTL,
        clock: Clock = time.monotonic,
        inflight: InFlight | None = None,
    ) -> None:
        self.client = client
        self.coordinator = coordinator
        self.page_size = page_size
        self._cache: TTLCache[str, PagedEvents] = TTLCache(ttl=ttl, clock=clock)
        self._inflight = inflight if inflight is not None else InFlight()

    async def fetch_page(self, list_id: str, page: int = 1, load_more: bool = False) -> Page:
        """Return one page of a list's events.

        Pages up to the cached ``current_page`` are sliced from the cache.
        Otherwise ``list_content`` is called: with ``load_more`` the page is
        appended to the cached pages, without it the entry is replaced.

        Raises:
            PaginationError: if ``page`` would leave a gap after the cached pages
            RpcError: if the backend call fails
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")

        entry = self._cache.get_entry(list_id)
        cached = entry.value if entry is not None else None

        if cached is not None and page <= cached.current_page:
            return Page(events=list(cached.page(page)), has_more=cached.has_more)

        base = cached if load_more else None
        if page > 1 and (base is None or base.current_page != page - 1):
            raise PaginationError(list_id, page, base.current_page if base else 0)

        return await self._inflight.run(
            CacheKeys.event_page(list_id, page),
            lambda: self._load_page(list_id, page, base),
        )

    async def _load_page(self, list_id: str, page: int, base: PagedEvents | None) -> Page:
        version = self._cache.version(list_id)
        events = await self.client.list_content(list_id, page, self.page_size)
        has_more = len(events) == self.page_size

        if base is not None:
            data = (*base.data[: (page - 1) * self.page_size], *events)
        else:
            data = tuple(events)

        stored = self._cache.set_if_version(
            list_id,
            PagedEvents(
                data=data,
                has_more=has_more,
                page_size=self.page_size,
                current_page=page,
            ),
            version,
        )
        if not stored:
            logger.debug(f"Discarded page {page} of list {list_id} fetched before an invalidation")
        logger.debug(f"Fetched page {page} of list {list_id}: {len(events)} events")
        return Page(events=list(events), has_more=has_more)

    def events_for(self, list_id: str) -> list[Event]:
        """Every cached event of a list (all fetched pages)."""
        entry = self._cache.get_entry(list_id)
        return list(entry.value.data) if entry is not None else []

    def page_info(self, list_id: str) -> PageInfo:
        entry = self._cache.get_entry(list_id)
        if entry is None:
            return PageInfo()
        return PageInfo(current_page=entry.value.current_page, has_more=entry.value.has_more)

    def find_event(self, event_id: str, list_id: str | None = None) -> Event | None:
        """Find a cached event, in ``list_id`` first and then in every list."""
        list_ids = [list_id] if list_id is not None else []
        list_ids += [key for key in self._cache.keys() if key != list_id]
        for key in list_ids:
            entry = self._cache.get_entry(key)
            if entry is None:
                continue
            for event in entry.value.data:
                if event.id == event_id:
                    return event
        return None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_event(
        self,
        list_id: str,
        title: str,
        priority: Priority = Priority.MEDIUM,
        ddl: str | None = None,
    ) -> None:
        """Create an event and invalidate the list's cached pages."""
        await self.client.add_event(list_id, title, priority, ddl or now_ms())
        logger.info(f"Added event to list {list_id}")
        await self.coordinator.events_changed(list_id)

    async def update_event(self, event: Event) -> None:
        """Update an event and invalidate its list pages, content and tags."""
        previous = self.find_event(event.id, event.list_id)
        await self.client.update_event(event)
        logger.info(f"Updated event {event.id}")
        await self.coordinator.event_changed(
            _affected_lists(event.list_id, previous),
            event.id,
            _affected_tags(previous, event),
        )

    async def delete_event(self, event_id: str, list_id: str) -> None:
        """Delete an event and invalidate its list pages, content and tags."""
        previous = self.find_event(event_id, list_id)
        await self.client.delete_event(event_id)
        logger.info(f"Deleted event {event_id}")
        await self.coordinator.event_changed(
            _affected_lists(list_id, previous),
            event_id,
            _affected_tags(previous, None),
        )

    def invalidate(self, list_id: str) -> bool:
        self._inflight.forget_prefix(f"{CacheKeys.events(list_id)}:")
        return self._cache.invalidate(list_id)

    def clear(self) -> None:
        self._cache.clear()
        self._inflight.forget_prefix(f"{CacheKeys.PREFIX}:events:")


def _affected_lists(list_id: str, previous: Event | None) -> set[str]:
    lists = {list_id}
    if previous is not None:
        lists.add(previous.list_id)
    return lists


def _affected_tags(previous: Event | None, current: Event | None) -> frozenset[str] | None:
    # Unknown previous tags: every tagged-events cache may be stale
    if previous is None:
        return None
    tags = previous.tag_set
    if current is not None:
        tags |= current.tag_set
    return tags


class ContentCache:
    """Cache of event body content keyed by event id.

    Saving is write-through: the saved text replaces the cached entry.
    """

    def __init__(
        self,
        client: BackendClient,
        *,
        ttl: float = DEFAULT_TTL,
        clock: Clock = time.monotonic,
        inflight: InFlight | None = None,
    ) -> None:
        self.client = client
        self._cache: TTLCache[str, str] = TTLCache(ttl=ttl, clock=clock)
        self._inflight = inflight if inflight is not None else InFlight()

    async def get(self, event_id: str) -> str:
        entry = self._cache.get_entry(event_id)
        if entry is not None:
            return entry.value
        return await self._inflight.run(CacheKeys.content(event_id), lambda: self._load(event_id))

    async def _load(self, event_id: str) -> str:
        version = self._cache.version(event_id)
        content = await self.client.event_content(event_id)
        self._cache.set_if_version(event_id, content, version)
        return content

    async def save(self, event_id: str, content: str) -> str:
        """Write content to the backend, then cache it. Failures propagate."""
        await self.client.write_content(event_id, content)
        self.invalidate(event_id)
        self._cache.set(event_id, content)
        logger.debug(f"Saved content of event {event_id}")
        return content

    def invalidate(self, event_id: str) -> bool:
        self._inflight.forget(CacheKeys.content(event_id))
        return self._cache.invalidate(event_id)

    def clear(self) -> None:
        self._cache.clear()
        self._inflight.forget_prefix(f"{CacheKeys.PREFIX}:content:")
