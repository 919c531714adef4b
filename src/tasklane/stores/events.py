"""Reactive state for events and the selected event's content.

The store keeps its own view of each list: the events of the pages shown
so far plus a ``PageInfo`` cursor. Pages come from ``EventCache``; after a
mutation the affected list is reloaded from page 1.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from tasklane.cache.events import ContentCache, EventCache, PageInfo
from tasklane.cache.lists import ListCache
from tasklane.errors import NotFoundError, PaginationError, TasklaneError
from tasklane.models import Event, Priority, merge_event
from tasklane.stores.base import Store

logger = logging.getLogger(__name__)


class EventStore(Store):
    """Events per list and the currently selected event."""

    name = "events"

    def __init__(self, cache: EventCache, content: ContentCache, lists: ListCache) -> None:
        super().__init__()
        self.cache = cache
        self.content = content
        self.lists = lists
        self.events: dict[str, list[Event]] = {}
        self.page_info: dict[str, PageInfo] = {}
        self.selected_event_id: str | None = None
        self.selected_event_content: str = ""

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def get_page_info(self, list_id: str) -> PageInfo:
        return self.page_info.get(list_id, PageInfo())

    def get_events_by_list_id(self, list_id: str) -> list[Event]:
        return list(self.events.get(list_id, []))

    def get_event_by_id(self, event_id: str) -> Event | None:
        for events in self.events.values():
            for event in events:
                if event.id == event_id:
                    return event
        return self.cache.find_event(event_id)

    @property
    def selected_event(self) -> Event | None:
        if self.selected_event_id is None:
            return None
        return self.get_event_by_id(self.selected_event_id)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def fetch_events_by_list_id(self, list_id: str, load_more: bool = False) -> list[Event]:
        """Load the first page of a list, or the next page with ``load_more``.

        Returns every event of the list shown so far. A "load more" past the
        last page is a no-op.
        """
        with self._operation("fetch_events"):
            info = self.get_page_info(list_id)
            if load_more and info.current_page > 0 and not info.has_more:
                return self.get_events_by_list_id(list_id)

            page = info.current_page + 1 if load_more else 1
            try:
                try:
                    result = await self.cache.fetch_page(list_id, page, load_more=load_more)
                except PaginationError as e:
                    # Cached pages were dropped under us; start over
                    logger.debug(f"Restarting list {list_id} from page 1: {e}")
                    page = 1
                    result = await self.cache.fetch_page(list_id, 1)
            except TasklaneError as e:
                self._fail(f"Failed to fetch events of list {list_id}", e)
                return self.get_events_by_list_id(list_id)

            if page > 1:
                self.events[list_id] = [*self.events.get(list_id, []), *result.events]
            else:
                self.events[list_id] = list(result.events)
            self.page_info[list_id] = PageInfo(current_page=page, has_more=result.has_more)
            return self.get_events_by_list_id(list_id)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_event(
        self,
        list_id: str,
        title: str,
        priority: Priority = Priority.MEDIUM,
        ddl: str | None = None,
    ) -> list[Event]:
        """Create an event in an existing list and reload that list."""
        with self._operation("add_event"):
            try:
                if await self.lists.find(list_id) is None:
                    raise NotFoundError("List", list_id)
                await self.cache.add_event(list_id, title, priority, ddl)
            except TasklaneError as e:
                self._fail("Failed to add event", e)
                return self.get_events_by_list_id(list_id)
            return await self.fetch_events_by_list_id(list_id)

    async def update_event(self, update: Event | Mapping[str, Any]) -> bool:
        """Merge ``update`` into the known event and send it to the backend."""
        with self._operation("update_event"):
            event_id = update.id if isinstance(update, Event) else update.get("id")
            try:
                current = self.get_event_by_id(str(event_id)) if event_id is not None else None
                if current is None:
                    raise NotFoundError("Event", str(event_id))
                merged = merge_event(current, update)
                await self.cache.update_event(merged)
            except (TasklaneError, ValueError) as e:
                self._fail("Failed to update event", e)
                return False

            for list_id in {current.list_id, merged.list_id}:
                if list_id in self.events:
                    await self.fetch_events_by_list_id(list_id)
            return True

    async def delete_event(self, event_id: str, list_id: str) -> bool:
        with self._operation("delete_event"):
            try:
                await self.cache.delete_event(event_id, list_id)
            except TasklaneError as e:
                self._fail("Failed to delete event", e)
                return False

            if self.selected_event_id == event_id:
                self.clear_selected_event()
            await self.fetch_events_by_list_id(list_id)
            return True

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    async def get_event_content(self, event_id: str) -> str:
        """Select an event and load its content."""
        with self._operation("get_event_content"):
            self.selected_event_id = event_id
            try:
                content = await self.content.get(event_id)
            except TasklaneError as e:
                self._fail("Failed to fetch event content", e)
                if self.selected_event_id == event_id:
                    self.selected_event_content = ""
                return ""
            if self.selected_event_id == event_id:
                self.selected_event_content = content
            return content

    async def save_event_content(self, event_id: str, content: str) -> None:
        """Save an event's content.

        Raises:
            TasklaneError: if the backend rejects the write; ``error`` is set too
        """
        with self._operation("save_event_content"):
            try:
                await self.content.save(event_id, content)
            except TasklaneError as e:
                self._fail("Failed to save event content", e)
                raise
            if self.selected_event_id == event_id:
                self.selected_event_content = content

    def clear_selected_event(self) -> None:
        self.selected_event_id = None
        self.selected_event_content = ""

    def clear_cache(self) -> None:
        self.events = {}
        self.page_info = {}
        self.clear_selected_event()
        self.cache.clear()
        self.content.clear()
