"""Cross-cache invalidation.

Caches never evict each other's entries directly. After a successful
mutation they publish an ``InvalidationMessage`` to the coordinator, and the
registered ``LocalCacheInvalidator`` decides which caches must be dropped:

    list deleted     -> that list's event pages
    events changed   -> that list's event pages, timeline refetch
    event changed    -> event pages of the affected lists, the event's content,
                        tagged-events caches of its old/new tags, timeline refetch
    tags changed     -> tag collection
    tag deleted      -> tag collection, that tag's tagged events
    all              -> everything

Example:
    coordinator = InvalidationCoordinator()
    coordinator.add_handler(invalidator.handle_invalidation)

    await coordinator.event_changed({"list-1"}, "event-7", tag_names={"urgent"})
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tasklane.cache.events import ContentCache, EventCache
    from tasklane.cache.lists import ListCache
    from tasklane.cache.tags import TagCache
    from tasklane.timeline import TimelineAggregator

logger = logging.getLogger(__name__)


class InvalidationType(str, Enum):
    """What kind of change happened."""

    LIST_DELETED = "list_deleted"
    EVENTS_CHANGED = "events_changed"
    EVENT_CHANGED = "event_changed"
    TAGS_CHANGED = "tags_changed"
    TAG_DELETED = "tag_deleted"
    ALL = "all"


@dataclass(frozen=True, slots=True)
class InvalidationMessage:
    """A change that may make cached data stale.

    ``tag_names`` of None means the affected tags are unknown, so every
    tagged-events cache is dropped.
    """

    type: InvalidationType
    list_ids: frozenset[str] = field(default_factory=frozenset)
    event_id: str | None = None
    tag_names: frozenset[str] | None = field(default_factory=frozenset)
    refresh_timeline: bool = True


InvalidationHandler = Callable[[InvalidationMessage], Awaitable[None]]


class InvalidationCoordinator:
    """Dispatches invalidation messages to registered handlers in order."""

    def __init__(self) -> None:
        self._handlers: list[InvalidationHandler] = []

    def add_handler(self, handler: InvalidationHandler) -> None:
        """Register a handler for invalidation messages."""
        self._handlers.append(handler)
        handler_name = getattr(handler, "__name__", handler.__class__.__name__)
        logger.debug(f"Registered invalidation handler: {handler_name}")

    async def publish(self, message: InvalidationMessage) -> None:
        """Deliver ``message`` to every handler.

        A failing handler is logged and does not stop the others.
        """
        logger.debug(
            f"Invalidation {message.type.value} lists={sorted(message.list_ids)} "
            f"event={message.event_id}"
        )
        for handler in self._handlers:
            try:
                await handler(message)
            except Exception as e:
                logger.error(f"Invalidation handler failed: {e}")

    # Convenience methods for common invalidations

    async def list_deleted(self, list_id: str) -> None:
        await self.publish(
            InvalidationMessage(
                type=InvalidationType.LIST_DELETED,
                list_ids=frozenset({list_id}),
                refresh_timeline=False,
            )
        )

    async def events_changed(self, list_id: str) -> None:
        """A list gained events whose position only the backend knows."""
        await self.publish(
            InvalidationMessage(type=InvalidationType.EVENTS_CHANGED, list_ids=frozenset({list_id}))
        )

    async def event_changed(
        self,
        list_ids: Iterable[str],
        event_id: str,
        tag_names: Iterable[str] | None,
        refresh_timeline: bool = True,
    ) -> None:
        """An event was updated or deleted."""
        await self.publish(
            InvalidationMessage(
                type=InvalidationType.EVENT_CHANGED,
                list_ids=frozenset(list_ids),
                event_id=event_id,
                tag_names=frozenset(tag_names) if tag_names is not None else None,
                refresh_timeline=refresh_timeline,
            )
        )

    async def tags_changed(self) -> None:
        await self.publish(
            InvalidationMessage(type=InvalidationType.TAGS_CHANGED, refresh_timeline=False)
        )

    async def tag_deleted(self, name: str) -> None:
        await self.publish(
            InvalidationMessage(
                type=InvalidationType.TAG_DELETED,
                tag_names=frozenset({name}),
                refresh_timeline=False,
            )
        )

    async def invalidate_all(self) -> None:
        """Drop every cached entry."""
        await self.publish(InvalidationMessage(type=InvalidationType.ALL, tag_names=None))


class LocalCacheInvalidator:
    """Applies invalidation messages to the in-process caches.

    Registered as a handler with the ``InvalidationCoordinator``.
    """

    def __init__(
        self,
        lists: ListCache,
        events: EventCache,
        content: ContentCache,
        tags: TagCache,
        timeline: TimelineAggregator,
    ) -> None:
        self.lists = lists
        self.events = events
        self.content = content
        self.tags = tags
        self.timeline = timeline

    async def handle_invalidation(self, message: InvalidationMessage) -> None:
        """Handle an invalidation message by dropping the affected entries."""
        if message.type == InvalidationType.LIST_DELETED:
            for list_id in message.list_ids:
                self.events.invalidate(list_id)
            logger.debug(f"Invalidated event pages of deleted lists {sorted(message.list_ids)}")

        elif message.type == InvalidationType.EVENTS_CHANGED:
            for list_id in message.list_ids:
                self.events.invalidate(list_id)

        elif message.type == InvalidationType.EVENT_CHANGED:
            for list_id in message.list_ids:
                self.events.invalidate(list_id)
            if message.event_id:
                self.content.invalidate(message.event_id)
            dropped = self.tags.invalidate_tag_content(message.tag_names)
            logger.debug(f"Invalidated event {message.event_id} ({dropped} tag caches)")

        elif message.type == InvalidationType.TAGS_CHANGED:
            self.tags.invalidate_collection()

        elif message.type == InvalidationType.TAG_DELETED:
            self.tags.invalidate_collection()
            self.tags.invalidate_tag_content(message.tag_names)

        elif message.type == InvalidationType.ALL:
            self.lists.clear()
            self.events.clear()
            self.content.clear()
            self.tags.clear()
            self.timeline.clear()
            logger.info("Invalidated all cache entries")
            return

        if message.refresh_timeline:
            await self.timeline.refresh()
