"""Timeline aggregator: events grouped into backend-computed date buckets.

States:
    uninitialized -> loading -> ready

``fetch_events()`` issues one ``filter_events`` call per bucket, in
parallel. A bucket whose call fails is logged, recorded in
``failed_buckets`` and resolves to an empty list; the other buckets and the
transition to ``ready`` are unaffected. Concurrent calls while loading share
one pending task.

Example:
    timeline = TimelineAggregator(client, coordinator)
    await timeline.fetch_events()
    today = timeline.group_items(TimelineBucket.TODAY)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tasklane.cache.inflight import InFlight
from tasklane.cache.invalidation import InvalidationCoordinator
from tasklane.cache.keys import CacheKeys
from tasklane.errors import TasklaneError
from tasklane.models import Event, TimelineBucket, merge_event, sort_by_priority
from tasklane.rpc.client import BackendClient

logger = logging.getLogger(__name__)


class TimelineState(str, Enum):
    """Lifecycle of the timeline buckets."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True, slots=True)
class TimelineGroup:
    """Display metadata for one bucket."""

    bucket: TimelineBucket
    title: str
    icon_name: str
    color: str


TIMELINE_GROUPS: tuple[TimelineGroup, ...] = (
    TimelineGroup(TimelineBucket.TODAY, "Today", "mdi-calendar-today", "primary"),
    TimelineGroup(TimelineBucket.TOMORROW, "Tomorrow", "mdi-calendar-arrow-right", "secondary"),
    TimelineGroup(TimelineBucket.THIS_WEEK, "This week", "mdi-calendar-week", "secondary"),
    TimelineGroup(TimelineBucket.NEXT_WEEK, "Next week", "mdi-calendar-week", "info"),
    TimelineGroup(TimelineBucket.OVERDUE, "Overdue", "mdi-calendar-alert", "error"),
)


class TimelineAggregator:
    """Derived read model of events per date bucket."""

    def __init__(
        self,
        client: BackendClient,
        coordinator: InvalidationCoordinator | None = None,
        *,
        inflight: InFlight | None = None,
        groups: tuple[TimelineGroup, ...] = TIMELINE_GROUPS,
    ) -> None:
        self.client = client
        self.coordinator = coordinator
        self.groups = groups
        self.state = TimelineState.UNINITIALIZED
        self.failed_buckets: dict[TimelineBucket, str] = {}
        self._buckets: dict[TimelineBucket, tuple[Event, ...]] = {}
        self._inflight = inflight if inflight is not None else InFlight()
        # Bumped by clear(); a load started under an older generation is discarded
        self._generation = 0

    @property
    def is_ready(self) -> bool:
        return self.state == TimelineState.READY

    async def fetch_events(self) -> None:
        """Load every bucket once; no-op when already ready."""
        if self.state == TimelineState.READY:
            return
        await self._inflight.run(CacheKeys.timeline(), self._load)

    async def _load(self) -> None:
        generation = self._generation
        self.state = TimelineState.LOADING

        results = await asyncio.gather(*(self._load_bucket(g.bucket) for g in self.groups))

        if generation != self._generation:
            logger.debug("Discarded timeline load superseded by clear()")
            return

        self._buckets = {}
        self.failed_buckets = {}
        for bucket, events, error in results:
            self._buckets[bucket] = events
            if error is not None:
                self.failed_buckets[bucket] = error
        self.state = TimelineState.READY
        logger.debug(
            f"Timeline ready: {sum(len(v) for v in self._buckets.values())} events, "
            f"{len(self.failed_buckets)} failed buckets"
        )

    async def _load_bucket(
        self, bucket: TimelineBucket
    ) -> tuple[TimelineBucket, tuple[Event, ...], str | None]:
        try:
            events = await self.client.filter_events(bucket)
        except TasklaneError as e:
            logger.error(f"Failed to fetch {bucket.value} events: {e}")
            return bucket, (), str(e)
        return bucket, tuple(events), None

    def clear(self) -> None:
        """Discard all buckets and return to ``uninitialized``."""
        self._generation += 1
        self._buckets = {}
        self.failed_buckets = {}
        self.state = TimelineState.UNINITIALIZED
        self._inflight.forget(CacheKeys.timeline())

    async def refresh(self) -> None:
        """Discard the buckets and refetch them if the timeline was in use."""
        was_used = self.state != TimelineState.UNINITIALIZED
        self.clear()
        if was_used:
            await self.fetch_events()

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def group_items(self, bucket: TimelineBucket) -> list[Event]:
        return list(self._buckets.get(bucket, ()))

    def all_events(self) -> list[Event]:
        return [event for group in self.groups for event in self._buckets.get(group.bucket, ())]

    def visible_groups(self) -> list[TimelineGroup]:
        """Groups with at least one event, in display order."""
        return [group for group in self.groups if self._buckets.get(group.bucket)]

    def sorted_items(self, bucket: TimelineBucket) -> list[Event]:
        return sort_by_priority(self.group_items(bucket))

    # -------------------------------------------------------------------------
    # Local update
    # -------------------------------------------------------------------------

    async def update_event(
        self, updated: Event | Mapping[str, Any], bucket: TimelineBucket
    ) -> bool:
        """Merge ``updated`` into the event in ``bucket`` and send it to the backend.

        The merged event is written into the bucket only after
        ``update_event`` succeeds. On failure the bucket is left as it was
        and the error propagates.

        Returns False if the bucket is not loaded or does not hold the event.
        """
        items = self._buckets.get(bucket)
        if items is None:
            return False

        event_id = updated.id if isinstance(updated, Event) else updated.get("id")
        index = next((i for i, item in enumerate(items) if item.id == event_id), None)
        if index is None:
            return False

        merged = merge_event(items[index], updated)
        generation = self._generation

        await self.client.update_event(merged)

        # The bucket may have been replaced while the call was pending
        if generation == self._generation:
            current = self._buckets.get(bucket, ())
            self._buckets[bucket] = tuple(merged if e.id == merged.id else e for e in current)
        logger.info(f"Updated event {merged.id} in {bucket.value}")

        if self.coordinator is not None:
            previous = items[index]
            await self.coordinator.event_changed(
                {previous.list_id, merged.list_id},
                merged.id,
                previous.tag_set | merged.tag_set,
                refresh_timeline=False,
            )
        return True
