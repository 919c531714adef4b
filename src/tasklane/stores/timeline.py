"""Reactive state for the timeline view."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tasklane.errors import TasklaneError
from tasklane.models import Event, TimelineBucket
from tasklane.stores.base import Store
from tasklane.timeline import TimelineAggregator, TimelineGroup, TimelineState


class TimelineStore(Store):
    """Thin store over ``TimelineAggregator``.

    A failed bucket does not fail the timeline; it only sets ``error``.
    """

    name = "timeline"

    def __init__(self, aggregator: TimelineAggregator) -> None:
        super().__init__()
        self.aggregator = aggregator

    @property
    def state(self) -> TimelineState:
        return self.aggregator.state

    @property
    def is_ready(self) -> bool:
        return self.aggregator.is_ready

    @property
    def groups(self) -> tuple[TimelineGroup, ...]:
        return self.aggregator.groups

    def group_items(self, bucket: TimelineBucket) -> list[Event]:
        return self.aggregator.group_items(bucket)

    def sorted_items(self, bucket: TimelineBucket) -> list[Event]:
        return self.aggregator.sorted_items(bucket)

    def visible_groups(self) -> list[TimelineGroup]:
        return self.aggregator.visible_groups()

    async def fetch_events(self) -> None:
        with self._operation("fetch_events"):
            await self.aggregator.fetch_events()
            failed = self.aggregator.failed_buckets
            if failed:
                names = ", ".join(bucket.value for bucket in failed)
                self.error = f"Failed to fetch timeline buckets: {names}"

    async def refresh(self) -> None:
        with self._operation("refresh"):
            self.aggregator.clear()
            await self.fetch_events()

    async def update_event(
        self, updated: Event | Mapping[str, Any], bucket: TimelineBucket
    ) -> bool:
        with self._operation("update_event"):
            try:
                return await self.aggregator.update_event(updated, bucket)
            except (TasklaneError, ValueError) as e:
                self._fail("Failed to update event", e)
                return False

    def clear_cache(self) -> None:
        self.aggregator.clear()
