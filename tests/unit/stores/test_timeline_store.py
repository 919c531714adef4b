"""Tests for the timeline store."""

from collections.abc import Callable
from typing import Any

import pytest
from fakes import FakeTransport

from tasklane.errors import RpcError
from tasklane.manager import CacheManager
from tasklane.models import TimelineBucket
from tasklane.stores import TimelineStore
from tasklane.timeline import TimelineState


class TestTimelineStore:
    """Test TimelineStore."""

    @pytest.fixture
    def store(
        self,
        manager: CacheManager,
        transport: FakeTransport,
        make_event: Callable[..., dict[str, Any]],
    ) -> TimelineStore:
        """Timeline store with events only today."""
        transport.reply(
            "filter_events",
            lambda args: [make_event("t1")] if args["filter"] == "today" else [],
        )
        return manager.timeline_store

    async def test_fetch_events(self, store: TimelineStore) -> None:
        """Loaded timeline shows only non-empty groups."""
        await store.fetch_events()

        assert store.state == TimelineState.READY
        assert store.is_ready
        assert [g.bucket for g in store.visible_groups()] == [TimelineBucket.TODAY]
        assert store.group_items(TimelineBucket.TODAY)[0].id == "t1"
        assert store.error is None

    async def test_failed_bucket_sets_error(
        self,
        store: TimelineStore,
        transport: FakeTransport,
        make_event: Callable[..., dict[str, Any]],
    ) -> None:
        """A failing bucket is reported but the timeline loads."""

        def reply(args: dict[str, Any]) -> list[dict[str, Any]]:
            if args["filter"] == "overdue":
                raise RpcError("filter_events", "boom")
            return [make_event("t1")]

        transport.reply("filter_events", reply)

        await store.fetch_events()

        assert store.is_ready
        assert store.error == "Failed to fetch timeline buckets: overdue"
        assert len(store.sorted_items(TimelineBucket.TODAY)) == 1

    async def test_update_event(self, store: TimelineStore, transport: FakeTransport) -> None:
        """Local update succeeds for a loaded event."""
        await store.fetch_events()

        updated = await store.update_event({"id": "t1", "finished": True}, TimelineBucket.TODAY)

        assert updated is True
        assert store.group_items(TimelineBucket.TODAY)[0].finished is True

    async def test_update_failure_returns_false(
        self, store: TimelineStore, transport: FakeTransport
    ) -> None:
        """Rejected update is reported through error."""
        await store.fetch_events()
        transport.fail("update_event")

        updated = await store.update_event({"id": "t1", "finished": True}, TimelineBucket.TODAY)

        assert updated is False
        assert store.error is not None
        assert store.group_items(TimelineBucket.TODAY)[0].finished is False

    async def test_refresh_reloads(self, store: TimelineStore, transport: FakeTransport) -> None:
        """refresh always refetches every bucket."""
        await store.refresh()
        await store.refresh()

        assert transport.count("filter_events") == 10

    async def test_clear_cache(self, store: TimelineStore) -> None:
        """clear_cache resets the aggregator."""
        await store.fetch_events()
        store.clear_cache()

        assert store.state == TimelineState.UNINITIALIZED
        assert store.visible_groups() == []
