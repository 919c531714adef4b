"""Tests for the event store."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest
from fakes import FakeTransport

from tasklane.cache.events import PageInfo
from tasklane.errors import RpcError
from tasklane.manager import CacheManager
from tasklane.models import Priority
from tasklane.stores import EventStore


def paged(events: list[dict[str, Any]]) -> Callable[[dict[str, Any]], list[dict[str, Any]]]:
    def reply(args: dict[str, Any]) -> list[dict[str, Any]]:
        start = (args["page"] - 1) * args["pageSize"]
        return events[start : start + args["pageSize"]]

    return reply


class TestEventStorePaging:
    """Test per-list paging state."""

    @pytest.fixture
    def store(
        self,
        manager: CacheManager,
        transport: FakeTransport,
        make_events: Callable[..., list[dict[str, Any]]],
    ) -> EventStore:
        """Event store over a list of 25 events."""
        transport.reply("list_content", paged(make_events(25)))
        return manager.event_store

    async def test_first_page(self, store: EventStore) -> None:
        """First fetch shows page 1."""
        events = await store.fetch_events_by_list_id("list-1")

        assert len(events) == 20
        assert store.get_page_info("list-1") == PageInfo(current_page=1, has_more=True)

    async def test_load_more_appends(self, store: EventStore) -> None:
        """load_more appends the next page."""
        await store.fetch_events_by_list_id("list-1")
        events = await store.fetch_events_by_list_id("list-1", load_more=True)

        assert len(events) == 25
        assert store.get_page_info("list-1") == PageInfo(current_page=2, has_more=False)

    async def test_load_more_past_end_is_noop(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """No RPC once the last page was seen."""
        await store.fetch_events_by_list_id("list-1")
        await store.fetch_events_by_list_id("list-1", load_more=True)

        events = await store.fetch_events_by_list_id("list-1", load_more=True)

        assert len(events) == 25
        assert transport.count("list_content") == 2

    async def test_plain_fetch_resets_to_first_page(self, store: EventStore) -> None:
        """Fetching without load_more shows page 1 again."""
        await store.fetch_events_by_list_id("list-1")
        await store.fetch_events_by_list_id("list-1", load_more=True)

        events = await store.fetch_events_by_list_id("list-1")

        assert len(events) == 20
        assert store.get_page_info("list-1").current_page == 1

    async def test_load_more_after_invalidation_restarts(
        self, store: EventStore, manager: CacheManager
    ) -> None:
        """Cached pages dropped under the store restart from page 1."""
        await store.fetch_events_by_list_id("list-1")
        manager.events.invalidate("list-1")

        events = await store.fetch_events_by_list_id("list-1", load_more=True)

        assert len(events) == 20
        assert store.get_page_info("list-1").current_page == 1
        assert store.error is None

    async def test_fetch_failure_keeps_shown_events(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """Failure sets error and returns what was shown."""
        await store.fetch_events_by_list_id("list-1")
        transport.fail("list_content")

        events = await store.fetch_events_by_list_id("list-1", load_more=True)

        assert len(events) == 20
        assert store.error is not None
        assert store.error.startswith("Failed to fetch events of list list-1")


class TestEventStoreMutations:
    """Test event mutations and selection."""

    @pytest.fixture
    def store(
        self,
        manager: CacheManager,
        transport: FakeTransport,
        make_event: Callable[..., dict[str, Any]],
    ) -> EventStore:
        """Event store over one list with two events."""
        transport.reply("get_lists", [{"id": "list-1", "title": "Work"}])
        transport.reply(
            "list_content", [make_event("e1", tags=["work"]), make_event("e2")]
        )
        transport.reply("event_content", "# body")
        return manager.event_store

    async def test_add_event_reloads_list(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """Adding to a known list calls the backend and refetches the list."""
        await store.fetch_events_by_list_id("list-1")

        await store.add_event("list-1", "Call", Priority.LOW, "1767225600000")

        assert transport.args_of("add_event")[0]["priority"] == "Low"
        assert transport.count("list_content") == 2

    async def test_add_event_to_unknown_list(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """Unknown list is reported without calling add_event."""
        await store.add_event("missing", "Call")

        assert store.error == "Failed to add event: List missing does not exist"
        assert transport.count("add_event") == 0
        assert transport.count("get_lists") == 2

    async def test_update_event_merges_partial_update(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """A partial update is merged with the shown event."""
        await store.fetch_events_by_list_id("list-1")

        assert await store.update_event({"id": "e1", "finished": True}) is True

        wire = transport.args_of("update_event")[0]["fEvent"]
        assert wire["finished"] is True
        assert wire["title"] == "Event e1"
        assert wire["tag"] == ["work"]
        assert transport.count("list_content") == 2

    async def test_update_unknown_event(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """Unknown event is reported, not sent."""
        assert await store.update_event({"id": "nope", "title": "x"}) is False
        assert store.error == "Failed to update event: Event nope does not exist"
        assert transport.count("update_event") == 0

    async def test_update_with_invalid_priority(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """An update that cannot be merged is reported, not raised."""
        await store.fetch_events_by_list_id("list-1")

        assert await store.update_event({"id": "e1", "priority": "Urgent"}) is False

        assert store.error is not None
        assert store.error.startswith("Failed to update event: ")
        assert transport.count("update_event") == 0
        assert not store.is_loading

    async def test_delete_selected_event_clears_selection(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """Deleting the selected event clears the selection."""
        await store.fetch_events_by_list_id("list-1")
        await store.get_event_content("e1")
        assert store.selected_event is not None

        assert await store.delete_event("e1", "list-1") is True

        assert store.selected_event_id is None
        assert store.selected_event_content == ""
        assert store.selected_event is None

    async def test_delete_failure(self, store: EventStore, transport: FakeTransport) -> None:
        """Rejected delete keeps the selection and sets error."""
        await store.get_event_content("e1")
        transport.fail("delete_event")

        assert await store.delete_event("e1", "list-1") is False
        assert store.selected_event_id == "e1"
        assert store.error is not None

    async def test_get_event_content_selects(self, store: EventStore) -> None:
        """Loading content selects the event."""
        content = await store.get_event_content("e1")

        assert content == "# body"
        assert store.selected_event_id == "e1"
        assert store.selected_event_content == "# body"

    async def test_content_failure_keeps_newer_selection(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """A failed load does not blank the content of a newer selection."""
        await store.get_event_content("e2")
        gate = transport.hold("event_content")
        transport.fail("event_content")
        pending = asyncio.create_task(store.get_event_content("e1"))
        await transport.until_called("event_content", times=2)

        await store.get_event_content("e2")
        gate.set()

        assert await pending == ""
        assert store.selected_event_id == "e2"
        assert store.selected_event_content == "# body"
        assert store.error is not None

    async def test_save_content_updates_selection(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """Saved content is shown for the selected event."""
        await store.get_event_content("e1")

        await store.save_event_content("e1", "# edited")

        assert store.selected_event_content == "# edited"
        assert await store.get_event_content("e1") == "# edited"
        assert transport.count("event_content") == 1

    async def test_save_content_failure_reraises(
        self, store: EventStore, transport: FakeTransport
    ) -> None:
        """Failed save sets error and raises."""
        await store.get_event_content("e1")
        transport.fail("write_content")

        with pytest.raises(RpcError):
            await store.save_event_content("e1", "# edited")

        assert store.error is not None
        assert store.selected_event_content == "# body"
        assert not store.is_loading

    async def test_clear_cache(self, store: EventStore, transport: FakeTransport) -> None:
        """clear_cache drops state and cached pages."""
        await store.fetch_events_by_list_id("list-1")
        await store.get_event_content("e1")

        store.clear_cache()

        assert store.get_events_by_list_id("list-1") == []
        assert store.get_page_info("list-1") == PageInfo()
        assert store.selected_event_id is None
        await store.fetch_events_by_list_id("list-1")
        assert transport.count("list_content") == 2
