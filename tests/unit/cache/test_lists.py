"""Tests for the list cache."""

import asyncio

import pytest
from fakes import FakeTransport, ManualClock

from tasklane.cache.invalidation import InvalidationCoordinator, InvalidationMessage
from tasklane.cache.lists import DEFAULT_ICON, ListCache
from tasklane.errors import NotFoundError, RpcError
from tasklane.rpc.client import BackendClient

LISTS = [
    {"id": "l1", "title": "Work", "icon": "mdi-briefcase"},
    {"id": "l2", "title": "Home", "icon": "mdi-home"},
]


class TestListCache:
    """Test ListCache reads and mutations."""

    @pytest.fixture
    def coordinator(self) -> InvalidationCoordinator:
        """Create a coordinator recording published messages."""
        return InvalidationCoordinator()

    @pytest.fixture
    def published(self, coordinator: InvalidationCoordinator) -> list[InvalidationMessage]:
        """Collect messages published on the coordinator."""
        messages: list[InvalidationMessage] = []

        async def record(message: InvalidationMessage) -> None:
            messages.append(message)

        coordinator.add_handler(record)
        return messages

    @pytest.fixture
    def cache(
        self,
        client: BackendClient,
        coordinator: InvalidationCoordinator,
        clock: ManualClock,
        transport: FakeTransport,
    ) -> ListCache:
        """Create a list cache with two lists on the backend."""
        transport.reply("get_lists", LISTS)
        return ListCache(client, coordinator, ttl=300.0, clock=clock)

    async def test_fetch_is_cached_within_ttl(
        self, cache: ListCache, transport: FakeTransport, clock: ManualClock
    ) -> None:
        """Second fetch within the TTL makes no RPC."""
        first = await cache.fetch_lists()
        clock.advance(299.0)
        second = await cache.fetch_lists()

        assert [item.id for item in first] == ["l1", "l2"]
        assert second == first
        assert transport.count("get_lists") == 1

    async def test_fetch_after_ttl_refetches(
        self, cache: ListCache, transport: FakeTransport, clock: ManualClock
    ) -> None:
        """Fetch after the TTL calls the backend again."""
        await cache.fetch_lists()
        clock.advance(300.0)
        await cache.fetch_lists()

        assert transport.count("get_lists") == 2

    async def test_concurrent_fetches_coalesce(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """Concurrent fetches on a cold cache issue one RPC."""
        results = await asyncio.gather(cache.fetch_lists(), cache.fetch_lists())

        assert results[0] == results[1]
        assert transport.count("get_lists") == 1

    async def test_returned_list_is_a_copy(self, cache: ListCache) -> None:
        """Mutating the returned list does not touch the cache."""
        lists = await cache.fetch_lists()
        lists.clear()

        assert len(await cache.fetch_lists()) == 2

    async def test_fetch_failure_propagates(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """RPC failure raises and caches nothing."""
        transport.fail("get_lists")

        with pytest.raises(RpcError):
            await cache.fetch_lists()
        assert cache.snapshot() is None

    async def test_create_appends_without_refetch(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """Created list is appended to the cached collection."""
        transport.reply("new_list", {"id": "l3", "title": "Errands", "icon": DEFAULT_ICON})
        await cache.fetch_lists()

        lists = await cache.create_list("Errands")
        again = await cache.fetch_lists()

        assert [item.id for item in lists] == ["l1", "l2", "l3"]
        assert again == lists
        assert transport.count("get_lists") == 1
        assert transport.args_of("new_list") == [{"title": "Errands", "icon": DEFAULT_ICON}]

    async def test_create_keeps_entry_timestamp(
        self, cache: ListCache, transport: FakeTransport, clock: ManualClock
    ) -> None:
        """Appending does not extend the collection's TTL."""
        transport.reply("new_list", {"id": "l3", "title": "Errands"})
        await cache.fetch_lists()
        clock.advance(200.0)
        await cache.create_list("Errands")
        clock.advance(100.0)

        await cache.fetch_lists()
        assert transport.count("get_lists") == 2

    async def test_create_on_cold_cache_fetches(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """With nothing cached, the collection is fetched after creating."""
        transport.reply("new_list", {"id": "l2", "title": "Home"})

        lists = await cache.create_list("Home")

        assert [item.id for item in lists] == ["l1", "l2"]
        assert transport.count("get_lists") == 1

    async def test_rename_updates_cached_title(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """Renamed title is visible without a refetch."""
        await cache.fetch_lists()

        await cache.rename_list("l1", "Office")
        lists = await cache.fetch_lists()

        assert lists[0].title == "Office"
        assert lists[0].icon == "mdi-briefcase"
        assert transport.args_of("rename_list") == [{"listid": "l1", "new": "Office"}]
        assert transport.count("get_lists") == 1

    async def test_rename_unknown_list_makes_no_rpc(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """Unknown id raises NotFoundError before calling the backend."""
        with pytest.raises(NotFoundError, match="List missing does not exist"):
            await cache.rename_list("missing", "x")
        assert transport.count("rename_list") == 0

    async def test_rename_failure_leaves_cache_unchanged(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """Rejected rename keeps the old title."""
        await cache.fetch_lists()
        transport.fail("rename_list")

        with pytest.raises(RpcError):
            await cache.rename_list("l1", "Office")

        lists = await cache.fetch_lists()
        assert lists[0].title == "Work"

    async def test_delete_removes_list_and_publishes(
        self,
        cache: ListCache,
        transport: FakeTransport,
        published: list[InvalidationMessage],
    ) -> None:
        """Deleted list leaves the cache and its events are invalidated."""
        await cache.fetch_lists()

        lists = await cache.delete_list("l1")

        assert [item.id for item in lists] == ["l2"]
        assert transport.args_of("delete_list") == [{"listid": "l1"}]
        assert len(published) == 1
        assert published[0].list_ids == frozenset({"l1"})
        assert published[0].refresh_timeline is False

    async def test_concurrent_renames_both_survive(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """Renames finishing together keep each other's titles."""
        await cache.fetch_lists()
        gate = transport.hold("rename_list")
        first = asyncio.create_task(cache.rename_list("l1", "Office"))
        second = asyncio.create_task(cache.rename_list("l2", "House"))
        await transport.until_called("rename_list", times=2)

        gate.set()
        await asyncio.gather(first, second)

        titles = {item.id: item.title for item in await cache.fetch_lists()}
        assert titles == {"l1": "Office", "l2": "House"}
        assert transport.count("get_lists") == 1

    async def test_create_during_rename_is_kept(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """A list created while a rename is pending stays cached."""
        transport.reply("new_list", {"id": "l3", "title": "New"})
        await cache.fetch_lists()
        gate = transport.hold("rename_list")
        rename = asyncio.create_task(cache.rename_list("l1", "Office"))
        await transport.until_called("rename_list")

        await cache.create_list("New")
        gate.set()
        await rename

        lists = await cache.fetch_lists()
        assert [item.id for item in lists] == ["l1", "l2", "l3"]
        assert lists[0].title == "Office"

    async def test_delete_after_invalidation_refetches(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """With the collection invalidated mid-delete, the backend is asked again."""
        await cache.fetch_lists()
        gate = transport.hold("delete_list")
        delete = asyncio.create_task(cache.delete_list("l1"))
        await transport.until_called("delete_list")

        cache.invalidate()
        transport.reply("get_lists", LISTS[1:])
        gate.set()

        assert [item.id for item in await delete] == ["l2"]
        assert transport.count("get_lists") == 2

    async def test_delete_unknown_list_makes_no_rpc(
        self,
        cache: ListCache,
        transport: FakeTransport,
        published: list[InvalidationMessage],
    ) -> None:
        """Unknown id raises NotFoundError and publishes nothing."""
        with pytest.raises(NotFoundError):
            await cache.delete_list("missing")
        assert transport.count("delete_list") == 0
        assert published == []

    async def test_delete_failure_leaves_cache_unchanged(
        self,
        cache: ListCache,
        transport: FakeTransport,
        published: list[InvalidationMessage],
    ) -> None:
        """Rejected delete keeps the list and publishes nothing."""
        await cache.fetch_lists()
        transport.fail("delete_list")

        with pytest.raises(RpcError):
            await cache.delete_list("l1")

        assert [item.id for item in await cache.fetch_lists()] == ["l1", "l2"]
        assert published == []

    async def test_find_refetches_once_on_miss(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """An id missing from the cache triggers one refetch."""
        await cache.fetch_lists()
        transport.reply("get_lists", [*LISTS, {"id": "l3", "title": "New"}])

        found = await cache.find("l3")
        missing = await cache.find("l4")

        assert found is not None and found.title == "New"
        assert missing is None
        assert transport.count("get_lists") == 3

    async def test_invalidated_fetch_does_not_repopulate(
        self, cache: ListCache, transport: FakeTransport
    ) -> None:
        """A fetch pending across an invalidation is not cached."""
        gate = transport.hold("get_lists")
        pending = asyncio.create_task(cache.fetch_lists())
        await transport.until_called("get_lists")

        cache.invalidate()
        gate.set()
        await pending

        assert cache.snapshot() is None
