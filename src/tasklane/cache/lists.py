"""Cache of the full collection of lists.

The collection is cached as one entry. Creating a list appends the
backend's reply to the cached collection instead of refetching it. Rename
and delete are applied in two phases: the id is checked against the known
collection, the backend is called, and only then is the change applied to
the collection cached at that point, so mutations finishing in any order
all survive. If the backend call fails, the cached collection stays as it
was and the error propagates.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from tasklane.cache.inflight import InFlight
from tasklane.cache.invalidation import InvalidationCoordinator
from tasklane.cache.keys import CacheKeys
from tasklane.cache.ttl import DEFAULT_TTL, Clock, TTLCache
from tasklane.errors import NotFoundError
from tasklane.models import TaskList
from tasklane.rpc.client import BackendClient

logger = logging.getLogger(__name__)

DEFAULT_ICON = "mdi-format-list-bulleted"

_KEY = "lists"


class ListCache:
    """Read-through cache over the backend's lists."""

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
        self._cache: TTLCache[str, tuple[TaskList, ...]] = TTLCache(ttl=ttl, clock=clock)
        self._inflight = inflight if inflight is not None else InFlight()

    async def fetch_lists(self) -> list[TaskList]:
        """Return all lists, calling ``get_lists`` only on miss or expiry."""
        entry = self._cache.get_entry(_KEY)
        if entry is not None:
            return list(entry.value)
        return list(await self._inflight.run(CacheKeys.lists(), self._load))

    async def _load(self) -> tuple[TaskList, ...]:
        version = self._cache.version(_KEY)
        lists = tuple(await self.client.get_lists())
        if not self._cache.set_if_version(_KEY, lists, version):
            logger.debug("Discarded lists fetched before an invalidation")
        logger.debug(f"Fetched {len(lists)} lists")
        return lists

    def snapshot(self) -> list[TaskList] | None:
        """Cached collection without fetching, or None if nothing valid is cached."""
        entry = self._cache.get_entry(_KEY)
        return list(entry.value) if entry is not None else None

    async def find(self, list_id: str, refresh_on_miss: bool = True) -> TaskList | None:
        """Look up a list by id.

        An id missing from the cached collection triggers one refetch,
        since the list may have been created after the cache was filled.
        """
        for item in await self.fetch_lists():
            if item.id == list_id:
                return item
        if not refresh_on_miss or self.snapshot() is None:
            return None
        self.invalidate()
        return await self.find(list_id, refresh_on_miss=False)

    async def create_list(self, title: str, icon: str = DEFAULT_ICON) -> list[TaskList]:
        """Create a list and return the updated collection.

        The new list is appended to the cached collection when one is cached;
        otherwise the collection is fetched (and already contains it).
        """
        new_list = await self.client.new_list(title, icon)
        logger.info(f"Created list {new_list.id}")

        entry = self._cache.get_entry(_KEY)
        if entry is None:
            return await self.fetch_lists()

        updated = (*entry.value, new_list)
        self._commit(updated, entry.timestamp)
        return list(updated)

    async def rename_list(self, list_id: str, new_title: str) -> list[TaskList]:
        """Rename a list.

        Raises:
            NotFoundError: if the list is unknown; ``rename_list`` is not called
            RpcError: if the backend rejects the rename; the cache is unchanged
        """
        _index_of(await self.fetch_lists(), list_id)

        await self.client.rename_list(list_id, new_title)

        logger.info(f"Renamed list {list_id}")
        return await self._apply(
            lambda lists: tuple(
                item.model_copy(update={"title": new_title}) if item.id == list_id else item
                for item in lists
            )
        )

    async def delete_list(self, list_id: str) -> list[TaskList]:
        """Delete a list and evict its cached events.

        Raises:
            NotFoundError: if the list is unknown; ``delete_list`` is not called
            RpcError: if the backend rejects the delete; the cache is unchanged
        """
        _index_of(await self.fetch_lists(), list_id)

        await self.client.delete_list(list_id)

        logger.info(f"Deleted list {list_id}")
        updated = await self._apply(
            lambda lists: tuple(item for item in lists if item.id != list_id)
        )
        await self.coordinator.list_deleted(list_id)
        return updated

    async def _apply(
        self, change: Callable[[tuple[TaskList, ...]], tuple[TaskList, ...]]
    ) -> list[TaskList]:
        # Applied to the collection cached now, which may differ from the one
        # read before the backend call
        entry = self._cache.get_entry(_KEY)
        if entry is None:
            self.invalidate()
            return await self.fetch_lists()
        updated = change(entry.value)
        self._commit(updated, entry.timestamp)
        return list(updated)

    def _commit(self, lists: tuple[TaskList, ...], timestamp: float | None) -> None:
        # A fetch pending from before this change must not overwrite it
        self._cache.invalidate(_KEY)
        self._inflight.forget(CacheKeys.lists())
        self._cache.set(_KEY, lists, timestamp=timestamp)

    def invalidate(self) -> None:
        self._cache.invalidate(_KEY)
        self._inflight.forget(CacheKeys.lists())

    def clear(self) -> None:
        self._cache.clear()
        self._inflight.forget(CacheKeys.lists())


def _index_of(lists: list[TaskList], list_id: str) -> int:
    for index, item in enumerate(lists):
        if item.id == list_id:
            return index
    logger.warning(f"List {list_id} not found")
    raise NotFoundError("List", list_id)
