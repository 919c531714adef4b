"""Reactive state for lists."""

from __future__ import annotations

from tasklane.cache.lists import DEFAULT_ICON, ListCache
from tasklane.errors import TasklaneError
from tasklane.models import TaskList
from tasklane.stores.base import Store


class ListStore(Store):
    """Lists shown in the sidebar."""

    name = "lists"

    def __init__(self, cache: ListCache) -> None:
        super().__init__()
        self.cache = cache
        self.lists: list[TaskList] = []

    def get_list_by_id(self, list_id: str) -> TaskList | None:
        return next((item for item in self.lists if item.id == list_id), None)

    @property
    def sorted_lists(self) -> list[TaskList]:
        return sorted(self.lists, key=lambda item: item.title.casefold())

    async def fetch_lists(self) -> list[TaskList]:
        with self._operation("fetch_lists"):
            try:
                self.lists = await self.cache.fetch_lists()
            except TasklaneError as e:
                self._fail("Failed to fetch lists", e)
                return []
            return list(self.lists)

    async def create_list(self, title: str, icon: str = DEFAULT_ICON) -> list[TaskList]:
        with self._operation("create_list"):
            try:
                self.lists = await self.cache.create_list(title, icon)
            except TasklaneError as e:
                self._fail("Failed to create list", e)
            return list(self.lists)

    async def rename_list(self, list_id: str, new_title: str) -> list[TaskList]:
        with self._operation("rename_list"):
            try:
                self.lists = await self.cache.rename_list(list_id, new_title)
            except TasklaneError as e:
                self._fail("Failed to rename list", e)
            return list(self.lists)

    async def delete_list(self, list_id: str) -> list[TaskList]:
        with self._operation("delete_list"):
            try:
                self.lists = await self.cache.delete_list(list_id)
            except TasklaneError as e:
                self._fail("Failed to delete list", e)
            return list(self.lists)

    def clear_cache(self) -> None:
        self.lists = []
        self.cache.clear()
