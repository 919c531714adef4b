"""Reactive state for tags."""

from __future__ import annotations

from tasklane.cache.tags import TagCache
from tasklane.errors import TasklaneError
from tasklane.models import Event, Tag, TagColor
from tasklane.stores.base import Store


class TagStore(Store):
    """Tags and the events of the selected tag."""

    name = "tags"

    def __init__(self, cache: TagCache) -> None:
        super().__init__()
        self.cache = cache
        self.tags: list[Tag] = []
        self.selected_tag_name: str | None = None
        self.tag_events: list[Event] = []

    def get_tag_by_name(self, name: str) -> Tag | None:
        return next((tag for tag in self.tags if tag.name == name), None)

    @property
    def selected_tag(self) -> Tag | None:
        if self.selected_tag_name is None:
            return None
        return self.get_tag_by_name(self.selected_tag_name)

    async def fetch_tags(self) -> list[Tag]:
        with self._operation("fetch_tags"):
            try:
                self.tags = await self.cache.fetch_tags()
            except TasklaneError as e:
                self._fail("Failed to fetch tags", e)
                return []
            return list(self.tags)

    async def add_tag(self, name: str, color: TagColor = TagColor.PRIMARY) -> list[Tag]:
        with self._operation("add_tag"):
            try:
                await self.cache.add_tag(name, color)
            except TasklaneError as e:
                self._fail("Failed to add tag", e)
                return list(self.tags)
            return await self.fetch_tags()

    async def delete_tag(self, name: str) -> list[Tag]:
        with self._operation("delete_tag"):
            try:
                await self.cache.delete_tag(name)
            except TasklaneError as e:
                self._fail("Failed to delete tag", e)
                return list(self.tags)
            if self.selected_tag_name == name:
                self.clear_selected_tag()
            return await self.fetch_tags()

    async def get_tag_content(self, name: str) -> list[Event]:
        """Select a tag and load the events carrying it."""
        with self._operation("get_tag_content"):
            self.selected_tag_name = name
            try:
                events = await self.cache.get_tag_content(name)
            except TasklaneError as e:
                self._fail(f"Failed to fetch events of tag {name}", e)
                self.tag_events = []
                return []
            if self.selected_tag_name == name:
                self.tag_events = events
            return list(events)

    def clear_selected_tag(self) -> None:
        self.selected_tag_name = None
        self.tag_events = []

    def clear_cache(self) -> None:
        self.tags = []
        self.clear_selected_tag()
        self.cache.clear()
