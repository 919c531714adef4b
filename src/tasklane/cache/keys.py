"""Key schema for pending fetches.

Key format: {prefix}:{entity_type}[:{identifier}][:{variant}]

Where:
- prefix: "tasklane"
- entity_type: "lists", "events", "content", "tags", "tag", "timeline"
- identifier: list id, event id or tag name
- variant: e.g. "page:2" for one page of a list's events
"""

from __future__ import annotations


class CacheKeys:
    """Key generator following one naming convention."""

    PREFIX = "tasklane"

    @classmethod
    def lists(cls) -> str:
        """Key for the full collection of lists."""
        return f"{cls.PREFIX}:lists"

    @classmethod
    def events(cls, list_id: str) -> str:
        """Prefix shared by every page of one list's events."""
        return f"{cls.PREFIX}:events:{list_id}"

    @classmethod
    def event_page(cls, list_id: str, page: int) -> str:
        """Key for one page of a list's events."""
        return f"{cls.events(list_id)}:page:{page}"

    @classmethod
    def content(cls, event_id: str) -> str:
        """Key for an event's body content."""
        return f"{cls.PREFIX}:content:{event_id}"

    @classmethod
    def tags(cls) -> str:
        """Key for the full tag collection."""
        return f"{cls.PREFIX}:tags"

    @classmethod
    def tag_content(cls, name: str) -> str:
        """Key for the events carrying one tag."""
        return f"{cls.PREFIX}:tag:{name}"

    @classmethod
    def timeline(cls) -> str:
        """Key for the timeline aggregator as a whole."""
        return f"{cls.PREFIX}:timeline"
