"""Domain models mirrored from the backend.

The backend owns every entity; these are read-through copies. Models are
frozen so a value handed out by a cache can never be edited in place.
Wire names (``listid``, ``tag``, ``ddl``, ``create``) are kept as aliases.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    """Base model for backend entities.

    Unknown fields are ignored so that newer backends can add fields
    without breaking older clients.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )


class Priority(str, Enum):
    """Event priority."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNDEFINED = "Undefined"


class TagColor(str, Enum):
    """Display color of a tag."""

    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    SUCCESS = "Success"
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


class TimelineBucket(str, Enum):
    """Backend-computed date ranges used by the timeline."""

    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    NEXT_WEEK = "next_week"
    OVERDUE = "overdue"


UNDEFINED = "Undefined"

PRIORITY_WEIGHT: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
    Priority.UNDEFINED: 0,
}


class TaskList(FrozenModel):
    """A list of events."""

    id: str
    title: str
    icon: str = "mdi-format-list-bulleted"


class Tag(FrozenModel):
    """A free-form tag; ``name`` is the unique key."""

    name: str
    color: TagColor = TagColor.PRIMARY


class Event(FrozenModel):
    """An event (task) without its body content."""

    id: str
    list_id: str = Field(alias="listid")
    title: str
    deadline: str = Field(default=UNDEFINED, alias="ddl")
    priority: Priority = Priority.UNDEFINED
    finished: bool = False
    color: str = ""
    icon: str = ""
    tags: tuple[str, ...] | None = Field(default=None, alias="tag")
    created: str = Field(default="", alias="create")

    def to_wire(self) -> dict[str, Any]:
        """Serialize using backend field names."""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def tag_set(self) -> frozenset[str]:
        return frozenset(self.tags or ())


# Accepted spellings for each Event field in a partial update
_EVENT_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "list_id": ("list_id", "listid"),
    "title": ("title",),
    "deadline": ("deadline", "ddl"),
    "priority": ("priority",),
    "finished": ("finished",),
    "color": ("color",),
    "icon": ("icon",),
    "tags": ("tags", "tag"),
    "created": ("created", "create"),
}


def _lookup(update: Mapping[str, Any], field: str) -> tuple[bool, Any]:
    for key in _EVENT_FIELD_KEYS[field]:
        if key in update:
            return True, update[key]
    return False, None


def _text(update: Mapping[str, Any], field: str, current: str) -> str:
    present, value = _lookup(update, field)
    if not present or value is None:
        return current
    return str(value)


def merge_event(current: Event, update: Event | Mapping[str, Any]) -> Event:
    """Merge a full or partial update into ``current``.

    Field policies:
        id        immutable; a mismatching id is rejected
        list_id   replaced when a non-empty value is given
        title     replaced when given
        deadline  replaced when given
        priority  coerced to ``Priority``; kept when missing
        finished  coerced to bool; kept when missing or None
        color     replaced when given
        icon      replaced when given
        tags      replaced when the key is present (None clears)
        created   never changes
    """
    if isinstance(update, Event):
        update = update.model_dump()

    present, event_id = _lookup(update, "id")
    if present and event_id is not None and str(event_id) != current.id:
        raise ValueError(f"cannot merge event {event_id} into event {current.id}")

    list_id = _text(update, "list_id", current.list_id) or current.list_id

    present, priority = _lookup(update, "priority")
    merged_priority = Priority(priority) if present and priority is not None else current.priority

    present, finished = _lookup(update, "finished")
    merged_finished = bool(finished) if present and finished is not None else current.finished

    present, tags = _lookup(update, "tags")
    if present:
        merged_tags = tuple(str(t) for t in tags) if tags is not None else None
    else:
        merged_tags = current.tags

    return Event(
        id=current.id,
        list_id=list_id,
        title=_text(update, "title", current.title),
        deadline=_text(update, "deadline", current.deadline),
        priority=merged_priority,
        finished=merged_finished,
        color=_text(update, "color", current.color),
        icon=_text(update, "icon", current.icon),
        tags=merged_tags,
        created=current.created,
    )


def sort_by_priority(items: list[Event]) -> list[Event]:
    """Sort events High first; order within a priority is preserved."""
    return sorted(items, key=lambda e: PRIORITY_WEIGHT.get(e.priority, 0), reverse=True)


def now_ms() -> str:
    """Current time as a millisecond timestamp string (backend ``ddl`` format)."""
    return str(int(time.time() * 1000))


__all__ = [
    "Event",
    "FrozenModel",
    "Priority",
    "PRIORITY_WEIGHT",
    "Tag",
    "TagColor",
    "TaskList",
    "TimelineBucket",
    "UNDEFINED",
    "merge_event",
    "now_ms",
    "sort_by_priority",
]
