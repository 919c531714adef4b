"""UI-facing stores over the caches."""

from tasklane.stores.base import Store
from tasklane.stores.events import EventStore
from tasklane.stores.lists import ListStore
from tasklane.stores.tags import TagStore
from tasklane.stores.timeline import TimelineStore

__all__ = [
    "EventStore",
    "ListStore",
    "Store",
    "TagStore",
    "TimelineStore",
]
