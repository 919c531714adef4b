"""Cache layer for tasklane.

In-memory read-through caches over the backend RPC surface:
- TTL-gated entries (5 minutes by default)
- Coalescing of concurrent fetches for the same key
- Paginated event pages with incremental "load more"
- Cross-cache invalidation through a coordinator
"""

from tasklane.cache.events import ContentCache, EventCache, Page, PagedEvents, PageInfo
from tasklane.cache.inflight import InFlight
from tasklane.cache.invalidation import (
    InvalidationCoordinator,
    InvalidationMessage,
    InvalidationType,
    LocalCacheInvalidator,
)
from tasklane.cache.keys import CacheKeys
from tasklane.cache.lists import ListCache
from tasklane.cache.tags import TagCache
from tasklane.cache.ttl import DEFAULT_TTL, CacheEntry, TTLCache

__all__ = [
    # Primitives
    "CacheEntry",
    "CacheKeys",
    "DEFAULT_TTL",
    "InFlight",
    "TTLCache",
    # Entity caches
    "ContentCache",
    "EventCache",
    "ListCache",
    "Page",
    "PagedEvents",
    "PageInfo",
    "TagCache",
    # Invalidation
    "InvalidationCoordinator",
    "InvalidationMessage",
    "InvalidationType",
    "LocalCacheInvalidator",
]
