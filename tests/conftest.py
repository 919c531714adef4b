"""Global pytest configuration and fixtures.

Provides an in-memory scripted transport and a manual clock so the cache
layer can be exercised without a backend process or real time.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fakes import FakeTransport, ManualClock

from tasklane.config import Settings
from tasklane.manager import CacheManager
from tasklane.rpc.client import BackendClient


@pytest.fixture
def transport() -> FakeTransport:
    """Create a scripted transport."""
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> BackendClient:
    """Create a backend client over the fake transport."""
    return BackendClient(transport)


@pytest.fixture
def clock() -> ManualClock:
    """Create a manual clock."""
    return ManualClock()


@pytest.fixture
def settings() -> Settings:
    """Create settings with the default TTL and page size."""
    return Settings(cache_ttl_seconds=300.0, page_size=20)


@pytest.fixture
def manager(client: BackendClient, settings: Settings, clock: ManualClock) -> CacheManager:
    """Create a fully wired cache manager."""
    return CacheManager(client, settings=settings, clock=clock)


@pytest.fixture
def make_event() -> Callable[..., dict[str, Any]]:
    """Factory for events in backend wire format."""

    def factory(
        event_id: str,
        list_id: str = "list-1",
        title: str | None = None,
        priority: str = "Medium",
        tags: list[str] | None = None,
        finished: bool = False,
    ) -> dict[str, Any]:
        return {
            "id": event_id,
            "listid": list_id,
            "title": title or f"Event {event_id}",
            "ddl": "1767225600000",
            "priority": priority,
            "finished": finished,
            "color": "",
            "icon": "",
            "tag": tags,
            "create": "1767139200000",
        }

    return factory


@pytest.fixture
def make_events(make_event: Callable[..., dict[str, Any]]) -> Callable[..., list[dict[str, Any]]]:
    """Factory for ``count`` consecutive wire events of one list."""

    def factory(count: int, list_id: str = "list-1", start: int = 0) -> list[dict[str, Any]]:
        return [make_event(f"{list_id}-e{i}", list_id) for i in range(start, start + count)]

    return factory
