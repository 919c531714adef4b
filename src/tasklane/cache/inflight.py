"""Coalescing of concurrent identical fetches.

While a fetch for a key is pending, later callers for the same key await
the same task instead of issuing another backend call:

    inflight = InFlight()
    lists = await inflight.run(CacheKeys.lists(), lambda: client.get_lists())

A caller being cancelled does not cancel the shared task; other waiters
still receive its result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InFlight:
    """Keyed map of pending fetch tasks."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task[Any]] = {}

    async def run(self, key: str, factory: Callable[[], Coroutine[Any, Any, T]]) -> T:
        """Run ``factory()`` for ``key`` or join the fetch already pending."""
        task = self._pending.get(key)
        if task is None:
            task = asyncio.create_task(factory(), name=f"fetch:{key}")
            self._pending[key] = task
            task.add_done_callback(lambda t, key=key: self._finished(key, t))
        else:
            logger.debug(f"Joining pending fetch for {key}")
        return await asyncio.shield(task)

    def _finished(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Mark the outcome retrieved even if every waiter was cancelled
        if not task.cancelled():
            task.exception()

    def forget(self, key: str) -> None:
        """Detach the pending task for ``key`` so the next caller starts a new fetch."""
        self._pending.pop(key, None)

    def forget_prefix(self, prefix: str) -> int:
        keys = [key for key in self._pending if key.startswith(prefix)]
        for key in keys:
            del self._pending[key]
        return len(keys)

    def clear(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
