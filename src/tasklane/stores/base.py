"""Shared behaviour of the UI-facing stores.

Stores are the error boundary of the cache layer. Each operation runs
inside ``_operation``, which tracks ``is_loading``, resets ``error`` and
tags log records with the store and operation names. Cache errors are
turned into a readable ``error`` message by ``_fail`` and the operation
returns a safe fallback instead of raising.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from tasklane.observability.logging import LogContext


class Store:
    """Base class with loading/error state."""

    name = "store"

    def __init__(self) -> None:
        self.error: str | None = None
        self._busy = 0

    @property
    def is_loading(self) -> bool:
        return self._busy > 0

    @contextmanager
    def _operation(self, operation: str) -> Iterator[None]:
        self._busy += 1
        if self._busy == 1:
            self.error = None
        try:
            with LogContext(store=self.name, operation=operation):
                yield
        finally:
            self._busy -= 1

    def _fail(self, action: str, error: Exception) -> None:
        logging.getLogger(type(self).__module__).error(f"{action}: {error}")
        self.error = f"{action}: {error}"
