"""Error types for the tasklane cache layer.

Cache classes raise these; stores catch them at their boundary and turn
them into a human-readable ``error`` message.
"""

from __future__ import annotations


class TasklaneError(Exception):
    """Base exception for all tasklane errors."""


class RpcError(TasklaneError):
    """Backend call failed (transport error or backend-reported failure)."""

    def __init__(self, command: str, detail: str):
        self.command = command
        self.detail = detail
        super().__init__(f"{command} failed: {detail}")


class MalformedResponseError(RpcError):
    """Backend replied with data that does not match the expected shape."""

    def __init__(self, command: str, detail: str):
        super().__init__(command, f"invalid response format: {detail}")


class NotFoundError(TasklaneError):
    """A list, event or tag id is not known locally."""

    def __init__(self, resource_type: str, identifier: str):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} {identifier} does not exist")


class PaginationError(TasklaneError):
    """Requested page is not contiguous with the cached pages."""

    def __init__(self, list_id: str, page: int, current_page: int):
        self.list_id = list_id
        self.page = page
        self.current_page = current_page
        super().__init__(
            f"page {page} of list {list_id} is not contiguous with "
            f"cached pages 1..{current_page}"
        )
