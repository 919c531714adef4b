"""Typed wrapper over the backend command surface.

Each coroutine maps to one backend command. Replies are validated with
pydantic before they reach a cache; a reply of the wrong shape raises
``MalformedResponseError`` and is never partially trusted.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from tasklane.errors import MalformedResponseError
from tasklane.models import Event, Priority, Tag, TagColor, TaskList, TimelineBucket
from tasklane.rpc.transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LISTS = TypeAdapter(list[TaskList])
_LIST = TypeAdapter(TaskList)
_EVENTS = TypeAdapter(list[Event])
_TAGS = TypeAdapter(list[Tag])
_TEXT = TypeAdapter(str)


def _decode(command: str, adapter: TypeAdapter[T], payload: Any) -> T:
    try:
        return adapter.validate_python(payload)
    except ValidationError as e:
        logger.error(f"Malformed reply for {command}: {e.error_count()} validation errors")
        raise MalformedResponseError(command, str(e)) from e


class BackendClient:
    """Backend RPC surface consumed by the caches."""

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    async def _call(self, command: str, **args: Any) -> Any:
        logger.debug(f"RPC {command} {sorted(args)}")
        return await self.transport.invoke(command, args)

    # -------------------------------------------------------------------------
    # Lists
    # -------------------------------------------------------------------------

    async def get_lists(self) -> list[TaskList]:
        return _decode("get_lists", _LISTS, await self._call("get_lists"))

    async def new_list(self, title: str, icon: str) -> TaskList:
        return _decode("new_list", _LIST, await self._call("new_list", title=title, icon=icon))

    async def rename_list(self, list_id: str, new_title: str) -> None:
        await self._call("rename_list", listid=list_id, new=new_title)

    async def delete_list(self, list_id: str) -> None:
        await self._call("delete_list", listid=list_id)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    async def list_content(self, list_id: str, page: int, page_size: int) -> list[Event]:
        payload = await self._call("list_content", listid=list_id, page=page, pageSize=page_size)
        return _decode("list_content", _EVENTS, payload)

    async def add_event(self, list_id: str, title: str, priority: Priority, ddl: str) -> None:
        await self._call(
            "add_event", listid=list_id, title=title, priority=priority.value, ddl=ddl
        )

    async def update_event(self, event: Event) -> None:
        await self._call("update_event", fEvent=event.to_wire())

    async def delete_event(self, event_id: str) -> None:
        await self._call("delete_event", uuid=event_id)

    async def event_content(self, event_id: str) -> str:
        return _decode("event_content", _TEXT, await self._call("event_content", uuid=event_id))

    async def write_content(self, event_id: str, content: str) -> None:
        await self._call("write_content", uuid=event_id, content=content)

    async def filter_events(self, bucket: TimelineBucket) -> list[Event]:
        payload = await self._call("filter_events", filter=bucket.value)
        return _decode("filter_events", _EVENTS, payload)

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    async def get_tags(self) -> list[Tag]:
        return _decode("get_tags", _TAGS, await self._call("get_tags"))

    async def add_tag(self, name: str, color: TagColor) -> None:
        await self._call("add_tag", tag=name, color=color.value)

    async def delete_tag(self, name: str) -> None:
        await self._call("delete_tag", tag=name)

    async def tag_content(self, name: str) -> list[Event]:
        return _decode("tag_content", _EVENTS, await self._call("tag_content", tag=name))

    async def aclose(self) -> None:
        await self.transport.aclose()
