"""Transports for backend RPC commands.

A transport delivers one named command with keyword arguments and returns
the decoded reply. ``HttpTransport`` talks to a backend process over HTTP:

    POST {base_url}/invoke/{command}
    body: JSON object with the command arguments
    2xx:  JSON reply (empty body means no value)
    else: error text, raised as RpcError
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
import orjson

from tasklane.errors import MalformedResponseError, RpcError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Delivers backend commands.

    Implementations raise ``RpcError`` for every failure so callers only
    need to handle one exception family.
    """

    async def invoke(self, command: str, args: dict[str, Any]) -> Any:
        """Run ``command`` on the backend and return its decoded reply."""
        ...

    async def aclose(self) -> None:
        """Release transport resources."""
        ...


class HttpTransport:
    """JSON-over-HTTP transport using a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def invoke(self, command: str, args: dict[str, Any]) -> Any:
        try:
            response = await self._client.post(
                f"/invoke/{command}",
                content=orjson.dumps(args),
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Backend command {command} timed out")
            raise RpcError(command, "timed out") from e
        except httpx.RequestError as e:
            logger.warning(f"Backend unreachable for {command}: {e}")
            raise RpcError(command, f"backend unreachable: {e}") from e

        if response.status_code >= 400:
            detail = response.text or f"HTTP {response.status_code}"
            raise RpcError(command, detail)

        if not response.content:
            return None

        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise MalformedResponseError(command, str(e)) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
