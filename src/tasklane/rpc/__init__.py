"""Backend RPC access for tasklane.

- Transport: protocol for delivering named commands
- HttpTransport: JSON-over-HTTP transport (httpx + orjson)
- BackendClient: typed, validated command surface
"""

from tasklane.rpc.client import BackendClient
from tasklane.rpc.transport import HttpTransport, Transport

__all__ = [
    "BackendClient",
    "HttpTransport",
    "Transport",
]
