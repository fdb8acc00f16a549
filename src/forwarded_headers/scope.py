"""Mutable view over an ASGI connection scope.

Exposes the connection attributes that forwarded headers rewrite: remote
endpoint, scheme, host and request headers. Changes are written back to
the scope in place so that every downstream middleware and endpoint sees
them.
"""

import ipaddress
from typing import Any

from forwarded_headers.models import Endpoint

_WEBSOCKET_SCHEMES = {"http": "ws", "https": "wss"}


class ScopeView:
    """Read and rewrite the connection state of an ``http`` or ``websocket`` scope.

    Args:
        scope: ASGI connection scope

    Example:
        >>> view = ScopeView(request.scope)
        >>> view.get_header_values("X-Forwarded-For")
        ['203.0.113.7, 10.0.0.1']
    """

    def __init__(self, scope: dict[str, Any]) -> None:
        self.scope = scope

    @property
    def remote_endpoint(self) -> Endpoint | None:
        """Native remote endpoint, or None if the server does not expose an IP."""
        client = self.scope.get("client")
        if not client:
            return None

        host, port = client[0], client[1]
        try:
            address = ipaddress.ip_address(host)
        except ValueError:
            # Unix sockets and test clients report a symbolic peer name. No
            # native address means the nearest hop is accepted unchecked, so
            # every peer on such a listener acts as a trusted first proxy.
            return None
        return Endpoint(address=address, port=port or 0)

    @remote_endpoint.setter
    def remote_endpoint(self, endpoint: Endpoint) -> None:
        self.scope["client"] = (str(endpoint.address), endpoint.port)

    @property
    def scheme(self) -> str:
        default = "ws" if self.scope.get("type") == "websocket" else "http"
        return self.scope.get("scheme") or default

    @scheme.setter
    def scheme(self, value: str) -> None:
        if self.scope.get("type") == "websocket":
            value = _WEBSOCKET_SCHEMES.get(value.lower(), value)
        self.scope["scheme"] = value

    @property
    def host(self) -> str:
        values = self.get_header_values("host")
        return values[0] if values else ""

    @host.setter
    def host(self, value: str) -> None:
        self.set_header("host", [value])

    def get_header_values(self, name: str) -> list[str]:
        """Return every raw line of header *name* (case-insensitive), in order."""
        key = name.lower().encode("latin-1")
        return [
            value.decode("latin-1")
            for header_name, value in self.scope.get("headers", [])
            if header_name.lower() == key
        ]

    def set_header(self, name: str, values: list[str]) -> None:
        """Replace header *name* with a single comma-joined line of *values*.

        The header keeps its position if it was already present.
        """
        key = name.lower().encode("latin-1")
        encoded = ", ".join(values).encode("latin-1")

        headers: list[tuple[bytes, bytes]] = []
        replaced = False
        for header_name, value in self.scope.get("headers", []):
            if header_name.lower() == key:
                if not replaced:
                    headers.append((key, encoded))
                    replaced = True
                continue
            headers.append((header_name, value))

        if not replaced:
            headers.append((key, encoded))
        self.scope["headers"] = headers

    def remove_header(self, name: str) -> None:
        key = name.lower().encode("latin-1")
        self.scope["headers"] = [
            (header_name, value)
            for header_name, value in self.scope.get("headers", [])
            if header_name.lower() != key
        ]
