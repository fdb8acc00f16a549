"""FastAPI dependency helpers.

Read the client identity resolved by ``ForwardedHeadersMiddleware``::

    @app.get("/whoami")
    async def whoami(client_ip: str = Depends(get_client_ip)):
        return {"ip": client_ip}
"""

from fastapi import Request

from forwarded_headers.middleware import STATE_KEY
from forwarded_headers.models import ForwardingResult

_DEFAULT_UNKNOWN_IP = "unknown"


def get_client_ip(request: Request) -> str:
    """Return the resolved client IP address.

    After ``ForwardedHeadersMiddleware`` has run, ``request.client`` already
    holds the most-forward trusted address, so no header is consulted here.

    Returns:
        Client IP address, or ``"unknown"`` if the server exposes none
    """
    if request.client:
        return request.client.host
    return _DEFAULT_UNKNOWN_IP


def get_forwarding_result(request: Request) -> ForwardingResult | None:
    """Return the outcome recorded by ``ForwardedHeadersMiddleware`` for this request."""
    return request.scope.get("state", {}).get(STATE_KEY)


def get_original_client(request: Request) -> str | None:
    """Return the native peer endpoint (``address:port``) replaced by forwarded headers.

    Returns:
        The proxy endpoint the connection actually came from, or None if
        the client address was not rewritten
    """
    result = get_forwarding_result(request)
    if result is None or result.original_endpoint is None:
        return None
    return str(result.original_endpoint)
