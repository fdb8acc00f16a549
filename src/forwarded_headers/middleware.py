"""Forwarded headers middleware.

Rewrites the client address, scheme and host of each request from the
``X-Forwarded-*`` headers set by trusted reverse proxies, before any
other middleware or endpoint sees the request.
"""

from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp, Receive, Scope, Send

from forwarded_headers.applier import apply_forwarders
from forwarded_headers.config import ForwardedHeadersConfig
from forwarded_headers.models import ForwardingResult
from forwarded_headers.scope import ScopeView

# Key of the forwarding result in the connection state (request.state.forwarding)
STATE_KEY = "forwarding"


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Forwarded headers middleware.

    Should be registered last so that it runs first: rate limiting,
    audit logging and authorization downstream then see the resolved
    client identity.

    Args:
        app: ASGI application
        config: Forwarding policy (loaded from the environment if None)

    Example:
        >>> from fastapi import FastAPI
        >>> from forwarded_headers import ForwardedHeadersMiddleware, ForwardedHeadersConfig
        >>>
        >>> app = FastAPI()
        >>> config = ForwardedHeadersConfig(
        ...     forwarded_headers={"for", "proto"},
        ...     known_networks=["10.0.0.0/8"],
        ... )
        >>> app.add_middleware(ForwardedHeadersMiddleware, config=config)
    """

    def __init__(self, app: ASGIApp, config: ForwardedHeadersConfig | None = None) -> None:
        super().__init__(app)
        self.config = config or ForwardedHeadersConfig()

    def _apply(self, scope: Scope) -> ForwardingResult:
        result = apply_forwarders(ScopeView(scope), self.config)
        scope.setdefault("state", {})[STATE_KEY] = result
        return result

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        # BaseHTTPMiddleware only dispatches http scopes
        if scope["type"] == "websocket":
            self._apply(scope)
            await self.app(scope, receive, send)
            return

        await super().__call__(scope, receive, send)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Apply forwarded headers, then hand the request on.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler

        Returns:
            HTTP response
        """
        self._apply(request.scope)
        return await call_next(request)


def add_forwarded_headers(app: Any, config: ForwardedHeadersConfig | None = None) -> None:
    """Register ``ForwardedHeadersMiddleware`` on a FastAPI/Starlette application.

    Args:
        app: FastAPI or Starlette application
        config: Forwarding policy (loaded from the environment if None)
    """
    app.add_middleware(ForwardedHeadersMiddleware, config=config or ForwardedHeadersConfig())
