"""Unit tests for Forwarded Headers Middleware."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import Request
from starlette.responses import Response

from forwarded_headers.config import ForwardedHeadersConfig
from forwarded_headers.middleware import STATE_KEY, ForwardedHeadersMiddleware, add_forwarded_headers
from forwarded_headers.models import ForwardingResult


@pytest.fixture
def config() -> ForwardedHeadersConfig:
    return ForwardedHeadersConfig(
        forwarded_headers={"for", "proto", "host"},
        known_proxies=[],
        known_networks=["10.0.0.0/8"],
        forward_limit=None,
    )


@pytest.fixture
def mock_call_next():
    """Create a call_next function that records the request it receives."""
    seen: list[Request] = []

    async def _call_next(request: Request) -> Response:
        seen.append(request)
        return Response(content="OK", status_code=200)

    _call_next.seen = seen  # type: ignore[attr-defined]
    return _call_next


@pytest.mark.asyncio
class TestDispatch:
    """Test ForwardedHeadersMiddleware.dispatch."""

    async def test_rewrites_request_before_call_next(
        self,
        config: ForwardedHeadersConfig,
        make_scope: Any,
        mock_call_next: Any,
    ):
        # Arrange
        middleware = ForwardedHeadersMiddleware(MagicMock(), config=config)
        scope = make_scope(headers=[("X-Forwarded-For", "203.0.113.7"), ("X-Forwarded-Proto", "https")])
        request = Request(scope)

        # Act
        response = await middleware.dispatch(request, mock_call_next)

        # Assert
        assert response.status_code == 200
        forwarded = mock_call_next.seen[0]
        assert forwarded.client.host == "203.0.113.7"
        assert forwarded.url.scheme == "https"
        assert forwarded.headers["X-Original-For"] == "10.0.0.1:41000"

    async def test_stores_result_in_request_state(
        self,
        config: ForwardedHeadersConfig,
        make_scope: Any,
        mock_call_next: Any,
    ):
        middleware = ForwardedHeadersMiddleware(MagicMock(), config=config)
        scope = make_scope(headers=[("X-Forwarded-For", "203.0.113.7")])

        await middleware.dispatch(Request(scope), mock_call_next)

        result = scope["state"][STATE_KEY]
        assert isinstance(result, ForwardingResult)
        assert result.entries_consumed == 1

    async def test_untrusted_peer_passes_through_unchanged(
        self,
        config: ForwardedHeadersConfig,
        make_scope: Any,
        mock_call_next: Any,
    ):
        middleware = ForwardedHeadersMiddleware(MagicMock(), config=config)
        scope = make_scope(headers=[("X-Forwarded-For", "10.0.0.5")], client=("203.0.113.99", 5000))

        await middleware.dispatch(Request(scope), mock_call_next)

        assert mock_call_next.seen[0].client.host == "203.0.113.99"


@pytest.mark.asyncio
class TestWebSocket:
    """WebSocket scopes bypass dispatch but are still rewritten."""

    async def test_websocket_scope_is_rewritten(self, config: ForwardedHeadersConfig, make_scope: Any):
        # Arrange
        app = AsyncMock()
        middleware = ForwardedHeadersMiddleware(app, config=config)
        scope = make_scope(
            headers=[("X-Forwarded-For", "203.0.113.7"), ("X-Forwarded-Proto", "https")],
            scheme="ws",
            scope_type="websocket",
        )
        receive, send = AsyncMock(), AsyncMock()

        # Act
        await middleware(scope, receive, send)

        # Assert
        app.assert_awaited_once_with(scope, receive, send)
        assert scope["client"] == ("203.0.113.7", 0)
        assert scope["scheme"] == "wss"

    async def test_lifespan_scope_is_passed_through(self, config: ForwardedHeadersConfig):
        app = AsyncMock()
        middleware = ForwardedHeadersMiddleware(app, config=config)
        scope = {"type": "lifespan"}
        receive, send = AsyncMock(), AsyncMock()

        await middleware(scope, receive, send)

        app.assert_awaited_once_with(scope, receive, send)
        assert scope == {"type": "lifespan"}


class TestConfiguration:
    """Middleware construction tests."""

    def test_loads_config_from_environment_by_default(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("FORWARDED_FORWARDED_HEADERS", '["proto"]')

        middleware = ForwardedHeadersMiddleware(MagicMock())

        assert middleware.config.forwarded_headers == frozenset({"proto"})

    def test_add_forwarded_headers_registers_middleware(self, config: ForwardedHeadersConfig):
        app = MagicMock()

        add_forwarded_headers(app, config)

        app.add_middleware.assert_called_once_with(ForwardedHeadersMiddleware, config=config)
