"""pytest fixtures."""

import os
from collections.abc import Callable
from typing import Any

import pytest

from forwarded_headers.config import ForwardedHeadersConfig

ALL_FEATURES = frozenset({"for", "proto", "host"})


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep FORWARDED_* variables and .env files from leaking into tests."""
    for key in list(os.environ):
        if key.startswith("FORWARDED_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_scope() -> Callable[..., dict[str, Any]]:
    """Build an ASGI http scope.

    Headers are given as (name, value) string pairs and may repeat.
    """

    def _make_scope(
        headers: list[tuple[str, str]] | None = None,
        client: tuple[str, int] | None = ("10.0.0.1", 41000),
        scheme: str = "http",
        host: str | None = "internal.example:8000",
        scope_type: str = "http",
    ) -> dict[str, Any]:
        raw_headers = [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers or []]
        if host is not None:
            raw_headers.insert(0, (b"host", host.encode("latin-1")))
        return {
            "type": scope_type,
            "scheme": scheme,
            "client": client,
            "headers": raw_headers,
            "path": "/",
        }

    return _make_scope


@pytest.fixture
def make_config() -> Callable[..., ForwardedHeadersConfig]:
    """Build a forwarding policy with all headers enabled and no hop limit."""

    def _make_config(**overrides: Any) -> ForwardedHeadersConfig:
        options: dict[str, Any] = {
            "forwarded_headers": ALL_FEATURES,
            "forward_limit": None,
            "known_proxies": [],
            "known_networks": ["10.0.0.0/8"],
        }
        options.update(overrides)
        return ForwardedHeadersConfig(**options)

    return _make_config
