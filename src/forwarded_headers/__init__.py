"""forwarded-headers: resolve the real client behind trusted reverse proxies.

Walks ``X-Forwarded-For`` / ``X-Forwarded-Proto`` / ``X-Forwarded-Host``
from the nearest proxy outwards, validates every hop against a trust
policy, and rewrites the request's client address, scheme and host.

Main components:
    - ForwardedHeadersMiddleware: Starlette/FastAPI middleware
    - ForwardedHeadersConfig: trust policy (env prefix ``FORWARDED_``)
    - apply_forwarders: per-request resolution over an ASGI scope
    - get_client_ip, get_original_client: FastAPI dependency helpers

Example:
    >>> from fastapi import FastAPI
    >>> from forwarded_headers import ForwardedHeadersConfig, ForwardedHeadersMiddleware
    >>>
    >>> app = FastAPI()
    >>> config = ForwardedHeadersConfig(
    ...     forwarded_headers={"for", "proto", "host"},
    ...     known_networks=["10.0.0.0/8"],
    ...     forward_limit=2,
    ... )
    >>> app.add_middleware(ForwardedHeadersMiddleware, config=config)
"""

from forwarded_headers.applier import apply_forwarders
from forwarded_headers.config import ForwardedHeadersConfig
from forwarded_headers.dependencies import get_client_ip, get_forwarding_result, get_original_client
from forwarded_headers.exceptions import (
    ForwardedHeadersError,
    ForwardedValueParseError,
    HeaderSymmetryError,
)
from forwarded_headers.middleware import ForwardedHeadersMiddleware, add_forwarded_headers
from forwarded_headers.models import Endpoint, ForwardedFeature, ForwardingResult, HopEntry
from forwarded_headers.scope import ScopeView

__all__ = [
    "ForwardedHeadersMiddleware",
    "ForwardedHeadersConfig",
    "ForwardedFeature",
    "add_forwarded_headers",
    "apply_forwarders",
    "ScopeView",
    "Endpoint",
    "HopEntry",
    "ForwardingResult",
    "get_client_ip",
    "get_forwarding_result",
    "get_original_client",
    "ForwardedHeadersError",
    "HeaderSymmetryError",
    "ForwardedValueParseError",
]
