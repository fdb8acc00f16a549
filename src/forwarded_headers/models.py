"""Data models for forwarded header resolution.

Per-request values (``HopEntry``, ``TrustAccumulator``, ``ForwardingResult``)
are created fresh for every request and never shared.
"""

from enum import StrEnum
from ipaddress import IPv4Address, IPv6Address

from pydantic import BaseModel, ConfigDict, Field

from forwarded_headers.exceptions import ForwardedHeadersError


class ForwardedFeature(StrEnum):
    """Forwarded headers that can be honoured."""

    FOR = "for"
    PROTO = "proto"
    HOST = "host"


class Endpoint(BaseModel):
    """IP address and port of a connection peer.

    Attributes:
        address: Peer IP address
        port: Peer port (0 when unknown)
    """

    model_config = ConfigDict(frozen=True)

    address: IPv4Address | IPv6Address
    port: int = Field(default=0, ge=0, le=65535)

    def __str__(self) -> str:
        if self.address.version == 6:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


class HopEntry(BaseModel):
    """Values reported for one proxy hop.

    Index 0 is the hop nearest to the server, i.e. the right-most entry of
    each forwarded header.

    Attributes:
        index: Position in nearest-to-farthest order
        ip_and_port_text: Raw ``X-Forwarded-For`` entry
        scheme: Raw ``X-Forwarded-Proto`` entry
        host: Raw ``X-Forwarded-Host`` entry
    """

    model_config = ConfigDict(frozen=True)

    index: int
    ip_and_port_text: str | None = None
    scheme: str | None = None
    host: str | None = None


class TrustAccumulator(BaseModel):
    """Most-forward trusted values seen during a walk.

    Seeded from the native connection endpoint; ``scheme`` and ``host``
    start out unset and are only filled from forwarded values.
    """

    remote_endpoint: Endpoint | None = None
    ip_and_port_text: str | None = None
    scheme: str | None = None
    host: str | None = None

    # Set when the corresponding value was taken from a forwarded header
    for_applied: bool = False
    proto_applied: bool = False
    host_applied: bool = False

    @property
    def apply_changes(self) -> bool:
        return self.for_applied or self.proto_applied or self.host_applied


class WalkOutcome(BaseModel):
    """State left behind by a completed trust walk."""

    accumulator: TrustAccumulator
    entries_consumed: int = 0
    stopped_at: Endpoint | None = None


class ForwardingResult(BaseModel):
    """Outcome of resolving forwarded headers for one request.

    Either the walk completed (``aborted`` is None, and ``applied`` tells
    whether anything was rewritten), or it was aborted under header
    symmetry and the request was left untouched.

    Attributes:
        applied: Whether any request attribute was rewritten
        entries_consumed: Number of hops consumed from the forwarded headers
        aborted: Error that aborted the operation, if any
        stopped_at: Untrusted proxy endpoint that ended the walk, if any
        original_endpoint: Native peer endpoint, when it was replaced
        remote_endpoint: Resolved client endpoint
        scheme: Resolved scheme
        host: Resolved host
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    applied: bool = False
    entries_consumed: int = 0
    aborted: ForwardedHeadersError | None = None
    stopped_at: Endpoint | None = None
    original_endpoint: Endpoint | None = None
    remote_endpoint: Endpoint | None = None
    scheme: str | None = None
    host: str | None = None

    @property
    def is_aborted(self) -> bool:
        return self.aborted is not None
