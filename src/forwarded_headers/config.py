"""Forwarded headers configuration.

Settings are loaded from environment variables with the ``FORWARDED_``
prefix (or a ``.env`` file). List values are given as JSON, e.g.
``FORWARDED_KNOWN_NETWORKS='["10.0.0.0/8", "fd00::/8"]'``.
"""

from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network, ip_address, ip_network

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from forwarded_headers.models import ForwardedFeature

IPAddress = IPv4Address | IPv6Address
IPNetwork = IPv4Network | IPv6Network


class ForwardedHeadersConfig(BaseSettings):
    """Trust policy for forwarded headers.

    The policy is immutable and safe to share between concurrent requests.
    Leaving both ``known_proxies`` and ``known_networks`` empty trusts every
    proxy in the chain.

    Attributes:
        forwarded_headers: Headers to honour (for, proto, host)
        forward_limit: Maximum number of hops to process (None for no limit)
        known_proxies: Individually trusted proxy addresses
        known_networks: Trusted proxy networks
        require_header_symmetry: Abort unless all enabled headers agree on hop count
            and every value parses
        use_relaxed_header_validation: Accept proto and host values without
            syntax validation

    Example:
        >>> config = ForwardedHeadersConfig(
        ...     forwarded_headers={"for", "proto"},
        ...     known_networks=["10.0.0.0/8"],
        ... )
        >>> config.is_known_address(ip_address("10.1.2.3"))
        True
    """

    forwarded_headers: frozenset[ForwardedFeature] = Field(
        default=frozenset(), description="Forwarded headers to honour"
    )
    forward_limit: int | None = Field(
        default=1, ge=1, description="Maximum number of hops to process (None for no limit)"
    )
    known_proxies: list[IPAddress] = Field(
        default_factory=lambda: [ip_address("::1")],
        description="Trusted proxy addresses",
    )
    known_networks: list[IPNetwork] = Field(
        default_factory=lambda: [ip_network("127.0.0.0/8")],
        description="Trusted proxy networks",
    )
    require_header_symmetry: bool = False
    use_relaxed_header_validation: bool = False

    # Header names
    forwarded_for_header_name: str = "X-Forwarded-For"
    forwarded_proto_header_name: str = "X-Forwarded-Proto"
    forwarded_host_header_name: str = "X-Forwarded-Host"
    original_for_header_name: str = "X-Original-For"
    original_proto_header_name: str = "X-Original-Proto"
    original_host_header_name: str = "X-Original-Host"

    model_config = SettingsConfigDict(
        env_prefix="FORWARDED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("forward_limit", mode="before")
    @classmethod
    def _parse_unlimited(cls, value: object) -> object:
        """Map "null", "none" and "" (as read from the environment) to no limit."""
        if isinstance(value, str) and value.strip().lower() in {"", "null", "none"}:
            return None
        return value

    def is_enabled(self, feature: ForwardedFeature) -> bool:
        return feature in self.forwarded_headers

    @property
    def checks_known_addresses(self) -> bool:
        """Whether any trust restriction is configured."""
        return bool(self.known_proxies or self.known_networks)

    def is_known_address(self, address: IPAddress) -> bool:
        """Check whether *address* belongs to a trusted proxy or network.

        IPv4-mapped IPv6 addresses (``::ffff:10.0.0.1``) are also matched
        in their IPv4 form.

        Args:
            address: Address of the peer that supplied the forwarded values

        Returns:
            True if the peer is trusted
        """
        candidates: list[IPAddress] = [address]
        if isinstance(address, IPv6Address) and address.ipv4_mapped is not None:
            candidates.append(address.ipv4_mapped)

        for candidate in candidates:
            if candidate in self.known_proxies:
                return True
            if any(candidate in network for network in self.known_networks):
                return True
        return False
