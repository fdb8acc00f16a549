"""Trust chain walker.

Walks hop entries from the nearest proxy outwards. A hop's values are
accepted only while the peer that reported them is trusted: before
consuming hop ``i`` the walker checks the endpoint accepted so far (the
native connection endpoint for ``i == 0``) against the trust policy and
stops at the first unknown proxy.
"""

from collections.abc import Sequence

from forwarded_headers.config import ForwardedHeadersConfig
from forwarded_headers.exceptions import ForwardedValueParseError
from forwarded_headers.logging import forwarding_logger
from forwarded_headers.models import (
    Endpoint,
    ForwardedFeature,
    HopEntry,
    TrustAccumulator,
    WalkOutcome,
)
from forwarded_headers.validators import parse_endpoint, validate_host, validate_scheme


def _reject(config: ForwardedHeadersConfig, feature: ForwardedFeature, value: str | None, index: int) -> None:
    # A shorter header running out of entries is not a parse failure
    if value is not None or config.require_header_symmetry:
        forwarding_logger.log_value_parse_failed(feature.value, value, index)
    if config.require_header_symmetry:
        raise ForwardedValueParseError(feature.value, value)


def _is_trusted_peer(config: ForwardedHeadersConfig, peer: Endpoint | None) -> bool:
    # A server without a native remote address cannot identify the first
    # hop, so the check is skipped while no address has been accepted.
    if peer is None or not config.checks_known_addresses:
        return True
    return config.is_known_address(peer.address)


def walk_trust_chain(
    hops: Sequence[HopEntry],
    seed: Endpoint | None,
    config: ForwardedHeadersConfig,
) -> WalkOutcome:
    """Accumulate the most-forward trusted values of a hop chain.

    Under header symmetry any value that fails to parse aborts the whole
    walk. Otherwise a failure only stops that feature from advancing for
    that hop; other features and later hops proceed.

    Args:
        hops: Hop entries, nearest first
        seed: Native remote endpoint of the connection, if known
        config: Forwarding policy

    Returns:
        Accumulated values and the number of hops consumed

    Raises:
        ForwardedValueParseError: A value failed to parse under header symmetry
    """
    check_for = config.is_enabled(ForwardedFeature.FOR)
    check_proto = config.is_enabled(ForwardedFeature.PROTO)
    check_host = config.is_enabled(ForwardedFeature.HOST)

    current = TrustAccumulator(remote_endpoint=seed)
    entries_consumed = 0

    for hop in hops:
        if check_for:
            if not _is_trusted_peer(config, current.remote_endpoint):
                # Stop at the first unknown proxy, keeping what was accepted so far
                forwarding_logger.log_unknown_proxy(str(current.remote_endpoint), hop.index)
                return WalkOutcome(
                    accumulator=current,
                    entries_consumed=entries_consumed,
                    stopped_at=current.remote_endpoint,
                )

            endpoint = parse_endpoint(hop.ip_and_port_text)
            if endpoint is not None:
                current.remote_endpoint = endpoint
                current.ip_and_port_text = hop.ip_and_port_text
                current.for_applied = True
            else:
                _reject(config, ForwardedFeature.FOR, hop.ip_and_port_text, hop.index)

        if check_proto:
            if hop.scheme and (config.use_relaxed_header_validation or validate_scheme(hop.scheme)):
                current.scheme = hop.scheme
                current.proto_applied = True
            else:
                _reject(config, ForwardedFeature.PROTO, hop.scheme, hop.index)

        if check_host:
            if hop.host and (config.use_relaxed_header_validation or validate_host(hop.host)):
                current.host = hop.host
                current.host_applied = True
            else:
                _reject(config, ForwardedFeature.HOST, hop.host, hop.index)

        entries_consumed += 1

    return WalkOutcome(accumulator=current, entries_consumed=entries_consumed)
