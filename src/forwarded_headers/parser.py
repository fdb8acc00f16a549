"""Header chain parsing.

Each proxy appends its own value to the right of a forwarded header, so
the right-most entry was added by the hop nearest to the server. Hops are
therefore built in reverse header order: index 0 is the nearest hop.
"""

from collections.abc import Iterable, Sequence

from forwarded_headers.config import ForwardedHeadersConfig
from forwarded_headers.exceptions import HeaderSymmetryError
from forwarded_headers.logging import forwarding_logger
from forwarded_headers.models import ForwardedFeature, HopEntry


def split_header_values(lines: Iterable[str]) -> list[str]:
    """Split raw header lines into trimmed comma-separated entries.

    Repeated header lines are concatenated in order and empty entries
    are dropped.

    Example:
        >>> split_header_values(["203.0.113.7, 10.0.0.1", "10.0.0.2"])
        ['203.0.113.7', '10.0.0.1', '10.0.0.2']
    """
    values: list[str] = []
    for line in lines:
        for item in line.split(","):
            item = item.strip()
            if item:
                values.append(item)
    return values


def check_header_symmetry(
    config: ForwardedHeadersConfig,
    forwarded_for: Sequence[str],
    forwarded_proto: Sequence[str],
    forwarded_host: Sequence[str],
) -> None:
    """Require all enabled headers to report the same number of hops.

    Does nothing unless ``require_header_symmetry`` is set.

    Raises:
        HeaderSymmetryError: Enabled headers disagree on hop count
    """
    if not config.require_header_symmetry:
        return

    counts: dict[str, int] = {}
    if config.is_enabled(ForwardedFeature.FOR):
        counts[config.forwarded_for_header_name] = len(forwarded_for)
    if config.is_enabled(ForwardedFeature.PROTO):
        counts[config.forwarded_proto_header_name] = len(forwarded_proto)
    if config.is_enabled(ForwardedFeature.HOST):
        counts[config.forwarded_host_header_name] = len(forwarded_host)

    if len(set(counts.values())) > 1:
        forwarding_logger.log_header_count_mismatch(counts)
        raise HeaderSymmetryError(counts)


def _nearest_first(values: Sequence[str], index: int) -> str | None:
    if index < len(values):
        return values[len(values) - index - 1]
    return None


def build_hop_entries(
    config: ForwardedHeadersConfig,
    forwarded_for: Sequence[str],
    forwarded_proto: Sequence[str],
    forwarded_host: Sequence[str],
) -> list[HopEntry]:
    """Group forwarded values into per-hop entries, nearest hop first.

    Values of disabled headers are ignored. The number of hops is the
    longest enabled header, capped at ``forward_limit``.

    Args:
        config: Forwarding policy
        forwarded_for: ``X-Forwarded-For`` entries in header order
        forwarded_proto: ``X-Forwarded-Proto`` entries in header order
        forwarded_host: ``X-Forwarded-Host`` entries in header order

    Returns:
        Hop entries, index 0 being nearest to the server

    Raises:
        HeaderSymmetryError: Header symmetry is required and violated
    """
    if not config.is_enabled(ForwardedFeature.FOR):
        forwarded_for = ()
    if not config.is_enabled(ForwardedFeature.PROTO):
        forwarded_proto = ()
    if not config.is_enabled(ForwardedFeature.HOST):
        forwarded_host = ()

    check_header_symmetry(config, forwarded_for, forwarded_proto, forwarded_host)

    entry_count = max(len(forwarded_for), len(forwarded_proto), len(forwarded_host))
    if config.forward_limit is not None:
        entry_count = min(entry_count, config.forward_limit)

    return [
        HopEntry(
            index=i,
            ip_and_port_text=_nearest_first(forwarded_for, i),
            scheme=_nearest_first(forwarded_proto, i),
            host=_nearest_first(forwarded_host, i),
        )
        for i in range(entry_count)
    ]
