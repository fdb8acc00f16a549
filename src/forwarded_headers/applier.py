"""Apply forwarded headers to a request.

``apply_forwarders`` is the single entry point invoked once per request:
it parses the forwarded headers into hops, walks the trust chain, and
rewrites the request. Under header symmetry a malformed chain aborts the
whole operation before anything is modified.
"""

from forwarded_headers.config import ForwardedHeadersConfig
from forwarded_headers.exceptions import ForwardedHeadersError
from forwarded_headers.logging import forwarding_logger
from forwarded_headers.models import ForwardedFeature, ForwardingResult
from forwarded_headers.parser import build_hop_entries, split_header_values
from forwarded_headers.scope import ScopeView
from forwarded_headers.walker import walk_trust_chain


def _truncate_header(view: ScopeView, name: str, values: list[str], entries_consumed: int) -> None:
    # Consumed entries are removed from the nearest (right-most) end
    if len(values) > entries_consumed:
        view.set_header(name, values[: len(values) - entries_consumed])
    else:
        view.remove_header(name)


def apply_forwarders(view: ScopeView, config: ForwardedHeadersConfig) -> ForwardingResult:
    """Resolve the client identity of a request behind trusted proxies.

    For every enabled feature whose value was taken from a forwarded
    header, the previous value is kept in the matching ``X-Original-*``
    header, the consumed entries are removed from the forwarded header,
    and the connection attribute is overwritten.

    Args:
        view: Request being processed
        config: Forwarding policy

    Returns:
        Outcome of the operation. An aborted result means the request
        was left untouched.

    Example:
        >>> result = apply_forwarders(ScopeView(scope), config)
        >>> result.applied, scope["client"]
        (True, ('203.0.113.7', 0))
    """
    forwarded_for = (
        split_header_values(view.get_header_values(config.forwarded_for_header_name))
        if config.is_enabled(ForwardedFeature.FOR)
        else []
    )
    forwarded_proto = (
        split_header_values(view.get_header_values(config.forwarded_proto_header_name))
        if config.is_enabled(ForwardedFeature.PROTO)
        else []
    )
    forwarded_host = (
        split_header_values(view.get_header_values(config.forwarded_host_header_name))
        if config.is_enabled(ForwardedFeature.HOST)
        else []
    )

    native_endpoint = view.remote_endpoint

    try:
        hops = build_hop_entries(config, forwarded_for, forwarded_proto, forwarded_host)
        outcome = walk_trust_chain(hops, native_endpoint, config)
    except ForwardedHeadersError as e:
        return ForwardingResult(aborted=e, remote_endpoint=native_endpoint)

    current = outcome.accumulator
    consumed = outcome.entries_consumed
    result = ForwardingResult(
        applied=current.apply_changes,
        entries_consumed=consumed,
        stopped_at=outcome.stopped_at,
        remote_endpoint=current.remote_endpoint,
        scheme=current.scheme if current.proto_applied else None,
        host=current.host if current.host_applied else None,
    )

    if not current.apply_changes:
        return result

    if current.for_applied and current.remote_endpoint is not None:
        if native_endpoint is not None:
            view.set_header(config.original_for_header_name, [str(native_endpoint)])
            result.original_endpoint = native_endpoint
        _truncate_header(view, config.forwarded_for_header_name, forwarded_for, consumed)
        view.remote_endpoint = current.remote_endpoint

    if current.proto_applied and current.scheme is not None:
        view.set_header(config.original_proto_header_name, [view.scheme])
        _truncate_header(view, config.forwarded_proto_header_name, forwarded_proto, consumed)
        view.scheme = current.scheme

    if current.host_applied and current.host is not None:
        view.set_header(config.original_host_header_name, [view.host])
        _truncate_header(view, config.forwarded_host_header_name, forwarded_host, consumed)
        view.host = current.host

    forwarding_logger.log_applied(
        entries_consumed=consumed,
        remote=str(current.remote_endpoint) if current.for_applied else None,
        scheme=result.scheme,
        host=result.host,
    )
    return result
