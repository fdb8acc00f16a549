"""Syntax validation for forwarded header values.

Character classes follow RFC 3986 for schemes. Hosts use the stricter
subset accepted by common HTTP servers: percent-encoding and
``* + , ; =`` are rejected.

All functions are pure and never raise; invalid input yields ``False``
or ``None``.
"""

import ipaddress
import string

from forwarded_headers.models import Endpoint

_ALPHANUMERIC = frozenset(string.ascii_letters + string.digits)

# scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
SCHEME_CHARS: frozenset[str] = _ALPHANUMERIC | frozenset("+-.")

HOST_CHARS: frozenset[str] = _ALPHANUMERIC | frozenset("!$&'()-._~")

_HEX_CHARS = frozenset(string.hexdigits)
_IPV6_LITERAL_CHARS = _HEX_CHARS | frozenset(":.")

MAX_PORT = 65535
MAX_PORT_DIGITS = len(str(MAX_PORT))


def is_scheme_char(ch: str) -> bool:
    """Return True if *ch* may appear in a URI scheme."""
    return ch in SCHEME_CHARS


def is_host_char(ch: str) -> bool:
    """Return True if *ch* may appear in a registered host name."""
    return ch in HOST_CHARS


def validate_scheme(scheme: str) -> bool:
    """Check that every character of *scheme* is a valid scheme character.

    Example:
        >>> validate_scheme("https")
        True
        >>> validate_scheme("ht tp")
        False
    """
    return bool(scheme) and all(ch in SCHEME_CHARS for ch in scheme)


def _is_digits(text: str) -> bool:
    # str.isdigit() accepts non-ASCII digits such as "²"
    return bool(text) and all("0" <= ch <= "9" for ch in text)


def _validate_host_port(host: str, offset: int) -> bool:
    if offset == len(host):
        # No port
        return True

    if host[offset] != ":":
        return False

    return _is_digits(host[offset + 1 :])


def _validate_ipv6_host(host: str) -> bool:
    # The leading "[" was already checked by the caller
    for i in range(1, len(host)):
        ch = host[i]
        if ch == "]":
            # [::1] is the shortest valid IPv6 host
            if i < 4:
                return False
            return _validate_host_port(host, i + 1)

        if ch not in _IPV6_LITERAL_CHARS:
            return False

    # Must contain a "]"
    return False


def validate_host(host: str) -> bool:
    """Validate a ``Host``-style value: a host name or IPv6 literal plus an optional port.

    Args:
        host: Raw host text, e.g. ``example.com:8080`` or ``[::1]:443``

    Returns:
        True if the value is syntactically acceptable

    Example:
        >>> validate_host("example.com:8080")
        True
        >>> validate_host("exa mple.com")
        False
        >>> validate_host(":80")
        False
    """
    if not host:
        return False

    if host[0] == "[":
        return _validate_ipv6_host(host)

    if host[0] == ":":
        # Only a port
        return False

    i = 0
    while i < len(host) and host[i] in HOST_CHARS:
        i += 1

    return _validate_host_port(host, i)


def parse_endpoint(text: str | None) -> Endpoint | None:
    """Parse an IP literal with an optional port.

    Accepted forms::

        203.0.113.7
        203.0.113.7:8080
        2001:db8::1
        [2001:db8::1]
        [2001:db8::1]:8080

    A missing port is reported as ``0``.

    Args:
        text: One ``X-Forwarded-For`` entry

    Returns:
        The parsed endpoint, or None if *text* is not an IP literal

    Example:
        >>> parse_endpoint("[::1]:8080")
        Endpoint(address=IPv6Address('::1'), port=8080)
        >>> parse_endpoint("[::1") is None
        True
    """
    if not text:
        return None

    port_text: str | None = None
    last_colon = text.rfind(":")

    if last_colon > 0:
        closing = text.rfind("]")
        if closing > 0:
            # Bracketed IPv6, possibly with a port: [::1]:80
            if text[0] != "[":
                return None
            address_text = text[1:closing]
            if closing < last_colon:
                if last_colon != closing + 1:
                    return None
                port_text = text[last_colon + 1 :]
            elif closing != len(text) - 1:
                return None
        elif text.find(":") != last_colon:
            # Bare IPv6 without a port: ::1
            address_text = text
        else:
            # IPv4 with a port: 127.0.0.1:123
            address_text = text[:last_colon]
            port_text = text[last_colon + 1 :]
    else:
        address_text = text

    try:
        address = ipaddress.ip_address(address_text)
    except ValueError:
        return None

    if port_text is None:
        return Endpoint(address=address, port=0)

    if not _is_digits(port_text):
        return None

    significant = port_text.lstrip("0") or "0"
    if len(significant) > MAX_PORT_DIGITS:
        return None

    port = int(significant)
    if port > MAX_PORT:
        return None

    return Endpoint(address=address, port=port)
