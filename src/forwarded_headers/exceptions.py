"""Forwarded header resolution errors.

These errors never reach the request pipeline. They are raised while
parsing or walking the hop chain and turned into an aborted
``ForwardingResult`` by the applier, leaving the request untouched.
"""


class ForwardedHeadersError(Exception):
    """Base class for forwarded header errors.

    Attributes:
        message: Error message
    """

    def __init__(self, message: str = "Forwarded headers could not be applied") -> None:
        self.message = message
        super().__init__(self.message)


class HeaderSymmetryError(ForwardedHeadersError):
    """Enabled forwarded headers report different hop counts.

    Only raised when header symmetry is required.

    Attributes:
        counts: Number of entries per header name
    """

    def __init__(self, counts: dict[str, int]) -> None:
        self.counts = counts
        detail = ", ".join(f"{name}={count}" for name, count in counts.items())
        super().__init__(message=f"Parameter count mismatch between forwarded headers ({detail})")


class ForwardedValueParseError(ForwardedHeadersError):
    """A forwarded value failed validation while header symmetry is required.

    Attributes:
        field: Forwarded feature the value belongs to (for, proto, host)
        value: Raw value that failed to parse
    """

    def __init__(self, field: str, value: str | None) -> None:
        self.field = field
        self.value = value
        super().__init__(message=f"Failed to parse forwarded {field}: {value!r}")
