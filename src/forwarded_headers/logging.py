"""Structured logging for forwarded header resolution.

Forwarding decisions are emitted as debug-level structlog events so that
proxy misconfiguration can be diagnosed without exposing anything at the
default log level.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor


def add_component_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the component name to all log entries."""
    event_dict.setdefault("component", "forwarded-headers")
    return event_dict


def configure_logging(level: int | str = logging.INFO, json_logs: bool = False) -> None:
    """Configure structured logging.

    - Development: Human-readable console output
    - Production: JSON-formatted logs for log aggregation

    Args:
        level: Standard library log level
        json_logs: Render JSON instead of console output
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_component_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_logs:
        processors = [*shared_processors, structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("forwarded_unknown_proxy", proxy="203.0.113.9:443")
    """
    return structlog.get_logger(name)


class ForwardingEventLogger:
    """Helper class for logging forwarding decisions."""

    def __init__(self) -> None:
        self.logger = get_logger("forwarded_headers")

    def log_header_count_mismatch(self, counts: dict[str, int]) -> None:
        """Log enabled headers disagreeing on hop count under header symmetry.

        Args:
            counts: Number of entries per header name
        """
        self.logger.debug(
            "forwarded_header_count_mismatch",
            event_type="forwarding",
            counts=counts,
        )

    def log_value_parse_failed(self, field: str, value: str | None, index: int) -> None:
        """Log a forwarded value that failed validation.

        Args:
            field: Forwarded feature (for, proto, host)
            value: Raw header entry
            index: Hop index, 0 being nearest to the server
        """
        self.logger.debug(
            "forwarded_value_parse_failed",
            event_type="forwarding",
            field=field,
            value=value,
            hop=index,
        )

    def log_unknown_proxy(self, proxy: str, index: int) -> None:
        """Log the walk stopping at a proxy outside the trusted set."""
        self.logger.debug(
            "forwarded_unknown_proxy",
            event_type="forwarding",
            proxy=proxy,
            hop=index,
        )

    def log_applied(
        self,
        entries_consumed: int,
        remote: str | None,
        scheme: str | None,
        host: str | None,
    ) -> None:
        self.logger.debug(
            "forwarded_headers_applied",
            event_type="forwarding",
            entries_consumed=entries_consumed,
            remote=remote,
            scheme=scheme,
            host=host,
        )


forwarding_logger = ForwardingEventLogger()
