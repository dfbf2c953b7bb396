"""Standard library logging bridge.

GovernedHandler sends ``logging`` records through a LoggingProvider, so code
that logs with ``logging.getLogger(...)`` is governed the same way as
GovernedLogger callers:

    attach_handler(provider)
    logging.getLogger("billing").info("Charge {creditCard}", extra={"creditCard": card})

Fields come from ``extra=``. A message without %-style arguments is treated
as a ``{name}`` template over those fields, so it renders redacted values.
Messages with arguments are formatted by ``logging`` first and kept literal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .provider import LoggingProvider

# LogRecord attributes that are never caller fields
_RESERVED_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)

# Internal diagnostics are never routed back into the pipeline
INTERNAL_LOGGER_PREFIXES = ("govstream",)


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Extract the fields passed with ``extra=`` from a LogRecord."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


def record_template(record: logging.LogRecord) -> str:
    """Get the message template for a LogRecord."""
    if record.args:
        message = record.getMessage()
        return message.replace("{", "{{").replace("}", "}}")
    return str(record.msg)


class GovernedHandler(logging.Handler):
    """Logging handler that emits records through the governed pipeline.

    The logger name becomes the category. An attached exception
    (``exc_info``) is recorded as exceptionType/exceptionMessage.
    """

    def __init__(
        self,
        provider: LoggingProvider,
        level: int = logging.NOTSET,
        ignore_prefixes: Iterable[str] = INTERNAL_LOGGER_PREFIXES,
    ):
        super().__init__(level)
        self.provider = provider
        self.ignore_prefixes = tuple(ignore_prefixes)

    def is_ignored(self, name: str) -> bool:
        """Check whether a logger name belongs to an ignored hierarchy."""
        return any(name == p or name.startswith(p + ".") for p in self.ignore_prefixes)

    def emit(self, record: logging.LogRecord) -> None:
        if self.is_ignored(record.name):
            return
        try:
            error = record.exc_info[1] if record.exc_info else None
            event = self.provider.make_event(
                record.name,
                record.levelno,
                record_template(record),
                error=error,
                fields=record_fields(record),
            )
            event.timestamp = datetime.fromtimestamp(record.created, UTC)
        except Exception:
            self.handleError(record)
            return
        self.provider.emit(event)


def attach_handler(
    provider: LoggingProvider,
    logger_name: str | None = None,
    level: int = logging.NOTSET,
) -> GovernedHandler:
    """Add a GovernedHandler to a stdlib logger (the root logger if None).

    Returns:
        The attached handler, for later ``removeHandler``
    """
    handler = GovernedHandler(provider, level=level)
    logging.getLogger(logger_name).addHandler(handler)
    return handler


__all__ = [
    "INTERNAL_LOGGER_PREFIXES",
    "GovernedHandler",
    "attach_handler",
    "record_fields",
    "record_template",
]
