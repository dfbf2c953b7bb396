"""Log event model for the governed pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from ..fields import FieldSet


class LogLevel(str, Enum):
    """Severity of a log event, named after the standard library levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def coerce(cls, value: LogLevel | str | int) -> LogLevel:
        """Convert a level name or stdlib numeric level to a LogLevel."""
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            # custom numeric levels map to the nearest level at or below them
            for level in reversed(list(cls)):
                if value >= level.numeric:
                    return level
            return cls.DEBUG
        name = str(value).strip().upper()
        aliases = {"INFORMATION": "INFO", "WARN": "WARNING", "FATAL": "CRITICAL", "TRACE": "DEBUG"}
        return cls(aliases.get(name, name))

    @property
    def numeric(self) -> int:
        """Matching standard library numeric level."""
        return logging.getLevelName(self.value)


@dataclass
class LogEvent:
    """A single structured log call, created and discarded per call.

    Attributes:
        category: Logger category (usually a module or component name)
        level: Event severity
        message_template: Message with ``{name}`` placeholders
        fields: Named field values in insertion order
        error: Optional attached exception
        timestamp: Event time (UTC)
    """

    category: str
    level: LogLevel
    message_template: str
    fields: FieldSet = field(default_factory=FieldSet)
    error: BaseException | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


__all__ = [
    "LogLevel",
    "LogEvent",
]
