"""Governed logging provider.

LoggingProvider composes the governance store, redaction engine,
enrichment stage, bounded queue and file sinks. Each log call is processed
synchronously in the caller's thread:

    event -> redaction -> enrichment -> record -> queue, primary, fallback

Governed logging must never change business-logic control flow, so nothing
on this path raises to the caller. Internal failures are reported on the
``govstream`` standard library logger.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from ..fields import FieldSet, Fields, bind_template, canonical_name, render_template
from ..governance.loader import GovernanceProfileStore
from ..governance.redaction import RELAXED_FIELD_NAMES, RedactionEngine, is_relaxed
from .buffer import BoundedQueue
from .config import PipelineConfig
from .enrichment import EnrichmentStage
from .events import LogEvent, LogLevel
from .rotation import RotationManager
from .sinks import SinkWriter, serialize_record

logger = logging.getLogger("govstream.provider")

FieldSource = Mapping[str, Any] | Fields


class LoggingProvider:
    """Creates governed loggers and runs the governance pipeline.

    Usage:
        provider = LoggingProvider(PipelineConfig(primary_path="logs/app.log"))
        log = provider.get_logger("PatientService")
        log.info("Service lookup {topic} {npi}", "NPI", npi)
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        store: GovernanceProfileStore | None = None,
        engine: RedactionEngine | None = None,
        sink: SinkWriter | None = None,
        queue: BoundedQueue | None = None,
    ):
        """Initialize the provider.

        The governance profile is loaded here, once, and held for the
        provider's lifetime.

        Args:
            config: Pipeline configuration (defaults if None)
            store: Governance store (loaded from config if None)
            engine: Redaction engine (built from config if None)
            sink: Sink writer (built from config if None)
            queue: Record buffer (built from config if None and buffering is on)
        """
        self.config = config or PipelineConfig()
        self.store = store or GovernanceProfileStore.from_path(
            self.config.governance_config_path,
            self.config.governance_profile,
        )
        self.definition = self.store.get(self.config.governance_profile)
        self.engine = engine or RedactionEngine(check_required=self.config.enforce_required_fields)
        self.enrichment = EnrichmentStage(
            app_name=self.config.app_name,
            environment=self.config.resolved_environment,
            enabled=self.config.enrichment_enabled,
        )
        self.sink = sink or SinkWriter(
            primary_path=self.config.primary_path,
            fallback_path=self.config.fallback_path,
            fallback_encoded=self.config.fallback_encoded,
            stream=sys.stdout if self.config.console_echo else None,
        )
        self.rotation = RotationManager(locks=self.sink.locks)

        if queue is not None:
            self.queue: BoundedQueue | None = queue
        elif self.config.queue_buffering:
            self.queue = BoundedQueue(self.config.queue_capacity)
        else:
            self.queue = None

        logger.info(
            f"Governed logging initialized: profile={self.config.governance_profile} "
            f"v{self.store.version}, sinks={[str(p) for p in self.sink.paths]}"
        )

    # --- Loggers ---

    def get_logger(self, category: str) -> GovernedLogger:
        """Get a logger for a category."""
        return GovernedLogger(category, self)

    @property
    def sink_paths(self) -> list[Path]:
        """Files this provider writes to."""
        return self.sink.paths

    # --- Pipeline ---

    def log(
        self,
        category: str,
        level: LogLevel | str | int,
        message_template: str,
        *args: Any,
        error: BaseException | None = None,
        fields: FieldSource | None = None,
        **named: Any,
    ) -> None:
        """Log a structured event.

        Template placeholders are paired with positional ``args`` in order.
        ``fields`` and keyword arguments add further named fields.

        Args:
            category: Logger category
            level: Event level (LogLevel, name, or stdlib numeric level)
            message_template: Message with ``{name}`` placeholders
            *args: Placeholder values
            error: Optional exception to attach
            fields: Additional fields (Fields builder or mapping)
            **named: Additional fields by keyword
        """
        try:
            event = self.make_event(category, level, message_template, args, error, fields, named)
        except Exception as e:
            logger.error(f"Dropped log event for {category}: {e}")
            return
        self.emit(event)

    def make_event(
        self,
        category: str,
        level: LogLevel | str | int,
        message_template: str,
        args: tuple[Any, ...] = (),
        error: BaseException | None = None,
        fields: FieldSource | None = None,
        named: Mapping[str, Any] | None = None,
    ) -> LogEvent:
        """Build a LogEvent from the caller-facing arguments."""
        event_fields = bind_template(message_template, args)
        if fields is not None:
            event_fields.update(fields.build() if isinstance(fields, Fields) else fields)
        if named:
            event_fields.update(named)
        return LogEvent(
            category=str(category),
            level=LogLevel.coerce(level),
            message_template=str(message_template),
            fields=event_fields,
            error=error,
        )

    def build_record(self, event: LogEvent) -> dict[str, Any]:
        """Apply governance and enrichment to an event.

        Returns:
            The governed record, keys in output order
        """
        source = event.fields if isinstance(event.fields, FieldSet) else FieldSet(event.fields)
        relaxed = is_relaxed(source)

        caller_fields = source.copy()
        caller_fields.pop_any(RELAXED_FIELD_NAMES)

        result = self.engine.apply(caller_fields, self.definition, relaxed=relaxed)
        governed = self.enrichment.apply(result.fields, event.category)

        # markers stay renderable; every other value comes from the governed set
        render_fields = source.copy()
        render_fields.update(governed)

        record: dict[str, Any] = {
            "category": event.category,
            "level": event.level.value,
            "message": render_template(event.message_template, render_fields),
            "timestamp": event.timestamp.isoformat(),
            "governanceProfileVersion": self.store.version,
            "governanceViolations": [v.to_record() for v in result.violations],
        }
        if relaxed:
            record["relaxed"] = True

        reserved = {canonical_name(key) for key in record}
        reserved.update(("relaxed", "exceptiontype", "exceptionmessage"))
        for name, value in governed.items():
            if canonical_name(name) not in reserved:
                record[name] = value

        if event.error is not None:
            record["exceptionType"] = type(event.error).__name__
            record["exceptionMessage"] = str(event.error)

        return record

    def emit(self, event: LogEvent) -> dict[str, Any] | None:
        """Run one event through the pipeline.

        The queue and each sink are attempted independently; a failure in
        one never prevents the others.

        Returns:
            The governed record, or None if it could not be built
        """
        try:
            record = self.build_record(event)
            payload = serialize_record(record)
        except Exception as e:
            logger.error(f"Failed to build governed record for {event.category}: {e}")
            return None

        if self.queue is not None:
            try:
                self.queue.enqueue(payload)
            except Exception as e:
                logger.error(f"Failed to buffer governed record: {e}")

        try:
            self.sink.write(record, payload)
        except Exception as e:
            logger.error(f"Failed to write governed record: {e}")

        return record

    # --- Observation & rotation ---

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Observe every serialized record entering this provider's queue.

        Returns:
            A function that removes the subscription
        """
        if self.queue is None:
            logger.debug("Queue buffering is disabled; subscriber will not be called")
            return lambda: None
        return self.queue.subscribe(callback)

    def rotate(self) -> dict[Path, Path]:
        """Rotate this provider's sink files that exceed the thresholds.

        Returns:
            Mapping of rotated file -> archive path
        """
        return self.rotation.rotate_all(self.sink.paths, self.config.rotation)


class GovernedLogger:
    """Per-category logger bound to a LoggingProvider.

    The keyword names ``error`` and ``fields`` are reserved by the call
    signature; pass fields with those names through ``fields=``.
    """

    __slots__ = ("category", "_provider")

    def __init__(self, category: str, provider: LoggingProvider):
        self.category = category
        self._provider = provider

    def __repr__(self) -> str:
        return f"GovernedLogger({self.category!r})"

    def log(
        self,
        level: LogLevel | str | int,
        message_template: str,
        *args: Any,
        error: BaseException | None = None,
        fields: FieldSource | None = None,
        **named: Any,
    ) -> None:
        self._provider.log(
            self.category, level, message_template, *args, error=error, fields=fields, **named
        )

    def debug(self, message_template: str, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.DEBUG, message_template, *args, **kwargs)

    def info(self, message_template: str, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.INFO, message_template, *args, **kwargs)

    def warning(self, message_template: str, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.WARNING, message_template, *args, **kwargs)

    def error(self, message_template: str, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.ERROR, message_template, *args, **kwargs)

    def critical(self, message_template: str, *args: Any, **kwargs: Any) -> None:
        self.log(LogLevel.CRITICAL, message_template, *args, **kwargs)

    def exception(
        self,
        message_template: str,
        *args: Any,
        error: BaseException | None = None,
        **kwargs: Any,
    ) -> None:
        """Log at ERROR level, attaching the exception being handled."""
        if error is None:
            error = sys.exc_info()[1]
        self.log(LogLevel.ERROR, message_template, *args, error=error, **kwargs)


__all__ = [
    "LoggingProvider",
    "GovernedLogger",
]
