"""Governed logging pipeline.

Components:
- LoggingProvider / GovernedLogger: caller-facing logging interface
- EnrichmentStage: default topic/app/env fields
- SinkWriter: JSON lines to the primary and encoded fallback files
- BoundedQueue: fixed-capacity buffer of serialized records
- GovernedHandler: stdlib logging records through the same pipeline
- RotationManager / RotationWorker: size/age based file rotation
"""

from ..fields import FieldSet, Fields
from .buffer import BoundedQueue
from .config import PipelineConfig, RotationPolicy
from .enrichment import EnrichmentStage
from .events import LogEvent, LogLevel
from .handler import GovernedHandler, attach_handler
from .provider import GovernedLogger, LoggingProvider
from .rotation import RotationManager, RotationWorker
from .sinks import (
    PathLocks,
    SinkWriter,
    decode_fallback_line,
    encode_fallback_line,
    serialize_record,
)

__all__ = [
    "BoundedQueue",
    "EnrichmentStage",
    "FieldSet",
    "Fields",
    "GovernedLogger",
    "GovernedHandler",
    "LogEvent",
    "LogLevel",
    "LoggingProvider",
    "PathLocks",
    "PipelineConfig",
    "RotationManager",
    "RotationPolicy",
    "RotationWorker",
    "SinkWriter",
    "attach_handler",
    "decode_fallback_line",
    "encode_fallback_line",
    "serialize_record",
]
