"""GovStream - governed structured logging.

Structured log events are evaluated against a versioned governance profile,
redacted and tagged with violations, enriched with context, and written to a
governed primary file plus an encoded fallback file.

Example usage:
    from govstream import LoggingProvider, PipelineConfig

    provider = LoggingProvider(PipelineConfig(primary_path="logs/app.log"))
    logger = provider.get_logger("Signup")
    logger.info("User signup {email} {password}", "a@b.com", "hunter2")
"""

__version__ = "0.3.0"

from .errors import ConfigError, GovStreamError, ProfileLoadError
from .governance import (
    REDACTED,
    GovernanceProfile,
    GovernanceProfileStore,
    ProfileDefinition,
    RedactionEngine,
    Violation,
    ViolationCode,
)
from .pipeline import (
    BoundedQueue,
    EnrichmentStage,
    FieldSet,
    Fields,
    GovernedHandler,
    GovernedLogger,
    LoggingProvider,
    LogLevel,
    PipelineConfig,
    RotationManager,
    RotationPolicy,
    RotationWorker,
    SinkWriter,
)

__all__ = [
    "__version__",
    # Errors
    "GovStreamError",
    "ProfileLoadError",
    "ConfigError",
    # Governance
    "REDACTED",
    "GovernanceProfile",
    "GovernanceProfileStore",
    "ProfileDefinition",
    "RedactionEngine",
    "Violation",
    "ViolationCode",
    # Pipeline
    "BoundedQueue",
    "EnrichmentStage",
    "FieldSet",
    "Fields",
    "GovernedHandler",
    "GovernedLogger",
    "LoggingProvider",
    "LogLevel",
    "PipelineConfig",
    "RotationManager",
    "RotationPolicy",
    "RotationWorker",
    "SinkWriter",
]
