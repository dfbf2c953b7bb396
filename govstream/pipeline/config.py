"""Pipeline configuration for GovStream.

PipelineConfig is an immutable value validated once when a provider is
constructed.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import ConfigError

DEFAULT_ENVIRONMENT = "Production"
ENVIRONMENT_VARIABLE = "GOVSTREAM_ENVIRONMENT"


class RotationPolicy(BaseModel):
    """Size/age thresholds for sink file rotation.

    Attributes:
        max_size_bytes: Rotate when the file is larger than this
        max_age_minutes: Rotate when the file is older than this
        max_archives: Keep at most this many archives per file (None = all)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_size_bytes: int = Field(default=1024 * 1024, ge=0)
    max_age_minutes: float = Field(default=60, ge=0)
    max_archives: int | None = Field(default=None, ge=1)


class PipelineConfig(BaseModel):
    """Configuration for a LoggingProvider.

    Attributes:
        primary_path: Governed primary log file
        fallback_path: Secondary log file (None disables it)
        fallback_encoded: Write the fallback as base64 text (NOT encryption)
        governance_profile: Active profile name
        governance_config_path: Governance document (None = built-in default)
        enrichment_enabled: Add topic/app/env when absent
        queue_buffering: Keep serialized records in a bounded in-memory queue
        queue_capacity: Maximum records held by the queue
        rotation: Rotation thresholds
        app_name: Application identifier used for enrichment
        environment: Deployment environment (defaults from the environment)
        enforce_required_fields: Report MissingRequiredField violations
        console_echo: Also write every plaintext record to stdout
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    primary_path: Path = Path("logs/primary-governed.log")
    fallback_path: Path | None = Path("logs/fallback-encoded.log")
    fallback_encoded: bool = True
    governance_profile: str = Field(default="default", min_length=1)
    governance_config_path: Path | None = Path("governance.json")
    enrichment_enabled: bool = True
    queue_buffering: bool = True
    queue_capacity: int = Field(default=50, ge=1)
    rotation: RotationPolicy = Field(default_factory=RotationPolicy)
    app_name: str = "GovStream"
    environment: str | None = None
    enforce_required_fields: bool = False
    console_echo: bool = False

    @model_validator(mode="after")
    def _distinct_sinks(self) -> PipelineConfig:
        if self.fallback_path is not None:
            if self.fallback_path.expanduser().absolute() == self.primary_path.expanduser().absolute():
                raise ValueError("fallback_path must differ from primary_path")
        return self

    @property
    def resolved_environment(self) -> str:
        """Deployment environment used for enrichment."""
        return self.environment or os.environ.get(ENVIRONMENT_VARIABLE) or DEFAULT_ENVIRONMENT

    @property
    def sink_paths(self) -> list[Path]:
        """All configured sink file paths."""
        paths = [self.primary_path]
        if self.fallback_path is not None:
            paths.append(self.fallback_path)
        return paths

    @classmethod
    def from_file(cls, path: str | Path, section: str | None = "govstream") -> PipelineConfig:
        """Bind configuration from a section of a YAML or JSON settings file.

        Args:
            path: Settings file
            section: Top-level key holding the pipeline settings (None = root)

        Returns:
            Validated PipelineConfig

        Raises:
            ConfigError: If the file cannot be read or fails validation
        """
        path = Path(path).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
            if path.suffix.lower() in (".yaml", ".yml"):
                data: Any = yaml.safe_load(text)
            else:
                data = json.loads(text)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot load settings file {path}: {e}")

        if section is not None:
            data = (data or {}).get(section) if isinstance(data, dict) else None
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Settings section '{section}' must be a mapping")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid pipeline configuration: {e}")


__all__ = [
    "DEFAULT_ENVIRONMENT",
    "ENVIRONMENT_VARIABLE",
    "RotationPolicy",
    "PipelineConfig",
]
