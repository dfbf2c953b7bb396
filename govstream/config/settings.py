"""Configuration settings using Pydantic."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..pipeline.config import PipelineConfig, RotationPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Settings (demo app)
    api_host: str = Field(default="127.0.0.1", alias="GOVSTREAM_HOST")
    api_port: int = Field(default=8080, alias="GOVSTREAM_PORT")

    # Sinks
    primary_file: Path = Field(
        default=Path("logs/primary-governed.log"),
        alias="GOVSTREAM_PRIMARY_FILE",
        description="Governed primary log file (JSON lines)",
    )
    fallback_file: Path | None = Field(
        default=Path("logs/fallback-encoded.log"),
        alias="GOVSTREAM_FALLBACK_FILE",
        description="Secondary log file",
    )
    fallback_encoded: bool = Field(
        default=True,
        alias="GOVSTREAM_FALLBACK_ENCODED",
        description="Base64-encode fallback lines (not encryption)",
    )

    # Governance
    governance_profile: str = Field(default="default", alias="GOVSTREAM_PROFILE")
    governance_config_path: Path = Field(
        default=Path("governance.json"),
        alias="GOVSTREAM_GOVERNANCE_PATH",
        description="Path to the governance JSON/YAML document",
    )
    enforce_required_fields: bool = Field(default=False, alias="GOVSTREAM_ENFORCE_REQUIRED")
    console_echo: bool = Field(default=False, alias="GOVSTREAM_CONSOLE_ECHO")

    # Pipeline toggles
    telemetry_enrichment: bool = Field(default=True, alias="GOVSTREAM_ENRICHMENT")
    queue_buffering: bool = Field(default=True, alias="GOVSTREAM_QUEUE_BUFFERING")
    queue_capacity: int = Field(default=50, alias="GOVSTREAM_QUEUE_CAPACITY")
    app_name: str = Field(default="GovStreamDemo", alias="GOVSTREAM_APP")
    environment: str = Field(default="Production", alias="GOVSTREAM_ENVIRONMENT")

    # Rotation
    rotation_max_file_size_bytes: int = Field(default=1048576, alias="GOVSTREAM_ROTATION_MAX_BYTES")
    rotation_max_file_age_minutes: float = Field(default=60, alias="GOVSTREAM_ROTATION_MAX_AGE_MINUTES")
    rotation_max_archives: int | None = Field(default=None, alias="GOVSTREAM_ROTATION_MAX_ARCHIVES")
    rotation_interval_seconds: float = Field(default=60, alias="GOVSTREAM_ROTATION_INTERVAL")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    govern_stdlib_logging: bool = Field(
        default=False,
        alias="GOVSTREAM_GOVERN_STDLIB",
        description="Route root-logger records through the governed pipeline",
    )

    def to_pipeline_config(self) -> PipelineConfig:
        """Build the immutable pipeline configuration."""
        return PipelineConfig(
            primary_path=self.primary_file,
            fallback_path=self.fallback_file,
            fallback_encoded=self.fallback_encoded,
            governance_profile=self.governance_profile,
            governance_config_path=self.governance_config_path,
            enrichment_enabled=self.telemetry_enrichment,
            queue_buffering=self.queue_buffering,
            queue_capacity=self.queue_capacity,
            rotation=RotationPolicy(
                max_size_bytes=self.rotation_max_file_size_bytes,
                max_age_minutes=self.rotation_max_file_age_minutes,
                max_archives=self.rotation_max_archives,
            ),
            app_name=self.app_name,
            environment=self.environment,
            enforce_required_fields=self.enforce_required_fields,
            console_echo=self.console_echo,
        )


@lru_cache
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return Settings()
