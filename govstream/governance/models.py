"""Governance profile models.

This module defines the data models for governance policy:
- GovernanceProfile: A versioned set of named logging profiles
- ProfileDefinition: Field rules for one profile
- Violation: A policy rule triggered by a log event
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..fields import canonical_name

# Severity value that forces redaction (compared case-insensitively)
FORBIDDEN_SEVERITY = "Forbidden"


class ViolationCode(str, Enum):
    """Kinds of governance violations."""

    FORBIDDEN_FIELD = "ForbiddenField"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"


class Violation(BaseModel):
    """A governance rule triggered by a single event.

    Attributes:
        code: Violation kind
        field: Field name as spelled by the caller (or the profile, for
            missing required fields)
    """

    model_config = ConfigDict(frozen=True)

    code: ViolationCode
    field: str

    def to_record(self) -> dict[str, str]:
        """Return the ``{code, field}`` form written to sinks."""
        return {"code": self.code.value, "field": self.field}


def _as_name_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v is not None]


class ProfileDefinition(BaseModel):
    """Field rules for one named logging profile.

    Disallowed names and severity keys are stored canonicalized so lookups
    are case-insensitive. Required names keep their configured spelling.

    Attributes:
        required_fields: Field names every event should carry
        disallowed_fields: Canonical names whose values are always redacted
        field_severities: Canonical name -> severity (e.g. "Forbidden")
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    required_fields: tuple[str, ...] = Field(default=(), alias="requiredFields")
    disallowed_fields: frozenset[str] = Field(default_factory=frozenset, alias="disallowedFields")
    field_severities: dict[str, str] = Field(default_factory=dict, alias="fieldSeverities")

    @field_validator("required_fields", mode="before")
    @classmethod
    def _required_names(cls, value: Any) -> list[str]:
        return _as_name_list(value)

    @field_validator("disallowed_fields", mode="before")
    @classmethod
    def _canonical_disallowed(cls, value: Any) -> set[str]:
        return {canonical_name(name) for name in _as_name_list(value)}

    @field_validator("field_severities", mode="before")
    @classmethod
    def _canonical_severities(cls, value: Any) -> dict[str, str]:
        if not value:
            return {}
        return {
            canonical_name(name): str(severity)
            for name, severity in dict(value).items()
            if severity is not None
        }

    def severity(self, name: str) -> str | None:
        """Get the configured severity for a field name, if any."""
        return self.field_severities.get(canonical_name(name))

    def is_forbidden(self, name: str) -> bool:
        """Check whether a field's value must be redacted."""
        canon = canonical_name(name)
        if canon in self.disallowed_fields:
            return True
        severity = self.field_severities.get(canon)
        return severity is not None and severity.casefold() == FORBIDDEN_SEVERITY.casefold()

    @property
    def is_empty(self) -> bool:
        """True when the definition carries no rules."""
        return not (self.required_fields or self.disallowed_fields or self.field_severities)


# Shared "no rules" definition for unknown profile names
EMPTY_DEFINITION = ProfileDefinition()


class GovernanceProfile(BaseModel):
    """A versioned governance policy document.

    Attributes:
        version: Policy version written to every governed record
        logging_profiles: Profile name -> field rules
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    version: str = Field(default="1.0.0", description="Policy version")
    logging_profiles: dict[str, ProfileDefinition] = Field(
        default_factory=dict,
        alias="loggingProfiles",
        description="Named field rule sets",
    )

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_string(cls, value: Any) -> str:
        # YAML reads `version: 1.0` as a float
        return "1.0.0" if value is None else str(value)

    @field_validator("logging_profiles", mode="before")
    @classmethod
    def _profiles_or_empty(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {name: (definition or {}) for name, definition in value.items()}
        return value

    def definition(self, name: str) -> ProfileDefinition:
        """Get a profile definition; unknown names yield an empty definition."""
        return self.logging_profiles.get(name, EMPTY_DEFINITION)


__all__ = [
    "FORBIDDEN_SEVERITY",
    "ViolationCode",
    "Violation",
    "ProfileDefinition",
    "EMPTY_DEFINITION",
    "GovernanceProfile",
]
