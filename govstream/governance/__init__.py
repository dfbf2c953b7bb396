"""Governance policy for GovStream.

Key components:
- GovernanceProfileStore: Loads and serves the active policy (loaded once)
- GovernanceProfile / ProfileDefinition: Policy document models
- RedactionEngine: Applies a profile definition to one event's fields

Configuration:
    The governance document is JSON or YAML:

        {
          "version": "1.2.0",
          "loggingProfiles": {
            "default": {
              "requiredFields": ["message"],
              "disallowedFields": ["ssn", "password"],
              "fieldSeverities": {"npi": "Forbidden"}
            }
          }
        }

    A missing or unparsable document falls back to a built-in default
    profile so logging works without external configuration.
"""

from .loader import (
    DEFAULT_PROFILE_NAME,
    FALLBACK_VERSION,
    GovernanceProfileStore,
    get_default_profile,
    load_profile,
    load_profile_from_file,
    save_profile_to_file,
)
from .models import (
    EMPTY_DEFINITION,
    FORBIDDEN_SEVERITY,
    GovernanceProfile,
    ProfileDefinition,
    Violation,
    ViolationCode,
)
from .redaction import (
    IMPLICIT_RECORD_FIELDS,
    REDACTED,
    RELAXED_FIELD,
    RELAXED_FIELD_NAMES,
    RedactionEngine,
    RedactionResult,
    is_relaxed,
    merge_violations,
)

__all__ = [
    # Loader
    "DEFAULT_PROFILE_NAME",
    "FALLBACK_VERSION",
    "GovernanceProfileStore",
    "get_default_profile",
    "load_profile",
    "load_profile_from_file",
    "save_profile_to_file",
    # Models
    "EMPTY_DEFINITION",
    "FORBIDDEN_SEVERITY",
    "GovernanceProfile",
    "ProfileDefinition",
    "Violation",
    "ViolationCode",
    # Redaction
    "IMPLICIT_RECORD_FIELDS",
    "REDACTED",
    "RELAXED_FIELD",
    "RELAXED_FIELD_NAMES",
    "RedactionEngine",
    "RedactionResult",
    "is_relaxed",
    "merge_violations",
]
