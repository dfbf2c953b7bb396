"""Policy-driven field redaction for governed logging.

The RedactionEngine replaces the values of forbidden fields with a fixed
sentinel and reports a violation for each rule an event triggers. Unlike
pattern scrubbing of free text, decisions are made per field name against
the active profile definition.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..fields import FieldSet, canonical_name
from .models import ProfileDefinition, Violation, ViolationCode

logger = logging.getLogger("govstream.redaction")

REDACTED = "***REDACTED***"

# Reserved boolean field requesting the relaxed bypass
RELAXED_FIELD = "GovernanceRelaxed"
RELAXED_FIELD_NAMES: frozenset[str] = frozenset({"governancerelaxed", "relaxed"})

# Keys every governed record carries regardless of caller fields
IMPLICIT_RECORD_FIELDS: frozenset[str] = frozenset({"category", "level", "message", "timestamp"})


@dataclass
class RedactionResult:
    """Outcome of applying a profile definition to one event's fields."""

    fields: FieldSet
    violations: list[Violation] = field(default_factory=list)

    @property
    def redacted_fields(self) -> list[str]:
        """Names of fields that triggered a ForbiddenField violation."""
        return [v.field for v in self.violations if v.code == ViolationCode.FORBIDDEN_FIELD]


def _truthy_marker(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return False


def is_relaxed(fields: Mapping[str, Any], marker_names: Iterable[str] = RELAXED_FIELD_NAMES) -> bool:
    """Check whether an event requests the relaxed governance bypass.

    Args:
        fields: Event fields
        marker_names: Canonical names of the reserved marker fields

    Returns:
        True if any marker field carries a true value
    """
    markers = {canonical_name(n) for n in marker_names}
    return any(
        canonical_name(name) in markers and _truthy_marker(value)
        for name, value in fields.items()
    )


class RedactionEngine:
    """Applies a profile definition to an event's fields.

    The engine never raises: a corrupt or partial definition degrades to
    "no rules" for the affected event.
    """

    def __init__(self, check_required: bool = False, sentinel: str = REDACTED):
        """Initialize the engine.

        Args:
            check_required: Report MissingRequiredField violations
            sentinel: Replacement value for forbidden fields
        """
        self.check_required = check_required
        self.sentinel = sentinel

    def apply(
        self,
        fields: Mapping[str, Any],
        definition: ProfileDefinition,
        relaxed: bool = False,
        implicit_fields: Iterable[str] = IMPLICIT_RECORD_FIELDS,
    ) -> RedactionResult:
        """Redact forbidden fields and collect violations.

        Args:
            fields: Event fields in insertion order
            definition: Active profile definition
            relaxed: Skip all rule evaluation for this event
            implicit_fields: Names always present on the output record,
                considered when checking required fields

        Returns:
            RedactionResult with a new field set and violations in field order
        """
        source = fields.copy() if isinstance(fields, FieldSet) else FieldSet(fields)

        if relaxed:
            return RedactionResult(fields=source)

        try:
            return self._evaluate(source, definition, implicit_fields)
        except Exception as e:
            logger.error(f"Governance evaluation failed, applying no rules: {e}")
            return RedactionResult(fields=source)

    def _evaluate(
        self,
        source: FieldSet,
        definition: ProfileDefinition,
        implicit_fields: Iterable[str],
    ) -> RedactionResult:
        result = FieldSet()
        violations: list[Violation] = []
        seen: set[tuple[ViolationCode, str]] = set()

        for name, value in source.items():
            if definition.is_forbidden(name):
                value = self.sentinel
                key = (ViolationCode.FORBIDDEN_FIELD, canonical_name(name))
                if key not in seen:
                    seen.add(key)
                    violations.append(Violation(code=ViolationCode.FORBIDDEN_FIELD, field=name))
            result[name] = value

        if self.check_required:
            present = source.canonical_keys() | {canonical_name(n) for n in implicit_fields}
            for required in definition.required_fields:
                key = (ViolationCode.MISSING_REQUIRED_FIELD, canonical_name(required))
                if canonical_name(required) not in present and key not in seen:
                    seen.add(key)
                    violations.append(
                        Violation(code=ViolationCode.MISSING_REQUIRED_FIELD, field=required)
                    )

        return RedactionResult(fields=result, violations=violations)


def merge_violations(existing: Iterable[Violation], new: Iterable[Violation]) -> list[Violation]:
    """Combine violation lists without duplicates, keeping first-seen order."""
    merged: list[Violation] = []
    seen: set[tuple[ViolationCode, str]] = set()
    for violation in [*existing, *new]:
        key = (violation.code, canonical_name(violation.field))
        if key not in seen:
            seen.add(key)
            merged.append(violation)
    return merged


__all__ = [
    "REDACTED",
    "RELAXED_FIELD",
    "RELAXED_FIELD_NAMES",
    "IMPLICIT_RECORD_FIELDS",
    "RedactionResult",
    "RedactionEngine",
    "is_relaxed",
    "merge_violations",
]
