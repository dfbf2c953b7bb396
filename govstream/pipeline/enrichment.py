"""Contextual enrichment of governed records."""

from __future__ import annotations

from ..fields import FieldSet
from .config import DEFAULT_ENVIRONMENT


class EnrichmentStage:
    """Adds ``topic``, ``app`` and ``env`` fields when the caller omitted them.

    Caller-supplied values are never overwritten.
    """

    def __init__(
        self,
        app_name: str,
        environment: str = DEFAULT_ENVIRONMENT,
        enabled: bool = True,
    ):
        self.app_name = app_name
        self.environment = environment or DEFAULT_ENVIRONMENT
        self.enabled = enabled

    def apply(self, fields: FieldSet, category: str) -> FieldSet:
        """Set missing enrichment fields in place and return the field set."""
        if not self.enabled:
            return fields

        defaults = (
            ("topic", category),
            ("app", self.app_name),
            ("env", self.environment),
        )
        for name, value in defaults:
            if name not in fields:
                fields[name] = value
        return fields


__all__ = ["EnrichmentStage"]
