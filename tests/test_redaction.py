"""Tests for policy-driven field redaction."""

from __future__ import annotations

import pytest

from govstream.fields import FieldSet
from govstream.governance import (
    REDACTED,
    ProfileDefinition,
    RedactionEngine,
    Violation,
    ViolationCode,
    is_relaxed,
    merge_violations,
)


@pytest.fixture
def definition():
    """Profile disallowing ssn and password."""
    return ProfileDefinition(
        disallowedFields=["ssn", "password"],
        fieldSeverities={"pem": "Forbidden"},
        requiredFields=["message", "userId"],
    )


@pytest.fixture
def engine():
    return RedactionEngine()


class TestRedactionEngine:
    """Tests for RedactionEngine.apply."""

    def test_redacts_forbidden_in_field_order(self, engine, definition):
        """Test forbidden values are replaced and violations follow field order."""
        fields = {"email": "a@b.com", "password": "x", "ssn": "111-11-1111"}
        result = engine.apply(fields, definition)

        assert result.fields["password"] == REDACTED
        assert result.fields["ssn"] == REDACTED
        assert result.fields["email"] == "a@b.com"
        assert [v.to_record() for v in result.violations] == [
            {"code": "ForbiddenField", "field": "password"},
            {"code": "ForbiddenField", "field": "ssn"},
        ]
        assert result.redacted_fields == ["password", "ssn"]

    def test_preserves_field_order(self, engine, definition):
        """Test output fields keep the input order."""
        fields = {"email": "a@b.com", "password": "x", "ssn": "1"}
        result = engine.apply(fields, definition)
        assert list(result.fields) == ["email", "password", "ssn"]

    def test_case_insensitive_match_keeps_caller_spelling(self, engine, definition):
        """Test rules match any casing and violations use the caller's spelling."""
        result = engine.apply({"SSN": "1"}, definition)
        assert result.fields["SSN"] == REDACTED
        assert result.violations == [Violation(code=ViolationCode.FORBIDDEN_FIELD, field="SSN")]

    def test_severity_forbidden(self, engine, definition):
        """Test a Forbidden severity redacts."""
        result = engine.apply({"pem": "-----BEGIN"}, definition)
        assert result.fields["pem"] == REDACTED

    def test_input_not_mutated(self, engine, definition):
        """Test the caller's mapping is left unchanged."""
        fields = FieldSet({"ssn": "1"})
        engine.apply(fields, definition)
        assert fields["ssn"] == "1"

    def test_idempotent(self, engine, definition):
        """Test applying twice yields the same fields and violations."""
        first = engine.apply({"email": "e", "ssn": "1"}, definition)
        second = engine.apply(first.fields, definition)
        assert second.fields == first.fields
        assert second.violations == first.violations

    def test_relaxed_bypasses_rules(self, engine, definition):
        """Test relaxed events pass through with no violations."""
        result = engine.apply({"pem": "-----BEGIN..."}, definition, relaxed=True)
        assert result.fields["pem"] == "-----BEGIN..."
        assert result.violations == []

    def test_empty_definition(self, engine):
        """Test an empty definition leaves fields unchanged."""
        result = engine.apply({"ssn": "1"}, ProfileDefinition())
        assert result.fields == {"ssn": "1"}
        assert result.violations == []

    def test_required_not_checked_by_default(self, engine, definition):
        """Test missing required fields are ignored unless enabled."""
        result = engine.apply({"email": "e"}, definition)
        assert result.violations == []

    def test_required_fields_checked(self, definition):
        """Test missing required fields are reported when enabled."""
        engine = RedactionEngine(check_required=True)
        result = engine.apply({"ssn": "1"}, definition)
        assert [v.to_record() for v in result.violations] == [
            {"code": "ForbiddenField", "field": "ssn"},
            {"code": "MissingRequiredField", "field": "userId"},
        ]

    def test_required_field_present_any_case(self, definition):
        """Test required fields match case-insensitively."""
        engine = RedactionEngine(check_required=True)
        result = engine.apply({"USERID": 7}, definition)
        assert result.violations == []

    def test_custom_sentinel(self, definition):
        """Test a custom replacement value."""
        engine = RedactionEngine(sentinel="[hidden]")
        result = engine.apply({"ssn": "1"}, definition)
        assert result.fields["ssn"] == "[hidden]"

    def test_evaluation_error_applies_no_rules(self, engine):
        """Test a broken definition degrades to no rules."""

        class Broken:
            def is_forbidden(self, name):
                raise RuntimeError("boom")

        result = engine.apply({"ssn": "1"}, Broken())
        assert result.fields == {"ssn": "1"}
        assert result.violations == []


class TestIsRelaxed:
    """Tests for relaxed marker detection."""

    @pytest.mark.parametrize(
        "fields",
        [
            {"GovernanceRelaxed": True},
            {"relaxed": True},
            {"RELAXED": "true"},
            {"governancerelaxed": "1"},
        ],
    )
    def test_relaxed_markers(self, fields):
        """Test accepted marker forms."""
        assert is_relaxed(fields)

    @pytest.mark.parametrize(
        "fields",
        [
            {},
            {"relaxed": False},
            {"relaxed": "no"},
            {"relaxed": 1},
            {"other": True},
        ],
    )
    def test_not_relaxed(self, fields):
        """Test values that do not request the bypass."""
        assert not is_relaxed(fields)


class TestMergeViolations:
    """Tests for merge_violations."""

    def test_deduplicates_case_insensitively(self):
        """Test duplicates by code and name are dropped, first kept."""
        a = Violation(code=ViolationCode.FORBIDDEN_FIELD, field="ssn")
        b = Violation(code=ViolationCode.FORBIDDEN_FIELD, field="SSN")
        c = Violation(code=ViolationCode.MISSING_REQUIRED_FIELD, field="ssn")
        assert merge_violations([a], [b, c]) == [a, c]
