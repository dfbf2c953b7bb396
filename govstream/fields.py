"""Case-insensitive ordered field sets and the explicit field builder.

Field names are matched case-insensitively everywhere in GovStream. Rather
than relying on a case-insensitive container, every key is canonicalized with
``canonical_name`` at the mapping boundary while the caller's first spelling
is kept for output.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import Any


def canonical_name(name: str) -> str:
    """Return the comparison key for a field name."""
    return str(name).casefold()


class FieldSet(MutableMapping):
    """Ordered mapping of field name to value with case-insensitive keys.

    Insertion order is preserved. Assigning to an existing key under a
    different casing replaces the value in place and keeps the original
    spelling and position.
    """

    def __init__(self, items: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None):
        self._data: dict[str, tuple[str, Any]] = {}
        if items is not None:
            self.update(items)

    def __getitem__(self, key: str) -> Any:
        return self._data[canonical_name(key)][1]

    def __setitem__(self, key: str, value: Any) -> None:
        canon = canonical_name(key)
        existing = self._data.get(canon)
        name = existing[0] if existing is not None else str(key)
        self._data[canon] = (name, value)

    def __delitem__(self, key: str) -> None:
        del self._data[canonical_name(key)]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_name(key) in self._data

    def __repr__(self) -> str:
        return f"FieldSet({dict(self.items())!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldSet):
            return list(self.items()) == list(other.items())
        if isinstance(other, Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    def copy(self) -> FieldSet:
        """Return a shallow copy preserving order and spelling."""
        clone = FieldSet()
        clone._data = dict(self._data)
        return clone

    def canonical_keys(self) -> set[str]:
        """Return the set of canonical (casefolded) field names."""
        return set(self._data)

    def pop_any(self, names: Iterable[str]) -> list[Any]:
        """Remove every field whose canonical name is in ``names``.

        Returns:
            The removed values, in field order
        """
        wanted = {canonical_name(n) for n in names}
        removed = []
        for canon in [c for c in self._data if c in wanted]:
            removed.append(self._data.pop(canon)[1])
        return removed


class Fields:
    """Explicit, ordered builder for an event's field set.

    Replaces runtime introspection of caller objects:

        fields = Fields().add("orderId", 123).add("email", "a@b.com")
        logger.info("Order placed {orderId}", fields=fields)
    """

    def __init__(self) -> None:
        self._fields = FieldSet()

    def add(self, name: str, value: Any) -> Fields:
        """Add (or replace) a named field and return the builder."""
        if not name:
            raise ValueError("Field name must be a non-empty string")
        self._fields[name] = value
        return self

    def extend(self, values: Mapping[str, Any]) -> Fields:
        """Add every entry of a mapping in its iteration order."""
        for name, value in values.items():
            self.add(name, value)
        return self

    def relaxed(self, enabled: bool = True) -> Fields:
        """Mark the event for the relaxed governance bypass."""
        from .governance.redaction import RELAXED_FIELD

        return self.add(RELAXED_FIELD, enabled)

    def build(self) -> FieldSet:
        """Return a copy of the accumulated field set."""
        return self._fields.copy()


# -----------------------------------------------------------------------------
# Message templates
# -----------------------------------------------------------------------------

# {name} or {name:format}; doubled braces are literals
_PLACEHOLDER = re.compile(r"\{\{|\}\}|\{([^{}:]+)(?::([^{}]*))?\}")


def template_placeholders(template: str) -> list[str]:
    """Return placeholder names of a message template in order of appearance.

    Repeated placeholders are returned once.
    """
    names: list[str] = []
    seen: set[str] = set()
    for match in _PLACEHOLDER.finditer(template or ""):
        name = match.group(1)
        if name is None:
            continue
        name = name.strip()
        if canonical_name(name) not in seen:
            seen.add(canonical_name(name))
            names.append(name)
    return names


def bind_template(template: str, args: Iterable[Any]) -> FieldSet:
    """Pair template placeholders with positional argument values.

    Extra arguments are ignored; placeholders without an argument are left
    unbound.
    """
    fields = FieldSet()
    for name, value in zip(template_placeholders(template), args):
        fields[name] = value
    return fields


def render_template(template: str, fields: Mapping[str, Any]) -> str:
    """Render a message template from field values.

    Unknown placeholders are left verbatim. A format spec is applied when
    the value supports it, otherwise the value is rendered with ``str``.
    """
    lookup = fields if isinstance(fields, FieldSet) else FieldSet(fields)

    def replace(match: re.Match) -> str:
        token = match.group(0)
        if token == "{{":
            return "{"
        if token == "}}":
            return "}"
        name = match.group(1).strip()
        if name not in lookup:
            return token
        value = lookup[name]
        spec = match.group(2)
        if spec:
            try:
                return format(value, spec)
            except (TypeError, ValueError):
                pass
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(replace, template or "")


__all__ = [
    "canonical_name",
    "FieldSet",
    "Fields",
    "template_placeholders",
    "bind_template",
    "render_template",
]
