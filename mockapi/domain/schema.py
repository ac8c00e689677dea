"""Collection schemas and relationship declarations."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

NUMERIC_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


class InvalidSchemaError(ValueError):
    """Raised when a schema definition does not have the expected shape."""


class RelationKind(str, Enum):
    HAS = "has"
    BELONGS_TO = "belongsTo"
    HABTM = "HABTM"  # declared only, never resolved


@dataclass(frozen=True)
class Relationship:
    kind: RelationKind
    target: str


@dataclass
class CollectionSchema:
    """Ordered field list plus the relationships a collection declares."""

    fields: list[str]
    relationships: list[Relationship] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._lookup: dict[str, Relationship] = {}
        # has wins over belongsTo, which wins over HABTM
        for kind in RelationKind:
            for rel in self.relationships:
                if rel.kind is kind:
                    self._lookup.setdefault(rel.target, rel)

    def relation_to(self, target: str) -> Optional[Relationship]:
        return self._lookup.get(target)

    def targets(self, kind: RelationKind) -> list[str]:
        return [rel.target for rel in self.relationships if rel.kind is kind]

    @property
    def has(self) -> list[str]:
        return self.targets(RelationKind.HAS)

    @property
    def belongs_to(self) -> list[str]:
        return self.targets(RelationKind.BELONGS_TO)

    @classmethod
    def from_dict(cls, name: str, raw: Mapping[str, Any]) -> "CollectionSchema":
        if not isinstance(raw, Mapping):
            raise InvalidSchemaError(f"Schema for '{name}' must be an object")
        fields = _string_list(name, "fields", raw.get("fields", []))
        relationships = [
            Relationship(kind, target)
            for kind in RelationKind
            for target in _string_list(name, kind.value, raw.get(kind.value, []))
        ]
        # related lists are embedded under the target name in views
        clashes = [rel.target for rel in relationships if rel.kind is not RelationKind.HABTM and rel.target in fields]
        if clashes:
            raise InvalidSchemaError(f"Fields of '{name}' must not reuse related collection names: {clashes}")
        return cls(fields=fields, relationships=relationships)

    def to_dict(self) -> dict:
        out: dict[str, list[str]] = {"fields": list(self.fields)}
        for kind in RelationKind:
            targets = self.targets(kind)
            if targets:
                out[kind.value] = targets
        return out


def _string_list(name: str, key: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise InvalidSchemaError(f"'{key}' in schema for '{name}' must be a list of names")
    items = list(value)
    if not all(isinstance(item, str) and item for item in items):
        raise InvalidSchemaError(f"'{key}' in schema for '{name}' must only contain non-empty strings")
    return items


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not NUMERIC_PATTERN.fullmatch(text):
            return None
        return float(text)
    return None


def loose_equals(left: Any, right: Any) -> bool:
    """
    Compare two field values the way a form-driven mock backend expects.

    Values that are equal compare equal. Numeric strings and numbers compare
    by numeric value, so "325.00" matches "325" and 325. None matches "".
    """
    if left == right:
        return True
    if left is None or right is None:
        return (left if right is None else right) == ""
    lnum, rnum = _number(left), _number(right)
    if lnum is not None and rnum is not None:
        return lnum == rnum
    return False
