from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mockapi.domain.schema import (  # noqa: E402
    CollectionSchema,
    InvalidSchemaError,
    RelationKind,
    Relationship,
    loose_equals,
)


def test_schema_round_trip_keeps_fields_and_relationships():
    raw = {
        "fields": ["customers.id", "orderdate", "ordertotal"],
        "belongsTo": ["customers"],
        "has": ["lines", "notes"],
        "HABTM": ["tags"],
    }
    schema = CollectionSchema.from_dict("orders", raw)

    assert schema.fields == ["customers.id", "orderdate", "ordertotal"]
    assert schema.has == ["lines", "notes"]
    assert schema.belongs_to == ["customers"]
    assert schema.to_dict() == {
        "fields": ["customers.id", "orderdate", "ordertotal"],
        "has": ["lines", "notes"],
        "belongsTo": ["customers"],
        "HABTM": ["tags"],
    }


def test_schema_without_relationships_serializes_fields_only():
    schema = CollectionSchema.from_dict("customers", {"fields": ["email"]})
    assert schema.relationships == []
    assert schema.to_dict() == {"fields": ["email"]}


def test_relation_lookup_prefers_has_over_belongs_to():
    schema = CollectionSchema.from_dict("nodes", {"fields": [], "belongsTo": ["nodes"], "has": ["nodes"]})
    assert schema.relation_to("nodes") == Relationship(RelationKind.HAS, "nodes")
    assert schema.relation_to("unknown") is None


def test_habtm_is_recorded_but_distinct():
    schema = CollectionSchema.from_dict("posts", {"fields": ["title"], "HABTM": ["tags"]})
    assert schema.relation_to("tags").kind is RelationKind.HABTM


@pytest.mark.parametrize(
    "raw",
    [
        "fields",
        {"fields": "title"},
        {"fields": ["title", 3]},
        {"fields": ["title"], "has": [""]},
    ],
)
def test_malformed_schema_is_rejected(raw):
    with pytest.raises(InvalidSchemaError):
        CollectionSchema.from_dict("posts", raw)


def test_loose_equals_compares_numeric_strings_by_value():
    assert loose_equals("325.00", "325.00")
    assert loose_equals("325.00", "325")
    assert loose_equals(325, "325.00")
    assert loose_equals("1e1", "10")
    assert not loose_equals("325.00", "325.01")


def test_loose_equals_for_text_and_missing_values():
    assert loose_equals("Doe", "Doe")
    assert not loose_equals("Doe", "doe")
    assert loose_equals(None, "")
    assert not loose_equals(None, "0")
    assert not loose_equals(True, "1")


@pytest.mark.parametrize("kind", ["has", "belongsTo"])
def test_fields_may_not_reuse_related_collection_names(kind):
    with pytest.raises(InvalidSchemaError):
        CollectionSchema.from_dict("customers", {"fields": ["name", "orders"], kind: ["orders"]})


def test_loose_equals_only_coerces_plain_decimal_strings():
    assert loose_equals("-1.5E2", "-150")
    assert loose_equals(".5", "0.50")
    assert not loose_equals("1_000", "1000")
    assert not loose_equals("inf", "infinity")
    assert not loose_equals("nan", "NaN")
    assert not loose_equals("0x10", "16")
