"""Tests for field path resolution."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest
from entities import Address, Envelope, Person, Shift

from cqrs_ddd_filter_engine.accessors import (
    collection_element_type,
    match_member,
    resolve_field,
    unwrap_optional,
)
from cqrs_ddd_filter_engine.exceptions import (
    FieldNotFoundError,
    RelationshipTraversalError,
)

# -- Type analysis -----------------------------------------------------------


def test_unwrap_optional():
    assert unwrap_optional(int | None) == (int, True)
    assert unwrap_optional(int) == (int, False)
    assert unwrap_optional(Any) == (Any, True)


@pytest.mark.parametrize(
    ("annotation", "expected"),
    [
        (list[Address], Address),
        (tuple[int, ...], int),
        (tuple[int, str], Any),
        (set[str], str),
        (list, Any),
        (str, None),
        (int, None),
        (dict[str, int], None),
    ],
)
def test_collection_element_type(annotation, expected):
    assert collection_element_type(annotation) is expected


def test_match_member():
    names = ["first_name", "zip_code"]
    assert match_member("first_name", names) == "first_name"
    assert match_member("FirstName", names) == "first_name"
    assert match_member("zipCode", names) == "zip_code"
    assert match_member("FIRST_NAME", names) == "first_name"
    assert match_member("last_name", names) is None


# -- Resolution --------------------------------------------------------------


def test_resolve_simple_field():
    accessor = resolve_field(Person, "age")
    assert accessor.attributes == ("age",)
    assert accessor.value_type is int
    assert accessor.nullable is False
    assert accessor.is_collection is False
    assert str(accessor) == "age"


@pytest.mark.parametrize("path", ["first_name", "firstName", "FirstName"])
def test_resolve_wire_names(path, alice):
    accessor = resolve_field(Person, path)
    assert accessor.attributes == ("first_name",)
    assert accessor.get(alice) == "Alice"


def test_resolve_nullable_field():
    accessor = resolve_field(Person, "salary")
    assert accessor.nullable is True
    assert accessor.annotation != accessor.value_type


def test_resolve_nested_path(alice, anna):
    accessor = resolve_field(Person, "manager.first_name")
    assert accessor.attributes == ("manager", "first_name")
    assert accessor.value_type is str
    # nullable through the optional manager
    assert accessor.nullable is True
    assert accessor.get(anna) == "Alice"
    assert accessor.get(alice) is None


def test_resolve_collection():
    accessor = resolve_field(Person, "addresses")
    assert accessor.is_collection is True
    assert accessor.element_type is Address


def test_resolve_enum_field():
    assert resolve_field(Person, "status").is_enum is True
    assert resolve_field(Person, "age").is_enum is False


def test_resolve_property(alice):
    accessor = resolve_field(Person, "full_name")
    assert accessor.value_type is str
    assert accessor.get(alice) == "Alice Smith"


def test_resolve_dataclass_field():
    accessor = resolve_field(Shift, "duration")
    assert accessor.value_type is timedelta


def test_resolve_through_untyped_member():
    accessor = resolve_field(Envelope, "payload.kind")
    assert accessor.attributes == ("payload", "kind")
    assert accessor.value_type is Any
    assert accessor.get(Envelope(payload={"kind": "created"})) == "created"


def test_get_from_mapping():
    accessor = resolve_field(Person, "first_name")
    assert accessor.get({"first_name": "Mapped"}) == "Mapped"


def test_resolution_is_cached():
    assert resolve_field(Person, "age") is resolve_field(Person, "age")


# -- Errors ------------------------------------------------------------------


def test_unknown_field_suggests_similar():
    with pytest.raises(FieldNotFoundError) as exc_info:
        resolve_field(Person, "frist_name")
    err = exc_info.value
    assert err.invalid_field == "frist_name"
    assert err.model_name == "Person"
    assert "first_name" in err.suggestions
    assert isinstance(err, AttributeError)


def test_unknown_nested_field():
    with pytest.raises(FieldNotFoundError) as exc_info:
        resolve_field(Person, "manager.nickname")
    assert exc_info.value.full_path == "manager.nickname"


def test_traversing_a_collection_requires_quantifier():
    with pytest.raises(RelationshipTraversalError, match="quantifier"):
        resolve_field(Person, "addresses.city")


def test_traversing_a_scalar_fails():
    with pytest.raises(RelationshipTraversalError) as exc_info:
        resolve_field(Person, "age.value")
    assert exc_info.value.field == "age"


def test_empty_path_fails():
    with pytest.raises(FieldNotFoundError):
        resolve_field(Person, "  ")
