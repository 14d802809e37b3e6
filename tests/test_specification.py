"""Tests for the specification algebra and compiled leaf types."""

from __future__ import annotations

import pytest
from entities import Address, Person

from cqrs_ddd_filter_engine import (
    AndSpecification,
    FieldSpecification,
    FilterOperator,
    ISpecification,
    MembershipSpecification,
    NotSpecification,
    OrSpecification,
    PredicateSpecification,
    QuantifierSpecification,
    TrueSpecification,
    and_all,
    or_all,
)
from cqrs_ddd_filter_engine.accessors import resolve_field
from cqrs_ddd_filter_engine.ast import enum_ordinal


def _pred(name: str, result: bool) -> PredicateSpecification:
    return PredicateSpecification(lambda _: result, name)


@pytest.fixture
def yes() -> PredicateSpecification:
    return _pred("yes", True)


@pytest.fixture
def no() -> PredicateSpecification:
    return _pred("no", False)


# -- Algebra -----------------------------------------------------------------


def test_and_or_not(yes, no):
    assert (yes & yes).is_satisfied_by(None) is True
    assert (yes & no).is_satisfied_by(None) is False
    assert (yes | no).is_satisfied_by(None) is True
    assert (no | no).is_satisfied_by(None) is False
    assert (~no).is_satisfied_by(None) is True


def test_method_aliases(yes, no):
    assert isinstance(yes.and_(no), AndSpecification)
    assert isinstance(yes.or_(no), OrSpecification)
    assert isinstance(yes.not_(), NotSpecification)
    assert isinstance(yes.merge(no), AndSpecification)


def test_and_is_associative():
    a, b, c = _pred("a", True), _pred("b", True), _pred("c", False)
    left = (a & b) & c
    right = a & (b & c)
    assert left.to_dict() == right.to_dict()
    assert left.specifications == (a, b, c)


def test_or_is_associative():
    a, b, c = _pred("a", False), _pred("b", False), _pred("c", True)
    assert ((a | b) | c).to_dict() == (a | (b | c)).to_dict()


def test_mixed_composites_are_not_flattened(yes, no):
    spec = (yes | no) & yes
    assert len(spec.specifications) == 2
    assert isinstance(spec.specifications[0], OrSpecification)


def test_combining_does_not_mutate_operands(yes, no):
    pair = yes & no
    triple = pair & yes
    assert pair.specifications == (yes, no)
    assert len(triple.specifications) == 3


def test_not_to_dict(yes):
    assert (~yes).to_dict() == {
        "op": "not",
        "conditions": [{"op": "predicate", "name": "yes", "args": []}],
    }


def test_and_all_and_or_all(yes, no):
    assert isinstance(and_all([]), TrueSpecification)
    assert and_all([yes]) is yes
    assert isinstance(and_all([yes, no]), AndSpecification)
    assert or_all([no]) is no
    assert or_all([yes, no]).is_satisfied_by(None) is True
    with pytest.raises(ValueError):
        or_all([])


def test_true_specification():
    spec = TrueSpecification()
    assert spec.is_satisfied_by(object()) is True
    assert spec.to_dict() == {"op": "true"}


def test_runtime_protocol(yes):
    assert isinstance(yes, ISpecification)
    assert not isinstance(object(), ISpecification)


# -- Leaves ------------------------------------------------------------------


def test_field_specification(operators, alice):
    accessor = resolve_field(Person, "age")
    spec = FieldSpecification(accessor, "gte", 30, registry=operators)
    assert spec.op is FilterOperator.GREATER_THAN_OR_EQUAL
    assert spec.attr == "age"
    assert spec.is_satisfied_by(alice) is True
    assert spec.to_dict() == {"op": "gte", "attr": "age", "val": 30}


def test_field_specification_transform(operators, alice, bob):
    accessor = resolve_field(Person, "priority")
    spec = FieldSpecification(
        accessor,
        FilterOperator.GREATER_THAN,
        5,
        registry=operators,
        transform=enum_ordinal,
    )
    assert spec.is_satisfied_by(alice) is True
    assert spec.is_satisfied_by(bob) is False
    assert spec.to_dict()["transform"] == "ordinal"


def test_membership_specification(alice, bob, anna):
    spec = MembershipSpecification(resolve_field(Person, "first_name"), ["Alice"])
    assert spec.is_satisfied_by(alice) is True
    assert spec.is_satisfied_by(bob) is False
    negated = MembershipSpecification(
        resolve_field(Person, "first_name"), ["Alice"], negate=True
    )
    assert negated.is_satisfied_by(bob) is True
    assert negated.to_dict() == {
        "op": "not_in",
        "attr": "first_name",
        "val": ["Alice"],
    }


def test_membership_over_collection(alice, bob, anna):
    spec = MembershipSpecification(resolve_field(Person, "tags"), ["admin"])
    assert spec.is_satisfied_by(alice) is True
    assert spec.is_satisfied_by(bob) is False
    assert spec.is_satisfied_by(anna) is False


def test_quantifier_specification(operators, alice, bob, anna):
    city = FieldSpecification(
        resolve_field(Address, "city"),
        "eq",
        "Berlin",
        registry=operators,
    )
    addresses = resolve_field(Person, "addresses")
    any_berlin = QuantifierSpecification(addresses, FilterOperator.ANY, city)
    all_berlin = QuantifierSpecification(addresses, FilterOperator.ALL, city)

    assert any_berlin.is_satisfied_by(alice) is True
    assert all_berlin.is_satisfied_by(alice) is False
    # an empty collection: any is false, all is vacuously true
    assert any_berlin.is_satisfied_by(anna) is False
    assert all_berlin.is_satisfied_by(anna) is True
    assert any_berlin.to_dict()["op"] == "any"
    assert any_berlin.to_dict()["conditions"] == [city.to_dict()]


def test_quantifier_rejects_none_operator(operators):
    addresses = resolve_field(Person, "addresses")
    with pytest.raises(ValueError):
        QuantifierSpecification(addresses, FilterOperator.NONE, TrueSpecification())


def test_predicate_specification():
    spec = PredicateSpecification(lambda p: p > 3, "gt3", [3])
    assert spec.is_satisfied_by(4) is True
    assert spec.to_dict() == {"op": "predicate", "name": "gt3", "args": [3]}
