"""Tests for value coercion."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any

import pytest
from entities import Address, EmploymentStatus, Priority

from cqrs_ddd_filter_engine.coercion import ValueCoercer, parse_enum
from cqrs_ddd_filter_engine.exceptions import ValueCoercionError


@pytest.fixture
def coercer() -> ValueCoercer:
    return ValueCoercer()


class Money:
    def __init__(self, cents: int) -> None:
        self.cents = int(cents)

    @classmethod
    def parse(cls, value: Any) -> Money:
        return cls(round(float(str(value).lstrip("$")) * 100))


class Sku:
    def __init__(self, code: str) -> None:
        self.code = code

    @classmethod
    def from_value(cls, value: Any) -> Sku:
        return cls(str(value).upper())


# -- Strings -----------------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "target", "expected"),
    [
        ("42", int, 42),
        (" 42 ", int, 42),
        ("42.0", int, 42),
        ("2.5", float, 2.5),
        ("12.50", Decimal, Decimal("12.50")),
        ("true", bool, True),
        ("No", bool, False),
        ("2020-01-31", date, date(2020, 1, 31)),
        (
            "2020-01-31T10:00:00Z",
            datetime,
            datetime(2020, 1, 31, 10, 0, tzinfo=timezone.utc),
        ),
        ("31 Jan 2020", datetime, datetime(2020, 1, 31)),
        ("10:30", time, time(10, 30)),
        ("10:30 PM", time, time(22, 30)),
        ("1:30:00", timedelta, timedelta(hours=1, minutes=30)),
        ("7d", timedelta, timedelta(days=7)),
        ("hello", str, "hello"),
    ],
)
def test_coerce_strings(coercer, value, target, expected):
    assert coercer.coerce(value, target) == expected


def test_coerce_uuid(coercer):
    value = uuid.uuid4()
    assert coercer.coerce(str(value), uuid.UUID) == value


def test_coerce_non_integral_string_to_int_fails(coercer):
    with pytest.raises(ValueCoercionError) as exc_info:
        coercer.coerce("42.5", int)
    assert exc_info.value.target_type is int
    assert exc_info.value.value == "42.5"


def test_coerce_unrecognised_bool_fails(coercer):
    with pytest.raises(ValueCoercionError):
        coercer.coerce("maybe", bool)


def test_coerce_bad_date_fails(coercer):
    with pytest.raises(ValueCoercionError):
        coercer.coerce("not a date", date)


# -- Numbers -----------------------------------------------------------------


def test_coerce_numbers(coercer):
    assert coercer.coerce(42, float) == 42.0
    assert coercer.coerce(42.0, int) == 42
    assert coercer.coerce(1.1, Decimal) == Decimal("1.1")
    assert coercer.coerce(1, str) == "1"
    assert coercer.coerce(True, str) == "true"
    assert coercer.coerce(1, bool) is True
    assert coercer.coerce(0, datetime) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert coercer.coerce(90, timedelta) == timedelta(seconds=90)


def test_coerce_non_integral_float_to_int_fails(coercer):
    with pytest.raises(ValueCoercionError):
        coercer.coerce(42.5, int)


def test_coerce_number_to_bool_out_of_range_fails(coercer):
    with pytest.raises(ValueCoercionError):
        coercer.coerce(2, bool)


# -- Enums -------------------------------------------------------------------


def test_coerce_enum(coercer):
    assert coercer.coerce("active", EmploymentStatus) is EmploymentStatus.ACTIVE
    assert coercer.coerce("On_Leave", EmploymentStatus) is EmploymentStatus.ON_LEAVE
    assert coercer.coerce(5, Priority) is Priority.MEDIUM
    assert coercer.coerce("high", Priority) is Priority.HIGH


def test_coerce_unknown_enum_fails(coercer):
    with pytest.raises(ValueCoercionError):
        coercer.coerce("retired", EmploymentStatus)


def test_parse_enum_ordinal_only_for_non_int_enums():
    assert parse_enum(EmploymentStatus, "2") is EmploymentStatus.TERMINATED
    assert parse_enum(Priority, "10") is Priority.HIGH
    with pytest.raises(ValueError):
        # int-valued enums match by value, never by position
        parse_enum(Priority, "2")


# -- Pass-through and generic conversion ---------------------------------------


def test_none_and_any(coercer):
    assert coercer.coerce(None, int) is None
    marker = object()
    assert coercer.coerce(marker, Any) is marker


def test_optional_target_is_unwrapped(coercer):
    assert coercer.coerce("3", int | None) == 3


def test_lists_are_coerced_element_wise(coercer):
    assert coercer.coerce(["1", 2, "3"], int) == [1, 2, 3]


def test_assignable_value_passes_through(coercer):
    moment = datetime(2024, 1, 1)
    assert coercer.coerce(moment, datetime) is moment


def test_from_value_hook(coercer):
    assert coercer.coerce("abc-1", Sku).code == "ABC-1"


def test_pydantic_model_target(coercer):
    address = coercer.coerce({"street": "Main St 1", "city": "Springfield"}, Address)
    assert isinstance(address, Address)
    assert address.city == "Springfield"


def test_pydantic_validation_failure_is_wrapped(coercer):
    with pytest.raises(ValueCoercionError):
        coercer.coerce({"street": "Main St 1"}, Address)


def test_registered_converter_wins(coercer):
    coercer.register(Money, Money.parse)
    assert coercer.coerce("$12.34", Money).cents == 1234
    coercer.unregister(Money)
    with pytest.raises(ValueCoercionError):
        coercer.coerce("$12.34", Money)
