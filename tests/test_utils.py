"""Tests for parsing helpers."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from cqrs_ddd_filter_engine.utils import (
    align_temporal,
    is_date_only,
    parse_bool,
    parse_date_or_epoch,
    parse_interval,
    parse_list_value,
    parse_time,
    shift,
    time_of_day,
)

# -- parse_list_value --------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("a, b, c", ["a", "b", "c"]),
        ("a; b;; c", ["a", "b", "c"]),
        ("['a', 'b']", ["a", "b"]),
        ([1, 2], [1, 2]),
        (("x",), ["x"]),
        (None, []),
        ("", []),
        (42, [42]),
    ],
)
def test_parse_list_value(value, expected):
    assert parse_list_value(value) == expected


def test_parse_list_value_custom_separator():
    assert parse_list_value("New York, NY;Boston", separators=";") == [
        "New York, NY",
        "Boston",
    ]


# -- parse_bool --------------------------------------------------------------


@pytest.mark.parametrize("value", [True, "true", "Yes", "1", 1, "on"])
def test_parse_bool_true(value):
    assert parse_bool(value) is True


@pytest.mark.parametrize("value", [False, "false", "NO", "0", 0, "off"])
def test_parse_bool_false(value):
    assert parse_bool(value) is False


def test_parse_bool_rejects_garbage():
    with pytest.raises(ValueError):
        parse_bool("perhaps")


# -- parse_interval ----------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("1:30:00", timedelta(hours=1, minutes=30)),
        ("2w", timedelta(weeks=2)),
        ("1 day 2 hours", timedelta(days=1, hours=2)),
        ("90", timedelta(seconds=90)),
        (timedelta(minutes=5), timedelta(minutes=5)),
    ],
)
def test_parse_interval(value, expected):
    assert parse_interval(value) == expected


def test_parse_interval_rejects_garbage():
    with pytest.raises(ValueError):
        parse_interval("soon")


# -- dates and times ---------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("08:30", time(8, 30)),
        ("08:30:15", time(8, 30, 15)),
        ("8:30 am", time(8, 30)),
        ("11:45:10 PM", time(23, 45, 10)),
        ("9pm", time(21, 0)),
        (datetime(2024, 1, 1, 7, 15), time(7, 15)),
    ],
)
def test_parse_time(value, expected):
    assert parse_time(value) == expected


def test_parse_time_rejects_garbage():
    with pytest.raises(ValueError):
        parse_time("25:99")


def test_parse_date_or_epoch_seconds_and_millis():
    expected = datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert parse_date_or_epoch(1577836800) == expected
    assert parse_date_or_epoch("1577836800") == expected
    assert parse_date_or_epoch(1577836800000) == expected


def test_parse_date_or_epoch_strings():
    assert parse_date_or_epoch("2020-01-31") == datetime(2020, 1, 31)
    assert parse_date_or_epoch("2020-01-31T10:00:00Z") == datetime(
        2020, 1, 31, 10, tzinfo=timezone.utc
    )
    assert parse_date_or_epoch(date(2020, 1, 31)) == datetime(2020, 1, 31)


def test_parse_date_or_epoch_rejects_empty():
    with pytest.raises(ValueError):
        parse_date_or_epoch("  ")


def test_is_date_only():
    assert is_date_only("2020-01-31")
    assert is_date_only(date(2020, 1, 31))
    assert not is_date_only("2020-01-31T00:00:00")
    assert not is_date_only(datetime(2020, 1, 31))


def test_shift_is_calendar_aware():
    jan_31 = datetime(2024, 1, 31, 9, 0)
    assert shift(jan_31, "month", 1) == datetime(2024, 2, 29, 9, 0)
    assert shift(jan_31, "years", -1) == datetime(2023, 1, 31, 9, 0)
    assert shift(jan_31, "Hours", 2) == datetime(2024, 1, 31, 11, 0)


def test_shift_rejects_unknown_unit():
    with pytest.raises(ValueError):
        shift(datetime(2024, 1, 1), "fortnight", 1)


def test_align_temporal():
    naive = datetime(2024, 1, 1)
    left, right = align_temporal(naive, datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert left.tzinfo is timezone.utc
    left, right = align_temporal(datetime(2024, 1, 1, 5), date(2024, 1, 1))
    assert right == datetime(2024, 1, 1)
    left, right = align_temporal(date(2024, 1, 1), datetime(2024, 1, 1, 5))
    assert right == date(2024, 1, 1)
    assert align_temporal(1, 2) == (1, 2)


def test_time_of_day():
    assert time_of_day(datetime(2024, 1, 1, 22, 15)) == time(22, 15)
    assert time_of_day(timedelta(hours=26, minutes=5)) == time(2, 5)
    assert time_of_day(time(8, 0, tzinfo=timezone.utc)) == time(8, 0)
    assert time_of_day(None) is None
