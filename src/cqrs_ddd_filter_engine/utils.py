"""
Shared parsing helpers for filter values.

These are pure-Python helpers with no dependency on the filter model.
"""

from __future__ import annotations

import datetime
import re
from typing import Any

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# ---------------------------------------------------------------------------
# List parsing
# ---------------------------------------------------------------------------


def parse_list_value(value: Any, separators: str = ",;") -> list[Any]:
    """
    Parse a value into a list.

    Supports:
    - Python collections (list, tuple, set)
    - Delimited strings: ``"val1; val2"`` or ``"val1, val2"``
    - Bracketed strings: ``"[val1, val2]"`` or ``"['val1', 'val2']"``

    String items are trimmed and empty items are dropped.
    """
    if value is None:
        return []
    if isinstance(value, list | tuple | set | frozenset):
        items = list(value)
    elif isinstance(value, str):
        content = value.strip()
        if content.startswith("[") and content.endswith("]"):
            content = content[1:-1].strip()
        pattern = "|".join(re.escape(sep) for sep in separators)
        items = [v.strip().strip("'").strip('"') for v in re.split(pattern, content)]
    else:
        items = [value]
    return [
        item.strip() if isinstance(item, str) else item
        for item in items
        if not (item is None or (isinstance(item, str) and not item.strip()))
    ]


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return bool(value)
    text = str(value).strip().lower()
    if text in ("true", "1", "yes", "y", "on"):
        return True
    if text in ("false", "0", "no", "n", "off"):
        return False
    raise ValueError(f"Unrecognised boolean value: {value!r}")


# ---------------------------------------------------------------------------
# Interval parsing
# ---------------------------------------------------------------------------

_TIME_RE = re.compile(r"^(\d+):(\d+):(\d+)$")
_DAY_RE = re.compile(r"(\d+)\s*days?", re.IGNORECASE)
_HOUR_RE = re.compile(r"(\d+)\s*hours?", re.IGNORECASE)
_MIN_RE = re.compile(r"(\d+)\s*minutes?", re.IGNORECASE)
_SEC_RE = re.compile(r"(\d+)\s*seconds?", re.IGNORECASE)
# Shorthand: 7d, 24h, 30m, 90s, 2w
_SHORTHAND_RE = re.compile(r"^(\d+)\s*([dhmsw])$", re.IGNORECASE)
_UNIT_NAMES = {"d": "days", "h": "hours", "m": "minutes", "s": "seconds", "w": "weeks"}


def parse_interval(value: Any) -> datetime.timedelta:
    """
    Parse an interval string into a ``timedelta``.

    Supported formats:
    - ``"1:30:00"`` (HH:MM:SS)
    - ``"7d"``, ``"24h"``, ``"30m"``, ``"2w"``
    - ``"1 day 2 hours 30 minutes"``
    - Plain numeric string → treated as seconds
    """
    if isinstance(value, datetime.timedelta):
        return value

    text = str(value).strip()

    sm = _SHORTHAND_RE.match(text)
    if sm:
        return datetime.timedelta(
            **{_UNIT_NAMES[sm.group(2).lower()]: int(sm.group(1))}
        )

    m = _TIME_RE.match(text)
    if m:
        hours, minutes, seconds = map(int, m.groups())
        return datetime.timedelta(hours=hours, minutes=minutes, seconds=seconds)

    parts = {
        unit: int(match.group(1))
        for unit, regex in (
            ("days", _DAY_RE),
            ("hours", _HOUR_RE),
            ("minutes", _MIN_RE),
            ("seconds", _SEC_RE),
        )
        if (match := regex.search(text))
    }
    if parts:
        return datetime.timedelta(**parts)

    try:
        return datetime.timedelta(seconds=float(text))
    except ValueError as err:
        raise ValueError(f"Unrecognised interval format: {value}") from err


# ---------------------------------------------------------------------------
# Date / time parsing
# ---------------------------------------------------------------------------

_EPOCH_RE = re.compile(r"^-?\d+(\.\d+)?$")
_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# Values above this are treated as epoch milliseconds (year 5138 in seconds).
_EPOCH_MS_THRESHOLD = 10**11

_TIME_FORMATS = (
    "%H:%M:%S",
    "%H:%M",
    "%H:%M:%S.%f",
    "%I:%M:%S %p",
    "%I:%M %p",
    "%I:%M:%S%p",
    "%I:%M%p",
    "%I %p",
    "%I%p",
)


def parse_datetime(value: Any) -> datetime.datetime:
    """ISO 8601 first, then free-form (culture-invariant) parsing."""
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min)
    text = str(value).strip()
    try:
        return datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return date_parser.parse(text)


def parse_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    text = str(value).strip()
    try:
        return datetime.date.fromisoformat(text)
    except ValueError:
        return parse_datetime(text).date()


def parse_time(value: Any) -> datetime.time:
    """
    Parse a time of day in 24h (``HH:MM[:SS]``) or 12h
    (``hh:MM[:SS] AM/PM``) format.
    """
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, datetime.time):
        return value
    text = str(value).strip().upper()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    try:
        return datetime.time.fromisoformat(text)
    except ValueError as err:
        raise ValueError(f"Unrecognised time format: {value!r}") from err


def parse_date_or_epoch(value: Any) -> datetime.datetime:
    """
    Parse a date/time string or a Unix epoch (seconds or milliseconds).

    Epoch values produce aware UTC datetimes.
    """
    if isinstance(value, datetime.date):
        return parse_datetime(value)
    if isinstance(value, int | float) and not isinstance(value, bool):
        return _from_epoch(float(value))
    text = str(value).strip()
    if not text:
        raise ValueError("Empty date value")
    if _EPOCH_RE.match(text):
        return _from_epoch(float(text))
    return parse_datetime(text)


def _from_epoch(seconds: float) -> datetime.datetime:
    if abs(seconds) >= _EPOCH_MS_THRESHOLD:
        seconds /= 1000
    return datetime.datetime.fromtimestamp(seconds, tz=datetime.timezone.utc)


def is_date_only(value: Any) -> bool:
    """True for ``YYYY-MM-DD`` strings and plain ``date`` objects."""
    if isinstance(value, datetime.datetime):
        return False
    if isinstance(value, datetime.date):
        return True
    return isinstance(value, str) and bool(_DATE_ONLY_RE.match(value.strip()))


def shift(
    reference: datetime.datetime, unit: str, amount: int
) -> datetime.datetime:
    """Move *reference* by *amount* units (calendar-aware months/years)."""
    units = {
        "minute": "minutes",
        "hour": "hours",
        "day": "days",
        "week": "weeks",
        "month": "months",
        "year": "years",
    }
    key = unit.strip().lower().rstrip("s")
    if key not in units:
        raise ValueError(f"Unsupported time unit: {unit!r}")
    return reference + relativedelta(**{units[key]: amount})


# ---------------------------------------------------------------------------
# Temporal comparison helpers
# ---------------------------------------------------------------------------


def align_temporal(left: Any, right: Any) -> tuple[Any, Any]:
    """
    Make two temporal values comparable.

    Naive datetimes are taken as UTC when compared with aware ones; a
    ``date`` compared with a ``datetime`` is promoted to midnight (or the
    datetime reduced to its date when the field itself is a ``date``).
    """
    if isinstance(left, datetime.datetime) and isinstance(right, datetime.datetime):
        if left.tzinfo is None and right.tzinfo is not None:
            left = left.replace(tzinfo=datetime.timezone.utc)
        elif left.tzinfo is not None and right.tzinfo is None:
            right = right.replace(tzinfo=datetime.timezone.utc)
    elif isinstance(left, datetime.datetime) and isinstance(right, datetime.date):
        right = datetime.datetime.combine(right, datetime.time.min, left.tzinfo)
    elif isinstance(left, datetime.date) and isinstance(right, datetime.datetime):
        right = right.date()
    return left, right


def time_of_day(value: Any) -> Any:
    """Reduce datetimes and durations to a naive ``time`` of day."""
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, datetime.time):
        return value.replace(tzinfo=None)
    if isinstance(value, datetime.timedelta):
        seconds = int(value.total_seconds()) % 86400
        return datetime.time(seconds // 3600, (seconds // 60) % 60, seconds % 60)
    return value
