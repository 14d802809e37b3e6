"""
Value coercion: convert loosely-typed filter values to a field's type.

Resolution order:

1. ``None`` stays ``None``; registered converters for the target win.
2. numbers and booleans map directly onto the (nullable-unwrapped) target.
3. strings are parsed per target type with culture-invariant rules
   (ISO 8601 first for temporal types, enums by name or value).
4. anything else goes through a generic conversion: values that already
   have the target type pass through, then the target's ``from_value``
   hook, pydantic validation for pydantic-aware types, and finally the
   target's constructor.

Usage::

    coercer = ValueCoercer()
    coercer.coerce("2020-01-31", datetime.date)   # -> date(2020, 1, 31)
    coercer.register(Money, Money.parse)
"""

from __future__ import annotations

import datetime
import decimal
import functools
import uuid
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .accessors import is_class, unwrap_optional
from .exceptions import ValueCoercionError
from .utils import parse_bool, parse_date, parse_datetime, parse_interval, parse_time

Converter = Callable[[Any], Any]


@functools.lru_cache(maxsize=256)
def _type_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _parse_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        number = decimal.Decimal(text)
        if number != number.to_integral_value():
            raise ValueError(f"{text!r} is not an integral number") from None
        return int(number)


def parse_enum(enum_type: type[Enum], token: Any) -> Enum:
    """
    Parse *token* into a member of *enum_type*.

    Accepts a member name (case-insensitive), a member value (or its
    string form) and, for enums whose values are not integers, a
    zero-based declaration ordinal.
    """
    if isinstance(token, enum_type):
        return token
    text = str(token).strip()
    for member in enum_type:
        if member.name.lower() == text.lower():
            return member
    for member in enum_type:
        if member.value == token or str(member.value).lower() == text.lower():
            return member
    if text.lstrip("-").isdigit():
        members = list(enum_type)
        ordinal = int(text)
        if 0 <= ordinal < len(members) and not any(
            isinstance(member.value, int) for member in members
        ):
            return members[ordinal]
    raise ValueError(
        f"'{token}' is not a valid {enum_type.__name__}; "
        f"expected one of {', '.join(member.name for member in enum_type)}"
    )


class ValueCoercer:
    """Per-target-type conversion table, open for extension."""

    def __init__(self) -> None:
        self._converters: dict[type, Converter] = {}
        self._string_parsers: dict[type, Converter] = {
            str: str,
            bool: parse_bool,
            int: _parse_int,
            float: float,
            decimal.Decimal: decimal.Decimal,
            # datetime before date: datetime is a date subclass
            datetime.datetime: parse_datetime,
            datetime.date: parse_date,
            datetime.time: parse_time,
            datetime.timedelta: parse_interval,
            uuid.UUID: uuid.UUID,
        }

    # -- registration --------------------------------------------------------

    def register(self, target_type: type, converter: Converter) -> None:
        """Convert any value destined for *target_type* with *converter*."""
        self._converters[target_type] = converter

    def unregister(self, target_type: type) -> None:
        self._converters.pop(target_type, None)

    # -- conversion ----------------------------------------------------------

    def coerce(self, value: Any, target_type: Any) -> Any:
        """
        Convert *value* to *target_type*.

        Lists are converted element-wise.

        Raises:
            ValueCoercionError: when the value cannot be converted.
        """
        if value is None:
            return None
        target, _ = unwrap_optional(target_type)
        if target is Any or not is_class(target):
            return value
        if isinstance(value, list | tuple | set | frozenset):
            return [self.coerce(item, target) for item in value]
        try:
            converter = self._lookup(self._converters, target)
            if converter is not None:
                return converter(value)
            if isinstance(value, bool | int | float | decimal.Decimal):
                return self._coerce_number(value, target)
            if isinstance(value, str):
                return self._coerce_string(value, target)
            return self._coerce_generic(value, target)
        except ValueCoercionError:
            raise
        except (
            ValueError,
            TypeError,
            ArithmeticError,
            OverflowError,
            PydanticValidationError,
        ) as exc:
            raise ValueCoercionError(value, target, str(exc)) from exc

    @staticmethod
    def _lookup(table: dict[type, Converter], target: type) -> Converter | None:
        for klass in target.__mro__:
            if klass in table:
                return table[klass]
        return None

    def _coerce_number(self, value: Any, target: type) -> Any:
        if issubclass(target, Enum):
            return parse_enum(target, value)
        if target is bool:
            if isinstance(value, bool) or value in (0, 1):
                return bool(value)
            raise ValueError(f"{value!r} is not a boolean")
        if target is int or (issubclass(target, int) and not issubclass(target, bool)):
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"{value!r} is not an integral number")
            return target(value)
        if issubclass(target, float):
            return target(value)
        if issubclass(target, decimal.Decimal):
            return target(str(value))
        if issubclass(target, str):
            return str(value).lower() if isinstance(value, bool) else str(value)
        if target is datetime.datetime or target is datetime.date:
            moment = datetime.datetime.fromtimestamp(
                float(value), tz=datetime.timezone.utc
            )
            return moment if target is datetime.datetime else moment.date()
        if target is datetime.timedelta:
            return datetime.timedelta(seconds=float(value))
        return self._coerce_generic(value, target)

    def _coerce_string(self, value: str, target: type) -> Any:
        if issubclass(target, Enum):
            return parse_enum(target, value)
        parser = self._lookup(self._string_parsers, target)
        if parser is not None:
            result = parser(value if target is str else value.strip())
            return result if isinstance(result, target) else target(result)
        return self._coerce_generic(value, target)

    def _coerce_generic(self, value: Any, target: type) -> Any:
        if isinstance(value, target):
            return value
        hook = getattr(target, "from_value", None)
        if callable(hook):
            return hook(value)
        if issubclass(target, BaseModel) or hasattr(
            target, "__get_pydantic_core_schema__"
        ):
            return _type_adapter(target).validate_python(value)
        return target(value)


default_coercer = ValueCoercer()
