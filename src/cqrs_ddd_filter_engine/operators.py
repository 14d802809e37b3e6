"""
Wire enumerations of the filter model.

Values are the lower-case strings used on the wire.  Parsing is
case-insensitive and tolerant of separators (``is_null``, ``IsNull`` and
``isnull`` are the same operator) and of the symbolic aliases listed in
``_OPERATOR_ALIASES``.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any


def _normalise(value: str) -> str:
    return "".join(ch for ch in value.strip().lower() if ch not in "_- ")


class _WireEnum(str, Enum):
    """String enum that parses its wire values leniently."""

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def _missing_(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        key = cls._aliases().get(key, key)
        key = _normalise(key)
        key = cls._aliases().get(key, key)
        for member in cls:
            if member.value == key:
                return member
        return None

    def __str__(self) -> str:
        return str(self.value)


class FilterOperator(_WireEnum):
    """Operators of a simple field criterion."""

    EQUAL = "eq"
    NOT_EQUAL = "neq"
    IS_NULL = "isnull"
    IS_NOT_NULL = "isnotnull"
    IS_EMPTY = "isempty"
    IS_NOT_EMPTY = "isnotempty"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"
    CONTAINS = "contains"
    DOES_NOT_CONTAIN = "doesnotcontain"
    STARTS_WITH = "startswith"
    DOES_NOT_START_WITH = "doesnotstartwith"
    ENDS_WITH = "endswith"
    DOES_NOT_END_WITH = "doesnotendwith"
    ANY = "any"
    ALL = "all"
    NONE = "none"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return _OPERATOR_ALIASES

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISONS

    @property
    def is_string(self) -> bool:
        return self in _STRING_OPERATORS

    @property
    def is_quantifier(self) -> bool:
        return self in (FilterOperator.ANY, FilterOperator.ALL, FilterOperator.NONE)

    @property
    def takes_value(self) -> bool:
        """False for operators that ignore the criterion value."""
        return self not in _VALUELESS


_OPERATOR_ALIASES: dict[str, str] = {
    "=": "eq",
    "==": "eq",
    "equal": "eq",
    "equals": "eq",
    "!=": "neq",
    "<>": "neq",
    "ne": "neq",
    "notequal": "neq",
    "notequals": "neq",
    ">": "gt",
    "greaterthan": "gt",
    ">=": "gte",
    "ge": "gte",
    "greaterthanorequal": "gte",
    "<": "lt",
    "lessthan": "lt",
    "<=": "lte",
    "le": "lte",
    "lessthanorequal": "lte",
    "notcontains": "doesnotcontain",
    "notstartswith": "doesnotstartwith",
    "notendswith": "doesnotendwith",
}

_COMPARISONS = frozenset(
    {
        FilterOperator.GREATER_THAN,
        FilterOperator.GREATER_THAN_OR_EQUAL,
        FilterOperator.LESS_THAN,
        FilterOperator.LESS_THAN_OR_EQUAL,
    }
)
_STRING_OPERATORS = frozenset(
    {
        FilterOperator.CONTAINS,
        FilterOperator.DOES_NOT_CONTAIN,
        FilterOperator.STARTS_WITH,
        FilterOperator.DOES_NOT_START_WITH,
        FilterOperator.ENDS_WITH,
        FilterOperator.DOES_NOT_END_WITH,
    }
)
_VALUELESS = frozenset(
    {
        FilterOperator.IS_NULL,
        FilterOperator.IS_NOT_NULL,
        FilterOperator.IS_EMPTY,
        FilterOperator.IS_NOT_EMPTY,
    }
)


class FilterLogicOperator(_WireEnum):
    """How a criterion joins the one that follows it."""

    AND = "and"
    OR = "or"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"&&": "and", "||": "or"}


class OrderDirection(_WireEnum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"ascending": "asc", "descending": "desc"}


class FilterCustomType(_WireEnum):
    """Discriminator of a criterion; ``none`` means a simple field criterion."""

    NONE = "none"
    FULL_TEXT_SEARCH = "fulltextsearch"
    DATE_RANGE = "daterange"
    DATE_RELATIVE = "daterelative"
    TIME_RANGE = "timerange"
    TIME_RELATIVE = "timerelative"
    NUMERIC_RANGE = "numericrange"
    IS_NULL = "isnull"
    IS_NOT_NULL = "isnotnull"
    ENUM_VALUES = "enumvalues"
    TEXT_IN = "textin"
    TEXT_NOT_IN = "textnotin"
    NUMERIC_IN = "numericin"
    NUMERIC_NOT_IN = "numericnotin"
    NAMED_SPECIFICATION = "namedspecification"
    COMPOSITE_SPECIFICATION = "compositespecification"

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {"fts": "fulltextsearch"}


class CriterionKind(str, Enum):
    """Which part of a criterion is meaningful, derived from its custom type."""

    SIMPLE = "simple"
    CUSTOM = "custom"
    NAMED = "named"
    COMPOSITE = "composite"


class PageSize(IntEnum):
    """Standard page sizes accepted by the fluent builder."""

    SMALL = 10
    MEDIUM = 25
    LARGE = 50
    EXTRA_LARGE = 100
