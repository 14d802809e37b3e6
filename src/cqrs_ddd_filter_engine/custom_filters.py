"""
Custom filter compiler.

Builds a specification for each parametrised custom filter kind
(full-text search, date and time ranges, relative dates and times,
numeric ranges, null checks, enum and value lists).  Parameters come from
``FilterCriterion.custom_parameters``; keys are matched
case-insensitively.

Every builder validates its parameters and fails fast with
:class:`FilterSchemaError`; values that cannot be converted to the
field's type raise :class:`ValueCoercionError`.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

from .accessors import is_class, resolve_field
from .ast import FieldSpecification, MembershipSpecification, as_float, casefold
from .base import AndSpecification, OrSpecification, and_all, or_all
from .coercion import parse_enum
from .exceptions import (
    FilterSchemaError,
    UnsupportedCustomTypeError,
    ValueCoercionError,
)
from .operators import FilterCustomType, FilterOperator
from .utils import (
    is_date_only,
    parse_bool,
    parse_date_or_epoch,
    parse_list_value,
    parse_time,
    shift,
    time_of_day,
)

if TYPE_CHECKING:
    from .accessors import FieldAccessor
    from .config import CompilerOptions
    from .domain.specification import ISpecification
    from .model import FilterCriterion

logger = logging.getLogger(__name__)

Op = FilterOperator

_DATE_UNITS = ("day", "week", "month", "year")
_TIME_UNITS = ("minute", "hour")
_TIME_TYPES = (datetime.time, datetime.datetime, datetime.timedelta)

# Accepted spellings of the range bounds.
_ALIASES: dict[str, tuple[str, ...]] = {
    "start": ("start", "startDate", "startTime", "from"),
    "end": ("end", "endDate", "endTime", "to"),
    "searchTerm": ("searchTerm", "term", "query"),
}


class CustomParameters:
    """Case-insensitive view over a criterion's custom parameters."""

    def __init__(self, custom_type: FilterCustomType, raw: Mapping[str, Any]):
        self.custom_type = custom_type
        self._values = {str(key).lower(): value for key, value in raw.items()}

    def get(self, key: str, default: Any = None) -> Any:
        for alias in _ALIASES.get(key, (key,)):
            value = self._values.get(alias.lower())
            if value is not None and value != "":
                return value
        return default

    def require(self, *keys: str) -> list[Any]:
        missing = [key for key in keys if self.get(key) is None]
        if missing:
            raise FilterSchemaError(
                f"Custom filter '{self.custom_type.value}' requires parameter(s): "
                f"{', '.join(missing)}",
                path=f"customParameters.{missing[0]}",
            )
        return [self.get(key) for key in keys]

    def flag(self, key: str, default: bool) -> bool:
        value = self.get(key)
        if value is None:
            return default
        try:
            return parse_bool(value)
        except ValueError as exc:
            raise FilterSchemaError(str(exc), path=f"customParameters.{key}") from exc

    def integer(self, key: str) -> int:
        (value,) = self.require(key)
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise FilterSchemaError(
                f"Parameter '{key}' must be an integer, got {value!r}",
                path=f"customParameters.{key}",
            ) from exc

    def choice(self, key: str, choices: tuple[str, ...]) -> str:
        (value,) = self.require(key)
        text = str(value).strip().lower()
        if text not in choices and text.rstrip("s") in choices:
            text = text.rstrip("s")
        if text not in choices:
            raise FilterSchemaError(
                f"Parameter '{key}' must be one of {', '.join(choices)}, "
                f"got {value!r}",
                path=f"customParameters.{key}",
            )
        return text

    def values(self, key: str = "values") -> list[Any]:
        (raw,) = self.require(key)
        tokens = parse_list_value(raw, separators=";")
        if not tokens:
            raise FilterSchemaError(
                f"Parameter '{key}' contains no values",
                path=f"customParameters.{key}",
            )
        return tokens


class CustomFilterCompiler:
    """
    Dispatch custom filter criteria to their builders.

    Usage::

        compiler = CustomFilterCompiler(CompilerOptions())
        spec = compiler.compile(Person, criterion)
    """

    def __init__(self, options: CompilerOptions) -> None:
        self._options = options
        self._builders: dict[
            FilterCustomType,
            Callable[[Any, CustomParameters], ISpecification[Any]],
        ] = {
            FilterCustomType.FULL_TEXT_SEARCH: self._full_text_search,
            FilterCustomType.DATE_RANGE: self._date_range,
            FilterCustomType.DATE_RELATIVE: self._date_relative,
            FilterCustomType.TIME_RANGE: self._time_range,
            FilterCustomType.TIME_RELATIVE: self._time_relative,
            FilterCustomType.NUMERIC_RANGE: self._numeric_range,
            FilterCustomType.IS_NULL: self._is_null,
            FilterCustomType.IS_NOT_NULL: self._is_not_null,
            FilterCustomType.ENUM_VALUES: self._enum_values,
            FilterCustomType.TEXT_IN: self._text_in,
            FilterCustomType.TEXT_NOT_IN: self._text_not_in,
            FilterCustomType.NUMERIC_IN: self._numeric_in,
            FilterCustomType.NUMERIC_NOT_IN: self._numeric_not_in,
        }

    @property
    def supported_types(self) -> set[FilterCustomType]:
        return set(self._builders)

    def compile(
        self, entity_type: Any, criterion: FilterCriterion
    ) -> ISpecification[Any]:
        """
        Raises:
            UnsupportedCustomTypeError: no builder for the criterion's type.
            FilterSchemaError: missing or malformed parameters.
        """
        builder = self._builders.get(criterion.custom_type)
        if builder is None:
            raise UnsupportedCustomTypeError(criterion.custom_type)
        params = CustomParameters(criterion.custom_type, criterion.custom_parameters)
        spec = builder(entity_type, params)
        logger.debug("Compiled custom filter %s", criterion.custom_type.value)
        return spec

    # -- helpers ---------------------------------------------------------------

    def _field(
        self, entity_type: Any, params: CustomParameters, key: str = "field"
    ) -> FieldAccessor:
        (path,) = params.require(key)
        if not isinstance(path, str):
            raise FilterSchemaError(
                f"Parameter '{key}' must be a field path, got {path!r}",
                path=f"customParameters.{key}",
            )
        return resolve_field(entity_type, path)

    def _leaf(
        self,
        accessor: FieldAccessor,
        op: FilterOperator,
        value: Any = None,
        transform: Callable[[Any], Any] | None = None,
    ) -> FieldSpecification[Any]:
        return FieldSpecification(
            accessor,
            op,
            value,
            registry=self._options.operators,
            transform=transform,
        )

    def _guard(
        self, accessor: FieldAccessor, spec: ISpecification[Any]
    ) -> ISpecification[Any]:
        """Conjoin a not-null check for nullable fields."""
        if not accessor.nullable:
            return spec
        return AndSpecification(self._leaf(accessor, Op.IS_NOT_NULL), spec)

    def _now(self) -> datetime.datetime:
        return self._options.clock()

    # -- full-text search ------------------------------------------------------

    def _full_text_search(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        term, raw_fields = params.require("searchTerm", "fields")
        fields = parse_list_value(raw_fields)
        if not fields or not all(isinstance(f, str) for f in fields):
            raise FilterSchemaError(
                "Parameter 'fields' must name at least one field",
                path="customParameters.fields",
            )
        term = str(term)
        transform = casefold if self._options.case_insensitive_search else None
        value = term.casefold() if transform is not None else term
        return or_all(
            self._leaf(resolve_field(entity_type, path), Op.CONTAINS, value, transform)
            for path in fields
        )

    # -- dates -----------------------------------------------------------------

    def _date_bound(self, accessor: FieldAccessor, raw: Any, key: str) -> Any:
        try:
            moment = parse_date_or_epoch(raw)
        except (ValueError, OverflowError) as exc:
            raise ValueCoercionError(raw, datetime.datetime, str(exc)) from exc
        if accessor.value_type is datetime.date:
            return moment.date()
        logger.debug("Parsed %s bound %r as %s", key, raw, moment.isoformat())
        return moment

    def _date_range(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        accessor = self._field(entity_type, params)
        start_raw, end_raw = params.get("start"), params.get("end")
        if start_raw is None and end_raw is None:
            params.require("start", "end")
        inclusive = params.flag("inclusive", True)

        bounds: list[ISpecification[Any]] = []
        if start_raw is not None:
            start = self._date_bound(accessor, start_raw, "start")
            lower = Op.GREATER_THAN_OR_EQUAL if inclusive else Op.GREATER_THAN
            bounds.append(self._leaf(accessor, lower, start))
        if end_raw is not None:
            end = self._date_bound(accessor, end_raw, "end")
            upper = Op.LESS_THAN_OR_EQUAL if inclusive else Op.LESS_THAN
            if isinstance(end, datetime.datetime) and is_date_only(end_raw):
                # a bare end date on a datetime field covers that whole day
                upper = Op.LESS_THAN
                if inclusive:
                    end = end + datetime.timedelta(days=1)
            bounds.append(self._leaf(accessor, upper, end))
        return self._guard(accessor, and_all(bounds))

    def _date_relative(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        accessor = self._field(entity_type, params)
        unit = params.choice("unit", _DATE_UNITS)
        amount = params.integer("amount")
        direction = params.choice("direction", ("past", "future"))

        now = self._now()
        if direction == "past":
            reference: Any = shift(now, unit, -amount)
            op = Op.GREATER_THAN_OR_EQUAL
        else:
            reference = shift(now, unit, amount)
            op = Op.LESS_THAN_OR_EQUAL
        if accessor.value_type is datetime.date:
            reference = reference.date()
        return self._guard(accessor, self._leaf(accessor, op, reference))

    # -- times -----------------------------------------------------------------

    def _time_field(
        self, entity_type: Any, params: CustomParameters
    ) -> FieldAccessor:
        accessor = self._field(entity_type, params)
        value_type = accessor.value_type
        if value_type is not Any and not (
            is_class(value_type) and issubclass(value_type, _TIME_TYPES)
        ):
            raise FilterSchemaError(
                f"Field '{accessor.path}' is not a time, datetime or timedelta field",
                path="customParameters.field",
            )
        return accessor

    @staticmethod
    def _time_bound(raw: Any) -> datetime.time:
        try:
            return parse_time(raw)
        except ValueError as exc:
            raise FilterSchemaError(str(exc), path="customParameters") from exc

    def _time_range(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        accessor = self._time_field(entity_type, params)
        start_raw, end_raw = params.require("start", "end")
        start, end = self._time_bound(start_raw), self._time_bound(end_raw)
        inclusive = params.flag("inclusive", True)
        lower = Op.GREATER_THAN_OR_EQUAL if inclusive else Op.GREATER_THAN
        upper = Op.LESS_THAN_OR_EQUAL if inclusive else Op.LESS_THAN

        after_start = self._leaf(accessor, lower, start, time_of_day)
        before_end = self._leaf(accessor, upper, end, time_of_day)
        if start <= end:
            spec: ISpecification[Any] = AndSpecification(after_start, before_end)
        else:
            # Overnight: [start, midnight) or [midnight, end]
            spec = OrSpecification(after_start, before_end)
        return self._guard(accessor, spec)

    def _time_relative(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        accessor = self._time_field(entity_type, params)
        unit = params.choice("unit", _TIME_UNITS)
        amount = params.integer("amount")
        direction = params.choice("direction", ("past", "future"))

        now = self._now()
        if direction == "past":
            reference = shift(now, unit, -amount).time()
            op = Op.GREATER_THAN_OR_EQUAL
        else:
            reference = shift(now, unit, amount).time()
            op = Op.LESS_THAN_OR_EQUAL
        return self._guard(accessor, self._leaf(accessor, op, reference, time_of_day))

    # -- numbers ---------------------------------------------------------------

    def _numeric_range(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        accessor = self._field(entity_type, params)
        raw_min, raw_max = params.require("min", "max")
        coercer = self._options.coercer
        low, high = coercer.coerce(raw_min, float), coercer.coerce(raw_max, float)
        inclusive = params.flag("inclusive", True)
        return self._guard(
            accessor,
            AndSpecification(
                self._leaf(
                    accessor,
                    Op.GREATER_THAN_OR_EQUAL if inclusive else Op.GREATER_THAN,
                    low,
                    as_float,
                ),
                self._leaf(
                    accessor,
                    Op.LESS_THAN_OR_EQUAL if inclusive else Op.LESS_THAN,
                    high,
                    as_float,
                ),
            ),
        )

    # -- null checks -----------------------------------------------------------

    def _is_null(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        return self._leaf(self._field(entity_type, params), Op.IS_NULL)

    def _is_not_null(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        return self._leaf(self._field(entity_type, params), Op.IS_NOT_NULL)

    # -- value lists -----------------------------------------------------------

    def _enum_values(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        accessor = self._field(entity_type, params)
        enum_type = (
            accessor.element_type if accessor.is_collection else accessor.value_type
        )
        if not (is_class(enum_type) and issubclass(enum_type, Enum)):
            raise FilterSchemaError(
                f"Field '{accessor.path}' is not an enum field",
                path="customParameters.field",
            )
        members = []
        for token in params.values():
            try:
                members.append(parse_enum(enum_type, token))
            except ValueError as exc:
                raise ValueCoercionError(token, enum_type, str(exc)) from exc
        return MembershipSpecification(accessor, members)

    def _text_in(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        return self._text_membership(entity_type, params, negate=False)

    def _text_not_in(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        return self._text_membership(entity_type, params, negate=True)

    def _text_membership(
        self, entity_type: Any, params: CustomParameters, *, negate: bool
    ) -> ISpecification[Any]:
        accessor = self._field(entity_type, params)
        tokens = [str(token) for token in params.values()]
        return MembershipSpecification(accessor, tokens, negate=negate)

    def _numeric_in(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        return self._numeric_membership(entity_type, params, negate=False)

    def _numeric_not_in(
        self, entity_type: Any, params: CustomParameters
    ) -> ISpecification[Any]:
        return self._numeric_membership(entity_type, params, negate=True)

    def _numeric_membership(
        self, entity_type: Any, params: CustomParameters, *, negate: bool
    ) -> ISpecification[Any]:
        accessor = self._field(entity_type, params)
        target = (
            accessor.element_type if accessor.is_collection else accessor.value_type
        )
        if not is_class(target):
            target = float
        coerce = self._options.coercer.coerce
        values = [coerce(token, target) for token in params.values()]
        return MembershipSpecification(accessor, values, negate=negate)
