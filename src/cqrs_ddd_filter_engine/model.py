"""
Filter model: the serializable description of a query.

A :class:`FilterModel` carries paging, orderings, a flat list of
:class:`FilterCriterion` (joined by each criterion's ``logic`` flag),
include paths and an optional hierarchy.  The models are pydantic v2
models with camelCase aliases, so the JSON wire format is::

    {
        "page": 1,
        "pageSize": 10,
        "orderings": [{"field": "lastName", "direction": "desc"}],
        "filters": [
            {"field": "age", "operator": "gte", "value": 18, "logic": "and"},
            {
                "customType": "daterange",
                "customParameters": {"field": "birthDate",
                                     "startDate": "1990-01-01",
                                     "endDate": "2000-12-31"}
            }
        ],
        "includes": ["addresses"]
    }

Keys are accepted in camelCase, PascalCase or snake_case.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .exceptions import (
    FilterSchemaError,
    OperatorNotFoundError,
    SpecificationError,
    UnsupportedCustomTypeError,
)
from .operators import (
    CriterionKind,
    FilterCustomType,
    FilterLogicOperator,
    FilterOperator,
    OrderDirection,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
DEFAULT_HIERARCHY_MAX_DEPTH = 5


def _lower_first(key: Any) -> Any:
    return key[:1].lower() + key[1:] if isinstance(key, str) else key


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _normalise_keys(cls, data: Any) -> Any:
        # "PageSize" and "pageSize" are the same key
        if isinstance(data, Mapping):
            return {_lower_first(key): value for key, value in data.items()}
        return data

    def to_dict(self) -> dict[str, Any]:
        """Wire representation: camelCase keys, enum values, no ``None``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


def _none_as_empty(value: Any, empty: Any) -> Any:
    return empty if value is None else value


def _schema_error(exc: PydanticValidationError) -> SpecificationError:
    """Surface our own errors raised inside validators; wrap the rest."""
    for error in exc.errors():
        original = (error.get("ctx") or {}).get("error")
        if isinstance(original, SpecificationError):
            return original
    first = exc.errors()[0] if exc.errors() else {}
    path = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return FilterSchemaError(f"Invalid filter payload: {exc}", path=path)


# -- ordering ------------------------------------------------------------------


class OrderCriterion(_WireModel):
    field: str
    direction: OrderDirection = OrderDirection.ASC


# -- named / composite specifications -------------------------------------------


class SpecificationLeaf(_WireModel):
    """Reference to a registered specification by name."""

    name: str
    arguments: list[Any] = Field(default_factory=list)

    @field_validator("arguments", mode="before")
    @classmethod
    def _arguments(cls, value: Any) -> Any:
        return _none_as_empty(value, [])


class SpecificationGroup(_WireModel):
    """Nodes folded with ``logic``."""

    logic: FilterLogicOperator = FilterLogicOperator.AND
    nodes: list[SpecificationNode]


SpecificationNode = Union[SpecificationLeaf, SpecificationGroup]  # noqa: UP007


class CompositeSpecification(_WireModel):
    """Tree of named specifications; top-level nodes are AND-ed."""

    nodes: list[SpecificationNode] = Field(default_factory=list)


SpecificationGroup.model_rebuild()
CompositeSpecification.model_rebuild()


# -- criteria ------------------------------------------------------------------


class FilterCriterion(_WireModel):
    """
    One node of the filter list.

    ``custom_type`` selects which of the other members matter; see
    :attr:`kind`.  For the quantifiers (any/all/none) the nested
    criterion is ``value`` when it is a criterion, else the first of
    ``filters``.
    """

    field: str | None = None
    operator: FilterOperator = FilterOperator.EQUAL
    value: Any = None
    logic: FilterLogicOperator = FilterLogicOperator.AND
    filters: list[FilterCriterion] = Field(default_factory=list)
    custom_type: FilterCustomType = FilterCustomType.NONE
    custom_parameters: dict[str, Any] = Field(default_factory=dict)
    specification_name: str | None = None
    specification_arguments: list[Any] = Field(default_factory=list)
    composite_specification: CompositeSpecification | None = None

    @field_validator("operator", mode="before")
    @classmethod
    def _operator(cls, value: Any) -> Any:
        if value is None:
            return FilterOperator.EQUAL
        if isinstance(value, str):
            try:
                return FilterOperator(value)
            except ValueError:
                raise OperatorNotFoundError(
                    value, [member.value for member in FilterOperator]
                ) from None
        return value

    @field_validator("custom_type", mode="before")
    @classmethod
    def _custom_type(cls, value: Any) -> Any:
        if value is None:
            return FilterCustomType.NONE
        if isinstance(value, str):
            try:
                return FilterCustomType(value)
            except ValueError:
                raise UnsupportedCustomTypeError(value) from None
        return value

    @field_validator("logic", mode="before")
    @classmethod
    def _logic(cls, value: Any) -> Any:
        return _none_as_empty(value, FilterLogicOperator.AND)

    @field_validator("filters", "specification_arguments", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> Any:
        return _none_as_empty(value, [])

    @field_validator("custom_parameters", mode="before")
    @classmethod
    def _parameters(cls, value: Any) -> Any:
        return _none_as_empty(value, {})

    @model_validator(mode="after")
    def _nested_value(self) -> FilterCriterion:
        if (
            self.operator.is_quantifier
            and isinstance(self.value, Mapping)
            and any(str(key).lower() == "field" for key in self.value)
        ):
            self.value = FilterCriterion.model_validate(self.value)
        return self

    # -- derived ---------------------------------------------------------------

    @property
    def kind(self) -> CriterionKind:
        if self.custom_type is FilterCustomType.NONE:
            return CriterionKind.SIMPLE
        if self.custom_type is FilterCustomType.NAMED_SPECIFICATION:
            return CriterionKind.NAMED
        if self.custom_type is FilterCustomType.COMPOSITE_SPECIFICATION:
            return CriterionKind.COMPOSITE
        return CriterionKind.CUSTOM

    @property
    def nested_criterion(self) -> FilterCriterion | None:
        """Criterion a quantifier applies to each collection element."""
        if isinstance(self.value, FilterCriterion):
            return self.value
        return self.filters[0] if self.filters else None

    def references(self, field: str) -> bool:
        """True when the criterion targets *field* (custom ``field`` key too)."""
        return field in (self.field, self._custom_field())

    def _custom_field(self) -> Any:
        for key, value in self.custom_parameters.items():
            if key.lower() == "field":
                return value
        return None

    def replaces(self, other: FilterCriterion) -> bool:
        """
        True when this criterion supersedes *other* on merge.

        Simple criteria match on field and operator, custom filters on
        their type and target field, named specifications on their name.
        Composite specifications never replace anything.
        """
        if self.custom_type is not other.custom_type:
            return False
        kind = self.kind
        if kind is CriterionKind.SIMPLE:
            return self.field == other.field and self.operator is other.operator
        if kind is CriterionKind.NAMED:
            return self.specification_name == other.specification_name
        if kind is CriterionKind.CUSTOM:
            target = self._custom_field()
            return target is not None and target == other._custom_field()
        return False

    def walk(self) -> Iterator[FilterCriterion]:
        """This criterion and every nested one, depth-first."""
        yield self
        if isinstance(self.value, FilterCriterion):
            yield from self.value.walk()
        for nested in self.filters:
            yield from nested.walk()


# -- model ---------------------------------------------------------------------


class FilterModel(_WireModel):
    """
    Paging, ordering, criteria and include instructions for one query.

    The compiler never mutates a model; the mutation helpers below are
    for callers that assemble or adjust models (merge user input with
    server defaults, drop a field the caller may not filter on, ...).

    Usage::

        model = FilterModel.from_json(request.query["filter"])
        model.merge(FilterModel(page_size=50)).clear("ssn")
    """

    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    no_tracking: bool = True
    orderings: list[OrderCriterion] = Field(default_factory=list)
    filters: list[FilterCriterion] = Field(default_factory=list)
    includes: list[str] = Field(default_factory=list)
    hierarchy: str | None = None
    hierarchy_max_depth: int = DEFAULT_HIERARCHY_MAX_DEPTH

    @field_validator("orderings", "filters", "includes", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> Any:
        return _none_as_empty(value, [])

    @field_validator("includes", mode="after")
    @classmethod
    def _unique_includes(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("page", mode="before")
    @classmethod
    def _page(cls, value: Any) -> Any:
        return _none_as_empty(value, DEFAULT_PAGE)

    @field_validator("page_size", mode="before")
    @classmethod
    def _page_size(cls, value: Any) -> Any:
        return _none_as_empty(value, DEFAULT_PAGE_SIZE)

    @field_validator("hierarchy_max_depth", mode="before")
    @classmethod
    def _max_depth(cls, value: Any) -> Any:
        return _none_as_empty(value, DEFAULT_HIERARCHY_MAX_DEPTH)

    # -- codec -----------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FilterModel:
        """
        Parse a wire dictionary.

        Raises:
            FilterSchemaError: the payload is not a valid filter model.
        """
        if not isinstance(data, Mapping):
            raise FilterSchemaError(
                f"Expected an object, got {type(data).__name__}", path="<root>"
            )
        cls._warn_unknown_keys(data)
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise _schema_error(exc) from exc

    @classmethod
    def from_json(cls, text: str | bytes) -> FilterModel:
        """Parse a JSON document (see :meth:`from_dict`)."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FilterSchemaError(f"Invalid JSON: {exc}", path="<root>") from exc
        return cls.from_dict(data)

    @classmethod
    def from_query_params(
        cls, params: Mapping[str, Any], key: str = "filter"
    ) -> FilterModel:
        """
        Unpack a model embedded in a query string under *key*.

        The value may be a JSON string or an already-decoded mapping.
        A missing key yields a default model.
        """
        raw = params.get(key)
        if raw is None:
            return cls()
        if isinstance(raw, list | tuple):
            if len(raw) != 1:
                raise FilterSchemaError(
                    f"Expected a single '{key}' parameter, got {len(raw)}", path=key
                )
            raw = raw[0]
        if isinstance(raw, str | bytes):
            return cls.from_json(raw)
        if isinstance(raw, Mapping):
            return cls.from_dict(raw)
        raise FilterSchemaError(
            f"Unsupported '{key}' parameter type: {type(raw).__name__}", path=key
        )

    @classmethod
    def _warn_unknown_keys(cls, data: Mapping[str, Any]) -> None:
        known = {name for name in cls.model_fields} | {
            info.alias for info in cls.model_fields.values() if info.alias
        }
        unknown = [
            key
            for key in data
            if isinstance(key, str) and _lower_first(key) not in known
        ]
        if unknown:
            logger.warning("Ignoring unknown filter model keys: %s", unknown)

    # -- queries ---------------------------------------------------------------

    def is_empty(self) -> bool:
        return not (self.filters or self.orderings or self.includes or self.hierarchy)

    def get_filters(self, field: str | None = None) -> list[FilterCriterion]:
        """All criteria (nested ones included, depth-first) matching *field*."""
        return [
            criterion
            for top in self.filters
            for criterion in top.walk()
            if field is None or criterion.references(field)
        ]

    def get_filter(
        self, field: str, operator: FilterOperator | str | None = None
    ) -> FilterCriterion | None:
        op = FilterOperator(operator) if operator is not None else None
        for criterion in self.get_filters(field):
            if op is None or criterion.operator is op:
                return criterion
        return None

    def has_filter(
        self, field: str, operator: FilterOperator | str | None = None
    ) -> bool:
        return self.get_filter(field, operator) is not None

    def has_filters(self) -> bool:
        return bool(self.filters)

    def has_ordering(self, field: str | None = None) -> bool:
        if field is None:
            return bool(self.orderings)
        return any(order.field == field for order in self.orderings)

    def has_include(self, path: str) -> bool:
        return path in self.includes

    # -- merge / clear ---------------------------------------------------------

    def merge(self, other: FilterModel | None) -> FilterModel:
        """
        Merge *other* into this model and return this model.

        Incoming orderings replace existing ones on the same field;
        incoming filters replace the existing ones they supersede (see
        :meth:`FilterCriterion.replaces`); includes are unioned; hierarchy
        and paging are taken from *other* when set.
        """
        if other is None:
            return self

        if other.page > 0:
            self.page = other.page
        if other.page_size > 0:
            self.page_size = other.page_size
        if self.page <= 0:
            self.page = DEFAULT_PAGE
        if self.page_size <= 0:
            self.page_size = DEFAULT_PAGE_SIZE
        if "no_tracking" in other.model_fields_set:
            self.no_tracking = other.no_tracking

        for ordering in other.orderings:
            self.add_or_update_ordering(ordering.field, ordering.direction)

        for incoming in other.filters:
            self.filters = [
                existing
                for existing in self.filters
                if not incoming.replaces(existing)
            ]
            self.filters.append(incoming.model_copy(deep=True))

        for include in other.includes:
            self.add_include(include)

        if other.hierarchy:
            self.hierarchy = other.hierarchy
            self.hierarchy_max_depth = other.hierarchy_max_depth
        return self

    def clear(self, field: str | None = None) -> FilterModel:
        """
        Reset the model, or remove everything referencing *field*.

        With a field: drops matching orderings, top-level filters, one
        level of nested filters and includes, and resets the hierarchy
        when it is that field.
        """
        if field is None:
            self.page = DEFAULT_PAGE
            self.page_size = DEFAULT_PAGE_SIZE
            self.no_tracking = True
            self.orderings = []
            self.filters = []
            self.includes = []
            self.hierarchy = None
            self.hierarchy_max_depth = DEFAULT_HIERARCHY_MAX_DEPTH
            return self

        self.orderings = [o for o in self.orderings if o.field != field]
        self.filters = [f for f in self.filters if not f.references(field)]
        for criterion in self.filters:
            criterion.filters = [
                nested for nested in criterion.filters if not nested.references(field)
            ]
        self.includes = [path for path in self.includes if path != field]
        if self.hierarchy == field:
            self.hierarchy = None
            self.hierarchy_max_depth = DEFAULT_HIERARCHY_MAX_DEPTH
        return self

    # -- mutation helpers ------------------------------------------------------

    def add_or_update_filter(
        self,
        field: str,
        operator: FilterOperator | str,
        value: Any = None,
        logic: FilterLogicOperator | str = FilterLogicOperator.AND,
    ) -> FilterModel:
        op = FilterOperator(operator)
        existing = next(
            (
                f
                for f in self.filters
                if f.field == field
                and f.operator is op
                and f.custom_type is FilterCustomType.NONE
            ),
            None,
        )
        if existing is not None:
            existing.value = value
            existing.logic = FilterLogicOperator(logic)
        else:
            self.filters.append(
                FilterCriterion(
                    field=field,
                    operator=op,
                    value=value,
                    logic=FilterLogicOperator(logic),
                )
            )
        return self

    def remove_filter(
        self, field: str, operator: FilterOperator | str | None = None
    ) -> FilterModel:
        op = FilterOperator(operator) if operator is not None else None
        self.filters = [
            f
            for f in self.filters
            if not (f.references(field) and (op is None or f.operator is op))
        ]
        return self

    def add_or_update_ordering(
        self, field: str, direction: OrderDirection | str = OrderDirection.ASC
    ) -> FilterModel:
        direction = OrderDirection(direction)
        for ordering in self.orderings:
            if ordering.field == field:
                ordering.direction = direction
                return self
        self.orderings.append(OrderCriterion(field=field, direction=direction))
        return self

    def remove_ordering(self, field: str) -> FilterModel:
        self.orderings = [o for o in self.orderings if o.field != field]
        return self

    def add_include(self, path: str) -> FilterModel:
        if path not in self.includes:
            self.includes.append(path)
        return self

    def remove_include(self, path: str) -> FilterModel:
        self.includes = [p for p in self.includes if p != path]
        return self

    def set_hierarchy(
        self, path: str | None, max_depth: int = DEFAULT_HIERARCHY_MAX_DEPTH
    ) -> FilterModel:
        if max_depth < 1:
            raise ValueError("Hierarchy max depth must be at least 1")
        self.hierarchy = path
        self.hierarchy_max_depth = max_depth
        return self

    def set_paging(self, page: int, page_size: int) -> FilterModel:
        if page < 1:
            raise ValueError("Page must be at least 1")
        if page_size < 1:
            raise ValueError("Page size must be at least 1")
        self.page = page
        self.page_size = page_size
        return self
