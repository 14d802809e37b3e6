"""
Fluent builder for filter models.

Example::

    model = (
        FilterModelBuilder(Person)
        .set_paging(2, PageSize.MEDIUM)
        .add_filter("age", FilterOperator.GREATER_THAN_OR_EQUAL, 18)
        .add_filter("status", "eq", "active", logic="or")
        .add_filter("status", "eq", "pending")
        .add_ordering("last_name", OrderDirection.DESC)
        .add_custom_filter(FilterCustomType.DATE_RANGE)
            .add_parameter("field", "birth_date")
            .add_parameter("start", "1990-01-01")
            .add_parameter("end", "2000-12-31")
        .done()
        .build()
    )

Every method takes a keyword-only ``condition``; when it is false the
call is a no-op, which keeps optional query parameters out of ``if``
chains::

    builder.add_filter("city", "eq", city, condition=city is not None)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .accessors import resolve_field
from .model import (
    DEFAULT_HIERARCHY_MAX_DEPTH,
    CompositeSpecification,
    FilterCriterion,
    FilterModel,
    SpecificationGroup,
    SpecificationLeaf,
)
from .operators import (
    FilterCustomType,
    FilterLogicOperator,
    FilterOperator,
    OrderDirection,
    PageSize,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .model import SpecificationNode


def spec(name: str, *arguments: Any) -> SpecificationLeaf:
    """Leaf node of a composite specification."""
    return SpecificationLeaf(name=name, arguments=list(arguments))


def spec_group(
    logic: FilterLogicOperator | str, *nodes: SpecificationNode
) -> SpecificationGroup:
    """Group node of a composite specification."""
    return SpecificationGroup(logic=FilterLogicOperator(logic), nodes=list(nodes))


class FilterModelBuilder:
    """
    Fluent builder for :class:`FilterModel`.

    When *entity_type* is given, field paths are validated as they are
    added (``FieldNotFoundError`` on typos) instead of at compile time.
    """

    def __init__(
        self,
        entity_type: Any | None = None,
        model: FilterModel | None = None,
    ) -> None:
        self.entity_type = entity_type
        self._model = FilterModel() if model is None else model.model_copy(deep=True)

    # -- paging ----------------------------------------------------------------

    def set_paging(
        self,
        page: int | PageSize,
        page_size: int | PageSize | None = None,
        *,
        condition: bool = True,
    ) -> FilterModelBuilder:
        """
        Set page and page size; ``set_paging(PageSize.LARGE)`` only sets
        the size.

        Raises:
            ValueError: page or page size below 1.
        """
        if not condition:
            return self
        if isinstance(page, PageSize) and page_size is None:
            page, page_size = self._model.page, page
        size = int(page_size) if page_size is not None else self._model.page_size
        self._model.set_paging(int(page), size)
        return self

    # -- criteria --------------------------------------------------------------

    def add_filter(
        self,
        field: str,
        operator: FilterOperator | str = FilterOperator.EQUAL,
        value: Any = None,
        logic: FilterLogicOperator | str = FilterLogicOperator.AND,
        *,
        condition: bool = True,
    ) -> FilterModelBuilder:
        """Append a simple field criterion."""
        if not condition:
            return self
        self._check(field)
        self._model.filters.append(
            FilterCriterion(
                field=field,
                operator=FilterOperator(operator),
                value=value,
                logic=FilterLogicOperator(logic),
            )
        )
        return self

    def add_collection_filter(
        self,
        field: str,
        operator: FilterOperator | str,
        configure: Callable[[FilterModelBuilder], Any],
        logic: FilterLogicOperator | str = FilterLogicOperator.AND,
        *,
        condition: bool = True,
    ) -> FilterModelBuilder:
        """
        Append a quantifier criterion (any/all/none) whose nested criteria
        are built by *configure* against the collection's element type.

        Nothing is added when *configure* adds no criteria.
        """
        if not condition:
            return self
        element_type = None
        if self.entity_type is not None:
            accessor = resolve_field(self.entity_type, field)
            element_type = accessor.element_type
        nested = FilterModelBuilder(element_type)
        configure(nested)
        criteria = nested.build().filters
        if criteria:
            self._model.filters.append(
                FilterCriterion(
                    field=field,
                    operator=FilterOperator(operator),
                    filters=criteria,
                    logic=FilterLogicOperator(logic),
                )
            )
        return self

    def add_custom_filter(
        self,
        custom_type: FilterCustomType | str,
        logic: FilterLogicOperator | str = FilterLogicOperator.AND,
        *,
        condition: bool = True,
    ) -> CustomFilterBuilder:
        """Start a custom filter; finish it with ``done()``."""
        criterion = FilterCriterion(
            custom_type=FilterCustomType(custom_type),
            logic=FilterLogicOperator(logic),
        )
        return CustomFilterBuilder(self, criterion, attach=condition)

    def add_named_specification(
        self,
        name: str,
        *arguments: Any,
        logic: FilterLogicOperator | str = FilterLogicOperator.AND,
        condition: bool = True,
    ) -> FilterModelBuilder:
        if not condition:
            return self
        self._model.filters.append(
            FilterCriterion(
                custom_type=FilterCustomType.NAMED_SPECIFICATION,
                specification_name=name,
                specification_arguments=list(arguments),
                logic=FilterLogicOperator(logic),
            )
        )
        return self

    def add_composite_specification(
        self,
        *nodes: SpecificationNode,
        logic: FilterLogicOperator | str = FilterLogicOperator.AND,
        condition: bool = True,
    ) -> FilterModelBuilder:
        """Append a composite specification; top-level *nodes* are AND-ed."""
        if not condition:
            return self
        self._model.filters.append(
            FilterCriterion(
                custom_type=FilterCustomType.COMPOSITE_SPECIFICATION,
                composite_specification=CompositeSpecification(nodes=list(nodes)),
                logic=FilterLogicOperator(logic),
            )
        )
        return self

    # -- ordering / includes ---------------------------------------------------

    def add_ordering(
        self,
        field: str,
        direction: OrderDirection | str = OrderDirection.ASC,
        *,
        condition: bool = True,
    ) -> FilterModelBuilder:
        if not condition:
            return self
        self._check(field)
        self._model.add_or_update_ordering(field, direction)
        return self

    def add_include(self, path: str, *, condition: bool = True) -> FilterModelBuilder:
        if not condition:
            return self
        self._check(path)
        self._model.add_include(path)
        return self

    def add_hierarchy(
        self,
        path: str,
        max_depth: int = DEFAULT_HIERARCHY_MAX_DEPTH,
        *,
        condition: bool = True,
    ) -> FilterModelBuilder:
        if not condition:
            return self
        self._check(path)
        self._model.set_hierarchy(path, max_depth)
        return self

    # -- build -----------------------------------------------------------------

    def build(self) -> FilterModel:
        """Return a copy of the model built so far."""
        return self._model.model_copy(deep=True)

    def _check(self, path: str) -> None:
        if self.entity_type is not None:
            resolve_field(self.entity_type, path)

    def _append(self, criterion: FilterCriterion) -> None:
        field = criterion.custom_parameters.get("field")
        if isinstance(field, str):
            self._check(field)
        self._model.filters.append(criterion)


class CustomFilterBuilder:
    """Collects the parameters of one custom filter."""

    def __init__(
        self,
        parent: FilterModelBuilder,
        criterion: FilterCriterion,
        *,
        attach: bool = True,
    ) -> None:
        self._parent = parent
        self._criterion = criterion
        self._attach = attach

    def add_parameter(
        self, key: str, value: Any, *, condition: bool = True
    ) -> CustomFilterBuilder:
        if condition:
            self._criterion.custom_parameters[key] = value
        return self

    def done(self) -> FilterModelBuilder:
        """Add the custom filter to the parent builder and return it."""
        if self._attach:
            self._parent._append(self._criterion)
        return self._parent
