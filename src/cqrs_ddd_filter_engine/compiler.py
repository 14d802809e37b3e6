"""
Specification compiler: filter criteria → list of specifications.

Criteria are read left to right.  Consecutive criteria are OR-ed while
their ``logic`` flag is ``or``; a criterion whose flag is ``and`` (or the
last criterion) closes the running group.  The resulting list is meant
to be AND-ed by the caller (a repository applies every specification)::

    A(or) B(and) C(or) D      →  [A | B, C | D]
    A(and) B(and)             →  [A, B]

Usage::

    specs = compile_specifications(Person, filter_model)
    matches = [p for p in people if all(s.is_satisfied_by(p) for s in specs)]
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .accessors import resolve_field
from .ast import FieldSpecification, QuantifierSpecification, enum_ordinal
from .base import AndSpecification, NotSpecification, and_all, or_all
from .config import CompilerOptions
from .custom_filters import CustomFilterCompiler
from .exceptions import FilterSchemaError, NotACollectionError
from .model import (
    CompositeSpecification,
    FilterCriterion,
    FilterModel,
    SpecificationGroup,
    SpecificationLeaf,
)
from .operators import CriterionKind, FilterLogicOperator, FilterOperator

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .accessors import FieldAccessor
    from .domain.specification import ISpecification
    from .model import SpecificationNode

logger = logging.getLogger(__name__)


class SpecificationCompiler:
    """
    Compile filter models into specifications for one entity type.

    The compiler is stateless apart from its options and never mutates
    the filter model.  Errors abort compilation; no partial result is
    returned.
    """

    def __init__(self, options: CompilerOptions | None = None) -> None:
        self._options = options or CompilerOptions()
        self._custom = CustomFilterCompiler(self._options)

    @property
    def options(self) -> CompilerOptions:
        return self._options

    # -- public API ------------------------------------------------------------

    def compile(
        self,
        entity_type: Any,
        filters: FilterModel | Sequence[FilterCriterion] | None,
        specifications: Iterable[ISpecification[Any]] | None = None,
    ) -> list[ISpecification[Any]]:
        """
        Compile *filters* and append the extra *specifications*.

        Raises:
            FilterSchemaError: malformed criterion or parameters.
            ValueCoercionError: a value does not fit its field's type.
            FieldNotFoundError: a field path does not exist.
            SpecificationNotRegisteredError: unknown named specification.
        """
        criteria = self._criteria(filters)
        result: list[ISpecification[Any]] = []
        group: list[ISpecification[Any]] = []
        last = len(criteria) - 1
        for index, criterion in enumerate(criteria):
            group.append(self.compile_criterion(entity_type, criterion))
            if criterion.logic is FilterLogicOperator.AND or index == last:
                result.append(or_all(group))
                group = []
        compiled = len(result)
        if specifications:
            result.extend(specifications)
        logger.debug(
            "Compiled %d criteria into %d specification(s) (+%d extra) for %s",
            len(criteria),
            compiled,
            len(result) - compiled,
            getattr(entity_type, "__name__", entity_type),
        )
        return result

    def compile_criterion(
        self, entity_type: Any, criterion: FilterCriterion
    ) -> ISpecification[Any]:
        """Compile one criterion, dispatching on its kind."""
        if criterion is None:
            raise FilterSchemaError("Filter criterion is required")
        kind = criterion.kind
        if kind is CriterionKind.SIMPLE:
            return self._compile_simple(entity_type, criterion)
        if kind is CriterionKind.NAMED:
            return self._compile_named(entity_type, criterion)
        if kind is CriterionKind.COMPOSITE:
            return self._compile_composite(
                entity_type, criterion.composite_specification
            )
        return self._custom.compile(entity_type, criterion)

    # -- input -----------------------------------------------------------------

    @staticmethod
    def _criteria(
        filters: FilterModel | Sequence[FilterCriterion] | None,
    ) -> list[FilterCriterion]:
        if filters is None:
            return []
        if isinstance(filters, FilterModel):
            return list(filters.filters)
        if isinstance(filters, FilterCriterion):
            return [filters]
        criteria = list(filters)
        if any(criterion is None for criterion in criteria):
            raise FilterSchemaError("Filter criterion is required", path="filters")
        return criteria

    # -- simple criteria -------------------------------------------------------

    def _leaf(
        self,
        accessor: FieldAccessor,
        op: FilterOperator,
        value: Any = None,
        transform: Any = None,
    ) -> FieldSpecification[Any]:
        return FieldSpecification(
            accessor,
            op,
            value,
            registry=self._options.operators,
            transform=transform,
        )

    def _compile_simple(
        self, entity_type: Any, criterion: FilterCriterion
    ) -> ISpecification[Any]:
        if not criterion.field:
            raise FilterSchemaError(
                "Field is required for filter criteria "
                f"(operator '{criterion.operator.value}')",
                path="field",
            )
        accessor = resolve_field(entity_type, criterion.field)
        op = criterion.operator

        if op.is_quantifier:
            return self._compile_quantifier(accessor, criterion)
        if not op.takes_value:
            return self._leaf(accessor, op)
        if op.is_string:
            return self._compile_string(accessor, criterion)

        value = self._options.coercer.coerce(criterion.value, accessor.value_type)
        if op.is_comparison:
            return self._compile_comparison(accessor, op, value)
        return self._leaf(accessor, op, value)

    def _compile_comparison(
        self, accessor: FieldAccessor, op: FilterOperator, value: Any
    ) -> ISpecification[Any]:
        if value is None:
            raise FilterSchemaError(
                f"Operator '{op.value}' requires a value", path=accessor.path
            )
        if accessor.is_enum:
            spec: ISpecification[Any] = self._leaf(
                accessor, op, enum_ordinal(value), enum_ordinal
            )
        else:
            spec = self._leaf(accessor, op, value)
        if accessor.nullable:
            not_null = self._leaf(accessor, FilterOperator.IS_NOT_NULL)
            return AndSpecification(not_null, spec)
        return spec

    def _compile_string(
        self, accessor: FieldAccessor, criterion: FilterCriterion
    ) -> ISpecification[Any]:
        if criterion.value is None:
            raise FilterSchemaError(
                f"Operator '{criterion.operator.value}' requires a value",
                path=accessor.path,
            )
        value = self._options.coercer.coerce(criterion.value, str)
        return self._leaf(accessor, criterion.operator, value)

    def _compile_quantifier(
        self, accessor: FieldAccessor, criterion: FilterCriterion
    ) -> ISpecification[Any]:
        if not accessor.is_collection:
            raise NotACollectionError(
                accessor.attributes[-1],
                getattr(accessor.entity_type, "__name__", str(accessor.entity_type)),
                full_path=accessor.path,
            )
        nested = criterion.nested_criterion
        if nested is None:
            raise FilterSchemaError(
                f"Operator '{criterion.operator.value}' requires a nested filter "
                "criterion in 'value' or 'filters'",
                path=accessor.path,
            )
        inner = self.compile_criterion(accessor.element_type, nested)
        if criterion.operator is FilterOperator.NONE:
            return NotSpecification(
                QuantifierSpecification(accessor, FilterOperator.ANY, inner)
            )
        return QuantifierSpecification(accessor, criterion.operator, inner)

    # -- named / composite -----------------------------------------------------

    def _compile_named(
        self, entity_type: Any, criterion: FilterCriterion
    ) -> ISpecification[Any]:
        if not criterion.specification_name:
            raise FilterSchemaError(
                "Specification name is required for named specification filters",
                path="specificationName",
            )
        return self._options.registry.resolve(
            criterion.specification_name,
            criterion.specification_arguments,
            entity_type=entity_type,
        )

    def _compile_composite(
        self, entity_type: Any, composite: CompositeSpecification | None
    ) -> ISpecification[Any]:
        if composite is None or not composite.nodes:
            raise FilterSchemaError(
                "Composite specification requires at least one node",
                path="compositeSpecification",
            )
        return and_all(
            self._compile_node(entity_type, node) for node in composite.nodes
        )

    def _compile_node(
        self, entity_type: Any, node: SpecificationNode
    ) -> ISpecification[Any]:
        if isinstance(node, SpecificationLeaf):
            return self._options.registry.resolve(
                node.name, node.arguments, entity_type=entity_type
            )
        if isinstance(node, SpecificationGroup):
            if not node.nodes:
                raise FilterSchemaError(
                    "Specification group requires at least one node",
                    path="compositeSpecification.nodes",
                )
            children = [self._compile_node(entity_type, child) for child in node.nodes]
            if node.logic is FilterLogicOperator.OR:
                return or_all(children)
            return and_all(children)
        raise FilterSchemaError(
            f"Unknown specification node type: {type(node).__name__}",
            path="compositeSpecification.nodes",
        )


def compile_specifications(
    entity_type: Any,
    filters: FilterModel | Sequence[FilterCriterion] | None,
    extra_specifications: Iterable[ISpecification[Any]] | None = None,
    *,
    options: CompilerOptions | None = None,
) -> list[ISpecification[Any]]:
    """Compile *filters* for *entity_type* with default (or given) options."""
    return SpecificationCompiler(options).compile(
        entity_type, filters, extra_specifications
    )


__all__ = [
    "SpecificationCompiler",
    "compile_specifications",
]
