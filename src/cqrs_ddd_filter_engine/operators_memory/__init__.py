"""
In-memory operator implementations.

Provides concrete MemoryOperator subclasses for each value operator of
FilterOperator and a factory function to create registries.  Quantifiers
(any/all/none) are structural and compiled into
:class:`~cqrs_ddd_filter_engine.ast.QuantifierSpecification` instead.

Usage::

    from cqrs_ddd_filter_engine.operators_memory import build_default_registry

    registry = build_default_registry()
    result = registry.evaluate(FilterOperator.EQUAL, actual, expected)
"""

from __future__ import annotations

from ..evaluator import MemoryOperatorRegistry
from .null import (
    IsEmptyOperator,
    IsNotEmptyOperator,
    IsNotNullOperator,
    IsNullOperator,
)
from .standard import (
    EqualOperator,
    GreaterEqualOperator,
    GreaterThanOperator,
    LessEqualOperator,
    LessThanOperator,
    NotEqualOperator,
)
from .string import (
    ContainsOperator,
    DoesNotContainOperator,
    DoesNotEndWithOperator,
    DoesNotStartWithOperator,
    EndsWithOperator,
    StartsWithOperator,
)


def build_default_registry() -> MemoryOperatorRegistry:
    """A fresh registry holding a strategy for every value operator."""
    return MemoryOperatorRegistry(
        EqualOperator(),
        NotEqualOperator(),
        GreaterThanOperator(),
        LessThanOperator(),
        GreaterEqualOperator(),
        LessEqualOperator(),
        ContainsOperator(),
        DoesNotContainOperator(),
        StartsWithOperator(),
        DoesNotStartWithOperator(),
        EndsWithOperator(),
        DoesNotEndWithOperator(),
        IsNullOperator(),
        IsNotNullOperator(),
        IsEmptyOperator(),
        IsNotEmptyOperator(),
    )


__all__ = [
    "build_default_registry",
    "MemoryOperatorRegistry",
]
