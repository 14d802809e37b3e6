"""
Value-level comparison strategies behind compiled field specifications.

A :class:`~cqrs_ddd_filter_engine.ast.FieldSpecification` reads the
field from the candidate and hands both sides to the strategy registered
for its :class:`FilterOperator`.  Quantifiers never reach this table;
they are specifications of their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .exceptions import OperatorNotFoundError

if TYPE_CHECKING:
    from .operators import FilterOperator


class MemoryOperator(ABC):
    """Compares one resolved field value against an already coerced operand."""

    @property
    @abstractmethod
    def name(self) -> FilterOperator: ...

    @abstractmethod
    def evaluate(self, field_value: Any, condition_value: Any) -> bool: ...


class MemoryOperatorRegistry:
    """
    Strategy table keyed by operator.

    A strategy registered for an operator that is already present
    replaces the previous one, so callers can swap a built-in (e.g. a
    case-insensitive ``eq``) without rebuilding the table.
    """

    def __init__(self, *operators: MemoryOperator) -> None:
        self._operators: dict[FilterOperator, MemoryOperator] = {}
        for operator in operators:
            self.register(operator)

    def register(self, operator: MemoryOperator) -> None:
        self._operators[operator.name] = operator

    def evaluate(
        self, name: FilterOperator, field_value: Any, condition_value: Any
    ) -> bool:
        """
        Raises:
            OperatorNotFoundError: no strategy handles *name*.
        """
        try:
            strategy = self._operators[name]
        except KeyError:
            raise OperatorNotFoundError(
                name.value, sorted(known.value for known in self._operators)
            ) from None
        return strategy.evaluate(field_value, condition_value)
