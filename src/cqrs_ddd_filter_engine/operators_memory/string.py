"""
String operators: contains, startswith, endswith and their negations.

Matching is case-sensitive.  A ``None`` field never matches, not even the
negated forms.
"""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import FilterOperator


class ContainsOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.CONTAINS

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return str(condition_value) in str(field_value)


class DoesNotContainOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.DOES_NOT_CONTAIN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return str(condition_value) not in str(field_value)


class StartsWithOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.STARTS_WITH

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return str(field_value).startswith(str(condition_value))


class DoesNotStartWithOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.DOES_NOT_START_WITH

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return not str(field_value).startswith(str(condition_value))


class EndsWithOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.ENDS_WITH

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return str(field_value).endswith(str(condition_value))


class DoesNotEndWithOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.DOES_NOT_END_WITH

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        return not str(field_value).endswith(str(condition_value))
