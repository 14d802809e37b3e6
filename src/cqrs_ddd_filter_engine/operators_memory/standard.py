"""Standard comparison operators: eq, neq, gt, gte, lt, lte."""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import FilterOperator
from ..utils import align_temporal


class EqualOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.EQUAL

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        field_value, condition_value = align_temporal(field_value, condition_value)
        return bool(field_value == condition_value)


class NotEqualOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.NOT_EQUAL

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        field_value, condition_value = align_temporal(field_value, condition_value)
        return bool(field_value != condition_value)


class GreaterThanOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.GREATER_THAN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None or condition_value is None:
            return False
        field_value, condition_value = align_temporal(field_value, condition_value)
        return bool(field_value > condition_value)


class LessThanOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.LESS_THAN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None or condition_value is None:
            return False
        field_value, condition_value = align_temporal(field_value, condition_value)
        return bool(field_value < condition_value)


class GreaterEqualOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.GREATER_THAN_OR_EQUAL

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None or condition_value is None:
            return False
        field_value, condition_value = align_temporal(field_value, condition_value)
        return bool(field_value >= condition_value)


class LessEqualOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.LESS_THAN_OR_EQUAL

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None or condition_value is None:
            return False
        field_value, condition_value = align_temporal(field_value, condition_value)
        return bool(field_value <= condition_value)
