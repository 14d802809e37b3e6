"""Null / empty check operators: isnull, isnotnull, isempty, isnotempty."""

from __future__ import annotations

from collections.abc import Sized
from typing import Any

from ..evaluator import MemoryOperator
from ..operators import FilterOperator


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, Sized):
        return len(value) == 0
    return False


class IsNullOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IS_NULL

    def evaluate(self, field_value: Any, _condition_value: Any) -> bool:
        return field_value is None


class IsNotNullOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IS_NOT_NULL

    def evaluate(self, field_value: Any, _condition_value: Any) -> bool:
        return field_value is not None


class IsEmptyOperator(MemoryOperator):
    """True for None, empty strings, and empty collections."""

    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IS_EMPTY

    def evaluate(self, field_value: Any, _condition_value: Any) -> bool:
        return _is_empty(field_value)


class IsNotEmptyOperator(MemoryOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IS_NOT_EMPTY

    def evaluate(self, field_value: Any, _condition_value: Any) -> bool:
        return not _is_empty(field_value)
