"""
Compiled specification types.

These are the leaves the compiler produces.  Each one reads a field
through a resolved :class:`~cqrs_ddd_filter_engine.accessors.FieldAccessor`
and serialises to the same ``{"op", "attr", "val"}`` shape the composite
specifications use, so a query backend can translate the tree.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from .base import BaseSpecification
from .operators import FilterOperator
from .utils import time_of_day

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .accessors import FieldAccessor
    from .domain.specification import ISpecification
    from .evaluator import MemoryOperatorRegistry

T = TypeVar("T", contravariant=True)


# -- value transforms ----------------------------------------------------------


def enum_ordinal(value: Any) -> Any:
    """Int value of int-valued enum members, declaration index otherwise."""
    if not isinstance(value, Enum):
        return value
    if isinstance(value.value, int):
        return value.value
    return list(type(value)).index(value)


def as_float(value: Any) -> Any:
    return None if value is None else float(value)


def casefold(value: Any) -> Any:
    return None if value is None else str(value).casefold()


# Names used in ``to_dict`` for the known transforms.
_TRANSFORM_NAMES: dict[Any, str] = {
    enum_ordinal: "ordinal",
    as_float: "float",
    casefold: "casefold",
    time_of_day: "time_of_day",
}


def _describe(transform: Any) -> str:
    return _TRANSFORM_NAMES.get(transform, getattr(transform, "__name__", "custom"))


# -- leaves --------------------------------------------------------------------


class FieldSpecification(BaseSpecification[T]):
    """
    Specification that checks a single field value.

    Delegates in-memory evaluation to a :class:`MemoryOperatorRegistry`
    (strategy pattern).  An optional *transform* is applied to the field
    value before comparison (enum ordinal, time of day, ...); the
    criterion value is expected to be transformed already.
    """

    def __init__(
        self,
        accessor: FieldAccessor,
        op: FilterOperator | str,
        val: Any = None,
        *,
        registry: MemoryOperatorRegistry,
        transform: Callable[[Any], Any] | None = None,
    ) -> None:
        self.accessor = accessor
        self.op = FilterOperator(op) if isinstance(op, str) else op
        self.val = val
        self.transform = transform
        self._registry = registry

    @property
    def attr(self) -> str:
        return self.accessor.path

    def is_satisfied_by(self, candidate: T) -> bool:
        actual = self.accessor.get(candidate)
        if self.transform is not None:
            actual = self.transform(actual)
        return self._registry.evaluate(self.op, actual, self.val)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "op": self.op.value,
            "attr": self.attr,
            "val": self.val,
        }
        if self.transform is not None:
            data["transform"] = _describe(self.transform)
        return data

    def __repr__(self) -> str:
        return f"FieldSpecification({self.attr!r}, {self.op.value!r}, {self.val!r})"


class MembershipSpecification(BaseSpecification[T]):
    """
    Field value is one of a fixed set of values (or not, when *negate*).

    For collection-typed fields the check succeeds when any element is a
    member.
    """

    def __init__(
        self,
        accessor: FieldAccessor,
        values: Iterable[Any],
        *,
        negate: bool = False,
        transform: Callable[[Any], Any] | None = None,
    ) -> None:
        self.accessor = accessor
        self.values = tuple(values)
        self.negate = negate
        self.transform = transform
        self._lookup = set(self.values)

    def _contains(self, value: Any) -> bool:
        if self.transform is not None:
            value = self.transform(value)
        return value in self._lookup

    def is_satisfied_by(self, candidate: T) -> bool:
        actual = self.accessor.get(candidate)
        if self.accessor.is_collection:
            found = any(self._contains(item) for item in actual or ())
        else:
            found = actual is not None and self._contains(actual)
        return found != self.negate

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "op": "not_in" if self.negate else "in",
            "attr": self.accessor.path,
            "val": list(self.values),
        }
        if self.transform is not None:
            data["transform"] = _describe(self.transform)
        return data


class QuantifierSpecification(BaseSpecification[T]):
    """
    ``any`` / ``all`` over the elements of a collection field.

    ``none`` is compiled as ``Not(any)``.  A missing collection behaves as
    an empty one: ``any`` is false and ``all`` is true.
    """

    def __init__(
        self,
        accessor: FieldAccessor,
        quantifier: FilterOperator,
        inner: ISpecification[Any],
    ) -> None:
        if quantifier not in (FilterOperator.ANY, FilterOperator.ALL):
            raise ValueError(f"Unsupported quantifier: {quantifier}")
        self.accessor = accessor
        self.quantifier = quantifier
        self.inner = inner

    def is_satisfied_by(self, candidate: T) -> bool:
        elements = self.accessor.get(candidate) or ()
        matches = (self.inner.is_satisfied_by(element) for element in elements)
        if self.quantifier is FilterOperator.ANY:
            return any(matches)
        return all(matches)

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.quantifier.value,
            "attr": self.accessor.path,
            "conditions": [self.inner.to_dict()],
        }


class PredicateSpecification(BaseSpecification[T]):
    """
    Wrap a plain callable as a specification.

    Handy for named specifications registered through a factory::

        registry.register_factory(
            "Adult", lambda: PredicateSpecification(lambda p: p.age >= 18, "adult")
        )
    """

    def __init__(
        self,
        predicate: Callable[[T], bool],
        name: str | None = None,
        arguments: Iterable[Any] = (),
    ) -> None:
        self.predicate = predicate
        self.name = name or getattr(predicate, "__name__", "predicate")
        self.arguments = list(arguments)

    def is_satisfied_by(self, candidate: T) -> bool:
        return bool(self.predicate(candidate))

    def to_dict(self) -> dict[str, Any]:
        return {"op": "predicate", "name": self.name, "args": self.arguments}
