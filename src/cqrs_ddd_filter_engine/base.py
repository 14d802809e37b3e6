from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .domain.specification import ISpecification

if TYPE_CHECKING:
    from collections.abc import Iterable

T = TypeVar("T", contravariant=True)


class BaseSpecification(Generic[T], ISpecification[T]):
    """Base class for specifications with logic operator support.

    Combining never mutates an operand. Nested ``and``/``or`` composites of
    the same kind are flattened, so ``(a & b) & c`` and ``a & (b & c)``
    produce the same tree.
    """

    def __and__(self, other: ISpecification[T]) -> AndSpecification[T]:
        return AndSpecification(self, other)

    def __or__(self, other: ISpecification[T]) -> OrSpecification[T]:
        return OrSpecification(self, other)

    def __invert__(self) -> NotSpecification[T]:
        return NotSpecification(self)

    def and_(self, other: ISpecification[T]) -> AndSpecification[T]:
        return self & other

    def or_(self, other: ISpecification[T]) -> OrSpecification[T]:
        return self | other

    def not_(self) -> NotSpecification[T]:
        return ~self

    def merge(self, other: ISpecification[T]) -> AndSpecification[T]:
        """Merge with another specification using logical AND."""
        return AndSpecification(self, other)


def _flatten(
    kind: type[_CompositeSpecification[Any]],
    specifications: Iterable[ISpecification[Any]],
) -> tuple[ISpecification[Any], ...]:
    flat: list[ISpecification[Any]] = []
    for spec in specifications:
        if type(spec) is kind:
            flat.extend(spec.specifications)  # type: ignore[attr-defined]
        else:
            flat.append(spec)
    return tuple(flat)


class _CompositeSpecification(BaseSpecification[T]):
    op = ""

    def __init__(self, *specifications: ISpecification[T]) -> None:
        self.specifications = _flatten(type(self), specifications)

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.op,
            "conditions": [spec.to_dict() for spec in self.specifications],
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}{self.specifications!r}"


class AndSpecification(_CompositeSpecification[T]):
    """Logical AND composite specification."""

    op = "and"

    def is_satisfied_by(self, candidate: T) -> bool:
        return all(spec.is_satisfied_by(candidate) for spec in self.specifications)


class OrSpecification(_CompositeSpecification[T]):
    """Logical OR composite specification."""

    op = "or"

    def is_satisfied_by(self, candidate: T) -> bool:
        return any(spec.is_satisfied_by(candidate) for spec in self.specifications)


class NotSpecification(BaseSpecification[T]):
    """Logical NOT composite specification."""

    def __init__(self, specification: ISpecification[T]) -> None:
        self.specification = specification

    def is_satisfied_by(self, candidate: T) -> bool:
        return not self.specification.is_satisfied_by(candidate)

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": "not",
            "conditions": [self.specification.to_dict()],
        }

    def __repr__(self) -> str:
        return f"NotSpecification({self.specification!r})"


class TrueSpecification(BaseSpecification[Any]):
    """Specification satisfied by every candidate."""

    def is_satisfied_by(self, candidate: Any) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"op": "true"}


def and_all(specifications: Iterable[ISpecification[T]]) -> ISpecification[T]:
    """Fold *specifications* with AND; a single item is returned as is."""
    items = tuple(specifications)
    if not items:
        return TrueSpecification()
    if len(items) == 1:
        return items[0]
    return AndSpecification(*items)


def or_all(specifications: Iterable[ISpecification[T]]) -> ISpecification[T]:
    """Fold *specifications* with OR; a single item is returned as is."""
    items = tuple(specifications)
    if not items:
        raise ValueError("Cannot OR-fold an empty sequence of specifications")
    if len(items) == 1:
        return items[0]
    return OrSpecification(*items)
