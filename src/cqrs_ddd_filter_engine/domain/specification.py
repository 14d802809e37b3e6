"""Specification pattern primitives."""

from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T", contravariant=True)


@runtime_checkable
class ISpecification(Protocol, Generic[T]):
    """
    Protocol for the Specification pattern.
    A compiled filter predicate over a single entity type.
    """

    def is_satisfied_by(self, candidate: T) -> bool:
        """
        Check whether *candidate* satisfies the specification.
        Used by in-memory backends and by composite specifications.
        """
        ...

    def to_dict(self) -> dict[str, Any]:
        """
        Return a dictionary representation of the specification.
        Useful for logging and for translating criteria to query backends.
        """
        ...
