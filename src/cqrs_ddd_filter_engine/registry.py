"""SpecificationRegistry: maps specification names to their factories."""

from __future__ import annotations

import inspect
import logging
import threading
import typing
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar, get_args, get_origin

from .base import BaseSpecification
from .domain.specification import ISpecification
from .exceptions import (
    SpecificationArgumentsError,
    SpecificationNotRegisteredError,
    SpecificationRegistrationError,
)

logger = logging.getLogger(__name__)

S = TypeVar("S")
SpecificationFactory = Callable[..., ISpecification[Any]]


def declared_entity_type(spec_type: type) -> Any | None:
    """
    Entity type a specification class declares through its generic base,
    e.g. ``Person`` for ``class Adult(BaseSpecification[Person])``.
    """
    for klass in spec_type.__mro__:
        for base in getattr(klass, "__orig_bases__", ()):
            origin = get_origin(base)
            if not (isinstance(origin, type) and issubclass(origin, BaseSpecification)):
                continue
            args = get_args(base)
            if args and not isinstance(args[0], TypeVar):
                return args[0]
    return None


@dataclass(frozen=True)
class _Registration:
    name: str
    factory: SpecificationFactory
    spec_type: type | None
    entity_type: Any | None


class SpecificationRegistry:
    """Registry for mapping ``name: str`` → specification factory.

    Used to resolve named specifications and the leaves of composite
    specification trees carried by filter models.  Registration and
    lookup are guarded by a re-entrant lock so a process-wide instance
    can be shared across threads; create separate instances for
    isolation (tests, multi-tenant setups).

    Usage::

        registry = SpecificationRegistry()
        registry.register(ActiveCustomers)
        registry.register_factory("OlderThan", lambda age: AgeAbove(age))
        spec = registry.resolve("OlderThan", [18], entity_type=Person)
    """

    def __init__(self) -> None:
        self._registry: dict[str, _Registration] = {}
        self._lock = threading.RLock()

    # -- registration --------------------------------------------------------

    def register(
        self,
        spec_type: type,
        name: str | None = None,
        *,
        entity_type: Any | None = None,
    ) -> type:
        """Register a specification class under *name* (default: class name).

        Raises:
            SpecificationRegistrationError: not a specification type, entity
                type mismatch, or name already taken.
        """
        if not isinstance(spec_type, type) or not _implements_specification(
            spec_type
        ):
            raise SpecificationRegistrationError(
                f"{spec_type!r} does not implement ISpecification"
            )
        declared = declared_entity_type(spec_type)
        if (
            entity_type is not None
            and declared is not None
            and not _is_compatible(entity_type, declared)
        ):
            raise SpecificationRegistrationError(
                f"Specification '{spec_type.__name__}' targets "
                f"'{_name(declared)}', not '{_name(entity_type)}'"
            )
        self._add(
            _Registration(
                name=name or spec_type.__name__,
                factory=spec_type,
                spec_type=spec_type,
                entity_type=declared or entity_type,
            )
        )
        return spec_type

    def register_factory(
        self,
        name: str,
        factory: SpecificationFactory,
        *,
        entity_type: Any | None = None,
    ) -> None:
        """Register a callable ``(*arguments) -> ISpecification``."""
        if not callable(factory):
            raise SpecificationRegistrationError(f"{factory!r} is not callable")
        self._add(
            _Registration(
                name=name, factory=factory, spec_type=None, entity_type=entity_type
            )
        )

    def _add(self, registration: _Registration) -> None:
        if not registration.name:
            raise SpecificationRegistrationError("Specification name is required")
        with self._lock:
            if registration.name in self._registry:
                raise SpecificationRegistrationError(
                    f"Specification '{registration.name}' is already registered"
                )
            self._registry[registration.name] = registration
        logger.debug("Registered specification %r", registration.name)

    def unregister(self, name: str) -> None:
        with self._lock:
            self._registry.pop(name, None)

    # -- look-up -------------------------------------------------------------

    def is_registered(self, name: str) -> bool:
        """Return ``True`` if *name* is registered."""
        with self._lock:
            return name in self._registry

    def get_type(self, name: str) -> type | None:
        """Specification class registered under *name* (``None`` for factories)."""
        return self._get(name).spec_type

    def list_registered(self) -> list[str]:
        """Return all registered specification names."""
        with self._lock:
            return list(self._registry.keys())

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        with self._lock:
            self._registry.clear()

    def _get(self, name: str) -> _Registration:
        with self._lock:
            registration = self._registry.get(name)
            if registration is None:
                raise SpecificationNotRegisteredError(name, list(self._registry))
            return registration

    # -- resolution ----------------------------------------------------------

    def resolve(
        self,
        name: str,
        arguments: Sequence[Any] = (),
        *,
        entity_type: Any | None = None,
    ) -> ISpecification[Any]:
        """Instantiate the specification registered under *name*.

        Raises:
            SpecificationNotRegisteredError: *name* is unknown.
            SpecificationArgumentsError: *arguments* do not fit the
                constructor, or the specification targets another entity.
        """
        registration = self._get(name)
        args = list(arguments or ())
        if (
            entity_type is not None
            and registration.entity_type is not None
            and not _is_compatible(entity_type, registration.entity_type)
        ):
            raise SpecificationArgumentsError(
                name,
                args,
                f"specification targets '{_name(registration.entity_type)}', "
                f"not '{_name(entity_type)}'",
            )
        _check_signature(name, registration.factory, args)
        try:
            spec = registration.factory(*args)
        except (TypeError, ValueError) as exc:
            raise SpecificationArgumentsError(name, args, str(exc)) from exc
        if not isinstance(spec, ISpecification):
            raise SpecificationArgumentsError(
                name, args, f"factory returned {type(spec).__name__}"
            )
        logger.debug("Resolved specification %r with %d argument(s)", name, len(args))
        return spec


def _implements_specification(spec_type: type) -> bool:
    return callable(getattr(spec_type, "is_satisfied_by", None)) and callable(
        getattr(spec_type, "to_dict", None)
    )


def _is_compatible(requested: Any, declared: Any) -> bool:
    if requested is declared:
        return True
    if isinstance(requested, type) and isinstance(declared, type):
        return issubclass(requested, declared)
    return False


def _check_signature(name: str, factory: Callable[..., Any], args: list[Any]) -> None:
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError):
        # builtins without an introspectable signature
        return
    try:
        signature.bind(*args)
    except TypeError as exc:
        raise SpecificationArgumentsError(name, args, str(exc)) from exc


def _name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


default_registry = SpecificationRegistry()


@typing.overload
def specification(spec_type: type[S], /) -> type[S]: ...


@typing.overload
def specification(
    name: str | None = None,
    *,
    entity_type: Any | None = None,
    registry: SpecificationRegistry | None = None,
) -> Callable[[type[S]], type[S]]: ...


def specification(
    name: Any = None,
    *,
    entity_type: Any | None = None,
    registry: SpecificationRegistry | None = None,
) -> Any:
    """
    Class decorator registering a specification.

    Usage::

        @specification("Adult")
        class Adult(BaseSpecification[Person]):
            ...

        @specification
        class Active(BaseSpecification[Person]):
            ...
    """
    if isinstance(name, type):
        return (registry or default_registry).register(name)

    def decorator(spec_type: type[S]) -> type[S]:
        (registry or default_registry).register(
            spec_type, name, entity_type=entity_type
        )
        return spec_type

    return decorator
