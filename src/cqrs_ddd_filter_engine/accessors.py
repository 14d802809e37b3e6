"""
Field accessor resolution.

Turns a dotted field path (``"manager.address.city"``) into a
:class:`FieldAccessor`: the chain of attribute names to read and the
annotated type found at the end of the chain.  Resolution works on
pydantic models, dataclasses and plain annotated classes, and is cached
per ``(entity_type, path)``.

Names are matched exactly first, then case-insensitively, then ignoring
underscores, so wire names such as ``FirstName`` or ``firstName`` resolve
to a ``first_name`` attribute.

Usage::

    accessor = resolve_field(Person, "address.city")
    accessor.get(person)       # -> "Berlin"
    accessor.value_type        # -> str
"""

from __future__ import annotations

import collections.abc
import dataclasses
import functools
import logging
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union, get_args, get_origin

from pydantic import BaseModel

from .exceptions import FieldNotFoundError, RelationshipTraversalError

logger = logging.getLogger(__name__)

_COLLECTION_ORIGINS: frozenset[Any] = frozenset(
    {
        list,
        tuple,
        set,
        frozenset,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
        collections.abc.Collection,
        collections.abc.Iterable,
    }
)
_SCALAR_TYPES: tuple[type, ...] = (str, bytes, int, float, bool, complex)


# -- type analysis -----------------------------------------------------------


def is_class(annotation: Any) -> bool:
    """Plain classes only; generic aliases such as ``list[int]`` are not."""
    return isinstance(annotation, type) and get_origin(annotation) is None


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Return ``(inner_type, nullable)`` for ``X | None`` style annotations."""
    if annotation is Any:
        return Any, True
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        inner = [arg for arg in args if arg is not type(None)]
        nullable = len(inner) != len(args)
        if len(inner) == 1:
            return inner[0], nullable
        return Union[tuple(inner)], nullable  # noqa: UP007
    return annotation, False


def collection_element_type(annotation: Any) -> Any | None:
    """Element type of a collection annotation, ``None`` for non-collections."""
    if is_class(annotation):
        if issubclass(annotation, _SCALAR_TYPES) or issubclass(annotation, Enum):
            return None
        if issubclass(annotation, list | tuple | set | frozenset):
            return Any
        return None
    origin = get_origin(annotation)
    if origin not in _COLLECTION_ORIGINS:
        return None
    args = get_args(annotation)
    if not args:
        return Any
    if origin is tuple:
        # tuple[int, ...] is homogeneous; tuple[int, str] is not
        return args[0] if len(args) == 2 and args[1] is ... else Any
    return args[0]


def field_hints(entity_type: Any) -> dict[str, Any]:
    """Annotated members of *entity_type*, including typed properties."""
    hints: dict[str, Any] = {}
    if is_class(entity_type) and issubclass(entity_type, BaseModel):
        hints.update(
            {name: info.annotation for name, info in entity_type.model_fields.items()}
        )
        hints.update(
            {
                name: info.return_type
                for name, info in entity_type.model_computed_fields.items()
            }
        )
    elif is_class(entity_type):
        try:
            raw = typing.get_type_hints(entity_type)
        except (NameError, TypeError):
            raw = dict(getattr(entity_type, "__annotations__", {}))
        hints.update(
            {
                name: hint
                for name, hint in raw.items()
                if get_origin(hint) is not ClassVar and not name.startswith("_")
            }
        )
        if dataclasses.is_dataclass(entity_type):
            for f in dataclasses.fields(entity_type):
                hints.setdefault(f.name, f.type)
    if is_class(entity_type):
        for klass in entity_type.__mro__:
            for name, member in vars(klass).items():
                if not isinstance(member, property):
                    continue
                if name.startswith(("_", "model_")):
                    continue
                try:
                    returns = typing.get_type_hints(member.fget).get("return", Any)
                except (NameError, TypeError):
                    returns = Any
                hints.setdefault(name, returns)
    return hints


def match_member(name: str, available: typing.Iterable[str]) -> str | None:
    """Find *name* among *available*: exact, case-insensitive, then sans ``_``."""
    candidates = list(available)
    if name in candidates:
        return name
    lowered = name.lower()
    for candidate in candidates:
        if candidate.lower() == lowered:
            return candidate
    squashed = lowered.replace("_", "")
    for candidate in candidates:
        if candidate.lower().replace("_", "") == squashed:
            return candidate
    return None


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


# -- accessor ----------------------------------------------------------------


@dataclass(frozen=True)
class FieldAccessor:
    """A resolved dotted path: attribute chain plus the leaf's type."""

    entity_type: Any
    path: str
    attributes: tuple[str, ...]
    annotation: Any
    value_type: Any
    nullable: bool
    element_type: Any | None = None

    @property
    def is_collection(self) -> bool:
        return self.element_type is not None

    @property
    def is_enum(self) -> bool:
        return is_class(self.value_type) and issubclass(self.value_type, Enum)

    def get(self, candidate: Any) -> Any:
        """Read the value at the end of the path; ``None`` short-circuits."""
        value = candidate
        for name in self.attributes:
            if value is None:
                return None
            if isinstance(value, collections.abc.Mapping):
                value = value.get(name)
            else:
                value = getattr(value, name, None)
        return value

    def __str__(self) -> str:
        return self.path


def resolve_field(entity_type: Any, path: str) -> FieldAccessor:
    """
    Resolve *path* against *entity_type*.

    Raises:
        FieldNotFoundError: a path segment is not a member of its owner.
        RelationshipTraversalError: a segment walks into a scalar or a
            collection.
    """
    return _resolve(entity_type, path.strip())


@functools.lru_cache(maxsize=2048)
def _resolve(entity_type: Any, path: str) -> FieldAccessor:
    logger.debug("Resolving field path %r on %s", path, _type_name(entity_type))
    parts = [part for part in path.split(".") if part]
    if not parts:
        raise FieldNotFoundError(path, _type_name(entity_type), [], full_path=path)

    owner = entity_type
    attributes: list[str] = []
    nullable = False
    annotation: Any = Any
    for index, part in enumerate(parts):
        if owner is Any:
            # Untyped owner: keep the remaining names verbatim.
            attributes.extend(parts[index:])
            annotation = Any
            nullable = True
            break
        hints = field_hints(owner)
        if not hints:
            raise RelationshipTraversalError(
                attributes[-1] if attributes else part,
                _type_name(owner),
                full_path=path,
            )
        name = match_member(part, hints)
        if name is None:
            raise FieldNotFoundError(
                part, _type_name(owner), list(hints), full_path=path
            )
        attributes.append(name)
        annotation = hints[name]
        inner, optional = unwrap_optional(annotation)
        nullable = nullable or optional
        if index < len(parts) - 1:
            if collection_element_type(inner) is not None:
                raise RelationshipTraversalError(
                    name,
                    _type_name(owner),
                    full_path=path,
                    reason="it is a collection; use an any/all/none quantifier",
                )
            if inner is not Any and (
                not is_class(inner) or issubclass(inner, _SCALAR_TYPES)
            ):
                raise RelationshipTraversalError(name, _type_name(owner), path)
            owner = inner

    value_type, optional = unwrap_optional(annotation)
    return FieldAccessor(
        entity_type=entity_type,
        path=path,
        attributes=tuple(attributes),
        annotation=annotation,
        value_type=value_type,
        nullable=nullable or optional,
        element_type=collection_element_type(value_type),
    )


def clear_cache() -> None:
    """Drop cached resolutions (testing utility)."""
    _resolve.cache_clear()
