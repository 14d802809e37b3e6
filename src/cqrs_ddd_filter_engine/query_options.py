"""
Query options for paging, ordering, includes and hierarchy loading.

``FindOptions`` is the result-shaping half of a compiled filter model:
the specifications define *what* to return, ``FindOptions`` defines
*how* results are returned.  Field paths are validated against the
entity type when the options are built, so a backend only ever sees
resolvable paths.

These options are consumed by the query backend (repository / query
handler), not by the specifications themselves.

Usage::

    options = compile_options(Person, filter_model)
    options.skip, options.take          # -> 20, 10 for page 3
    [o.field for o in options.orders]   # -> ["last_name"]
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from .accessors import FieldAccessor, resolve_field
from .exceptions import FilterSchemaError
from .model import (
    DEFAULT_HIERARCHY_MAX_DEPTH,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    FilterModel,
)
from .operators import OrderDirection

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .model import OrderCriterion

T = TypeVar("T")


# -- option types --------------------------------------------------------------


@dataclass(frozen=True)
class OrderOption:
    """Sort key: a resolved field and a direction."""

    field: str
    direction: OrderDirection = OrderDirection.ASC
    accessor: FieldAccessor | None = None

    @property
    def descending(self) -> bool:
        return self.direction is OrderDirection.DESC

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "direction": self.direction.value}


@dataclass(frozen=True)
class IncludeOption:
    """Related data to load alongside the entity."""

    path: str
    accessor: FieldAccessor | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path}


@dataclass(frozen=True)
class HierarchyOption:
    """Self-referencing relation to load recursively up to ``max_depth``."""

    path: str
    max_depth: int = DEFAULT_HIERARCHY_MAX_DEPTH
    accessor: FieldAccessor | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "max_depth": self.max_depth}


# -- builders ------------------------------------------------------------------


class OrderOptionBuilder:
    @staticmethod
    def build(
        entity_type: Any, orderings: Iterable[OrderCriterion] | None
    ) -> list[OrderOption]:
        """Validated sort keys, in the given order; empty input gives ``[]``."""
        options: list[OrderOption] = []
        for ordering in orderings or ():
            accessor = resolve_field(entity_type, ordering.field)
            options.append(
                OrderOption(
                    field=accessor.path, direction=ordering.direction, accessor=accessor
                )
            )
        return options


class IncludeOptionBuilder:
    @staticmethod
    def build(entity_type: Any, includes: Iterable[str] | None) -> list[IncludeOption]:
        """Validated include paths, de-duplicated in first-seen order."""
        return [
            IncludeOption(path=path, accessor=resolve_field(entity_type, path))
            for path in dict.fromkeys(includes or ())
        ]


class HierarchyOptionBuilder:
    @staticmethod
    def build(
        entity_type: Any,
        path: str | None,
        max_depth: int = DEFAULT_HIERARCHY_MAX_DEPTH,
    ) -> HierarchyOption | None:
        """``None`` without a path; a max depth below 1 is rejected."""
        if not path:
            return None
        if max_depth < 1:
            raise FilterSchemaError(
                f"Hierarchy max depth must be at least 1, got {max_depth}",
                path="hierarchyMaxDepth",
            )
        return HierarchyOption(
            path=path, max_depth=max_depth, accessor=resolve_field(entity_type, path)
        )


# -- find options --------------------------------------------------------------


def _unique(items: list[T], key: Callable[[T], str]) -> list[T]:
    seen: dict[str, T] = {}
    for item in items:
        seen.setdefault(key(item), item)
    return list(seen.values())


@dataclass(frozen=True)
class FindOptions:
    """
    Immutable container for result-shaping parameters.

    Attributes:
        skip: Number of results to skip (``None`` = from the start).
        take: Maximum number of results (``None`` = unbounded).
        orders: Sort keys, most significant first.
        includes: Related data to load.
        hierarchy: Recursive relation to load.
        no_tracking: Results are read-only snapshots.
        distinct: Return only distinct results.
    """

    skip: int | None = None
    take: int | None = None
    orders: list[OrderOption] = field(default_factory=list)
    includes: list[IncludeOption] = field(default_factory=list)
    hierarchy: HierarchyOption | None = None
    no_tracking: bool = True
    distinct: bool = False

    def with_paging(
        self,
        skip: int | None = None,
        take: int | None = None,
    ) -> FindOptions:
        """Return a copy with updated paging parameters."""
        return dataclasses.replace(
            self,
            skip=skip if skip is not None else self.skip,
            take=take if take is not None else self.take,
        )

    def with_orders(self, *orders: OrderOption) -> FindOptions:
        """Return a copy with the sort keys replaced."""
        return dataclasses.replace(self, orders=list(orders))

    def merge(self, other: FindOptions) -> FindOptions:
        """
        Merge two ``FindOptions`` instances.

        - ``self``'s skip/take/hierarchy win when set.
        - Orders and includes are concatenated (``other`` appended) and
          de-duplicated by field / path, first occurrence winning.
        """
        return FindOptions(
            skip=self.skip if self.skip is not None else other.skip,
            take=self.take if self.take is not None else other.take,
            orders=_unique([*self.orders, *other.orders], lambda o: o.field),
            includes=_unique([*self.includes, *other.includes], lambda i: i.path),
            hierarchy=self.hierarchy or other.hierarchy,
            no_tracking=self.no_tracking and other.no_tracking,
            distinct=self.distinct or other.distinct,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary."""
        result: dict[str, Any] = {"no_tracking": self.no_tracking}
        if self.skip is not None:
            result["skip"] = self.skip
        if self.take is not None:
            result["take"] = self.take
        if self.orders:
            result["orders"] = [o.to_dict() for o in self.orders]
        if self.includes:
            result["includes"] = [i.to_dict() for i in self.includes]
        if self.hierarchy is not None:
            result["hierarchy"] = self.hierarchy.to_dict()
        if self.distinct:
            result["distinct"] = True
        return result


class FindOptionsBuilder:
    @staticmethod
    def build(entity_type: Any, filter_model: FilterModel | None) -> FindOptions:
        """
        Paging, orderings, includes and hierarchy of *filter_model*.

        ``skip = page_size * (page - 1)`` and ``take = page_size``;
        non-positive values fall back to page 1 / size 10.
        """
        model = filter_model if filter_model is not None else FilterModel()
        page = model.page if model.page > 0 else DEFAULT_PAGE
        page_size = model.page_size if model.page_size > 0 else DEFAULT_PAGE_SIZE
        return FindOptions(
            skip=page_size * (page - 1),
            take=page_size,
            orders=OrderOptionBuilder.build(entity_type, model.orderings),
            includes=IncludeOptionBuilder.build(entity_type, model.includes),
            hierarchy=HierarchyOptionBuilder.build(
                entity_type, model.hierarchy, model.hierarchy_max_depth
            ),
            no_tracking=model.no_tracking,
        )


def compile_options(entity_type: Any, filter_model: FilterModel | None) -> FindOptions:
    """Convert *filter_model*'s result-shaping parts into ``FindOptions``."""
    return FindOptionsBuilder.build(entity_type, filter_model)
