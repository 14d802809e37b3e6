"""In-memory evaluation of compiled specifications and find options."""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .ast import enum_ordinal
from .compiler import SpecificationCompiler
from .query_options import compile_options

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .config import CompilerOptions
    from .domain.specification import ISpecification
    from .model import FilterModel
    from .query_options import FindOptions, OrderOption

logger = logging.getLogger(__name__)

E = TypeVar("E")


def _sort_key(order: OrderOption, item: Any) -> tuple[bool, Any]:
    value = order.accessor.get(item) if order.accessor else getattr(item, order.field)
    # None sorts before every value; enums sort by ordinal
    return (value is not None, enum_ordinal(value))


def apply_query(
    items: Iterable[E],
    specifications: Iterable[ISpecification[Any]] = (),
    options: FindOptions | None = None,
) -> list[E]:
    """
    Filter, order and page *items*.

    Keeps the items satisfying every specification, applies a stable
    multi-key sort (``None`` first ascending, last descending), then
    skip/take.  Includes and hierarchy need no loading in memory.
    """
    specs = list(specifications)
    result = [item for item in items if all(s.is_satisfied_by(item) for s in specs)]
    if options is None:
        return result
    for order in reversed(options.orders):
        result.sort(key=functools.partial(_sort_key, order), reverse=order.descending)
    start = options.skip or 0
    stop = start + options.take if options.take is not None else None
    return result[start:stop]


class InMemoryQuery(Generic[E]):
    """Query a plain collection of entities with filter models.

    Usage::

        people = InMemoryQuery(Person, [alice, bob])
        page = people.find_all(FilterModel.from_json(payload))
        total = people.count(FilterModel.from_json(payload))
    """

    def __init__(
        self,
        entity_type: type[E],
        items: Iterable[E] = (),
        options: CompilerOptions | None = None,
    ) -> None:
        self.entity_type = entity_type
        self._items: list[E] = list(items)
        self._compiler = SpecificationCompiler(options)

    def add(self, *items: E) -> None:
        self._items.extend(items)

    def find_all(
        self,
        filter_model: FilterModel | None = None,
        specifications: Iterable[ISpecification[Any]] | None = None,
    ) -> list[E]:
        """Matching entities, ordered and paged per *filter_model*."""
        specs = self._compiler.compile(self.entity_type, filter_model, specifications)
        options = compile_options(self.entity_type, filter_model)
        result = apply_query(self._items, specs, options)
        logger.debug(
            "In-memory query on %s returned %d item(s)",
            self.entity_type.__name__,
            len(result),
        )
        return result

    def count(
        self,
        filter_model: FilterModel | None = None,
        specifications: Iterable[ISpecification[Any]] | None = None,
    ) -> int:
        """Number of matching entities, ignoring paging."""
        specs = self._compiler.compile(self.entity_type, filter_model, specifications)
        return len(apply_query(self._items, specs))

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
