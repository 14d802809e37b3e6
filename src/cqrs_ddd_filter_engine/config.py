"""Compiler configuration."""

from __future__ import annotations

import datetime
from collections.abc import Callable
from dataclasses import dataclass, field

from .coercion import ValueCoercer, default_coercer
from .evaluator import MemoryOperatorRegistry
from .operators_memory import build_default_registry
from .registry import SpecificationRegistry, default_registry


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class CompilerOptions:
    """
    Collaborators of the specification compiler.

    Attributes:
        registry: Named specifications (defaults to the process-wide one).
        operators: In-memory operator strategies used by compiled leaves.
        coercer: Value conversion table.
        clock: Returns "now" as an aware UTC datetime; relative date and
            time filters are computed against it.
        case_insensitive_search: Full-text search ignores case.
    """

    registry: SpecificationRegistry = field(default_factory=lambda: default_registry)
    operators: MemoryOperatorRegistry = field(default_factory=build_default_registry)
    coercer: ValueCoercer = field(default_factory=lambda: default_coercer)
    clock: Callable[[], datetime.datetime] = utc_now
    case_insensitive_search: bool = True
