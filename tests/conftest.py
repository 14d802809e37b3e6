"""Shared fixtures for filter engine tests."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest
from entities import Address, EmploymentStatus, Person, Priority

from cqrs_ddd_filter_engine.compiler import SpecificationCompiler
from cqrs_ddd_filter_engine.config import CompilerOptions
from cqrs_ddd_filter_engine.operators_memory import build_default_registry
from cqrs_ddd_filter_engine.registry import SpecificationRegistry

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def operators():
    """Default in-memory operator registry for building specs."""
    return build_default_registry()


@pytest.fixture
def spec_registry() -> SpecificationRegistry:
    """Isolated named-specification registry."""
    return SpecificationRegistry()


@pytest.fixture
def options(spec_registry: SpecificationRegistry) -> CompilerOptions:
    return CompilerOptions(registry=spec_registry, clock=lambda: NOW)


@pytest.fixture
def compiler(options: CompilerOptions) -> SpecificationCompiler:
    return SpecificationCompiler(options)


@pytest.fixture
def alice() -> Person:
    return Person(
        id=1,
        first_name="Alice",
        last_name="Smith",
        age=30,
        email="alice@example.com",
        status=EmploymentStatus.ACTIVE,
        priority=Priority.HIGH,
        birth_date=date(1994, 3, 10),
        created_at=datetime(2024, 6, 10, 9, 0, tzinfo=timezone.utc),
        work_start_time=time(8, 30),
        salary=Decimal("5000"),
        tags=["admin", "dev"],
        scores=[90, 85],
        addresses=[
            Address(street="Unter den Linden 1", city="Berlin", zip_code="10117"),
            Address(street="Rue de Rivoli 5", city="Paris"),
        ],
    )


@pytest.fixture
def bob() -> Person:
    return Person(
        id=2,
        first_name="Bob",
        last_name="Jones",
        age=42,
        status=EmploymentStatus.ON_LEAVE,
        priority=Priority.MEDIUM,
        birth_date=date(1982, 1, 31),
        created_at=datetime(2024, 1, 31, 23, 30, tzinfo=timezone.utc),
        work_start_time=time(22, 0),
        salary=Decimal("4200.50"),
        tags=["dev"],
        scores=[40, 55],
        addresses=[Address(street="Baker Street 221b", city="London")],
    )


@pytest.fixture
def anna(alice: Person) -> Person:
    return Person(
        id=3,
        first_name="Anna",
        last_name="Brown",
        age=25,
        email="anna@example.org",
        status=EmploymentStatus.TERMINATED,
        priority=Priority.LOW,
        birth_date=date(1999, 2, 1),
        manager=alice,
    )


@pytest.fixture
def people(alice: Person, bob: Person, anna: Person) -> list[Person]:
    return [alice, bob, anna]


def matching(specs, items):
    """Items satisfying every specification."""
    return [item for item in items if all(s.is_satisfied_by(item) for s in specs)]


@pytest.fixture
def select():
    return matching
