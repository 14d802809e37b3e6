"""Entities the filter engine tests query."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, Field


class EmploymentStatus(Enum):
    ACTIVE = "active"
    ON_LEAVE = "on_leave"
    TERMINATED = "terminated"


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 5
    HIGH = 10


class Address(BaseModel):
    street: str
    city: str
    zip_code: str | None = None


class Person(BaseModel):
    id: int
    first_name: str
    last_name: str
    age: int
    email: str | None = None
    status: EmploymentStatus = EmploymentStatus.ACTIVE
    priority: Priority = Priority.LOW
    birth_date: date | None = None
    created_at: datetime | None = None
    work_start_time: time | None = None
    salary: Decimal | None = None
    tags: list[str] = Field(default_factory=list)
    scores: list[int] = Field(default_factory=list)
    addresses: list[Address] = Field(default_factory=list)
    manager: Person | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class Shift:
    name: str
    starts_at: datetime
    duration: timedelta
    ends: time | None = None


@dataclass
class Envelope:
    payload: Any
