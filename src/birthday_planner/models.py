from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

STORE_VERSION = "1.0.0"


@dataclass(frozen=True)
class ParsedDate:
    day: int
    month: int
    year: int | None


@dataclass(frozen=True)
class BirthRecord:
    id: str
    name: str
    birth_date: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class EnrichedBirthRecord:
    record: BirthRecord
    next_occurrence: date
    age: int | None

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def birth_date(self) -> str:
        return self.record.birth_date


@dataclass(frozen=True)
class PartitionedView:
    upcoming: list[EnrichedBirthRecord]
    future: list[EnrichedBirthRecord]


@dataclass(frozen=True)
class YearGroup:
    year: int
    records: list[EnrichedBirthRecord]


@dataclass(frozen=True)
class BirthdayStore:
    version: str = STORE_VERSION
    birthdays: list[BirthRecord] = field(default_factory=list)
