from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from birthday_planner.date_logic import as_calendar_day, enrich
from birthday_planner.models import BirthRecord, EnrichedBirthRecord, PartitionedView, YearGroup

LOGGER = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 30


def name_collation_key(name: str) -> tuple[str, str, str]:
    normalized = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    return (base.casefold(), normalized.casefold(), name)


def sort_birthdays(records: Iterable[EnrichedBirthRecord]) -> list[EnrichedBirthRecord]:
    return sorted(
        records,
        key=lambda item: (item.next_occurrence, name_collation_key(item.name)),
    )


def upcoming_window_end(reference: date | datetime) -> date:
    return as_calendar_day(reference) + timedelta(days=UPCOMING_WINDOW_DAYS - 1)


def split_birthdays(records: Iterable[BirthRecord], reference: date | datetime) -> PartitionedView:
    today = as_calendar_day(reference)
    window_end = upcoming_window_end(today)

    upcoming: list[EnrichedBirthRecord] = []
    future: list[EnrichedBirthRecord] = []
    for record in records:
        enriched = enrich(record, today)
        if enriched.next_occurrence <= window_end:
            upcoming.append(enriched)
        else:
            future.append(enriched)

    LOGGER.debug(
        "Split birthdays for %s: %s upcoming, %s later",
        today.isoformat(),
        len(upcoming),
        len(future),
    )
    return PartitionedView(upcoming=sort_birthdays(upcoming), future=sort_birthdays(future))


def group_by_year(records: Iterable[EnrichedBirthRecord]) -> list[YearGroup]:
    buckets: dict[int, list[EnrichedBirthRecord]] = {}
    for record in records:
        buckets.setdefault(record.next_occurrence.year, []).append(record)

    return [YearGroup(year=year, records=sort_birthdays(buckets[year])) for year in sorted(buckets)]
