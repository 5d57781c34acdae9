from __future__ import annotations

import calendar
from datetime import MAXYEAR, MINYEAR, date, datetime

from birthday_planner.date_format import parse_date
from birthday_planner.models import BirthRecord, EnrichedBirthRecord, ParsedDate


class InvalidBirthdayError(ValueError):
    pass


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def as_calendar_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_birth_date(record: BirthRecord) -> ParsedDate:
    parsed = parse_date(record.birth_date)
    if parsed is None:
        raise InvalidBirthdayError(f"Unparseable birth date for {record.id}: {record.birth_date!r}")
    return parsed


def occurrence_in_year(parsed: ParsedDate, year: int) -> date:
    if parsed.month < 1 or parsed.month > 12:
        raise InvalidBirthdayError(f"Invalid month: {parsed.month}")
    if year < MINYEAR or year > MAXYEAR:
        raise InvalidBirthdayError(f"Year {year} is outside the supported calendar range")

    if parsed.month == 2 and parsed.day == 29 and not is_leap_year(year):
        return date(year, 2, 28)

    # Out-of-range days (e.g. 31.04.) clamp to the month's last day.
    last_day = calendar.monthrange(year, parsed.month)[1]
    return date(year, parsed.month, min(max(parsed.day, 1), last_day))


def next_occurrence(parsed: ParsedDate, reference: date | datetime) -> date:
    today = as_calendar_day(reference)
    this_year = occurrence_in_year(parsed, today.year)
    if this_year >= today:
        return this_year
    return occurrence_in_year(parsed, today.year + 1)


def days_until(parsed: ParsedDate, reference: date | datetime) -> int:
    today = as_calendar_day(reference)
    return (next_occurrence(parsed, today) - today).days


def turning_age(parsed: ParsedDate, reference: date | datetime) -> int | None:
    """Age the person turns at the next occurrence, not their age today.

    ``None`` when the birth year is unknown or lies after the reference year.
    """
    today = as_calendar_day(reference)
    if parsed.year is None or parsed.year > today.year:
        return None
    return next_occurrence(parsed, today).year - parsed.year


def enrich(record: BirthRecord, reference: date | datetime) -> EnrichedBirthRecord:
    parsed = parse_birth_date(record)
    return EnrichedBirthRecord(
        record=record,
        next_occurrence=next_occurrence(parsed, reference),
        age=turning_age(parsed, reference),
    )
