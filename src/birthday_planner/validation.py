from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from birthday_planner.date_format import LOCALIZED_TEMPLATES, parse_localized
from birthday_planner.date_logic import as_calendar_day

MAX_NAME_LENGTH = 100
MAX_AGE_YEARS = 150
DAYS_PER_YEAR = 365.25

# Year-less dates are checked against a leap year so that 29.02. is accepted.
_YEARLESS_CHECK_YEAR = 2000


class ErrorKind(str, Enum):
    REQUIRED = "required"
    INVALID_FORMAT = "invalid_format"
    INVALID_CALENDAR_DATE = "invalid_calendar_date"
    FUTURE_DATE = "future_date"
    UNREALISTIC = "unrealistic"
    TOO_LONG = "too_long"


DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.REQUIRED: "This field is required",
    ErrorKind.INVALID_FORMAT: (
        f"Invalid date (format: {LOCALIZED_TEMPLATES[0]} or {LOCALIZED_TEMPLATES[1]})"
    ),
    ErrorKind.INVALID_CALENDAR_DATE: "Invalid date",
    ErrorKind.FUTURE_DATE: "Birth date cannot be in the future",
    ErrorKind.UNREALISTIC: "Birth date is unrealistic",
    ErrorKind.TOO_LONG: f"Name must be at most {MAX_NAME_LENGTH} characters long",
}

GERMAN_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.REQUIRED: "Angabe ist erforderlich",
    ErrorKind.INVALID_FORMAT: "Ungültiges Datum (Format: TT.MM. oder TT.MM.JJJJ)",
    ErrorKind.INVALID_CALENDAR_DATE: "Ungültiges Datum",
    ErrorKind.FUTURE_DATE: "Geburtsdatum kann nicht in der Zukunft liegen",
    ErrorKind.UNREALISTIC: "Geburtsdatum ist unrealistisch",
    ErrorKind.TOO_LONG: f"Name darf maximal {MAX_NAME_LENGTH} Zeichen lang sein",
}


def error_message(kind: ErrorKind, messages: dict[ErrorKind, str] | None = None) -> str:
    catalog = DEFAULT_MESSAGES if messages is None else messages
    return catalog.get(kind, DEFAULT_MESSAGES[kind])


def validate_name(text: str) -> ErrorKind | None:
    trimmed = (text or "").strip()
    if not trimmed:
        return ErrorKind.REQUIRED
    if len(trimmed) > MAX_NAME_LENGTH:
        return ErrorKind.TOO_LONG
    return None


def validate_date(text: str, reference: date | datetime) -> ErrorKind | None:
    """Validate a localized birth date against ``reference`` ("today").

    Checks run in order: presence, structural format, calendar validity and,
    when a year is given, that the date is neither in the future nor more than
    ``MAX_AGE_YEARS`` years back.
    """
    if not text or not text.strip():
        return ErrorKind.REQUIRED

    parsed = parse_localized(text)
    if parsed is None:
        return ErrorKind.INVALID_FORMAT

    year = parsed.year if parsed.year is not None else _YEARLESS_CHECK_YEAR
    try:
        birth_date = date(year, parsed.month, parsed.day)
    except ValueError:
        return ErrorKind.INVALID_CALENDAR_DATE

    if parsed.year is None:
        return None

    today = as_calendar_day(reference)
    if birth_date > today:
        return ErrorKind.FUTURE_DATE

    age_in_years = (today - birth_date).days / DAYS_PER_YEAR
    if age_in_years > MAX_AGE_YEARS:
        return ErrorKind.UNREALISTIC

    return None
