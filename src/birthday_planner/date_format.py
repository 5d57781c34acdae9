from __future__ import annotations

import re
from datetime import date

from birthday_planner.models import ParsedDate

# Localized: DD.MM.YYYY, DD.MM. or DD.MM
_LOCALIZED_FULL = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})", re.ASCII)
_LOCALIZED_SHORT = re.compile(r"(\d{2})\.(\d{2})\.?", re.ASCII)

# Portable: YYYY-MM-DD or --MM-DD (ISO 8601 recurring date)
_PORTABLE_FULL = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)
_PORTABLE_SHORT = re.compile(r"--(\d{2})-(\d{2})", re.ASCII)

LOCALIZED_TEMPLATES = ("DD.MM.", "DD.MM.YYYY")


def parse_localized(text: str) -> ParsedDate | None:
    if not isinstance(text, str):
        return None
    full_match = _LOCALIZED_FULL.fullmatch(text)
    if full_match:
        day, month, year = full_match.groups()
        return ParsedDate(day=int(day), month=int(month), year=int(year))

    short_match = _LOCALIZED_SHORT.fullmatch(text)
    if short_match:
        day, month = short_match.groups()
        return ParsedDate(day=int(day), month=int(month), year=None)

    return None


def parse_portable(text: str) -> ParsedDate | None:
    if not isinstance(text, str):
        return None
    full_match = _PORTABLE_FULL.fullmatch(text)
    if full_match:
        year, month, day = full_match.groups()
        return ParsedDate(day=int(day), month=int(month), year=int(year))

    short_match = _PORTABLE_SHORT.fullmatch(text)
    if short_match:
        month, day = short_match.groups()
        return ParsedDate(day=int(day), month=int(month), year=None)

    return None


def parse_date(text: str) -> ParsedDate | None:
    """Parse either textual encoding.

    Only the structural shape is checked; calendar validity is left to
    ``birthday_planner.validation``. Returns ``None`` for malformed input.
    """
    return parse_localized(text) or parse_portable(text)


def format_localized(parsed: ParsedDate) -> str:
    if parsed.year is None:
        return f"{parsed.day:02d}.{parsed.month:02d}."
    return f"{parsed.day:02d}.{parsed.month:02d}.{parsed.year:04d}"


def format_portable(parsed: ParsedDate) -> str:
    if parsed.year is None:
        return f"--{parsed.month:02d}-{parsed.day:02d}"
    return f"{parsed.year:04d}-{parsed.month:02d}-{parsed.day:02d}"


def date_to_localized(value: date) -> str:
    return format_localized(ParsedDate(day=value.day, month=value.month, year=value.year))


def localized_to_portable(text: str) -> str | None:
    parsed = parse_localized(text)
    if parsed is None:
        return None
    return format_portable(parsed)


def portable_to_localized(text: str) -> str | None:
    parsed = parse_portable(text)
    if parsed is None:
        return None
    return format_localized(parsed)


def canonical_localized(text: str) -> str | None:
    parsed = parse_localized(text)
    if parsed is None:
        return None
    return format_localized(parsed)
