from collections.abc import Callable
from datetime import date
from typing import Any

import pytest

from birthday_planner.date_format import (
    canonical_localized,
    date_to_localized,
    localized_to_portable,
    parse_date,
    parse_localized,
    parse_portable,
    portable_to_localized,
)
from birthday_planner.models import ParsedDate


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2000-12-25", ParsedDate(day=25, month=12, year=2000)),
        ("--06-15", ParsedDate(day=15, month=6, year=None)),
        ("25.12.2000", ParsedDate(day=25, month=12, year=2000)),
        ("15.06.", ParsedDate(day=15, month=6, year=None)),
        ("15.06", ParsedDate(day=15, month=6, year=None)),
    ],
)
def test_parse_date_accepts_both_encodings(text: str, expected: ParsedDate) -> None:
    assert parse_date(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "invalid", "1.6.2000", "15.06.00", "15.06.2000.", " 15.06.", "2000-1-05", "-06-15", "15-06"],
)
def test_parse_date_rejects_malformed_shapes(text: str) -> None:
    assert parse_date(text) is None


def test_parse_date_does_not_check_calendar() -> None:
    assert parse_date("31.02.2001") == ParsedDate(day=31, month=2, year=2001)


def test_localized_to_portable() -> None:
    assert localized_to_portable("25.12.2000") == "2000-12-25"
    assert localized_to_portable("15.06.") == "--06-15"
    assert localized_to_portable("15.06") == "--06-15"


def test_localized_to_portable_rejects_partial_matches() -> None:
    assert localized_to_portable("x25.12.2000") is None
    assert localized_to_portable("25.12.2000 ") is None
    assert localized_to_portable("25.12.2000\n") is None
    assert localized_to_portable("2000-12-25") is None


def test_portable_to_localized_always_adds_trailing_dot() -> None:
    assert portable_to_localized("2000-12-25") == "25.12.2000"
    assert portable_to_localized("--06-15") == "15.06."
    assert portable_to_localized("15.06.") is None


def test_round_trip_full_dates_is_exact() -> None:
    for value in ("25.12.2000", "01.01.1900", "29.02.2000", "31.12.1999"):
        assert portable_to_localized(localized_to_portable(value)) == value


def test_round_trip_yearless_dates_yields_canonical_form() -> None:
    for value in ("25.12", "25.12.", "01.01", "29.02."):
        assert portable_to_localized(localized_to_portable(value)) == canonical_localized(value)
        assert canonical_localized(value).endswith(".")


def test_date_to_localized() -> None:
    assert date_to_localized(date(2025, 7, 4)) == "04.07.2025"


@pytest.mark.parametrize(
    "convert",
    [parse_localized, parse_portable, parse_date, localized_to_portable, portable_to_localized, canonical_localized],
)
def test_non_string_input_returns_none(convert: Callable[[Any], object]) -> None:
    assert convert(None) is None
    assert convert(14031990) is None
