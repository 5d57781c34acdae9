from datetime import date, datetime

import pytest

from birthday_planner.validation import (
    GERMAN_MESSAGES,
    ErrorKind,
    error_message,
    validate_date,
    validate_name,
)

TODAY = date(2025, 6, 15)


@pytest.mark.parametrize("text", ["25.12.2000", "15.06.", "15.06", "29.02.2000", "29.02.", "15.06.2025"])
def test_validate_date_accepts_valid_input(text: str) -> None:
    assert validate_date(text, TODAY) is None


@pytest.mark.parametrize("text", ["", "   "])
def test_validate_date_requires_value(text: str) -> None:
    assert validate_date(text, TODAY) is ErrorKind.REQUIRED


@pytest.mark.parametrize("text", ["invalid", "2000-12-25", "1.1.2000", "15.06.25"])
def test_validate_date_rejects_format(text: str) -> None:
    assert validate_date(text, TODAY) is ErrorKind.INVALID_FORMAT


@pytest.mark.parametrize(
    "text",
    ["31.02.2000", "29.02.2001", "32.01.2000", "15.13.2000", "00.01.2000", "15.00.2000", "31.04."],
)
def test_validate_date_rejects_calendar_invalid(text: str) -> None:
    assert validate_date(text, TODAY) is ErrorKind.INVALID_CALENDAR_DATE


def test_validate_date_rejects_future() -> None:
    assert validate_date("16.06.2025", TODAY) is ErrorKind.FUTURE_DATE
    assert validate_date("01.01.3000", TODAY) is ErrorKind.FUTURE_DATE


def test_validate_date_future_check_ignores_time_of_day() -> None:
    assert validate_date("15.06.2025", datetime(2025, 6, 15, 0, 0, 1)) is None


def test_validate_date_rejects_unrealistic() -> None:
    assert validate_date("01.01.1800", TODAY) is ErrorKind.UNREALISTIC
    assert validate_date("14.06.1875", TODAY) is ErrorKind.UNREALISTIC
    assert validate_date("15.06.1900", TODAY) is None


def test_validate_name() -> None:
    assert validate_name("Paula") is None
    assert validate_name("José García") is None
    assert validate_name("A" * 100) is None
    assert validate_name("  " + "A" * 100 + "  ") is None
    assert validate_name("") is ErrorKind.REQUIRED
    assert validate_name("   ") is ErrorKind.REQUIRED
    assert validate_name("A" * 101) is ErrorKind.TOO_LONG


def test_invalid_format_message_names_both_templates() -> None:
    message = error_message(ErrorKind.INVALID_FORMAT)
    assert "DD.MM." in message
    assert "DD.MM.YYYY" in message
    assert "TT.MM. oder TT.MM.JJJJ" in error_message(ErrorKind.INVALID_FORMAT, GERMAN_MESSAGES)


def test_error_message_falls_back_for_partial_catalog() -> None:
    custom = {ErrorKind.REQUIRED: "needed"}
    assert error_message(ErrorKind.REQUIRED, custom) == "needed"
    assert error_message(ErrorKind.TOO_LONG, custom) == error_message(ErrorKind.TOO_LONG)
