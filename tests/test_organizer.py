from datetime import date

from birthday_planner.models import BirthRecord, EnrichedBirthRecord
from birthday_planner.organizer import group_by_year, sort_birthdays, split_birthdays

REFERENCE = date(2025, 6, 15)


def _record(name: str, birth_date: str) -> BirthRecord:
    return BirthRecord(
        id=f"id-{name}",
        name=name,
        birth_date=birth_date,
        created_at="2024-01-01T00:00:00.000Z",
        updated_at="2024-01-01T00:00:00.000Z",
    )


def _enriched(name: str, next_occurrence: date, age: int | None = None) -> EnrichedBirthRecord:
    return EnrichedBirthRecord(
        record=_record(name, "--01-01"),
        next_occurrence=next_occurrence,
        age=age,
    )


def test_sort_breaks_ties_by_name() -> None:
    same_day = date(2025, 12, 25)
    records = [_enriched("Charlie", same_day), _enriched("Alice", same_day), _enriched("Bob", same_day)]

    result = sort_birthdays(records)

    assert [item.name for item in result] == ["Alice", "Bob", "Charlie"]
    assert [item.name for item in records] == ["Charlie", "Alice", "Bob"]


def test_sort_orders_by_date_before_name() -> None:
    records = [
        _enriched("Alice", date(2025, 12, 25)),
        _enriched("Zoe", date(2025, 7, 1)),
    ]

    assert [item.name for item in sort_birthdays(records)] == ["Zoe", "Alice"]


def test_sort_name_comparison_is_case_and_accent_aware() -> None:
    same_day = date(2025, 7, 1)
    records = [_enriched("bob", same_day), _enriched("Émile", same_day), _enriched("Anna", same_day)]

    assert [item.name for item in sort_birthdays(records)] == ["Anna", "bob", "Émile"]


def test_split_birthdays_into_upcoming_and_future() -> None:
    records = [
        _record("Soon", "--06-20"),
        _record("Later", "--12-25"),
        _record("Within30", "--07-10"),
    ]

    view = split_birthdays(records, REFERENCE)

    assert [item.name for item in view.upcoming] == ["Soon", "Within30"]
    assert [item.name for item in view.future] == ["Later"]


def test_split_birthdays_window_boundary() -> None:
    records = [
        _record("JustPast", "--07-16"),
        _record("Boundary", "--07-14"),
        _record("DayThirty", "--07-15"),
    ]

    view = split_birthdays(records, REFERENCE)

    assert [item.name for item in view.upcoming] == ["Boundary"]
    assert [item.name for item in view.future] == ["DayThirty", "JustPast"]


def test_split_birthdays_today_is_upcoming() -> None:
    view = split_birthdays([_record("Today", "2000-06-15")], REFERENCE)

    assert [item.name for item in view.upcoming] == ["Today"]
    assert view.upcoming[0].age == 25


def test_split_birthdays_sorts_each_bucket() -> None:
    records = [
        _record("Charlie", "--06-25"),
        _record("Alice", "--06-20"),
        _record("Bob", "--06-20"),
    ]

    view = split_birthdays(records, REFERENCE)

    assert [item.name for item in view.upcoming] == ["Alice", "Bob", "Charlie"]
    assert view.future == []


def test_split_birthdays_empty_input() -> None:
    view = split_birthdays([], REFERENCE)

    assert view.upcoming == []
    assert view.future == []


def test_group_by_year_spanning_three_years() -> None:
    records = [
        _enriched("Year2027", date(2027, 1, 10)),
        _enriched("ThisYear1", date(2025, 12, 25)),
        _enriched("Year2026", date(2026, 6, 15)),
        _enriched("ThisYear2", date(2025, 11, 20)),
    ]

    groups = group_by_year(records)

    assert [group.year for group in groups] == [2025, 2026, 2027]
    assert [item.name for item in groups[0].records] == ["ThisYear2", "ThisYear1"]
    assert [item.name for item in groups[1].records] == ["Year2026"]
    assert [item.name for item in groups[2].records] == ["Year2027"]


def test_group_by_year_empty_input() -> None:
    assert group_by_year([]) == []
