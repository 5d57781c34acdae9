from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from birthday_planner.date_format import parse_date
from birthday_planner.models import STORE_VERSION, BirthdayStore, BirthRecord

LOGGER = logging.getLogger(__name__)


class StoreError(ValueError):
    pass


class BirthdayNotFoundError(KeyError):
    pass


def format_timestamp(now: datetime) -> str:
    utc_now = now.astimezone(timezone.utc) if now.tzinfo is not None else now
    return utc_now.isoformat(timespec="milliseconds").replace("+00:00", "") + "Z"


def _record_from_row(row: Any) -> BirthRecord:
    if not isinstance(row, dict):
        raise StoreError("birthday entries must be objects")

    birth_date = str(row.get("birthDate", ""))
    parsed = parse_date(birth_date)
    if parsed is None:
        raise StoreError(f"Invalid birthDate in store: {birth_date!r}")

    # Year-less dates are checked against leap year 2000 so --02-29 loads.
    try:
        date(parsed.year if parsed.year is not None else 2000, parsed.month, parsed.day)
    except ValueError as exc:
        raise StoreError(f"Invalid birthDate in store: {birth_date!r}") from exc

    record_id = str(row.get("id", "")).strip()
    if not record_id:
        raise StoreError("birthday entries must have an id")

    return BirthRecord(
        id=record_id,
        name=str(row.get("name", "")),
        birth_date=birth_date,
        created_at=str(row.get("createdAt", "")),
        updated_at=str(row.get("updatedAt", "")),
    )


def _row_from_record(record: BirthRecord) -> dict[str, str]:
    return {
        "id": record.id,
        "name": record.name,
        "birthDate": record.birth_date,
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
    }


def load_store(path: Path) -> BirthdayStore:
    if not path.exists():
        return BirthdayStore(version=STORE_VERSION, birthdays=[])

    try:
        with path.open("r", encoding="utf-8") as file_obj:
            data = json.load(file_obj)
    except json.JSONDecodeError as exc:
        raise StoreError(f"Birthday store is not valid JSON: {path}") from exc

    if not isinstance(data, dict):
        raise StoreError(f"Birthday store must be a JSON object: {path}")

    rows = data.get("birthdays", [])
    if not isinstance(rows, list):
        raise StoreError("birthdays must be a list")

    return BirthdayStore(
        version=str(data.get("version", STORE_VERSION)),
        birthdays=[_record_from_row(row) for row in rows],
    )


def save_store_atomic(path: Path, store: BirthdayStore) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "version": store.version,
        "birthdays": [_row_from_record(record) for record in store.birthdays],
    }

    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        delete=False,
    ) as temp_file:
        json.dump(payload, temp_file, indent=2, ensure_ascii=False)
        temp_file.write("\n")
        temp_name = temp_file.name

    os.replace(temp_name, path)


def ensure_store(path: Path) -> None:
    if path.exists():
        return
    save_store_atomic(path, BirthdayStore(version=STORE_VERSION, birthdays=[]))


def _index_of(store: BirthdayStore, record_id: str) -> int:
    for index, record in enumerate(store.birthdays):
        if record.id == record_id:
            return index
    raise BirthdayNotFoundError(record_id)


def add_birthday(path: Path, *, name: str, birth_date: str, now: datetime) -> BirthRecord:
    store = load_store(path)
    timestamp = format_timestamp(now)
    record = BirthRecord(
        id=str(uuid.uuid4()),
        name=name.strip(),
        birth_date=birth_date,
        created_at=timestamp,
        updated_at=timestamp,
    )
    save_store_atomic(path, BirthdayStore(version=store.version, birthdays=[*store.birthdays, record]))
    LOGGER.info("Added birthday %s", record.id)
    return record


def update_birthday(
    path: Path,
    record_id: str,
    *,
    name: str,
    birth_date: str,
    now: datetime,
) -> BirthRecord:
    store = load_store(path)
    index = _index_of(store, record_id)

    existing = store.birthdays[index]
    updated = BirthRecord(
        id=existing.id,
        name=name.strip(),
        birth_date=birth_date,
        created_at=existing.created_at,
        updated_at=format_timestamp(now),
    )
    birthdays = list(store.birthdays)
    birthdays[index] = updated
    save_store_atomic(path, BirthdayStore(version=store.version, birthdays=birthdays))
    LOGGER.info("Updated birthday %s", record_id)
    return updated


def delete_birthday(path: Path, record_id: str) -> BirthRecord:
    store = load_store(path)
    index = _index_of(store, record_id)

    birthdays = list(store.birthdays)
    removed = birthdays.pop(index)
    save_store_atomic(path, BirthdayStore(version=store.version, birthdays=birthdays))
    LOGGER.info("Deleted birthday %s", record_id)
    return removed
