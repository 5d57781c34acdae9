from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from telegram import Update
from telegram.ext import (
    CallbackContext,
    CommandHandler,
    ConversationHandler,
    MessageHandler,
    filters,
)

from birthday_planner.date_format import date_to_localized, localized_to_portable, portable_to_localized
from birthday_planner.date_logic import days_until, parse_birth_date
from birthday_planner.models import BirthRecord, EnrichedBirthRecord, PartitionedView
from birthday_planner.organizer import UPCOMING_WINDOW_DAYS, group_by_year, split_birthdays
from birthday_planner.settings import Settings
from birthday_planner.store import (
    BirthdayNotFoundError,
    add_birthday,
    delete_birthday,
    load_store,
    update_birthday,
)
from birthday_planner.validation import error_message, validate_date, validate_name

LOGGER = logging.getLogger(__name__)

(
    STATE_ADD_NAME,
    STATE_ADD_BIRTHDAY,
    STATE_ADD_CONFIRM,
    STATE_EDIT_SELECT,
    STATE_EDIT_NAME,
    STATE_EDIT_BIRTHDAY,
    STATE_EDIT_CONFIRM,
    STATE_DELETE_SELECT,
    STATE_DELETE_CONFIRM,
) = range(9)

PENDING_ADD_KEY = "pending_add_birthday"
PENDING_EDIT_KEY = "pending_edit_birthday"
PENDING_DELETE_KEY = "pending_delete_birthday"

MILESTONE_MARKER = "★"
DATE_FORMAT_HINT = "DD.MM.YYYY or DD.MM."


@dataclass(frozen=True)
class HandlerDependencies:
    settings: Settings


def _today() -> date:
    return date.today()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def is_authorized(update: Update, settings: Settings) -> bool:
    effective_user = update.effective_user
    effective_chat = update.effective_chat
    if effective_user is None or effective_chat is None:
        return False
    return (
        effective_user.id == settings.telegram_allowed_user_id
        and effective_chat.id == settings.telegram_allowed_chat_id
    )


async def _deny_unauthorized(update: Update) -> None:
    if update.effective_message:
        await update.effective_message.reply_text("This bot is restricted to its configured owner.")


async def _authorized_settings(update: Update, context: CallbackContext) -> Settings | None:
    deps: HandlerDependencies = context.application.bot_data["handler_deps"]
    if not is_authorized(update, deps.settings):
        await _deny_unauthorized(update)
        return None
    return deps.settings


def is_milestone_age(age: int | None) -> bool:
    if age is None or age <= 0:
        return False
    return age == 18 or age % 10 == 0


def parse_name_text(raw_text: str) -> str:
    error = validate_name(raw_text)
    if error is not None:
        raise ValueError(error_message(error))
    return raw_text.strip()


def parse_birthday_text(raw_text: str, today: date) -> str:
    value = raw_text.strip()
    error = validate_date(value, today)
    if error is not None:
        raise ValueError(error_message(error))

    portable = localized_to_portable(value)
    if portable is None:
        raise ValueError(f"Birthday must use {DATE_FORMAT_HINT}")
    return portable


def _format_countdown(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"
    return f"in {days}d"


def _format_row(item: EnrichedBirthRecord, today: date) -> str:
    details = [date_to_localized(item.next_occurrence), item.name]
    if item.age is not None:
        marker = f" {MILESTONE_MARKER}" if is_milestone_age(item.age) else ""
        details.append(f"turning {item.age}{marker}")
    details.append(_format_countdown(days_until(parse_birth_date(item.record), today)))
    return " | ".join(details)


def _render_list_message(view: PartitionedView, today: date) -> str:
    total = len(view.upcoming) + len(view.future)
    lines = [f"Tracked birthdays ({total})", "", f"Next {UPCOMING_WINDOW_DAYS} days:"]

    if view.upcoming:
        for index, item in enumerate(view.upcoming, start=1):
            lines.append(f"{index}. {_format_row(item, today)}")
    else:
        lines.append("(none)")

    if view.future:
        lines.append("")
        lines.append("Later:")
        for group in group_by_year(view.future):
            lines.append(f"{group.year}")
            for item in group.records:
                lines.append(f"- {_format_row(item, today)}")

    return "\n".join(lines)


def _format_stored_birthday(record: BirthRecord) -> str:
    return portable_to_localized(record.birth_date) or record.birth_date


def _render_selection(records: list[BirthRecord], header: str) -> str:
    lines = [header]
    for index, record in enumerate(records, start=1):
        lines.append(f"{index}. {record.name} | {_format_stored_birthday(record)}")
    return "\n".join(lines)


def _select_record(raw_text: str, records: list[BirthRecord]) -> BirthRecord:
    value = raw_text.strip()
    if not value.isdigit():
        raise ValueError("Please send the entry number shown in the list.")

    selected = int(value)
    if selected < 1 or selected > len(records):
        raise ValueError(f"Entry must be between 1 and {len(records)}.")
    return records[selected - 1]


def _is_skip(value: str) -> bool:
    return value.strip().lower() in {"skip", "keep", "same"}


def _is_yes(value: str) -> bool | None:
    decision = value.strip().lower()
    if decision in {"yes", "y"}:
        return True
    if decision in {"no", "n"}:
        return False
    return None


def _render_help() -> str:
    return (
        "Commands:\n"
        "/list - Show birthdays in the next 30 days and later ones by year\n"
        "/add - Start the interactive birthday wizard\n"
        "/edit - Interactively edit an existing birthday\n"
        "/delete - Remove a birthday\n"
        "/help - Show this help message\n"
        "/cancel - Cancel the active wizard\n\n"
        "Birthday format examples:\n"
        "- 14.03.1990\n"
        "- 14.03.\n\n"
        f"Ages marked {MILESTONE_MARKER} are milestones (18 or a round number)."
    )


async def help_command(update: Update, context: CallbackContext) -> None:
    if await _authorized_settings(update, context) is None:
        return
    await update.effective_message.reply_text(_render_help())


async def list_command(update: Update, context: CallbackContext) -> None:
    settings = await _authorized_settings(update, context)
    if settings is None:
        return

    store = load_store(settings.birthday_store_path)
    if not store.birthdays:
        await update.effective_message.reply_text("No birthdays are currently tracked.")
        return

    today = _today()
    view = split_birthdays(store.birthdays, today)
    await update.effective_message.reply_text(_render_list_message(view, today))


async def add_start(update: Update, context: CallbackContext) -> int:
    if await _authorized_settings(update, context) is None:
        return ConversationHandler.END

    context.user_data[PENDING_ADD_KEY] = {}
    await update.effective_message.reply_text(
        "Add birthday wizard started.\nStep 1/3: Send the person's name."
    )
    return STATE_ADD_NAME


async def add_name(update: Update, context: CallbackContext) -> int:
    if await _authorized_settings(update, context) is None:
        return ConversationHandler.END

    try:
        name = parse_name_text(update.effective_message.text or "")
    except ValueError as exc:
        await update.effective_message.reply_text(f"{exc}. Please send a name.")
        return STATE_ADD_NAME

    context.user_data[PENDING_ADD_KEY] = {"name": name}
    await update.effective_message.reply_text(f"Step 2/3: Send birthday as {DATE_FORMAT_HINT}")
    return STATE_ADD_BIRTHDAY


async def add_birthday_step(update: Update, context: CallbackContext) -> int:
    if await _authorized_settings(update, context) is None:
        return ConversationHandler.END

    try:
        birth_date = parse_birthday_text(update.effective_message.text or "", _today())
    except ValueError as exc:
        await update.effective_message.reply_text(f"{exc}. Please send {DATE_FORMAT_HINT}")
        return STATE_ADD_BIRTHDAY

    pending = context.user_data.get(PENDING_ADD_KEY, {})
    pending["birth_date"] = birth_date
    context.user_data[PENDING_ADD_KEY] = pending

    await update.effective_message.reply_text(
        "Step 3/3: Confirm this entry:\n"
        f"Name: {pending.get('name')}\n"
        f"Birthday: {portable_to_localized(birth_date)}\n\n"
        "Reply with yes to save, or no to cancel."
    )
    return STATE_ADD_CONFIRM


async def add_confirm(update: Update, context: CallbackContext) -> int:
    settings = await _authorized_settings(update, context)
    if settings is None:
        return ConversationHandler.END

    decision = _is_yes(update.effective_message.text or "")
    if decision is None:
        await update.effective_message.reply_text("Please reply with yes or no.")
        return STATE_ADD_CONFIRM

    pending = context.user_data.pop(PENDING_ADD_KEY, {})
    if not decision:
        await update.effective_message.reply_text("Canceled. No changes were made.")
        return ConversationHandler.END

    record = add_birthday(
        settings.birthday_store_path,
        name=str(pending["name"]),
        birth_date=str(pending["birth_date"]),
        now=_now(),
    )
    await update.effective_message.reply_text("Birthday saved.")
    LOGGER.info("Added birthday for %s", record.name)
    return ConversationHandler.END


async def edit_start(update: Update, context: CallbackContext) -> int:
    settings = await _authorized_settings(update, context)
    if settings is None:
        return ConversationHandler.END

    store = load_store(settings.birthday_store_path)
    if not store.birthdays:
        await update.effective_message.reply_text("No birthdays are currently tracked.")
        return ConversationHandler.END

    context.user_data[PENDING_EDIT_KEY] = {}
    await update.effective_message.reply_text(
        _render_selection(
            store.birthdays,
            "Edit birthday wizard started.\nStep 1/4: Reply with the number of the entry to edit:",
        )
    )
    return STATE_EDIT_SELECT


async def edit_select(update: Update, context: CallbackContext) -> int:
    settings = await _authorized_settings(update, context)
    if settings is None:
        return ConversationHandler.END

    store = load_store(settings.birthday_store_path)
    try:
        record = _select_record(update.effective_message.text or "", store.birthdays)
    except ValueError as exc:
        await update.effective_message.reply_text(str(exc))
        return STATE_EDIT_SELECT

    pending: dict[str, Any] = {
        "id": record.id,
        "original_name": record.name,
        "original_birth_date": record.birth_date,
        "name": record.name,
        "birth_date": record.birth_date,
    }
    context.user_data[PENDING_EDIT_KEY] = pending

    await update.effective_message.reply_text(
        f"Step 2/4: Send a new name, or skip to keep \"{record.name}\"."
    )
    return STATE_EDIT_NAME


def _pending_edit(context: CallbackContext) -> dict[str, Any] | None:
    pending = context.user_data.get(PENDING_EDIT_KEY)
    if not isinstance(pending, dict) or "id" not in pending:
        return None
    return pending


async def edit_name(update: Update, context: CallbackContext) -> int:
    if await _authorized_settings(update, context) is None:
        return ConversationHandler.END

    pending = _pending_edit(context)
    if pending is None:
        await update.effective_message.reply_text("Edit session expired. Send /edit to start again.")
        return ConversationHandler.END

    raw_text = update.effective_message.text or ""
    if not _is_skip(raw_text):
        try:
            pending["name"] = parse_name_text(raw_text)
        except ValueError as exc:
            await update.effective_message.reply_text(f"{exc}. Send a name or skip.")
            return STATE_EDIT_NAME

    context.user_data[PENDING_EDIT_KEY] = pending
    await update.effective_message.reply_text(
        f"Step 3/4: Send a new birthday as {DATE_FORMAT_HINT},\n"
        f"or skip to keep {portable_to_localized(pending['birth_date'])}."
    )
    return STATE_EDIT_BIRTHDAY


async def edit_birthday_step(update: Update, context: CallbackContext) -> int:
    if await _authorized_settings(update, context) is None:
        return ConversationHandler.END

    pending = _pending_edit(context)
    if pending is None:
        await update.effective_message.reply_text("Edit session expired. Send /edit to start again.")
        return ConversationHandler.END

    raw_text = update.effective_message.text or ""
    if not _is_skip(raw_text):
        try:
            pending["birth_date"] = parse_birthday_text(raw_text, _today())
        except ValueError as exc:
            await update.effective_message.reply_text(f"{exc}. Please send {DATE_FORMAT_HINT}, or skip.")
            return STATE_EDIT_BIRTHDAY

    context.user_data[PENDING_EDIT_KEY] = pending
    await update.effective_message.reply_text(
        "Step 4/4: Confirm these edits:\n"
        f"Name: {pending['original_name']} -> {pending['name']}\n"
        f"Birthday: {portable_to_localized(pending['original_birth_date'])}"
        f" -> {portable_to_localized(pending['birth_date'])}\n\n"
        "Reply with yes to save, or no to cancel."
    )
    return STATE_EDIT_CONFIRM


async def edit_confirm(update: Update, context: CallbackContext) -> int:
    settings = await _authorized_settings(update, context)
    if settings is None:
        return ConversationHandler.END

    pending = _pending_edit(context)
    if pending is None:
        await update.effective_message.reply_text("Edit session expired. Send /edit to start again.")
        return ConversationHandler.END

    decision = _is_yes(update.effective_message.text or "")
    if decision is None:
        await update.effective_message.reply_text("Please reply with yes or no.")
        return STATE_EDIT_CONFIRM

    context.user_data.pop(PENDING_EDIT_KEY, None)
    if not decision:
        await update.effective_message.reply_text("Canceled. No changes were made.")
        return ConversationHandler.END

    try:
        record = update_birthday(
            settings.birthday_store_path,
            str(pending["id"]),
            name=str(pending["name"]),
            birth_date=str(pending["birth_date"]),
            now=_now(),
        )
    except BirthdayNotFoundError:
        await update.effective_message.reply_text(
            "Could not save because the birthday list changed. Send /edit and try again."
        )
        return ConversationHandler.END

    await update.effective_message.reply_text("Birthday updated.")
    LOGGER.info("Updated birthday for %s", record.name)
    return ConversationHandler.END


async def delete_start(update: Update, context: CallbackContext) -> int:
    settings = await _authorized_settings(update, context)
    if settings is None:
        return ConversationHandler.END

    store = load_store(settings.birthday_store_path)
    if not store.birthdays:
        await update.effective_message.reply_text("No birthdays are currently tracked.")
        return ConversationHandler.END

    context.user_data[PENDING_DELETE_KEY] = {}
    await update.effective_message.reply_text(
        _render_selection(store.birthdays, "Reply with the number of the entry to delete:")
    )
    return STATE_DELETE_SELECT


async def delete_select(update: Update, context: CallbackContext) -> int:
    settings = await _authorized_settings(update, context)
    if settings is None:
        return ConversationHandler.END

    store = load_store(settings.birthday_store_path)
    try:
        record = _select_record(update.effective_message.text or "", store.birthdays)
    except ValueError as exc:
        await update.effective_message.reply_text(str(exc))
        return STATE_DELETE_SELECT

    context.user_data[PENDING_DELETE_KEY] = {"id": record.id, "name": record.name}
    await update.effective_message.reply_text(
        f"Delete {record.name} ({_format_stored_birthday(record)})?\n"
        "This cannot be undone. Reply with yes to delete, or no to cancel."
    )
    return STATE_DELETE_CONFIRM


async def delete_confirm(update: Update, context: CallbackContext) -> int:
    settings = await _authorized_settings(update, context)
    if settings is None:
        return ConversationHandler.END

    decision = _is_yes(update.effective_message.text or "")
    if decision is None:
        await update.effective_message.reply_text("Please reply with yes or no.")
        return STATE_DELETE_CONFIRM

    pending = context.user_data.pop(PENDING_DELETE_KEY, {})
    if not decision or "id" not in pending:
        await update.effective_message.reply_text("Canceled. No changes were made.")
        return ConversationHandler.END

    try:
        removed = delete_birthday(settings.birthday_store_path, str(pending["id"]))
    except BirthdayNotFoundError:
        await update.effective_message.reply_text("That birthday no longer exists.")
        return ConversationHandler.END

    await update.effective_message.reply_text("Birthday deleted.")
    LOGGER.info("Deleted birthday for %s", removed.name)
    return ConversationHandler.END


async def cancel_command(update: Update, context: CallbackContext) -> int:
    if await _authorized_settings(update, context) is None:
        return ConversationHandler.END

    context.user_data.pop(PENDING_ADD_KEY, None)
    context.user_data.pop(PENDING_EDIT_KEY, None)
    context.user_data.pop(PENDING_DELETE_KEY, None)
    await update.effective_message.reply_text("Wizard canceled.")
    return ConversationHandler.END


async def error_handler(update: object, context: CallbackContext) -> None:
    LOGGER.error("Unhandled error while processing update", exc_info=context.error)


def build_handlers() -> list:
    text_only = filters.TEXT & ~filters.COMMAND

    add_conversation = ConversationHandler(
        entry_points=[CommandHandler("add", add_start)],
        states={
            STATE_ADD_NAME: [MessageHandler(text_only, add_name)],
            STATE_ADD_BIRTHDAY: [MessageHandler(text_only, add_birthday_step)],
            STATE_ADD_CONFIRM: [MessageHandler(text_only, add_confirm)],
        },
        fallbacks=[CommandHandler("cancel", cancel_command)],
        name="add_birthday_conversation",
        persistent=False,
    )

    edit_conversation = ConversationHandler(
        entry_points=[CommandHandler("edit", edit_start)],
        states={
            STATE_EDIT_SELECT: [MessageHandler(text_only, edit_select)],
            STATE_EDIT_NAME: [MessageHandler(text_only, edit_name)],
            STATE_EDIT_BIRTHDAY: [MessageHandler(text_only, edit_birthday_step)],
            STATE_EDIT_CONFIRM: [MessageHandler(text_only, edit_confirm)],
        },
        fallbacks=[CommandHandler("cancel", cancel_command)],
        name="edit_birthday_conversation",
        persistent=False,
    )

    delete_conversation = ConversationHandler(
        entry_points=[CommandHandler("delete", delete_start)],
        states={
            STATE_DELETE_SELECT: [MessageHandler(text_only, delete_select)],
            STATE_DELETE_CONFIRM: [MessageHandler(text_only, delete_confirm)],
        },
        fallbacks=[CommandHandler("cancel", cancel_command)],
        name="delete_birthday_conversation",
        persistent=False,
    )

    return [
        CommandHandler("help", help_command),
        CommandHandler("list", list_command),
        CommandHandler("cancel", cancel_command),
        add_conversation,
        edit_conversation,
        delete_conversation,
    ]
