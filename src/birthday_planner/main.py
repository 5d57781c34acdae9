from __future__ import annotations

import logging

from telegram.ext import Application

from birthday_planner.bot_handlers import HandlerDependencies, build_handlers, error_handler
from birthday_planner.settings import load_settings
from birthday_planner.store import ensure_store, load_store

LOGGER = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every Telegram poll at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    configure_logging()

    settings = load_settings()
    ensure_store(settings.birthday_store_path)
    store = load_store(settings.birthday_store_path)
    LOGGER.info(
        "Loaded %s birthdays from %s",
        len(store.birthdays),
        settings.birthday_store_path,
    )

    application = Application.builder().token(settings.telegram_bot_token).build()
    application.bot_data["settings"] = settings
    application.bot_data["handler_deps"] = HandlerDependencies(settings=settings)

    for handler in build_handlers():
        application.add_handler(handler)
    application.add_error_handler(error_handler)

    application.run_polling()


if __name__ == "__main__":
    main()
