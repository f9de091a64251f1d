"""Telegram bot process entrypoint."""

from __future__ import annotations

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from verbal_pos.app import create_app
from verbal_pos.bot.handlers import handle_message
from verbal_pos.config.logging import configure_logging
from verbal_pos.config.settings import load_settings

logger = logging.getLogger(__name__)


async def main() -> None:
    """Run the Telegram bot polling loop."""

    settings = load_settings()
    configure_logging()

    if not settings.telegram_bot_token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is required to run the bot")

    app = create_app(settings)
    await app.open()

    bot = Bot(token=settings.telegram_bot_token, default=DefaultBotProperties(parse_mode=None))
    dp = Dispatcher()
    dp.message.register(handle_message)

    try:
        await dp.start_polling(bot, app=app)
    finally:
        logger.info("shutting down")
        await app.close()


if __name__ == "__main__":
    asyncio.run(main())
