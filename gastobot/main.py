import logging
import sys
from typing import Optional

from telegram import BotCommand
from telegram.ext import Application, CommandHandler, MessageHandler, filters
from telegram.request import BaseRequest

from gastobot.bot.controller import ConversationController
from gastobot.bot.handlers.admin import error_handler, status_command
from gastobot.bot.handlers.expense import CONTROLLER_KEY, begin_expense_command, text_message_handler
from gastobot.bot.handlers.menu import help_command, start_command
from gastobot.bot.message_manager import TelegramSender
from gastobot.config import (
    BEGIN_EXPENSE_COMMAND,
    WEBHOOK_PATH,
    ConfigError,
    Settings,
    load_settings,
    validate_settings,
)
from gastobot.services.draft_store import DraftStore
from gastobot.services.expense_api import ExpenseApiClient
from gastobot.services.scheduler import create_scheduler, start_scheduler, stop_scheduler
from gastobot.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

SCHEDULER_KEY = "scheduler"

BOT_COMMANDS = [
    BotCommand("start", "Apresentação do bot"),
    BotCommand(BEGIN_EXPENSE_COMMAND, "Registrar um novo gasto"),
    BotCommand("ajuda", "Como usar o bot"),
]


async def post_init(application: Application) -> None:
    start_scheduler(application.bot_data[SCHEDULER_KEY])

    try:
        await application.bot.set_my_commands(BOT_COMMANDS)
    except Exception as e:
        logger.warning(f"Could not set bot commands: {e}")


async def post_shutdown(application: Application) -> None:
    stop_scheduler(application.bot_data[SCHEDULER_KEY])


def build_application(settings: Settings, request: Optional[BaseRequest] = None) -> Application:
    """Собирает приложение: один контроллер для polling и webhook.

    Апдейты обрабатываются конкурентно: зависший запрос к API расходов
    блокирует только диалог своего пользователя.
    """
    builder = (
        Application.builder()
        .token(settings.bot_token)
        .concurrent_updates(True)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
    )
    if request is not None:
        builder = builder.request(request)
    application = builder.build()

    store = DraftStore()
    api = ExpenseApiClient(settings.expense_api_url, timeout=settings.api_timeout)
    application.bot_data[CONTROLLER_KEY] = ConversationController(
        store, api, TelegramSender(application.bot)
    )
    application.bot_data[SCHEDULER_KEY] = create_scheduler(
        store, settings.draft_ttl_minutes, settings.draft_sweep_interval_minutes
    )

    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler(["ajuda", "help"], help_command))
    application.add_handler(CommandHandler(BEGIN_EXPENSE_COMMAND, begin_expense_command))
    application.add_handler(CommandHandler("status", status_command))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, text_message_handler))

    application.add_error_handler(error_handler)

    return application


def main():
    """Точка входа в приложение."""
    try:
        settings = load_settings()
        validate_settings(settings)
    except ConfigError as e:
        logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(settings.log_dir, settings.log_level)

    application = build_application(settings)
    logger.info(f"Expense API endpoint: {settings.expense_api_url}")

    if settings.is_webhook:
        webhook_url = f"{settings.webhook_url.rstrip('/')}/{WEBHOOK_PATH}"
        logger.info(f"Starting bot in webhook mode on port {settings.port}...")
        application.run_webhook(
            listen="0.0.0.0",
            port=settings.port,
            url_path=WEBHOOK_PATH,
            webhook_url=webhook_url,
        )
    else:
        logger.info("Starting bot in polling mode...")
        application.run_polling(drop_pending_updates=True)


if __name__ == "__main__":
    main()
