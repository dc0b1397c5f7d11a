import logging

from telegram import Update
from telegram.ext import ContextTypes

from gastobot.bot.handlers.expense import get_controller
from gastobot.services.metrics import get_metrics
from gastobot.utils.formatters import format_status

logger = logging.getLogger(__name__)


async def status_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    metrics = get_metrics()
    open_drafts = len(get_controller(context).store)

    report = format_status(metrics.get_summary(), open_drafts)
    await update.message.reply_text(report)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Логирует ошибки обработки и получения апдейтов, бот продолжает работу."""
    logger.error(f"Error while handling update {update}: {context.error}", exc_info=context.error)
