import logging

from telegram import Update
from telegram.ext import ContextTypes

from gastobot.bot.controller import ConversationController
from gastobot.utils.metrics_decorator import track_request

logger = logging.getLogger(__name__)

CONTROLLER_KEY = "controller"


def get_controller(context: ContextTypes.DEFAULT_TYPE) -> ConversationController:
    return context.bot_data[CONTROLLER_KEY]


@track_request("command")
async def begin_expense_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик команды /gasto."""
    chat = update.effective_chat
    user = update.effective_user
    initiator_name = user.full_name if user else None

    await get_controller(context).begin(chat.id, initiator_name)


@track_request("text")
async def text_message_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.message
    if message is None or message.text is None:
        return

    await get_controller(context).handle_text(update.effective_chat.id, message.text)
