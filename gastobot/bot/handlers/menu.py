import logging

from telegram import Update
from telegram.ext import ContextTypes

from gastobot.config import BEGIN_EXPENSE_COMMAND
from gastobot.utils.metrics_decorator import track_request

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Olá! Eu sou seu bot de controle de gastos. "
    f"Para registrar um novo gasto, digite /{BEGIN_EXPENSE_COMMAND}."
)

HELP_TEXT = (
    "Como registrar um gasto:\n\n"
    f"1. Digite /{BEGIN_EXPENSE_COMMAND}\n"
    "2. Informe a descrição (Ex: Almoço no restaurante)\n"
    "3. Informe a categoria (Ex: Alimentação)\n"
    "4. Informe o valor (Ex: 50.75 ou 50,75)\n\n"
    f"Um novo /{BEGIN_EXPENSE_COMMAND} descarta o gasto em andamento."
)


@track_request("command")
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик команды /start."""
    user = update.effective_user
    await update.message.reply_text(WELCOME_TEXT)
    logger.info(f"User {user.id} started the bot")


@track_request("command")
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(HELP_TEXT)
