import logging
from typing import Hashable, Protocol

from telegram import Bot, Message
from telegram.constants import ParseMode
from telegram.error import BadRequest, TimedOut

from gastobot.services.metrics import get_metrics

logger = logging.getLogger(__name__)


class MessageSender(Protocol):
    async def send(self, user_id: Hashable, text: str, markdown: bool = False) -> None:
        ...


class TelegramSender:
    """Отправка сообщений через Bot API.

    Ошибка отправки не прерывает шаг диалога: TimedOut повторяется один раз,
    остальные ошибки логируются и учитываются в метриках.
    """

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send(self, user_id: Hashable, text: str, markdown: bool = False) -> Message | None:
        parse_mode = ParseMode.MARKDOWN if markdown else None

        try:
            return await self.bot.send_message(chat_id=user_id, text=text, parse_mode=parse_mode)
        except TimedOut:
            logger.warning("Send timeout, retrying once...")
            try:
                return await self.bot.send_message(chat_id=user_id, text=text, parse_mode=parse_mode)
            except Exception as e:
                logger.error(f"Send retry failed: {e}")
        except BadRequest as e:
            logger.warning(f"BadRequest in send: {e}")
        except Exception as e:
            logger.error(f"Unexpected error in send: {e}", exc_info=True)

        get_metrics().record_send_failure()
        return None
