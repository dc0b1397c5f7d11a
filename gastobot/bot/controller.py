import logging
import math
from typing import Awaitable, Callable, Dict, Hashable, Optional

from gastobot.bot.message_manager import MessageSender
from gastobot.bot.states import DraftState
from gastobot.models.expense import ExpenseDraft
from gastobot.services.draft_store import DraftStore
from gastobot.services.expense_api import (
    ApiConnectionError,
    ApiResponseError,
    ExpenseApiClient,
)
from gastobot.utils.formatters import format_expense_summary, md

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "/"

DESCRIPTION_PROMPT = "Certo! Qual a *descrição* do gasto? (Ex: Almoço no restaurante)"
INVALID_VALUE_MESSAGE = (
    "Valor inválido. Por favor, digite um número positivo para o valor do gasto. (Ex: 50.75)"
)
SUCCESS_MESSAGE = "Gasto enviado para a API com sucesso! ✅"
CONNECTION_FAILURE_MESSAGE = (
    "Ocorreu um erro ao tentar conectar com a API. "
    "Por favor, tente novamente mais tarde. ❌"
)


def parse_value(text: str) -> Optional[float]:
    """Разбирает сумму расхода: запятая или точка как разделитель.

    Возвращает None, если это не конечное положительное число.
    """
    if "_" in text:
        return None

    try:
        value = float(text.replace(",", ".", 1))
    except ValueError:
        return None

    if not math.isfinite(value) or value <= 0:
        return None
    return value


def is_command(text: str) -> bool:
    return text.startswith(COMMAND_PREFIX)


class ConversationController:
    """Пошаговый сбор расхода: описание, категория, сумма, отправка в API."""

    def __init__(self, store: DraftStore, api: ExpenseApiClient, sender: MessageSender):
        self.store = store
        self.api = api
        self.sender = sender

        self._handlers: Dict[DraftState, Callable[[Hashable, ExpenseDraft, str], Awaitable[None]]] = {
            DraftState.AWAITING_DESCRIPTION: self._on_description,
            DraftState.AWAITING_CATEGORY: self._on_category,
            DraftState.AWAITING_VALUE: self._on_value,
            DraftState.COMPLETED: self._on_completed,
        }

    async def begin(self, user_id: Hashable, initiator_name: Optional[str] = None) -> None:
        self.store.begin(user_id, initiator_name)
        logger.info(f"User {user_id} started a new expense")
        await self.sender.send(user_id, DESCRIPTION_PROMPT, markdown=True)

    async def handle_text(self, user_id: Hashable, text: str) -> None:
        if not text or is_command(text):
            return

        draft = self.store.get(user_id)
        if draft is None:
            return

        await self._handlers[draft.state](user_id, draft, text)

    async def _on_description(self, user_id: Hashable, draft: ExpenseDraft, text: str) -> None:
        def set_description(d: ExpenseDraft) -> None:
            d.description = text
            d.state = DraftState.AWAITING_CATEGORY

        self.store.advance(user_id, set_description)
        await self.sender.send(
            user_id,
            f'Ok, a descrição é "{md(text)}". Agora, qual a *categoria*? '
            "(Ex: Alimentação, Transporte, Lazer)",
            markdown=True,
        )

    async def _on_category(self, user_id: Hashable, draft: ExpenseDraft, text: str) -> None:
        def set_category(d: ExpenseDraft) -> None:
            d.category = text
            d.state = DraftState.AWAITING_VALUE

        self.store.advance(user_id, set_category)
        await self.sender.send(
            user_id,
            f'Entendido, a categoria é "{md(text)}". Por último, qual o *valor* do gasto? '
            "(Ex: 50.75 ou 50,75)",
            markdown=True,
        )

    async def _on_value(self, user_id: Hashable, draft: ExpenseDraft, text: str) -> None:
        value = parse_value(text)
        if value is None:
            await self.sender.send(user_id, INVALID_VALUE_MESSAGE)
            return

        def set_value(d: ExpenseDraft) -> None:
            d.value = value
            d.state = DraftState.COMPLETED

        self.store.advance(user_id, set_value)
        record = draft.to_record()

        await self.sender.send(user_id, format_expense_summary(record), markdown=True)

        try:
            await self.api.submit(record)
            await self.sender.send(user_id, SUCCESS_MESSAGE)
        except ApiResponseError as e:
            logger.error(f"Expense API rejected expense from user {user_id}: {e.status} {e.body}")
            await self.sender.send(
                user_id, f"Erro ao enviar gasto para a API: {e.status} - {e.body} 🔴"
            )
        except ApiConnectionError as e:
            logger.error(f"Expense API unreachable for user {user_id}: {e.cause!r}")
            await self.sender.send(user_id, CONNECTION_FAILURE_MESSAGE)
        finally:
            # /gasto during the submission replaces the draft; keep the new one
            if self.store.get(user_id) is draft:
                self.store.remove(user_id)

    async def _on_completed(self, user_id: Hashable, draft: ExpenseDraft, text: str) -> None:
        logger.debug(f"Ignoring message from user {user_id} while expense is being submitted")
