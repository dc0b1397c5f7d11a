import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Hashable, Optional

from gastobot.models.expense import ExpenseDraft, utcnow

logger = logging.getLogger(__name__)


class DraftStore:
    """Черновики расходов в памяти, не более одного на пользователя.

    Живёт столько же, сколько процесс. При перезапуске незавершённые
    диалоги теряются.
    """

    def __init__(self):
        self._drafts: Dict[Hashable, ExpenseDraft] = {}

    def begin(self, user_id: Hashable, initiator_name: Optional[str] = None) -> ExpenseDraft:
        """Создаёт новый черновик, заменяя существующий."""
        if user_id in self._drafts:
            logger.info(f"Replacing in-progress draft for user {user_id}")
        draft = ExpenseDraft(initiator_name=initiator_name)
        self._drafts[user_id] = draft
        return draft

    def get(self, user_id: Hashable) -> Optional[ExpenseDraft]:
        return self._drafts.get(user_id)

    def advance(self, user_id: Hashable, transform: Callable[[ExpenseDraft], None]) -> ExpenseDraft:
        """Применяет изменение к существующему черновику.

        Для отсутствующего пользователя бросает KeyError.
        """
        draft = self._drafts[user_id]
        transform(draft)
        draft.touch()
        return draft

    def remove(self, user_id: Hashable) -> None:
        self._drafts.pop(user_id, None)

    def evict_stale(self, max_age: timedelta, now: Optional[datetime] = None) -> int:
        """Удаляет черновики, не менявшиеся дольше max_age."""
        cutoff = (now or utcnow()) - max_age
        stale = [user_id for user_id, draft in self._drafts.items() if draft.updated_at < cutoff]

        for user_id in stale:
            del self._drafts[user_id]

        if stale:
            logger.info(f"Evicted {len(stale)} stale drafts")
        return len(stale)

    def __contains__(self, user_id: Hashable) -> bool:
        return user_id in self._drafts

    def __len__(self) -> int:
        return len(self._drafts)
