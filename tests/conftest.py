import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from gastobot.bot.controller import ConversationController
from gastobot.models.expense import ExpenseRecord
from gastobot.services.draft_store import DraftStore
from gastobot.services.expense_api import SubmissionAck


class FakeSender:
    def __init__(self):
        self.sent = []

    async def send(self, user_id, text, markdown=False):
        self.sent.append((user_id, text, markdown))

    def texts(self, user_id=None):
        return [text for uid, text, _ in self.sent if user_id is None or uid == user_id]


@pytest.fixture
def store():
    return DraftStore()


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def api():
    client = AsyncMock()
    client.submit.return_value = SubmissionAck(status=201)
    return client


@pytest.fixture
def controller(store, api, sender):
    return ConversationController(store, api, sender)


@pytest.fixture
def sample_record():
    return ExpenseRecord(
        description="Almoço no restaurante",
        category="Alimentação",
        value=50.75,
        date=datetime(2025, 1, 15, 12, 30, tzinfo=timezone.utc),
        initiator_name="Maria Silva",
    )
