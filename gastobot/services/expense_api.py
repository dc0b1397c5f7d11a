import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp
from aiohttp.resolver import ThreadedResolver

from gastobot.models.expense import ExpenseRecord
from gastobot.services.metrics import SubmissionOutcome
from gastobot.utils.metrics_decorator import track_submission

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Расход не удалось сохранить во внешнем API."""

    outcome = SubmissionOutcome.FAILED

    @property
    def summary(self) -> str:
        return type(self).__name__


class ApiResponseError(SubmissionError):
    outcome = SubmissionOutcome.REJECTED

    def __init__(self, status: int, body: str):
        super().__init__(f"Expense API error: {status} - {body}")
        self.status = status
        self.body = body

    @property
    def summary(self) -> str:
        return f"HTTP {self.status}"


class ApiConnectionError(SubmissionError):
    outcome = SubmissionOutcome.UNREACHABLE

    def __init__(self, cause: Exception):
        super().__init__(f"Expense API request failed: {cause!r}")
        self.cause = cause

    @property
    def summary(self) -> str:
        return type(self.cause).__name__


@dataclass(frozen=True)
class SubmissionAck:
    status: int


class ExpenseApiClient:
    """Отправляет расходы во внешний API. Без повторных попыток."""

    def __init__(self, url: str, timeout: Optional[float] = None):
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @track_submission
    async def submit(self, record: ExpenseRecord) -> SubmissionAck:
        payload = record.to_payload()

        try:
            resolver = ThreadedResolver()
            connector = aiohttp.TCPConnector(resolver=resolver, force_close=True)
            async with aiohttp.ClientSession(timeout=self.timeout, connector=connector) as session:
                async with session.post(self.url, json=payload) as response:
                    if not 200 <= response.status < 300:
                        error_text = await response.text()
                        raise ApiResponseError(response.status, error_text)

                    logger.info(f"Expense submitted to {self.url}: {response.status}")
                    return SubmissionAck(status=response.status)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ApiConnectionError(e) from e
