import logging
import time
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import psutil

logger = logging.getLogger(__name__)


class SubmissionOutcome(str, Enum):
    OK = "ok"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"
    FAILED = "failed"


@dataclass
class SubmissionStats:
    outcomes: Counter = field(default_factory=Counter)
    total_duration: float = 0.0
    last_error: Optional[str] = None

    @property
    def total(self) -> int:
        return sum(self.outcomes.values())

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 100.0
        return self.outcomes[SubmissionOutcome.OK] / self.total * 100


@dataclass
class MessageStats:
    handled: int = 0
    errors: int = 0


class MetricsCollector:
    """Счётчики для /status: сообщения, отправки расходов, сбои Telegram."""

    def __init__(self):
        self.start_time = time.time()
        self.messages: Dict[str, MessageStats] = defaultdict(MessageStats)
        self.submissions = SubmissionStats()
        self.send_failures = 0
        self._process = psutil.Process()

    def record_message(self, kind: str, success: bool = True):
        stats = self.messages[kind]
        stats.handled += 1
        if not success:
            stats.errors += 1

    def record_submission(
        self, outcome: SubmissionOutcome, duration: float, error: Optional[str] = None
    ):
        self.submissions.outcomes[outcome] += 1
        self.submissions.total_duration += duration
        if outcome != SubmissionOutcome.OK:
            self.submissions.last_error = error
            logger.debug(f"Submission {outcome.value}: {error}")

    def record_send_failure(self):
        self.send_failures += 1

    def get_uptime(self) -> float:
        return time.time() - self.start_time

    def get_memory_mb(self) -> float:
        return self._process.memory_info().rss / 1024 / 1024

    def get_status(self) -> str:
        """healthy / degraded / unhealthy по доле успешных отправок."""
        rate = self.submissions.success_rate
        if rate >= 95:
            return "healthy"
        if rate >= 50:
            return "degraded"
        return "unhealthy"

    def get_summary(self) -> Dict[str, Any]:
        submissions = self.submissions
        return {
            "status": self.get_status(),
            "uptime_seconds": int(self.get_uptime()),
            "memory_mb": round(self.get_memory_mb(), 2),
            "messages": {
                "total": sum(s.handled for s in self.messages.values()),
                "errors": sum(s.errors for s in self.messages.values()),
            },
            "submissions": {
                "total": submissions.total,
                **{outcome.value: submissions.outcomes[outcome] for outcome in SubmissionOutcome},
                "success_rate": round(submissions.success_rate, 2),
                "last_error": submissions.last_error,
            },
            "send_failures": self.send_failures,
        }


_metrics_collector = MetricsCollector()


def get_metrics() -> MetricsCollector:
    return _metrics_collector
