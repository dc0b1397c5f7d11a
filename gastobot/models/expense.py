from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from gastobot.bot.states import DraftState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_iso_date(value: datetime) -> str:
    """ISO-8601 в UTC с миллисекундами и суффиксом Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ExpenseRecord(BaseModel):
    """Готовый расход, отправляемый во внешний API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    description: str
    category: str
    value: float = Field(gt=0)
    date: datetime = Field(default_factory=utcnow)
    initiator_name: str | None = Field(default=None, alias="initiatorName")

    def to_payload(self) -> dict:
        """Тело JSON-запроса к API расходов."""
        payload = {
            "description": self.description,
            "category": self.category,
            "value": self.value,
            "date": format_iso_date(self.date),
        }
        if self.initiator_name:
            payload["initiatorName"] = self.initiator_name
        return payload


class ExpenseDraft(BaseModel):
    """Черновик расхода, который собирается по шагам диалога."""

    state: DraftState = DraftState.AWAITING_DESCRIPTION
    description: str = ""
    category: str = ""
    value: float = 0.0
    initiator_name: str | None = None
    updated_at: datetime = Field(default_factory=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_record(self, date: datetime | None = None) -> ExpenseRecord:
        return ExpenseRecord(
            description=self.description,
            category=self.category,
            value=self.value,
            date=date or utcnow(),
            initiator_name=self.initiator_name,
        )
