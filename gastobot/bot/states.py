from enum import Enum


class DraftState(str, Enum):
    """Шаги диалога ввода расхода."""

    AWAITING_DESCRIPTION = "awaiting_description"
    AWAITING_CATEGORY = "awaiting_category"
    AWAITING_VALUE = "awaiting_value"
    COMPLETED = "completed"
