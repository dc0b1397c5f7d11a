import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

POLLING_MODE = "polling"
WEBHOOK_MODE = "webhook"

DEFAULT_API_URL = "http://localhost:3000/expenses"
DEFAULT_WEBHOOK_PORT = 8443
WEBHOOK_PATH = "telegram"

BEGIN_EXPENSE_COMMAND = "gasto"


class ConfigError(Exception):
    """Обязательная настройка отсутствует или некорректна."""


@dataclass(frozen=True)
class Settings:
    bot_token: Optional[str]
    mode: str = POLLING_MODE
    api_url: Optional[str] = None
    webhook_url: Optional[str] = None
    port: int = DEFAULT_WEBHOOK_PORT
    api_timeout: Optional[float] = None
    draft_ttl_minutes: int = 60
    draft_sweep_interval_minutes: int = 10
    log_level: str = "INFO"
    log_dir: str = "logs"

    @property
    def is_webhook(self) -> bool:
        return self.mode == WEBHOOK_MODE

    @property
    def expense_api_url(self) -> str:
        if self.api_url:
            return self.api_url
        return DEFAULT_API_URL


def _optional_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    return float(raw)


def load_settings(environ=None) -> Settings:
    """Читает настройки из окружения (и .env)."""
    env = os.environ if environ is None else environ

    try:
        return Settings(
            bot_token=env.get("TELEGRAM_BOT_TOKEN") or None,
            mode=env.get("BOT_MODE", POLLING_MODE).strip().lower() or POLLING_MODE,
            api_url=env.get("API_URL") or None,
            webhook_url=env.get("WEBHOOK_URL") or None,
            port=int(env.get("PORT") or DEFAULT_WEBHOOK_PORT),
            api_timeout=_optional_float(env.get("EXPENSE_API_TIMEOUT")),
            draft_ttl_minutes=int(env.get("DRAFT_TTL_MINUTES") or 60),
            draft_sweep_interval_minutes=int(env.get("DRAFT_SWEEP_INTERVAL_MINUTES") or 10),
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_dir=env.get("LOG_DIR", "logs"),
        )
    except ValueError as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e


def validate_settings(settings: Settings) -> None:
    """Проверяет обязательные настройки, бросает ConfigError со списком проблем."""
    problems = []

    if not settings.bot_token:
        problems.append("TELEGRAM_BOT_TOKEN is not set")

    if settings.mode not in (POLLING_MODE, WEBHOOK_MODE):
        problems.append(f"BOT_MODE must be '{POLLING_MODE}' or '{WEBHOOK_MODE}', got '{settings.mode}'")

    if settings.is_webhook:
        if not settings.api_url:
            problems.append("API_URL is required in webhook mode")
        if not settings.webhook_url:
            problems.append("WEBHOOK_URL is required in webhook mode")

    if settings.draft_sweep_interval_minutes <= 0:
        problems.append("DRAFT_SWEEP_INTERVAL_MINUTES must be positive")

    if problems:
        raise ConfigError("; ".join(problems))
