import functools
import logging
import time
from typing import Any, Callable

from telegram import Update
from telegram.ext import ContextTypes

from gastobot.services.metrics import SubmissionOutcome, get_metrics

logger = logging.getLogger(__name__)


def track_request(kind: str):
    """Считает обработанные апдейты и ошибки обработчика."""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args: Any, **kwargs: Any) -> Any:
            success = False
            try:
                result = await func(update, context, *args, **kwargs)
                success = True
                return result
            except Exception as e:
                logger.error(f"Error in {func.__name__}: {e}", exc_info=True)
                raise
            finally:
                get_metrics().record_message(kind, success)

        return wrapper
    return decorator


def track_submission(func: Callable) -> Callable:
    """Записывает исход отправки расхода.

    Исход и краткое описание ошибки берутся из атрибутов исключения
    (outcome, summary); тело ответа API в метрики не попадает.
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            outcome = getattr(e, "outcome", SubmissionOutcome.FAILED)
            summary = getattr(e, "summary", type(e).__name__)
            get_metrics().record_submission(outcome, time.time() - start_time, summary)
            raise

        get_metrics().record_submission(SubmissionOutcome.OK, time.time() - start_time)
        return result

    return wrapper
