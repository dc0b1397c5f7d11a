import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = self.formatTime(record, self.datefmt)

        formatted = " ".join([
            f"{self.DIM}{timestamp}{self.RESET}",
            f"{color}{self.BOLD}{record.levelname:8s}{self.RESET}",
            f"{self.DIM}[{record.name}:{record.lineno}]{self.RESET}",
            record.getMessage(),
        ])

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def _rotating_handler(path: Path, level: int, backup_count: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path, maxBytes=10 * 1024 * 1024, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(log_dir: str = "logs", log_level: str = "INFO"):
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(level, logging.DEBUG))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if sys.stdout.isatty():
        console_handler.setFormatter(ColoredFormatter(datefmt=DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_path / "bot.log", logging.DEBUG, 5))
    root_logger.addHandler(_rotating_handler(log_path / "errors.log", logging.ERROR, 10))

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("telegram").setLevel(logging.INFO)

    logging.info(f"Logging configured: level={log_level}, dir={log_path}")
