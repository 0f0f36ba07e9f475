"""Logging setup for thingtree with sensitive data masking."""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"
LOGGER_NAME = "thingtree"


class SensitiveDataFilter(logging.Filter):
    """Mask request URLs and usernames in log messages."""

    URL_PATTERN = re.compile(r'https?://[^\s]+')
    USER_PATTERN = re.compile(r'(?<![\w/])/?u/[\w-]+')

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            msg = self.URL_PATTERN.sub('[URL_MASKED]', record.msg)
            record.msg = self.USER_PATTERN.sub('[USER_MASKED]', msg)
        return True


def setup_logger(
    log_level: str = "INFO",
    mask_logs: bool = True,
    log_dir: Optional[Path] = LOG_DIR,
) -> logging.Logger:
    """Set up the application logger. Call once at startup.

    Adds a console handler, plus a rotating file handler under ``log_dir``
    unless it is None. If already set up (has handlers), returns the
    existing logger.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    logger.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    )

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler()
    handlers.append(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_dir / "thingtree.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        ))

    sensitive_filter = SensitiveDataFilter()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        if mask_logs:
            handler.addFilter(sensitive_filter)
        logger.addHandler(handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)
