"""
Logging configuration for the Resume Tailor API.

Console plus a rotating file under LOG_DIR. Resume and job description text
is never logged; use sanitize_log_data before logging request payloads.
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any

from app.core.config import LOG_DIR

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_NAME = "resume_tailor.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Chatty libraries only surface warnings
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "stripe", "openai", "httpx", "alembic")

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = (
    "password", "token", "secret", "api_key", "authorization",
    "database_url", "signature", "resume_text", "job_description",
)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(log_level: str = "INFO", log_dir: str = LOG_DIR):
    """
    Configure the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown values mean INFO)
        log_dir: Directory for the rotating log file, created if missing
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_handler(logging.StreamHandler(sys.stdout), level, CONSOLE_FORMAT))
    root.addHandler(_handler(
        RotatingFileHandler(
            log_path / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
        ),
        level,
        FILE_FORMAT,
    ))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def sanitize_log_data(data: dict) -> dict:
    """Copy of `data` with secrets and document text redacted, nested dicts included."""
    return {key: _sanitize_value(key, value) for key, value in data.items()}


def _sanitize_value(key: str, value: Any) -> Any:
    if any(sensitive in str(key).lower() for sensitive in SENSITIVE_KEYS):
        return REDACTED
    if isinstance(value, dict):
        return sanitize_log_data(value)
    return value
