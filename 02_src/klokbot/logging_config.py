"""JSON logging for klok-bot, one line per record, tagged with the account label."""

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class JSONFormatter(logging.Formatter):
    """Renders a record as one JSON object.

    Records logged through an AccountLoggerAdapter carry an ``account``
    key, so lines for one account can be filtered without parsing the
    message text.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": f"{record.module}:{record.lineno}",
        }
        context = getattr(record, "context", None) or {}
        entry.update(context)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class AccountLoggerAdapter(logging.LoggerAdapter):
    """Prefixes messages with ``[label]`` and attaches ``{"account": label}``."""

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        extra["context"] = {**extra.get("context", {}), **self.extra}
        return f"[{self.extra['account']}] {msg}", kwargs


def build_logging_config(log_level: str, log_file: str) -> dict:
    """dictConfig schema: JSON to stdout and to a rotating file."""
    handler_defaults = {"formatter": "json"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": JSONFormatter}},
        "handlers": {
            "console": {
                **handler_defaults,
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
            },
            "file": {
                **handler_defaults,
                "class": "logging.handlers.RotatingFileHandler",
                "filename": log_file,
                "maxBytes": LOG_FILE_MAX_BYTES,
                "backupCount": LOG_FILE_BACKUPS,
                "encoding": "utf-8",
            },
        },
        "root": {"level": log_level.upper(), "handlers": ["console", "file"]},
        # httpx logs every request at INFO
        "loggers": {"httpx": {"level": "WARNING"}},
    }


def setup_logging(log_level: str | None = None, log_file: str | None = None) -> None:
    """Configure the root logger. Level defaults to $LOG_LEVEL, then INFO."""
    log_level = log_level or os.getenv("LOG_LEVEL", "INFO")
    log_file = log_file or str(DEFAULT_LOG_PATH)
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_level, log_file))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_account_logger(name: str, label: str) -> AccountLoggerAdapter:
    """Logger whose records carry the given account label."""
    return AccountLoggerAdapter(logging.getLogger(name), {"account": label})
