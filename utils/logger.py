"""
Structured JSON logging for DeepThought Relay.

Records go to rotating files under LOG_DIR (app.log for INFO+, error.log for
ERROR+, debug.log when LOG_LEVEL=DEBUG) and, if LOG_TO_CONSOLE=true, errors
also go to stderr. Structured fields are passed as
extra={"extra_fields": {...}}; the current HTTP request id is attached to
every record emitted while that request is being served.
"""

import json
import logging
import logging.handlers
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, ready for ELK/Loki/Datadog ingestion."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            log_data["request_id"] = request_id
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)
        return json.dumps(log_data, default=str)


class LoggerConfig:
    LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_TO_CONSOLE = os.getenv("LOG_TO_CONSOLE", "false").lower() == "true"
    MAX_BYTES = 10 * 1024 * 1024  # 10MB per file
    BACKUP_COUNT = 5

    _initialized = False

    @classmethod
    def _file_handler(cls, filename: str, level: int) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            cls.LOG_DIR / filename,
            maxBytes=cls.MAX_BYTES,
            backupCount=cls.BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(JsonFormatter())
        return handler

    @classmethod
    def setup_logging(cls) -> None:
        """Configure the root logger once per process."""
        if cls._initialized:
            return

        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

        handlers = [
            cls._file_handler("app.log", logging.INFO),
            cls._file_handler("error.log", logging.ERROR),
        ]
        if cls.LOG_LEVEL == "DEBUG":
            handlers.append(cls._file_handler("debug.log", logging.DEBUG))
        if cls.LOG_TO_CONSOLE:
            console = logging.StreamHandler(sys.stderr)
            console.setLevel(logging.ERROR)
            console.setFormatter(
                logging.Formatter(
                    fmt="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            handlers.append(console)

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, cls.LOG_LEVEL, logging.INFO))
        root_logger.handlers.clear()
        context_filter = RequestContextFilter()
        for handler in handlers:
            handler.addFilter(context_filter)
            root_logger.addHandler(handler)

        cls._initialized = True
        logging.getLogger(__name__).info(
            "Logging system initialized",
            extra={
                "extra_fields": {
                    "log_level": cls.LOG_LEVEL,
                    "log_dir": str(cls.LOG_DIR),
                    "console_logging": cls.LOG_TO_CONSOLE,
                }
            },
        )


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Reasoning stage finished", extra={"extra_fields": {"tokens": 12}})
    """
    LoggerConfig.setup_logging()
    return logging.getLogger(name)


def preview(text: str | None, limit: int = 80) -> str:
    """Shorten user text before it goes into a log record."""
    if not text:
        return ""
    return text if len(text) <= limit else text[:limit] + "..."
