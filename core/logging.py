"""Centralised logging configuration for the embedding batch backend."""
from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Dict

from core.utils.env import get_env

_PATH_TRIM_PREFIXES = ("/app/",)
_ORIGINAL_LOG_RECORD_FACTORY = logging.getLogRecordFactory()
_LOG_RECORD_FACTORY_CONFIGURED = False

_LOGGING_CONFIGURED = False

_NOISY_LOGGERS = (
    # HTTP clients
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
    "httpx",
    # Database
    "asyncpg",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    # Openai
    "openai",
    "openai._base_client",
    # Server
    "h11",
    "multipart",
    "python_multipart",
)


class _HealthCheckFilter(logging.Filter):
    """Drop access log lines for the health probe."""

    def filter(self, record: logging.LogRecord) -> bool:
        return "GET /health" not in record.getMessage()


def _resolve_level(value: str | None, default: str) -> str:
    value = (value or "").strip().upper()
    if value and getattr(logging, value, None) is not None:
        return value
    return default


def _install_log_record_factory() -> None:
    """Install a log record factory that exposes trimmed paths."""

    global _LOG_RECORD_FACTORY_CONFIGURED
    if _LOG_RECORD_FACTORY_CONFIGURED:
        return

    def factory(*args, **kwargs):
        record = _ORIGINAL_LOG_RECORD_FACTORY(*args, **kwargs)
        pathname = getattr(record, "pathname", "") or ""
        for prefix in _PATH_TRIM_PREFIXES:
            if pathname.startswith(prefix):
                record.shortpathname = pathname[len(prefix):]
                break
        else:
            record.shortpathname = pathname
        return record

    logging.setLogRecordFactory(factory)
    _LOG_RECORD_FACTORY_CONFIGURED = True


def setup_logging(force: bool = False) -> None:
    """Configure root/application loggers for both console and file output."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED and not force:
        return

    node_env = get_env("NODE_ENV")
    inside_docker = bool(node_env)

    log_level = _resolve_level(get_env("BACKEND_LOG_LEVEL", default="INFO"), "INFO")
    console_level = _resolve_level(
        get_env("BACKEND_LOG_CONSOLE_LEVEL", default=log_level), log_level
    )
    file_level = _resolve_level(get_env("BACKEND_LOG_FILE_LEVEL", default=log_level), log_level)

    handlers: Dict[str, object] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": console_level,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
    }
    root_handlers = ["console"]
    uvicorn_handlers = ["console"]

    if inside_docker:
        log_dir = Path(get_env("BACKEND_LOG_DIR", default="/storage/logs") or "/storage/logs")
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / (get_env("BACKEND_LOG_FILE", default="backend.log") or "backend.log")
        handlers["file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "level": file_level,
            "formatter": "standard",
            "filename": str(log_file),
            "when": "midnight",
            "backupCount": int(get_env("BACKEND_LOG_RETENTION", default="7") or "7"),
            "encoding": "utf-8",
        }
        root_handlers.append("file")
        uvicorn_handlers = ["console", "file"]

    use_milliseconds = (
        (get_env("BACKEND_LOG_TIME_MS", default="false") or "false").lower()
        in {"1", "true", "yes", "on"}
    )
    location_fmt = "%(shortpathname)s:%(lineno)d"
    if use_milliseconds:
        fmt = "%(asctime)s.%(msecs)03d %(levelname)s [{location}] - %(message)s".format(location=location_fmt)
    else:
        fmt = "%(asctime)s %(levelname)s [{location}] - %(message)s".format(location=location_fmt)
    datefmt = "%Y-%m-%d %H:%M:%S"

    access_level = _resolve_level(get_env("BACKEND_ACCESS_LOG_LEVEL"), "WARNING")

    config: Dict[str, object] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt,
                "datefmt": datefmt,
            },
        },
        "handlers": handlers,
        "root": {
            "level": log_level,
            "handlers": root_handlers,
        },
        "loggers": {
            "uvicorn": {
                "level": "WARNING",
                "handlers": uvicorn_handlers,
                "propagate": False,
            },
            "uvicorn.error": {
                "level": "WARNING",
                "handlers": uvicorn_handlers,
                "propagate": False,
            },
            "uvicorn.access": {
                "level": access_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    _install_log_record_factory()

    logging.config.dictConfig(config)
    logging.captureWarnings(True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("uvicorn.access").addFilter(_HealthCheckFilter())

    _LOGGING_CONFIGURED = True


__all__ = ["setup_logging"]
