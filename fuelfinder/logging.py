from __future__ import annotations

import logging
import os

import structlog

# Chatty libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def _get_log_level(level: str | None = None) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def _resolve_format(log_format: str | None) -> str:
    if log_format:
        return log_format.lower()
    if "LOG_FORMAT" in os.environ:
        return os.environ["LOG_FORMAT"].lower()
    return "console" if os.getenv("APP_ENV") == "dev" else "json"


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    - JSON lines with ISO/UTC timestamp, level, event and bound fields
    - contextvars merged so request_id bound by the middleware reaches service logs
    - stdlib records (uvicorn, sqlalchemy) pass through the same renderer
    """

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if _resolve_format(log_format) == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=_get_log_level(level),
        handlers=[handler],
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
