"""
Logging setup: loguru for application logs, structlog for audit events.

Standard-library loggers (uvicorn, SQLAlchemy, the API access log) are
routed into loguru. structlog events carry the request context bound by
the API middleware (request id, user id) and never the raw cookie header.
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog
from loguru import logger
from structlog.typing import EventDict, WrappedLogger

from stockcal.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "multipart")


class RedactSensitive:
    """structlog processor masking credentials and cookie headers."""

    SENSITIVE_KEYS = ("cookie", "authorization", "password", "secret", "token")

    def __call__(self, logger: WrappedLogger, name: str, event_dict: EventDict) -> EventDict:
        for key in list(event_dict):
            if any(marker in key.lower() for marker in self.SENSITIVE_KEYS):
                event_dict[key] = "[REDACTED]"
        return event_dict


def stamp_event(logger: WrappedLogger, name: str, event_dict: EventDict) -> EventDict:
    event_dict["level"] = name.upper()
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _add_loguru_sinks(level: str, as_json: bool) -> None:
    fmt = "{message}" if as_json else CONSOLE_FORMAT
    logger.add(sys.stderr, format=fmt, level=level, serialize=as_json, diagnose=settings.is_development)

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            format=fmt,
            level=level,
            serialize=as_json,
            rotation="50 MB",
            retention="14 days",
            diagnose=False,
        )


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Install loguru sinks, structlog processors and the stdlib bridge.

    Args:
        level: Overrides settings.log_level
        log_format: "json" or "text", overrides settings.log_format
    """
    level = (level or settings.log_level).upper()
    as_json = (log_format or settings.log_format) == "json"

    logger.remove()
    _add_loguru_sinks(level, as_json)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            stamp_event,
            RedactSensitive(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"Logging configured (level={level}, json={as_json}, env={settings.app_env})")


def bind_request_context(**values: Any) -> None:
    """Attach values (request_id, user_id) to every structlog event of this request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> Any:
    """structlog logger for audit-style events."""
    return structlog.get_logger(name)
