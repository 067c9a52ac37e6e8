"""Structured logging configuration with structlog."""

import logging

import structlog

from gamelib.config import Settings

# Chatty loggers whose output duplicates request_completed or floods at INFO
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def add_service_context(settings: Settings) -> structlog.types.Processor:
    """Processor stamping every event with the service name, version and environment."""

    def processor(_logger: object, _method: str, event_dict: structlog.types.EventDict) -> structlog.types.EventDict:
        event_dict.setdefault("service", "gamelib")
        event_dict.setdefault("version", settings.app_version)
        event_dict.setdefault("environment", settings.environment)
        return event_dict

    return processor


def setup_logging(settings: Settings) -> None:
    """Configure structlog for JSON or console output.

    Stdlib loggers under ``gamelib`` (stats, collection) share the level.
    """
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service_context(settings),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level)
    logging.getLogger("gamelib").setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(level if settings.debug else max(level, logging.WARNING))
