"""structlog setup shared by the app loggers and uvicorn's stdlib loggers."""

from __future__ import annotations

import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

import structlog

from vidget.infrastructure.config.schema import AppConfig

log = structlog.get_logger(__name__)

# Third-party loggers that are noisy at INFO.
_QUIET_LOGGERS: dict[str, str] = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
}


def _strip_uvicorn_color(_: Any, __: Any, event_dict: dict[str, Any]) -> dict[str, Any]:
    # duplicate of "event" with ANSI codes
    event_dict.pop("color_message", None)
    return event_dict


def _stamp_foreign_record_time(
    _: Any, __: Any, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Use ``LogRecord.created`` as the timestamp of stdlib-originated events."""
    record = event_dict.get("_record")
    if not isinstance(record, logging.LogRecord):
        return event_dict
    created = datetime.fromtimestamp(record.created, tz=timezone.utc)
    event_dict["timestamp"] = created.isoformat().replace("+00:00", "Z")
    return event_dict


def _shared_processors() -> list[structlog.typing.Processor]:
    return [
        _strip_uvicorn_color,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]


def _renderer(config: AppConfig) -> structlog.typing.Processor:
    if config.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _stream_handler(stream: str) -> dict[str, str]:
    return {
        "class": "logging.StreamHandler",
        "formatter": "structlog",
        "stream": f"ext://sys.{stream}",
    }


def _loggers(level: str) -> dict[str, dict[str, Any]]:
    loggers: dict[str, dict[str, Any]] = {
        "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
        "uvicorn.error": {"level": level},
        "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
    }
    for name, quiet_level in _QUIET_LOGGERS.items():
        loggers[name] = {"level": quiet_level}
    return loggers


def build_logging_config(config: AppConfig) -> dict[str, Any]:
    """dictConfig for ``logging.config`` and ``uvicorn.run(log_config=...)``.

    Every stdlib record, uvicorn's included, goes through a structlog
    ProcessorFormatter, so app and server lines share one format.
    """
    foreign_pre_chain = _shared_processors()
    foreign_pre_chain.insert(2, _stamp_foreign_record_time)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "foreign_pre_chain": foreign_pre_chain,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    _renderer(config),
                ],
            },
        },
        "handlers": {
            "default": _stream_handler("stderr"),
            "access": _stream_handler("stdout"),
        },
        "loggers": _loggers(config.log_level),
        "root": {"handlers": ["default"], "level": config.log_level},
    }


def configure_logging(config: AppConfig) -> dict[str, Any]:
    """Install structlog and the stdlib dictConfig; return the dictConfig."""
    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    dict_config = build_logging_config(config)
    logging.config.dictConfig(dict_config)
    log.info("logging_configured", format=config.log_format, level=config.log_level)
    return dict_config
