"""structlog setup for codec and Hermes pipeline runs."""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping
from typing import Any

import structlog

from ..models.shared import is_feed_id, short_feed_id
from .config import AppSettings

# Loggers of libraries that are chatty at DEBUG while Hermes is polled.
QUIET_LOGGERS = ("urllib3", "requests")


def abbreviate_feed_ids(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Shorten ``feed_id``/``feed_ids`` values so console lines stay readable.

    Only well-formed ids are shortened; anything else is rendered as given.
    """

    feed_id = event_dict.get("feed_id")
    if is_feed_id(feed_id):
        event_dict["feed_id"] = short_feed_id(feed_id)
    feed_ids = event_dict.get("feed_ids")
    if isinstance(feed_ids, (list, tuple)):
        event_dict["feed_ids"] = [short_feed_id(item) if is_feed_id(item) else item for item in feed_ids]
    return event_dict


def resolve_level(log_level: str | None = None) -> int:
    """Map a level name to a :mod:`logging` level, defaulting to ``AppSettings.log_level``."""

    name = log_level if log_level is not None else AppSettings().log_level
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_level: str | None = None) -> None:
    """Route structlog and stdlib records through one root handler.

    ``LOG_FORMAT=json`` keeps full feed ids for machine consumption; the
    default console format abbreviates them. Without an explicit level the
    ``LOG_LEVEL`` setting (environment or ``.env``) applies.
    """
    log_format = os.environ.get("LOG_FORMAT", "console").lower()
    level = resolve_level(log_level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    render_processors: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if log_format == "json":
        render_processors.append(structlog.processors.JSONRenderer())
    else:
        render_processors += [abbreviate_feed_ids, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processors=render_processors))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
