from __future__ import annotations

import logging
import sys
from typing import Any

import orjson
import structlog


def _json_serializer(obj: Any, default: Any) -> str:
    # callback responses and error payloads can be arbitrary objects;
    # structlog's ``default`` stringifies whatever orjson rejects
    return orjson.dumps(obj, default=default).decode("utf-8")


def _resolve_level(level: str) -> int:
    """Map a level name such as ``"debug"`` to its numeric value, INFO if unknown."""
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _processors() -> list[Any]:
    return [
        # engine_id and friends bound through bind_context
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        # engine.error_listener_failed / engine.tick_crashed carry tracebacks
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(serializer=_json_serializer),
    ]


def configure_logging(*, level: str = "INFO") -> None:
    """
    Route every tickdebounce log line to stdout as one JSON object.

    Engine events below ``level`` (tick-by-tick ``engine.tick`` records are
    DEBUG) are filtered before rendering. Applications that embed a
    Debouncer and already configure structlog should not call this.
    """
    log_level = _resolve_level(level)

    structlog.configure(
        processors=_processors(),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    # asyncio reports unretrieved tick-task errors through stdlib logging
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def bind_context(**values: Any) -> None:
    """
    Attach key/values to every following log line of the current context.

    Example:
        bind_context(engine_id="a1b2c3d4")
    """
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
