"""Constants, collaborator defaults and logging configuration.

The engine itself is stateless; everything here is either a constant or a
function that reads the environment at call time.

Logging goes through :mod:`structlog`.  :func:`configure_logging` renders
records as JSON (serialized with orjson) or as colored console output:

- ``timestamp``: ISO 8601 in UTC.
- ``level``: the stdlib level name.
- ``logger``: the module that emitted the record.
- ``message``: the log message as a string.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import orjson
import structlog
from structlog.contextvars import merge_contextvars

FUNCTION = "<anonymous>"
UNKNOWN = "<unknown>"

MAX_FRAMES = 20
MAX_LINE_LENGTH = 1024
MAX_STRING_LENGTH = 25
CAPTURE_ENTRY_POINTS: tuple[str, ...] = ("captureMessage", "captureException")

LOCATION_ENV = "STACKCANON_LOCATION"


def default_location() -> str:
    """Return the current page location, or ``""`` when none is known."""
    return os.environ.get(LOCATION_ENV, "")


def _orjson_serializer(obj: object, **_kw: object) -> str:
    """Serialize *obj* to a JSON string using orjson."""
    return orjson.dumps(obj, default=str).decode()


def _to_logging_level(level_name: str) -> int:
    """Convert a human-readable level name to its :mod:`logging` constant."""
    upper_level = level_name.upper()
    if upper_level == "WARN":
        return logging.WARNING
    result: int = getattr(logging, upper_level, logging.INFO)
    return result


def _stream_isatty(stream: Any) -> bool:
    """Check if *stream* is connected to a terminal."""
    try:
        result: bool = stream.isatty()
        return result
    except (AttributeError, ValueError):
        return False


def _build_shared_processors(
    *,
    throwable_events: bool = False,
) -> list[structlog.types.Processor]:
    """Build the processor chain shared by structlog and stdlib records."""
    processors: list[structlog.types.Processor] = [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if throwable_events:
        from stackcanon.processor import ThrowableEventProcessor

        processors.append(ThrowableEventProcessor())
    processors.append(structlog.processors.EventRenamer("message"))
    return processors


def configure_logging(
    *,
    level: str = "INFO",
    json_logs: bool = True,
    stream: Any = None,
    clear_handlers: bool = True,
    throwable_events: bool = False,
) -> None:
    """Configure structlog on top of stdlib logging.

    Parameters
    ----------
    level:
        Minimum log level (e.g. ``"DEBUG"``, ``"INFO"``).
    json_logs:
        ``True`` for JSON output, ``False`` for console output.
    stream:
        Output stream.  Defaults to ``sys.stderr``.
    clear_handlers:
        If ``True`` (default), remove existing root logger handlers first.
    throwable_events:
        If ``True``, records logged with a ``throwable=`` value carry the
        exception event built from it under ``exception_event``.
    """
    if not isinstance(level, str) or not level:
        msg = f"level must be a non-empty string, got {level!r}"
        raise ValueError(msg)
    if stream is None:
        stream = sys.stderr

    shared_processors = _build_shared_processors(throwable_events=throwable_events)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(_to_logging_level(level)),
        cache_logger_on_first_use=True,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(serializer=_orjson_serializer)
        if json_logs
        else structlog.dev.ConsoleRenderer(
            colors=_stream_isatty(stream),
            event_key="message",
        )
    )
    formatter_processors: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if json_logs:
        formatter_processors.append(structlog.processors.format_exc_info)
    formatter_processors.append(renderer)

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=formatter_processors,
        foreign_pre_chain=shared_processors,
    )

    root = logging.getLogger()
    if clear_handlers:
        root.handlers.clear()
    root.setLevel(_to_logging_level(level))

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def setup_logging() -> None:
    """Configure logging from the environment.

    Reads ``LOG_LEVEL`` (default ``"INFO"``) and ``JSON_LOGS`` (``"0"`` for
    console output, default ``"1"`` for JSON) and ``THROWABLE_EVENTS``
    (``"0"`` disables exception events, enabled by default).
    """
    level = os.environ.get("LOG_LEVEL", "INFO")
    json_logs = os.environ.get("JSON_LOGS", "1") != "0"
    throwable_events = os.environ.get("THROWABLE_EVENTS", "1") != "0"
    configure_logging(level=level, json_logs=json_logs, throwable_events=throwable_events)
