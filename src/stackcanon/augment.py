"""In-place helpers for event drafts.

Each helper creates the nested path it writes to when that path is absent,
then writes, and returns the same draft.  Calling them repeatedly, in any
order, never clobbers what an earlier call stored except where stated:

- :func:`add_exception_type_value`: the first ``type``/``value`` stays.
- :func:`add_exception_mechanism`: later keys replace earlier ones.
- :func:`enhance_event_with_initial_frame`: only fills an empty frame list.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from typing import Any

from stackcanon.config import FUNCTION, default_location


def add_exception_base(event: dict[str, Any]) -> dict[str, Any]:
    """Ensure ``event["exception"]["values"][0]`` exists."""
    exception = event.get("exception")
    if not isinstance(exception, dict):
        exception = event["exception"] = {}
    values = exception.get("values")
    if not isinstance(values, list):
        values = exception["values"] = []
    if not values:
        values.append({})
    elif not isinstance(values[0], dict):
        values[0] = {}
    return event


def _first_exception(event: dict[str, Any]) -> dict[str, Any]:
    value: dict[str, Any] = add_exception_base(event)["exception"]["values"][0]
    return value


def add_exception_type_value(
    event: dict[str, Any],
    value: str | None = None,
    type_: str | None = None,
) -> dict[str, Any]:
    """Set ``value`` and ``type`` of the first exception unless already set."""
    exception = _first_exception(event)
    exception["value"] = exception.get("value") or value or ""
    exception["type"] = exception.get("type") or type_ or "Error"
    return event


def add_exception_mechanism(event: dict[str, Any], mechanism: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *mechanism* into the first exception's ``mechanism``."""
    exception = _first_exception(event)
    current = exception.get("mechanism")
    if not isinstance(current, dict):
        current = exception["mechanism"] = {}
    current.update(mechanism)
    return event


def _to_int(value: Any) -> int:
    """Coerce *value* to an int, ``0`` when it is missing or not numeric."""
    if value is None:
        return 0
    if isinstance(value, int):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


def enhance_event_with_initial_frame(
    event: dict[str, Any],
    url: Any = None,
    line: Any = None,
    column: Any = None,
    location: Callable[[], str] | None = None,
) -> dict[str, Any]:
    """Give the first exception a single frame when it has none yet.

    Used for handlers that only know where the error happened (URL, line and
    column) but have no stack to parse.  *location* supplies the filename
    when *url* is empty; it defaults to :func:`stackcanon.config.default_location`.
    """
    exception = _first_exception(event)
    stacktrace = exception.get("stacktrace")
    if not isinstance(stacktrace, dict):
        stacktrace = exception["stacktrace"] = {}
    frames = stacktrace.get("frames")
    if not isinstance(frames, list):
        frames = stacktrace["frames"] = []

    if not frames:
        if isinstance(url, str) and url:
            filename = url
        else:
            filename = (location or default_location)()
        frames.append(
            {
                "colno": _to_int(column),
                "filename": filename,
                "function": FUNCTION,
                "in_app": True,
                "lineno": _to_int(line),
            }
        )
    return event
