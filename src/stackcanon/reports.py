"""JSON error reports.

Browsers usually ship errors to a collector as JSON, which loses the
distinction between an error and a plain object.  :func:`load_report`
restores it: a payload that carries stack text becomes an
:class:`~stackcanon.types.ErrorLike`, anything else stays as decoded.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import orjson
import structlog

from stackcanon.types import ErrorLike

log = structlog.get_logger(__name__)

_STACK_KEYS = ("stack", "stacktrace")


def _as_error(payload: Mapping[str, Any]) -> ErrorLike:
    message = payload.get("message")
    return ErrorLike(
        message if isinstance(message, str) else "",
        name=str(payload.get("name") or "Error"),
        stack=payload.get("stack") if isinstance(payload.get("stack"), str) else None,
        stacktrace=payload.get("stacktrace") if isinstance(payload.get("stacktrace"), str) else None,
        framesToPop=payload.get("framesToPop"),
        columnNumber=payload.get("columnNumber"),
    )


def load_report(raw: bytes | bytearray | memoryview | str | Mapping[str, Any]) -> Any:
    """Decode an error report into a value the event builder understands.

    Input that is not valid JSON is returned unchanged as text.
    """
    if isinstance(raw, Mapping):
        payload: Any = raw
    else:
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError:
            log.debug("undecodable report", size=len(raw))
            if isinstance(raw, (bytes, bytearray, memoryview)):
                return bytes(raw).decode("utf-8", "replace")
            return raw

    if isinstance(payload, Mapping) and any(isinstance(payload.get(key), str) for key in _STACK_KEYS):
        return _as_error(payload)
    return payload


def dumps_event(event: Mapping[str, Any]) -> str:
    """Serialize an event draft to JSON."""
    return orjson.dumps(event, default=str, option=orjson.OPT_SORT_KEYS).decode()
