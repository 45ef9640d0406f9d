"""Event builder.

Turns an arbitrary thrown value into an event draft: a plain ``dict`` of the
shape consumed by the transport layer::

    {
        "message": str,                                  # optional
        "exception": {"values": [{
            "type": str,
            "value": str,
            "stacktrace": {"frames": [canonical frame, ...]},  # optional
            "mechanism": {...},                                # optional
        }]},
        "stacktrace": {"frames": [canonical frame, ...]},  # optional
        "tags": {str: str},                                # optional
    }

Entry points:

- :func:`event_from_unknown_input` for values passed to a capture call or an
  unhandled-rejection handler.
- :func:`event_from_incomplete_on_error` for the legacy global error handler
  signature ``(message, url, line, column)``.
- :func:`event_from_rejection_with_primitive` for rejections whose reason is
  a primitive.

None of them raise.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import structlog

from stackcanon.augment import (
    add_exception_mechanism,
    add_exception_type_value,
    enhance_event_with_initial_frame,
)
from stackcanon.computer import compute_stack_trace
from stackcanon.config import UNKNOWN
from stackcanon.frames import prepare_frames_for_event
from stackcanon.types import StackTrace
from stackcanon.utils import (
    get_field,
    has_field,
    is_dom_error,
    is_dom_exception,
    is_error,
    is_error_event,
    is_event,
    is_record,
    is_truthy,
    record_keys,
    safe_str,
    truncate,
)

log = structlog.get_logger(__name__)

UNRECOVERABLE = "Unrecoverable error caught"
REJECTION_TYPE = "UnhandledRejection"

ERROR_RE = re.compile(
    r"(?:uncaught (?:exception: )?)?(?:((?:eval|internal|range|reference|syntax|type|uri|)error): )?(.*)",
    re.IGNORECASE,
)


def _fallback_type(rejection: bool) -> str:
    return REJECTION_TYPE if rejection else "Error"


def exception_from_stacktrace(stacktrace: StackTrace) -> dict[str, Any]:
    frames = prepare_frames_for_event(stacktrace.frames)

    exception: dict[str, Any] = {
        "type": stacktrace.name,
        "value": stacktrace.message or UNRECOVERABLE,
    }
    if frames:
        exception["stacktrace"] = {"frames": frames}
    return exception


def event_from_stacktrace(stacktrace: StackTrace) -> dict[str, Any]:
    return {"exception": {"values": [exception_from_stacktrace(stacktrace)]}}


def _synthetic_stacktrace(synthetic_exception: Any) -> dict[str, Any]:
    stacktrace = compute_stack_trace(synthetic_exception)
    return {"frames": prepare_frames_for_event(stacktrace.frames)}


def event_from_string(message: str, synthetic_exception: Any = None) -> dict[str, Any]:
    event: dict[str, Any] = {"message": message}
    if synthetic_exception is not None:
        event["stacktrace"] = _synthetic_stacktrace(synthetic_exception)
    return event


def _key_order(key: str) -> tuple[bool, int, str]:
    # Index keys first, in numeric order.
    return (not key.isdecimal(), int(key) if key.isdecimal() else 0, key)


def extract_exception_keys_for_message(exception: Any) -> str:
    """Sorted keys of *exception*, joined and cut to the display length."""
    keys = sorted(record_keys(exception), key=_key_order)
    if not keys:
        return UNKNOWN
    return truncate(", ".join(keys))


def event_from_plain_object(
    exception: Any,
    synthetic_exception: Any = None,
    rejection: bool = False,
) -> dict[str, Any]:
    kind = "promise rejection" if rejection else "exception"
    type_ = type(exception).__name__ if is_event(exception) else _fallback_type(rejection)

    event: dict[str, Any] = {
        "exception": {
            "values": [
                {
                    "type": type_,
                    "value": (
                        f"Non-Error {kind} captured with keys: "
                        f"{extract_exception_keys_for_message(exception)}"
                    ),
                }
            ]
        }
    }
    if synthetic_exception is not None:
        event["stacktrace"] = _synthetic_stacktrace(synthetic_exception)
    return event


def _event_from_dom_exception(
    exception: Any,
    synthetic_exception: Any,
    rejection: bool,
) -> dict[str, Any]:
    default_name = "DOMError" if is_dom_error(exception) else "DOMException"
    name = get_field(exception, "name")
    name = safe_str(name) if is_truthy(name) else default_name
    message = get_field(exception, "message")
    message = f"{name}: {safe_str(message)}" if is_truthy(message) else name

    event = event_from_string(message, synthetic_exception)
    add_exception_type_value(event, message, _fallback_type(rejection))
    if has_field(exception, "code"):
        tags = event.setdefault("tags", {})
        tags["DOMException.code"] = safe_str(get_field(exception, "code"))
    return event


def _event_from_unknown_input(
    exception: Any,
    synthetic_exception: Any,
    rejection: bool,
) -> dict[str, Any]:
    if is_error_event(exception):
        error = get_field(exception, "error")
        if is_truthy(error):
            return event_from_stacktrace(compute_stack_trace(error))

    if is_dom_error(exception) or is_dom_exception(exception):
        return _event_from_dom_exception(exception, synthetic_exception, rejection)

    if is_error(exception):
        return event_from_stacktrace(compute_stack_trace(exception))

    if is_record(exception):
        event = event_from_plain_object(exception, synthetic_exception, rejection)
        return add_exception_mechanism(event, {"synthetic": True})

    message = safe_str(exception)
    event = event_from_string(message, synthetic_exception)
    add_exception_type_value(event, message, _fallback_type(rejection))
    return add_exception_mechanism(event, {"synthetic": True})


def event_from_unknown_input(
    exception: Any,
    synthetic_exception: Any = None,
    rejection: bool = False,
) -> dict[str, Any]:
    """Build an event draft from any thrown value.

    Parameters
    ----------
    exception:
        The thrown value or rejection reason.
    synthetic_exception:
        An error created at the capture site.  Its stack is attached to
        events whose value carries no stack of its own.
    rejection:
        ``True`` when *exception* is the reason of an unhandled promise
        rejection.
    """
    try:
        return _event_from_unknown_input(exception, synthetic_exception, rejection)
    except Exception:
        log.warning("event build failed", exc_info=True)
        event: dict[str, Any] = {}
        add_exception_type_value(event, UNKNOWN, _fallback_type(rejection))
        return add_exception_mechanism(event, {"synthetic": True})


def event_from_incomplete_on_error(
    msg: Any,
    url: Any = None,
    line: Any = None,
    column: Any = None,
    location: Callable[[], str] | None = None,
) -> dict[str, Any]:
    """Build an event from the legacy ``(message, url, line, column)`` handler.

    A leading ``TypeName:`` token (optionally preceded by ``Uncaught``)
    becomes the exception type; the type is ``Error`` otherwise.
    """
    name = "Error"
    message = get_field(msg, "message") if is_error_event(msg) else msg
    message = "" if message is None else safe_str(message)

    groups = ERROR_RE.fullmatch(message)
    if groups is not None:
        name = groups.group(1) or name
        message = groups.group(2) or message

    event: dict[str, Any] = {"exception": {"values": [{"type": name, "value": message}]}}
    return enhance_event_with_initial_frame(event, url, line, column, location)


def event_from_rejection_with_primitive(reason: Any) -> dict[str, Any]:
    return {
        "exception": {
            "values": [
                {
                    "type": REJECTION_TYPE,
                    "value": f"Non-Error promise rejection captured with value: {safe_str(reason)}",
                }
            ]
        }
    }
