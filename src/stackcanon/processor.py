"""Structlog processor that turns thrown values into exception events.

Usage::

    from stackcanon import ThrowableEventProcessor

    structlog.configure(processors=[..., ThrowableEventProcessor(), ...])

    log.error("client error", throwable=load_report(request_body))
"""

from __future__ import annotations

from typing import Any

from stackcanon.events import event_from_unknown_input


class ThrowableEventProcessor:
    """Replace a thrown value in the event dict with its exception event.

    Parameters
    ----------
    key:
        Event-dict key holding the thrown value.
    synthetic_key:
        Event-dict key holding an optional synthetic error.
    rejection_key:
        Event-dict key flagging an unhandled promise rejection.
    target_key:
        Event-dict key the built event is stored under.
    """

    def __init__(
        self,
        *,
        key: str = "throwable",
        synthetic_key: str = "synthetic_exception",
        rejection_key: str = "rejection",
        target_key: str = "exception_event",
    ) -> None:
        for label, value in (
            ("key", key),
            ("synthetic_key", synthetic_key),
            ("rejection_key", rejection_key),
            ("target_key", target_key),
        ):
            if not value:
                msg = f"{label} must be a non-empty string, got {value!r}"
                raise ValueError(msg)
        self._key = key
        self._synthetic_key = synthetic_key
        self._rejection_key = rejection_key
        self._target_key = target_key

    def __call__(
        self,
        _logger: Any,
        _method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        if self._key not in event_dict:
            return event_dict

        throwable = event_dict.pop(self._key)
        synthetic = event_dict.pop(self._synthetic_key, None)
        rejection = bool(event_dict.pop(self._rejection_key, False))

        event_dict[self._target_key] = event_from_unknown_input(throwable, synthetic, rejection)
        return event_dict
