"""Conversion of parsed frames to transport frames."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from stackcanon.config import CAPTURE_ENTRY_POINTS, FUNCTION, MAX_FRAMES
from stackcanon.types import StackFrame


def _is_capture_call(frame: StackFrame) -> bool:
    function = frame.function or ""
    return any(name in function for name in CAPTURE_ENTRY_POINTS)


def prepare_frames_for_event(stack: Sequence[StackFrame]) -> list[dict[str, Any]]:
    """Build canonical frames from an innermost-first frame sequence.

    The capture call itself is dropped, only the innermost ``MAX_FRAMES``
    frames are kept, and the result is ordered outermost first.
    """
    if not stack:
        return []

    local_stack = list(stack)
    if _is_capture_call(local_stack[0]):
        local_stack = local_stack[1:]

    kept = local_stack[:MAX_FRAMES]
    fallback_url = next((frame.url for frame in kept if frame.url), "")

    return [
        {
            "colno": 0 if frame.column is None else frame.column,
            "filename": frame.url or fallback_url,
            "function": frame.function or FUNCTION,
            "in_app": True,
            "lineno": 0 if frame.line is None else frame.line,
        }
        for frame in reversed(kept)
    ]
