"""Stack-trace computer.

Turns any error-shaped value into a :class:`StackTrace`.  Two routes are
tried in order, each on its own field of the value:

1. ``stacktrace`` — the two-line Opera grammars.
2. ``stack`` — one frame per line, Chrome, then WinJS, then Gecko.

The first route that yields a frame wins.  A route that raises is logged and
treated as having produced nothing, so :func:`compute_stack_trace` itself
never raises.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence
from dataclasses import replace
from functools import partial
from typing import Any, TypeAlias

import structlog

from stackcanon.config import MAX_LINE_LENGTH, UNKNOWN
from stackcanon.matchers import match_chrome, match_gecko, match_opera10, match_opera11, match_winjs
from stackcanon.types import StackFrame, StackTrace
from stackcanon.utils import get_field, is_instance_of, is_truthy, safe_str

log = structlog.get_logger(__name__)

Matcher: TypeAlias = Callable[[str], "StackFrame | None"]

NO_MESSAGE = "No error message"

REACT_MINIFIED_RE = re.compile(r"minified react error #\d+;", re.IGNORECASE)

STACKTRACE_MATCHERS: tuple[Matcher, ...] = (match_opera10, match_opera11)
STACK_MATCHERS: tuple[Matcher, ...] = (match_chrome, match_winjs, match_gecko)


def extract_message(ex: Any) -> str:
    """Best-effort message of *ex*; ``"No error message"`` when it has none."""
    message = get_field(ex, "message")
    if message is None and is_instance_of(ex, BaseException):
        message = safe_str(ex)
    if not is_truthy(message):
        return NO_MESSAGE

    inner = get_field(get_field(message, "error"), "message")
    if isinstance(inner, str):
        return inner
    return message if isinstance(message, str) else safe_str(message)


def extract_name(ex: Any) -> str:
    name = get_field(ex, "name")
    if is_truthy(name):
        return safe_str(name)
    if is_instance_of(ex, BaseException):
        return type(ex).__name__
    return UNKNOWN


def _pop_size(ex: Any) -> int:
    frames_to_pop = get_field(ex, "framesToPop")
    if isinstance(frames_to_pop, (int, float)) and not isinstance(frames_to_pop, bool):
        return max(int(frames_to_pop), 0) if math.isfinite(frames_to_pop) else 0

    message = get_field(ex, "message")
    if isinstance(message, str) and REACT_MINIFIED_RE.search(message):
        return 1
    return 0


def pop_frames(stacktrace: StackTrace, pop_size: int) -> StackTrace:
    """Drop *pop_size* innermost frames, keeping at least one."""
    if pop_size <= 0 or pop_size >= len(stacktrace.frames):
        return stacktrace
    return replace(stacktrace, frames=stacktrace.frames[pop_size:])


def _first_match(line: str, matchers: Sequence[Matcher]) -> StackFrame | None:
    # Overlong lines are never frame lines.
    if len(line) > MAX_LINE_LENGTH:
        return None
    for matcher in matchers:
        frame = matcher(line)
        if frame is not None:
            return frame
    return None


def _trace(ex: Any, frames: list[StackFrame]) -> StackTrace | None:
    if not frames:
        return None
    return StackTrace(name=extract_name(ex), message=extract_message(ex), frames=tuple(frames))


def compute_stack_trace_from_stacktrace_prop(ex: Any) -> StackTrace | None:
    stacktrace = get_field(ex, "stacktrace")
    if not stacktrace or not isinstance(stacktrace, str):
        return None

    frames = []
    for line in stacktrace.split("\n")[::2]:
        frame = _first_match(line, STACKTRACE_MATCHERS)
        if frame is not None:
            frames.append(frame)
    return _trace(ex, frames)


def compute_stack_trace_from_stack_prop(ex: Any) -> StackTrace | None:
    stack = get_field(ex, "stack")
    if not stack or not isinstance(stack, str):
        return None

    # Gecko reports the throw column on the error itself, not in the first line.
    first_line_matchers = (
        match_chrome,
        match_winjs,
        partial(match_gecko, column_number=get_field(ex, "columnNumber")),
    )

    frames = []
    for index, line in enumerate(stack.split("\n")):
        frame = _first_match(line, STACK_MATCHERS if index else first_line_matchers)
        if frame is not None:
            frames.append(frame)
    return _trace(ex, frames)


_ROUTES: tuple[Callable[[Any], StackTrace | None], ...] = (
    compute_stack_trace_from_stacktrace_prop,
    compute_stack_trace_from_stack_prop,
)


def compute_stack_trace(ex: Any) -> StackTrace:
    """Compute the stack trace of *ex*.

    Returns a trace with ``failed=True`` and no frames when neither route
    recognises anything.
    """
    pop_size = _pop_size(ex)

    for route in _ROUTES:
        try:
            stacktrace = route(ex)
        except Exception:
            log.debug("stack route failed", route=route.__name__, exc_info=True)
            continue
        if stacktrace is not None:
            return pop_frames(stacktrace, pop_size)

    return StackTrace(name=extract_name(ex), message=extract_message(ex), failed=True)
