"""Line grammars for vendor stack text.

Each matcher takes a single line and returns a :class:`StackFrame` or
``None``.  Matchers are pure; the stack-trace computer decides which ones to
try and in what order.

Supported grammars::

    Chrome / V8     at handler (https://example.com/app.js:10:5)
    WinJS           at handler (ms-appx://app/js/main.js:10:5)
    Gecko           handler@https://example.com/app.js:10:5
    Opera 10        Line 10 of linked script https://example.com/app.js: in function handler
    Opera 11        Error thrown at line 10, column 5 in handler() in https://example.com/app.js:

The two Opera grammars describe a frame over two physical lines; only the
first of each pair is matched.
"""

from __future__ import annotations

import re
from typing import Any

from stackcanon.config import FUNCTION
from stackcanon.types import StackFrame

CHROME_RE = re.compile(
    r"^\s*at (?:(.*?) ?\()?"
    r"((?:file|https?|blob|chrome-extension|address|native|eval|webpack|<anonymous>|[a-z-]+:|.*bundle|/).*?)"
    r"(?::(\d+))?(?::(\d+))?\)?\s*$",
    re.IGNORECASE,
)
CHROME_EVAL_RE = re.compile(r"\((\S*):(\d+):(\d+)\)")

WINJS_RE = re.compile(
    r"^\s*at (?:((?:\[object object\])?.+) )?\(?"
    r"((?:file|ms-appx|https?|webpack|blob):.*?):(\d+)(?::(\d+))?\)?\s*$",
    re.IGNORECASE,
)

GECKO_RE = re.compile(
    r"^\s*(.*?)(?:\((.*?)\))?(?:^|@)?"
    r"((?:file|https?|blob|chrome|webpack|resource|moz-extension|capacitor).*?:/.*?"
    r"|\[native code\]|[^@]*(?:bundle|\d+\.js)|/[\w ./=-]+)"
    r"(?::(\d+))?(?::(\d+))?\s*$",
    re.IGNORECASE,
)
GECKO_EVAL_RE = re.compile(r"(\S+) line (\d+)(?: > eval line \d+)* > eval", re.IGNORECASE)

OPERA10_RE = re.compile(r" line (\d+).*script (?:in )?(\S+)(?:: in function (\S+))?$", re.IGNORECASE)
OPERA11_RE = re.compile(
    r" line (\d+), column (\d+)\s*"
    r"(?:in (?:<anonymous function: ([^>]+)>|([^)]+))\((.*)\))? in (.*):\s*$",
    re.IGNORECASE,
)

_ADDRESS_PREFIX = "address at "
_SAFARI_EXTENSION = "safari-extension"
_SAFARI_WEB_EXTENSION = "safari-web-extension"


def _to_int(value: str | None) -> int | None:
    return int(value) if value else None


def _split_args(value: str | None) -> tuple[str, ...]:
    return tuple(value.split(",")) if value else ()


def _frame(
    url: str,
    function: str | None,
    arguments: tuple[str, ...],
    line: int | None,
    column: int | None,
) -> StackFrame:
    if not function and line is not None:
        function = FUNCTION
    return StackFrame(
        url=url or "",
        function=function or "",
        arguments=arguments,
        line=line,
        column=column,
    )


def match_chrome(line: str) -> StackFrame | None:
    parts = CHROME_RE.search(line)
    if parts is None:
        return None

    function, location, line_no, column = parts.groups()
    is_native = location.startswith("native")

    if location.startswith("eval"):
        submatch = CHROME_EVAL_RE.search(location)
        if submatch is not None:
            location, line_no, column = submatch.groups()

    url = location[len(_ADDRESS_PREFIX) :] if location.startswith(_ADDRESS_PREFIX) else location
    function = function or FUNCTION

    is_safari_extension = _SAFARI_EXTENSION in function
    is_safari_web_extension = _SAFARI_WEB_EXTENSION in function
    if is_safari_extension or is_safari_web_extension:
        function = function.split("@")[0] if "@" in function else FUNCTION
        prefix = _SAFARI_EXTENSION if is_safari_extension else _SAFARI_WEB_EXTENSION
        url = f"{prefix}:{url}"

    return _frame(
        url,
        function,
        (location,) if is_native else (),
        _to_int(line_no),
        _to_int(column),
    )


def match_winjs(line: str) -> StackFrame | None:
    parts = WINJS_RE.search(line)
    if parts is None:
        return None

    function, url, line_no, column = parts.groups()
    return _frame(url, function or FUNCTION, (), int(line_no), _to_int(column))


def _column_hint(column_number: Any) -> int | None:
    """Convert a zero-based ``columnNumber`` field to a one-based column."""
    if column_number is None or isinstance(column_number, bool):
        return None
    try:
        return int(column_number) + 1
    except (TypeError, ValueError, OverflowError):
        return None


def match_gecko(line: str, column_number: Any = None) -> StackFrame | None:
    """Match a Gecko line.

    *column_number* is the throwable's own ``columnNumber`` field.  Callers
    pass it for the first line of the stack only; it fills the column when
    the line itself carries none.
    """
    parts = GECKO_RE.search(line)
    if parts is None:
        return None

    function, args, location, line_no, column = parts.groups()

    submatch = GECKO_EVAL_RE.search(location) if " > eval" in location else None
    if submatch is not None:
        function = function or "eval"
        location, line_no = submatch.groups()
        column_value = None
    else:
        column_value = _to_int(column)
        if column_value is None:
            column_value = _column_hint(column_number)

    return _frame(
        location,
        function or FUNCTION,
        _split_args(args),
        _to_int(line_no),
        column_value,
    )


def match_opera10(line: str) -> StackFrame | None:
    parts = OPERA10_RE.search(line)
    if parts is None:
        return None

    line_no, url, function = parts.groups()
    return _frame(url, function, (), int(line_no), None)


def match_opera11(line: str) -> StackFrame | None:
    parts = OPERA11_RE.search(line)
    if parts is None:
        return None

    line_no, column, anonymous_name, function, args, url = parts.groups()
    return _frame(url, anonymous_name or function, _split_args(args), int(line_no), int(column))
