"""Frame and trace value types.

:class:`StackFrame` and :class:`StackTrace` are the parser-side model:
frames are kept innermost first, exactly as the runtime printed them.
The transport-side model (canonical frames, event drafts) is plain
``dict`` data, see :mod:`stackcanon.events`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StackFrame:
    """One call-stack entry parsed from a line of stack text."""

    url: str
    function: str
    arguments: tuple[str, ...] = ()
    line: int | None = None
    column: int | None = None


@dataclass(frozen=True)
class StackTrace:
    """A parsed stack, innermost frame first.

    ``failed`` traces never carry frames; successful ones carry at least one.
    """

    name: str
    message: str
    frames: tuple[StackFrame, ...] = field(default_factory=tuple)
    failed: bool = False


class ErrorLike(Exception):
    """A runtime error rebuilt from a report, carrying its vendor stack text.

    Attribute names follow the runtime's own field names, so the stack-trace
    computer reads ``ErrorLike`` instances the same way it reads any other
    error-shaped object.
    """

    def __init__(
        self,
        message: str = "",
        *,
        name: str = "Error",
        stack: str | None = None,
        stacktrace: str | None = None,
        framesToPop: Any = None,  # noqa: N803
        columnNumber: Any = None,  # noqa: N803
    ) -> None:
        super().__init__(message)
        self.message = message
        self.name = name
        self.stack = stack
        self.stacktrace = stacktrace
        self.framesToPop = framesToPop
        self.columnNumber = columnNumber

    def __repr__(self) -> str:
        return f"ErrorLike(name={self.name!r}, message={self.message!r})"
