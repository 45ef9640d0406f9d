"""Shared fixtures and thrown-value doubles for stackcanon tests."""

from __future__ import annotations

import logging
from typing import Any

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_logging() -> None:  # type: ignore[misc]
    """Reset root logger handlers and level after each test."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level

    yield  # type: ignore[misc]

    root.handlers[:] = original_handlers
    root.setLevel(original_level)


@pytest.fixture(autouse=True)
def _reset_structlog() -> None:  # type: ignore[misc]
    """Reset structlog configuration after each test."""
    yield  # type: ignore[misc]
    structlog.reset_defaults()


class Event:
    """Stand-in for a browser ``Event``."""


class ErrorEvent(Event):
    def __init__(self, error: Any = None, message: str = "") -> None:
        self.error = error
        self.message = message


class DOMException(Exception):  # noqa: N818
    def __init__(self, name: str, message: str, code: Any = None) -> None:
        super().__init__(message)
        self.name = name
        self.message = message
        if code is not None:
            self.code = code


class DOMError:
    def __init__(self, name: str, message: str) -> None:
        self.name = name
        self.message = message


CHROME_STACK = "\n".join(
    [
        "TypeError: x is undefined",
        "    at inner (http://example.com/app.js:10:5)",
        "    at outer (http://example.com/app.js:20:3)",
        "    at http://example.com/app.js:30:1",
    ]
)

GECKO_STACK = "\n".join(
    [
        "inner@http://example.com/app.js:10",
        "outer@http://example.com/app.js:20:3",
    ]
)

OPERA10_STACKTRACE = "\n".join(
    [
        "  Line 7 of linked script http://example.com/app.js: in function inner",
        "    this.undef();",
        "  Line 3 of inline#1 script in http://example.com/page.html",
        "    inner();",
    ]
)
