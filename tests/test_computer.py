"""Tests for stackcanon.computer."""

from __future__ import annotations

import time
from types import SimpleNamespace
from unittest.mock import patch

from conftest import CHROME_STACK, GECKO_STACK, OPERA10_STACKTRACE

from stackcanon.computer import (
    NO_MESSAGE,
    compute_stack_trace,
    extract_message,
    extract_name,
    pop_frames,
)
from stackcanon.types import ErrorLike, StackFrame, StackTrace


class _HostileBool:
    def __bool__(self) -> bool:
        raise ValueError("no truth value")


class TestComputeStackTrace:
    def test_chrome_stack(self) -> None:
        trace = compute_stack_trace(ErrorLike("x is undefined", name="TypeError", stack=CHROME_STACK))
        assert trace.failed is False
        assert trace.name == "TypeError"
        assert trace.message == "x is undefined"
        assert [f.function for f in trace.frames] == ["inner", "outer", "<anonymous>"]
        assert trace.frames[0].line == 10
        assert trace.frames[0].column == 5

    def test_mapping_input(self) -> None:
        trace = compute_stack_trace({"message": "boom", "name": "Error", "stack": CHROME_STACK})
        assert trace.failed is False
        assert len(trace.frames) == 3

    def test_stacktrace_route_takes_precedence(self) -> None:
        ex = ErrorLike("boom", stack=CHROME_STACK, stacktrace=OPERA10_STACKTRACE)
        trace = compute_stack_trace(ex)
        assert [f.url for f in trace.frames] == [
            "http://example.com/app.js",
            "http://example.com/page.html",
        ]
        assert trace.frames[0].function == "inner"

    def test_gecko_column_number_applies_to_first_line_only(self) -> None:
        ex = ErrorLike("boom", stack=GECKO_STACK, columnNumber=4)
        trace = compute_stack_trace(ex)
        assert trace.frames[0].column == 5
        assert trace.frames[1].column == 3

    def test_gecko_column_number_snake_case_alias(self) -> None:
        ex = {"message": "boom", "stack": GECKO_STACK, "column_number": 0}
        trace = compute_stack_trace(ex)
        assert trace.frames[0].column == 1

    def test_unmatched_lines_skipped(self) -> None:
        stack = "garbage\n    at foo (http://example.com/app.js:1:2)\nmore garbage"
        trace = compute_stack_trace(ErrorLike("boom", stack=stack))
        assert len(trace.frames) == 1

    def test_frames_to_pop(self) -> None:
        trace = compute_stack_trace(ErrorLike("boom", stack=CHROME_STACK, framesToPop=1))
        assert [f.function for f in trace.frames] == ["outer", "<anonymous>"]

    def test_minified_react_error_pops_one(self) -> None:
        ex = ErrorLike("Minified React error #130; visit https://reactjs.org", stack=CHROME_STACK)
        trace = compute_stack_trace(ex)
        assert trace.frames[0].function == "outer"

    def test_frames_to_pop_beats_react_signature(self) -> None:
        ex = ErrorLike("Minified React error #130; x", stack=CHROME_STACK, framesToPop=0)
        trace = compute_stack_trace(ex)
        assert trace.frames[0].function == "inner"

    def test_pop_never_empties_trace(self) -> None:
        trace = compute_stack_trace(ErrorLike("boom", stack=CHROME_STACK, framesToPop=10))
        assert trace.failed is False
        assert len(trace.frames) == 3

    def test_bool_frames_to_pop_ignored(self) -> None:
        trace = compute_stack_trace(ErrorLike("boom", stack=CHROME_STACK, framesToPop=True))
        assert trace.frames[0].function == "inner"

    def test_opaque_object_fails(self) -> None:
        trace = compute_stack_trace(object())
        assert trace.failed is True
        assert trace.frames == ()
        assert trace.name == "<unknown>"
        assert trace.message == NO_MESSAGE

    def test_none_fails(self) -> None:
        trace = compute_stack_trace(None)
        assert trace.failed is True
        assert trace.frames == ()

    def test_unparseable_stack_fails(self) -> None:
        trace = compute_stack_trace(ErrorLike("boom", stack="nothing to see\nhere"))
        assert trace.failed is True
        assert trace.name == "Error"
        assert trace.message == "boom"

    def test_non_string_stack_fails(self) -> None:
        trace = compute_stack_trace({"stack": ["at foo (http://example.com/app.js:1:1)"]})
        assert trace.failed is True

    def test_route_exception_is_swallowed(self) -> None:
        with patch("stackcanon.computer.match_chrome", side_effect=RuntimeError("broken")):
            trace = compute_stack_trace(ErrorLike("boom", stack="    at foo (http://example.com/app.js:1:1)"))
        assert trace.failed is True
        assert trace.frames == ()

    def test_hostile_stack_property(self) -> None:
        class Hostile:
            @property
            def stack(self) -> str:
                raise RuntimeError("no access")

        trace = compute_stack_trace(Hostile())
        assert trace.failed is True

    def test_hostile_message_truthiness(self) -> None:
        trace = compute_stack_trace(SimpleNamespace(message=_HostileBool()))
        assert trace.failed is True
        assert trace.message == NO_MESSAGE

    def test_hostile_name_truthiness(self) -> None:
        trace = compute_stack_trace(SimpleNamespace(name=_HostileBool(), message="boom"))
        assert trace.failed is True
        assert trace.name == "<unknown>"
        assert trace.message == "boom"

    def test_mixed_chrome_winjs_gecko_stack(self) -> None:
        stack = "\n".join(
            [
                "Error: boom",
                "    at inner (http://example.com/app.js:10:5)",
                "    at handler ms-appx://app/js/main.js:20:3",
                "middle@http://example.com/app.js:30:1",
            ]
        )
        trace = compute_stack_trace(ErrorLike("boom", stack=stack))
        assert trace.failed is False
        assert [f.function for f in trace.frames] == ["inner", "handler", "middle"]
        assert trace.frames[1].url == "ms-appx://app/js/main.js"
        assert trace.frames[1].line == 20
        assert trace.frames[1].column == 3

    def test_opera11_stacktrace_reads_every_other_line(self) -> None:
        stacktrace = "\n".join(
            [
                "Error thrown at line 42, column 12 in <anonymous function: createException>() in "
                "http://example.com/app.js:",
                "called from line 99, column 1 in bar() in http://example.com/other.js:",
                "called from line 7, column 4 in foo(a,b) in http://example.com/app.js:",
                "    createException();",
            ]
        )
        trace = compute_stack_trace(ErrorLike("boom", stacktrace=stacktrace))
        assert trace.failed is False
        assert [f.function for f in trace.frames] == ["createException", "foo"]
        assert [(f.line, f.column) for f in trace.frames] == [(42, 12), (7, 4)]


class TestOverlongLines:
    def test_long_stack_line_skipped_quickly(self) -> None:
        stack = "\n".join(["    at " + "a" * 20000, "    at inner (http://example.com/app.js:10:5)"])
        started = time.perf_counter()
        trace = compute_stack_trace(ErrorLike("boom", stack=stack))
        assert time.perf_counter() - started < 1.0
        assert [f.function for f in trace.frames] == ["inner"]

    def test_long_gecko_like_line_skipped(self) -> None:
        stack = "\n".join(["@" * 5000 + "(" * 5000, "middle@http://example.com/app.js:30:1"])
        started = time.perf_counter()
        trace = compute_stack_trace(ErrorLike("boom", stack=stack))
        assert time.perf_counter() - started < 1.0
        assert [f.function for f in trace.frames] == ["middle"]

    def test_long_stacktrace_line_skipped(self) -> None:
        stacktrace = "\n".join(
            [
                "  Line 1 of linked script " + "x" * 20000,
                "    filler();",
                "  Line 3 of inline#1 script in http://example.com/page.html",
            ]
        )
        trace = compute_stack_trace(ErrorLike("boom", stacktrace=stacktrace))
        assert [f.url for f in trace.frames] == ["http://example.com/page.html"]


class TestExtractMessage:
    def test_missing_message(self) -> None:
        assert extract_message({}) == NO_MESSAGE

    def test_empty_message(self) -> None:
        assert extract_message({"message": ""}) == NO_MESSAGE

    def test_nested_error_message(self) -> None:
        assert extract_message({"message": {"error": {"message": "inner"}}}) == "inner"

    def test_python_exception(self) -> None:
        assert extract_message(ValueError("bad value")) == "bad value"


class TestExtractName:
    def test_explicit_name(self) -> None:
        assert extract_name({"name": "RangeError"}) == "RangeError"

    def test_python_exception_class_name(self) -> None:
        assert extract_name(KeyError("k")) == "KeyError"

    def test_unknown(self) -> None:
        assert extract_name(42) == "<unknown>"


class TestPopFrames:
    def _trace(self, count: int) -> StackTrace:
        frames = tuple(StackFrame(url="a.js", function=f"f{i}", line=i) for i in range(count))
        return StackTrace(name="Error", message="m", frames=frames)

    def test_drops_innermost(self) -> None:
        trace = pop_frames(self._trace(3), 2)
        assert [f.function for f in trace.frames] == ["f2"]

    def test_zero_is_identity(self) -> None:
        original = self._trace(3)
        assert pop_frames(original, 0) is original

    def test_returns_new_instance(self) -> None:
        original = self._trace(3)
        popped = pop_frames(original, 1)
        assert popped is not original
        assert len(original.frames) == 3
