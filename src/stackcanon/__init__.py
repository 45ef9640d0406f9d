"""stackcanon — normalize thrown JavaScript values into exception events."""

from stackcanon.augment import (
    add_exception_base,
    add_exception_mechanism,
    add_exception_type_value,
    enhance_event_with_initial_frame,
)
from stackcanon.computer import compute_stack_trace
from stackcanon.config import configure_logging, setup_logging
from stackcanon.events import (
    event_from_incomplete_on_error,
    event_from_rejection_with_primitive,
    event_from_unknown_input,
)
from stackcanon.frames import prepare_frames_for_event
from stackcanon.processor import ThrowableEventProcessor
from stackcanon.reports import dumps_event, load_report
from stackcanon.types import ErrorLike, StackFrame, StackTrace

__version__ = "0.1.0"

__all__ = [
    "ErrorLike",
    "StackFrame",
    "StackTrace",
    "ThrowableEventProcessor",
    "add_exception_base",
    "add_exception_mechanism",
    "add_exception_type_value",
    "compute_stack_trace",
    "configure_logging",
    "dumps_event",
    "enhance_event_with_initial_frame",
    "event_from_incomplete_on_error",
    "event_from_rejection_with_primitive",
    "event_from_unknown_input",
    "load_report",
    "prepare_frames_for_event",
    "setup_logging",
]
