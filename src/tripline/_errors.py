"""Error types raised by tripline.

- TriplineError: base class, carries the assertion details and the captured stack
  - AssertionFailure: a single check did not hold
    - AssertionFatal: evaluation of the whole composite assertion must stop
  - FormatError: a formatter reported a failure while rendering a value
"""

from __future__ import annotations

import json
import sys
import traceback
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from types import CodeType
from typing import Any

_PACKAGE_DIR = str(Path(__file__).resolve().parent)

type StackStart = Callable[..., Any] | CodeType


class ConfigError(Exception):
    """Error in tripline configuration."""


def _code_of(fn: object) -> CodeType | None:
    if isinstance(fn, CodeType):
        return fn
    fn = getattr(fn, "__func__", fn)
    return getattr(fn, "__code__", None)


def _is_internal(frame_code: CodeType) -> bool:
    return frame_code.co_filename.startswith(_PACKAGE_DIR)


def _capture_stack(stack_start: Iterable[StackStart] | None) -> tuple[traceback.StackSummary, traceback.StackSummary]:
    """Capture the current call stack.

    Returns the full stack and the stack with every frame from the outermost
    internal frame (or `stack_start` function) onwards removed, both ordered
    oldest call first like a traceback.
    """
    walked: list[tuple[Any, int]] = []
    frame = sys._getframe(2)  # noqa: SLF001 - skip _capture_stack and the error constructor
    while frame is not None:
        walked.append((frame, frame.f_lineno))
        frame = frame.f_back
    walked.reverse()

    full = traceback.StackSummary.extract(iter(walked))
    if stack_start is None:
        return full, full

    start_codes = {code for fn in stack_start if (code := _code_of(fn)) is not None}
    cut = len(walked)
    for idx, (walked_frame, _lineno) in enumerate(walked):
        code = walked_frame.f_code
        if code in start_codes or _is_internal(code):
            cut = idx
            break

    return full, traceback.StackSummary.from_list(full[:cut])


class TriplineError(AssertionError):
    """Base class for every error raised by tripline.

    Attributes:
        props: The assertion details (actual value, expected value, operation path, ...).
        inner_exception: The error that caused this error, if any.
        full_stack: The formatted call stack including tripline's internal frames.
        stack: The formatted call stack with internal frames removed.

    """

    def __init__(
        self,
        message: str = "",
        props: Mapping[str, Any] | None = None,
        stack_start: Iterable[StackStart] | None = None,
        *,
        inner_exception: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.props: dict[str, Any] | None = dict(props) if props is not None else None
        self.inner_exception = inner_exception
        full, filtered = _capture_stack(stack_start)
        self.full_stack = "".join(full.format())
        self.stack = "".join(filtered.format())

    def __str__(self) -> str:
        return self.message

    def to_json(self, *, stack: bool = False) -> dict[str, Any]:
        """Convert the error to a JSON compatible dictionary.

        Values in `props` that JSON cannot represent are converted with `repr`.
        """
        props = None
        if self.props is not None:
            try:
                props = json.loads(json.dumps(self.props, default=repr))
            except (TypeError, ValueError):
                # Circular values or non-string keys
                props = {key: repr(value) for key, value in self.props.items()}
        return {
            "name": type(self).__name__,
            "message": self.message,
            "props": props,
            "stack": self.stack if stack else None,
            "inner_exception": repr(self.inner_exception) if self.inner_exception is not None else None,
        }


class AssertionFailure(TriplineError):
    """Raised when an assertion check does not hold."""

    def _prop(self, name: str) -> Any:
        return self.props.get(name) if self.props else None

    @property
    def actual(self) -> Any:
        """The value that was evaluated."""
        return self._prop("actual")

    @property
    def expected(self) -> Any:
        """The value the check expected, when the check has one."""
        return self._prop("expected")

    @property
    def operator(self) -> str | None:
        """The comparison operator or operation name, when known."""
        return self._prop("operator") or self._prop("operation")


class AssertionFatal(AssertionFailure):
    """Raised when continuing the current composite assertion is meaningless.

    Scopes never re-compose the message of a fatal error.
    """


class FormatError(TriplineError):
    """Raised when a formatter fails to render a value."""
