"""Formatter pipeline used to render values into assertion messages."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from tripline._errors import FormatError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from tripline._config import Config

logger = logging.getLogger(__name__)

# Control characters other than tab and newline, this includes ESC (ANSI sequences)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


class FormatResult(StrEnum):
    """Outcome of a single formatter invocation."""

    OK = "ok"  # Use the value, stop the pipeline
    CONTINUE = "continue"  # Keep the value unless a later formatter returns OK
    SKIP = "skip"  # Not applicable, try the next formatter
    FAILED = "failed"  # Abort formatting and surface the error


@dataclass(frozen=True, slots=True)
class FormattedValue:
    """Result of one formatter invocation."""

    res: FormatResult
    val: str | None = None
    err: BaseException | None = None


type FormatterFn = Callable[[FormatCtx, Any], FormattedValue | None]


@dataclass(frozen=True, slots=True, eq=False)
class Formatter:
    """A named formatter function.

    Formatters are compared by identity so the same function can be registered
    twice under different names and removed independently.
    """

    name: str
    value: FormatterFn = field(repr=False)


class FormatCtx:
    """Recursion state of a single format operation.

    Formatters call `ctx.format(item)` for nested values. Values that are already
    being formatted further up, or that are nested deeper than
    `format.max_format_depth`, render as the configured circular message.
    """

    __slots__ = ("_visited", "cfg")

    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg
        self._visited: list[Any] = []

    @property
    def depth(self) -> int:
        return len(self._visited)

    def format(self, value: Any) -> str:
        if self._is_visited(value) or self.depth >= self.cfg.format.max_format_depth:
            return self.cfg.circular_msg() or ""

        self._visited.append(value)
        try:
            return run_formatters(self, value, self.cfg.format_mgr.get_formatters())
        finally:
            self._visited.pop()

    def _is_visited(self, value: Any) -> bool:
        if value is None or isinstance(value, (str, bytes, int, float, complex)):
            return False
        return any(visited is value for visited in self._visited)


def run_formatters(ctx: FormatCtx, value: Any, formatters: Iterable[Formatter]) -> str:
    """Run the formatter chain for a single value.

    The given formatters are tried in order, followed by the built-in ones. The
    built-in catch-all formatter is only consulted when no formatter returned
    OK or CONTINUE.

    Raises:
        FormatError: If a formatter reports FAILED or raises.

    """
    from ._defaults import DEFAULT_FORMATTERS, FALLBACK_FORMATTER  # noqa: PLC0415

    best: FormattedValue | None = None
    for formatter in (*formatters, *DEFAULT_FORMATTERS):
        try:
            formatted = formatter.value(ctx, value)
        except FormatError:
            raise
        except Exception as e:  # noqa: BLE001 - any formatter error is reported as FAILED
            formatted = FormattedValue(FormatResult.FAILED, err=e)

        if formatted is None:
            continue

        match formatted.res:
            case FormatResult.OK:
                return formatted.val or ""
            case FormatResult.CONTINUE:
                best = formatted
            case FormatResult.FAILED:
                msg = f"Formatter '{formatter.name}' failed to format a value of type '{type(value).__name__}'"
                logger.debug(msg)
                raise FormatError(msg, inner_exception=formatted.err) from formatted.err
            case FormatResult.SKIP:
                pass

    if best is not None:
        return best.val or ""

    fallback = FALLBACK_FORMATTER.value(ctx, value)
    if fallback is None or fallback.res is not FormatResult.OK:
        msg = f"No formatter could format a value of type '{type(value).__name__}'"
        raise FormatError(msg)
    return fallback.val or ""


def format_value(cfg: Config, value: Any) -> str:
    """Render a value for display in an assertion message.

    Args:
        cfg: The configuration providing the formatting options and custom formatters.
        value: The value to render.

    Returns:
        The display string. The finalize step is not applied, see `finalize_message`.

    Example:
        >>> format_value(assert_config, {"tea": "chai"})
        '{tea:"chai"}'

    """
    return FormatCtx(cfg).format(value)


def escape_ansi(value: str) -> str:
    """Escape control characters (including ANSI sequences) so they render literally."""
    return _CONTROL_CHARS.sub(lambda m: f"\\x{ord(m.group()):02x}", value)


def finalize_message(cfg: Config, message: str) -> str:
    """Apply the configured finalize step to a fully composed message."""
    options = cfg.format
    if not options.finalize:
        return message
    if options.finalize_fn is not None:
        return options.finalize_fn(message)
    return escape_ansi(message)
