"""Built-in formatters, ordered from the most specific to the catch-all."""

from __future__ import annotations

import dataclasses
import datetime
import enum
import inspect
import re
from collections.abc import Iterable, Mapping, Set
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from ._formatter import FormatResult, FormattedValue, Formatter

if TYPE_CHECKING:
    from ._formatter import FormatCtx

_PATTERN_FLAGS = (
    (re.ASCII, "a"),
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
)


def _ok(val: str) -> FormattedValue:
    return FormattedValue(FormatResult.OK, val)


def _format_items(ctx: FormatCtx, items: Iterable[Any]) -> list[str]:
    parts: list[str] = []
    max_props = ctx.cfg.format.max_props
    for idx, item in enumerate(items):
        if idx >= max_props:
            parts.append("...")
            break
        parts.append(ctx.format(item))
    return parts


def _format_key(ctx: FormatCtx, key: Any) -> str:
    if isinstance(key, str):
        return f'"{key}"' if " " in key else key
    return ctx.format(key)


def _format_entries(ctx: FormatCtx, entries: Iterable[tuple[Any, Any]]) -> list[str]:
    parts: list[str] = []
    max_props = ctx.cfg.format.max_props
    for idx, (key, value) in enumerate(entries):
        if idx >= max_props:
            parts.append("...")
            break
        parts.append(f"{_format_key(ctx, key)}:{ctx.format(value)}")
    return parts


def _record_fields(value: Any) -> dict[str, Any] | None:
    """Return the attributes displayed for a record like object, or None if it is not one."""
    if isinstance(value, BaseModel):
        return {name: getattr(value, name) for name in type(value).model_fields}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value) if f.repr}

    cls = type(value)
    # Classes with their own text representation are left to ToString / Fallback
    if cls.__str__ is not object.__str__ or cls.__repr__ is not object.__repr__:
        return None
    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    slots = [name for klass in cls.__mro__ for name in getattr(klass, "__slots__", ())]
    if slots:
        return {name: getattr(value, name) for name in slots if not name.startswith("_") and hasattr(value, name)}
    return None


def format_enum(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, enum.Enum):
        return _ok(f"[{type(value).__name__}.{value.name}]")
    return None


def format_string(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, str):
        return _ok(f'"{value}"')
    return None


def format_plain_object(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if type(value) is dict:
        return _ok("{" + ",".join(_format_entries(ctx, value.items())) + "}")
    return None


def format_array(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, list):
        return _ok("[" + ",".join(_format_items(ctx, value)) + "]")
    return None


def format_tuple(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, tuple):
        parts = _format_items(ctx, value)
        if len(parts) == 1:
            return _ok(f"({parts[0]},)")
        return _ok("(" + ",".join(parts) + ")")
    return None


def format_error(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, BaseException):
        return _ok(f"[{type(value).__name__}:{ctx.format(str(value))}]")
    return None


def format_error_type(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, type) and issubclass(value, BaseException):
        return _ok(f"{value.__name__}()")
    return None


def format_function(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if inspect.isroutine(value):
        name = getattr(value, "__qualname__", None) or getattr(value, "__name__", None)
        return _ok(f"[Function:{name}]" if name else "[Function]")
    return None


def format_date(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return _ok(f'[Date:"{value.isoformat()}"]')
    return None


def format_set(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, Set):
        return _ok("Set:{" + ",".join(_format_items(ctx, value)) + "}")
    return None


def format_map(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, Mapping):
        return _ok("Map:{" + ",".join(_format_entries(ctx, value.items())) + "}")
    return None


def format_pattern(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, re.Pattern):
        flags = "".join(letter for flag, letter in _PATTERN_FLAGS if value.flags & flag)
        return _ok(f"/{value.pattern}/{flags}")
    return None


def format_record(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, type) or inspect.ismodule(value):
        return None
    fields = _record_fields(value)
    if fields is None:
        return None
    return _ok(f"[{type(value).__name__}:{{" + ",".join(_format_entries(ctx, fields.items())) + "}]")


def format_to_string(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if value is not None and type(value).__str__ is not object.__str__:
        return _ok(str(value))
    return None


def format_fallback(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    try:
        return _ok(repr(value))
    except Exception:  # noqa: BLE001 - the catch-all must always produce a string
        return _ok(f"[{type(value).__name__}]")


DEFAULT_FORMATTERS: tuple[Formatter, ...] = (
    Formatter("Enum", format_enum),  # before String, StrEnum members are strings
    Formatter("String", format_string),
    Formatter("PlainObject", format_plain_object),
    Formatter("Array", format_array),
    Formatter("Tuple", format_tuple),
    Formatter("Error", format_error),
    Formatter("ErrorType", format_error_type),  # before Function
    Formatter("Function", format_function),
    Formatter("Date", format_date),
    Formatter("Set", format_set),
    Formatter("Map", format_map),
    Formatter("Pattern", format_pattern),
    Formatter("Record", format_record),
    Formatter("ToString", format_to_string),
)

FALLBACK_FORMATTER = Formatter("Fallback", format_fallback)
