"""Structural (deep) equality of arbitrary Python values.

The comparison walks both values in lock-step. Every pair of containers that is
currently being compared is kept on a visiting stack keyed by the identities of
*both* operands, so a pair that recurs through a reference cycle is treated as
equal instead of recursing forever. `a.x is a` does not imply `b.x is b`, which is
why a single visited set per operand is not enough.

Value categories:

- scalars (`None`, `bool`, numbers, `str`, `bytes`): compared by value. Loose mode
  coerces numeric strings against numbers, strict mode requires the same type tag.
  `NaN` equals `NaN`.
- plain values (`datetime`, `UUID`, paths, enum members, ...): compared with `==`.
- patterns and exceptions: compared by their defining attributes.
- sequences, mappings and sets: compared element-wise, unordered for mappings and sets.
- other sized collections (`dict.values()`, ...): compared as unordered multisets.
- records (dataclasses, pydantic models, plain instances): compared by their fields.
- functions, classes, modules, generators and field-less objects: equal only to themselves.
"""

from __future__ import annotations

import dataclasses
import datetime
import enum
import inspect
import logging
import numbers
import re
import uuid
import weakref
from collections.abc import Collection, Iterator, Mapping, Sequence, Set
from enum import StrEnum
from pathlib import PurePath
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from ._context import ScopeContext

logger = logging.getLogger(__name__)

_PLAIN_VALUE_TYPES = (
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    datetime.timezone,
    uuid.UUID,
    PurePath,
    enum.Enum,
    range,
)

_DECIMAL_LITERAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_MISSING: Any = object()


class _Category(StrEnum):
    SCALAR = "scalar"
    PLAIN = "plain"
    PATTERN = "pattern"
    EXCEPTION = "exception"
    REFERENCE = "reference"
    MAPPING = "mapping"
    SET = "set"
    SEQUENCE = "sequence"
    BAG = "bag"
    CUSTOM_EQ = "custom_eq"
    RECORD = "record"


def _is_reference_only(value: Any) -> bool:
    return (
        isinstance(value, (type, weakref.ReferenceType, Iterator))
        or inspect.isroutine(value)
        or inspect.ismodule(value)
        or inspect.iscoroutine(value)
        or inspect.isasyncgen(value)
    )


def _category(value: Any) -> _Category:  # noqa: PLR0911
    if isinstance(value, _PLAIN_VALUE_TYPES):
        return _Category.PLAIN
    if value is None or isinstance(value, (str, bytes, bytearray, numbers.Number)):
        return _Category.SCALAR
    if isinstance(value, re.Pattern):
        return _Category.PATTERN
    if isinstance(value, BaseException):
        return _Category.EXCEPTION
    if _is_reference_only(value):
        return _Category.REFERENCE
    if isinstance(value, Mapping):
        return _Category.MAPPING
    if isinstance(value, Set):
        return _Category.SET
    if isinstance(value, Sequence):
        return _Category.SEQUENCE
    if isinstance(value, BaseModel) or dataclasses.is_dataclass(value):
        return _Category.RECORD
    if type(value).__eq__ is not object.__eq__:
        return _Category.CUSTOM_EQ
    if isinstance(value, Collection):
        return _Category.BAG
    if not hasattr(value, "__dict__") and not _slot_names(type(value)):
        # Nothing to compare field by field
        return _Category.REFERENCE
    return _Category.RECORD


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = getattr(klass, "__slots__", ())
        names.extend(
            name for name in ((slots,) if isinstance(slots, str) else slots) if name not in {"__dict__", "__weakref__"}
        )
    return names


def _type_tag(value: Any) -> str:
    """Type tag used by strict scalar comparison. int and float share the number tag."""
    if value is None:
        return "none"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Number):
        return "number"
    if isinstance(value, str):
        return "string"
    return "bytes"


def _is_nan(value: Any) -> bool:
    if not isinstance(value, numbers.Number) or isinstance(value, bool):
        return False
    try:
        return bool(value != value)  # noqa: PLR0124
    except ArithmeticError:
        # Signalling Decimal NaN refuses comparison
        return True


def _to_number(value: str) -> int | float | None:
    """Parse a plain decimal literal. Underscores, `nan` and `inf` are not numbers here."""
    text = value.strip()
    if not _DECIMAL_LITERAL.fullmatch(text):
        return None
    if text.lstrip("+-").isdigit():
        return int(text)
    return float(text)


def _same_value(a: Any, b: Any) -> bool:
    if _is_nan(a) and _is_nan(b):
        return True
    return bool(a == b)


def _record_fields(value: Any) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        fields = {name: getattr(value, name) for name in type(value).model_fields}
        fields.update(value.model_extra or {})
        return fields
    if dataclasses.is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value) if f.compare}

    fields = dict(getattr(value, "__dict__", {}))
    for name in _slot_names(type(value)):
        if hasattr(value, name):
            fields[name] = getattr(value, name)
    return fields


class _DeepComparer:
    __slots__ = ("_context", "_max_depth", "_memo", "_strict", "_visiting")

    def __init__(self, *, strict: bool, max_depth: int | None, context: ScopeContext | None) -> None:
        self._strict = strict
        self._max_depth = max_depth
        self._context = context
        self._visiting: set[tuple[int, int]] = set()
        # The memo keeps both operands alive so their ids cannot be reused
        self._memo: dict[tuple[int, int], tuple[Any, Any, bool]] = {}

    def equal(self, a: Any, b: Any, depth: int) -> bool:
        if a is b:
            return True

        cat_a = _category(a)
        cat_b = _category(b)
        if cat_a != cat_b:
            return False

        match cat_a:
            case _Category.SCALAR:
                return self._scalar_equal(a, b)
            case _Category.PLAIN:
                return (not self._strict or type(a) is type(b)) and _same_value(a, b)
            case _Category.PATTERN:
                return a.pattern == b.pattern and a.flags == b.flags
            case _Category.REFERENCE:
                return False
            case _Category.CUSTOM_EQ:
                return (not self._strict or type(a) is type(b)) and bool(a == b)
            case _:
                pass

        return self._container_equal(cat_a, a, b, depth)

    def _container_equal(self, category: _Category, a: Any, b: Any, depth: int) -> bool:
        if self._max_depth is not None and depth > self._max_depth:
            self._depth_exceeded()

        key = (id(a), id(b))
        if key in self._visiting:
            return True
        memo = self._memo.get(key)
        if memo is not None:
            return memo[2]

        self._visiting.add(key)
        try:
            match category:
                case _Category.SEQUENCE:
                    result = self._sequence_equal(a, b, depth)
                case _Category.MAPPING:
                    result = self._strict_type_ok(a, b) and self._mapping_equal(a, b, depth)
                case _Category.SET:
                    result = self._strict_type_ok(a, b) and self._set_equal(a, b, depth)
                case _Category.BAG:
                    result = (
                        self._strict_type_ok(a, b)
                        and len(a) == len(b)
                        and self._pair_unordered(list(a), list(b), depth)
                    )
                case _Category.EXCEPTION:
                    result = (
                        type(a).__name__ == type(b).__name__
                        and self._strict_type_ok(a, b)
                        and self._sequence_equal(a.args, b.args, depth)
                    )
                case _:
                    result = self._record_equal(a, b, depth)
        finally:
            self._visiting.discard(key)

        self._memo[key] = (a, b, result)
        return result

    def _strict_type_ok(self, a: Any, b: Any) -> bool:
        return not self._strict or type(a) is type(b)

    def _depth_exceeded(self) -> None:
        msg = f"deep comparison exceeded the maximum depth of {self._max_depth}"
        logger.debug(msg)
        if self._context is not None:
            self._context.fatal(msg)
        raise RecursionError(msg)

    def _scalar_equal(self, a: Any, b: Any) -> bool:
        if self._strict:
            return _type_tag(a) == _type_tag(b) and _same_value(a, b)

        # Loose: a numeric string equals the number it spells
        if isinstance(a, str) and isinstance(b, numbers.Number):
            a = _to_number(a)
            if a is None:
                return False
        elif isinstance(b, str) and isinstance(a, numbers.Number):
            b = _to_number(b)
            if b is None:
                return False
        return _same_value(a, b)

    def _sequence_equal(self, a: Sequence[Any], b: Sequence[Any], depth: int) -> bool:
        if self._strict and type(a) is not type(b):
            return False
        if len(a) != len(b):
            return False
        return all(self.equal(item_a, item_b, depth + 1) for item_a, item_b in zip(a, b, strict=True))

    def _direct_hit(self, item: Any, lookup: Mapping[Any, Any], depth: int) -> Any:
        """Return the member of `lookup` that `item` hashes to, or `_MISSING`.

        Hash lookups treat `1`, `1.0` and `True` as the same member, so in strict
        mode the hit must also be deeply equal to `item`.
        """
        hit = lookup.get(item, _MISSING)
        if hit is _MISSING or hit is item or not self._strict:
            return hit
        return hit if self.equal(item, hit, depth + 1) else _MISSING

    def _pair_unordered(self, pending: list[Any], remaining: list[Any], depth: int) -> bool:
        """Pair every pending item with a distinct, deeply equal remaining item."""
        for item in pending:
            for idx, other in enumerate(remaining):
                if self.equal(item, other, depth + 1):
                    del remaining[idx]
                    break
            else:
                return False
        return True

    def _mapping_equal(self, a: Mapping[Any, Any], b: Mapping[Any, Any], depth: int) -> bool:
        if len(a) != len(b):
            return False

        # Keys found directly by hash are compared first, the rest are paired by deep equality
        b_keys = {key: key for key in b}
        matched: set[int] = set()
        pending: list[tuple[Any, Any]] = []
        for key, value in a.items():
            other_key = self._direct_hit(key, b_keys, depth)
            if other_key is _MISSING:
                pending.append((key, value))
                continue
            if not self.equal(value, b[other_key], depth + 1):
                return False
            matched.add(id(other_key))

        if not pending:
            return True

        remaining = [(key, value) for key, value in b.items() if id(key) not in matched]
        for key, value in pending:
            for idx, (other_key, other_value) in enumerate(remaining):
                if self.equal(key, other_key, depth + 1) and self.equal(value, other_value, depth + 1):
                    del remaining[idx]
                    break
            else:
                return False
        return True

    def _set_equal(self, a: Set[Any], b: Set[Any], depth: int) -> bool:
        if len(a) != len(b):
            return False

        b_items = {item: item for item in b}
        matched: set[int] = set()
        pending: list[Any] = []
        for item in a:
            other = self._direct_hit(item, b_items, depth)
            if other is _MISSING:
                pending.append(item)
            else:
                matched.add(id(other))

        if not pending:
            return True

        return self._pair_unordered(pending, [item for item in b if id(item) not in matched], depth)

    def _record_equal(self, a: Any, b: Any, depth: int) -> bool:
        if self._strict and type(a) is not type(b):
            return False
        # The field dicts are transient, compare them without memoising their ids
        return self._mapping_equal(_record_fields(a), _record_fields(b), depth)


def deep_equal(
    a: Any,
    b: Any,
    strict: bool = False,  # noqa: FBT001, FBT002
    *,
    max_depth: int | None = None,
    context: ScopeContext | None = None,
) -> bool:
    """Compare two values structurally.

    Args:
        a: The first value.
        b: The second value.
        strict: Require identical type tags for scalars and identical container types.
        max_depth: Maximum container nesting. Defaults to the `max_compare_depth` option
            of `context` when a context is given, otherwise unbounded.
        context: The scope context to report a depth overflow through.

    Returns:
        True if both values are deeply equal.

    Raises:
        AssertionFatal: If `max_depth` is exceeded and a context is given.
        RecursionError: If `max_depth` is exceeded without a context.

    Example:
        >>> deep_equal({"a": 1}, {"a": "1"})
        True
        >>> deep_equal({"a": 1}, {"a": "1"}, strict=True)
        False

    """
    if max_depth is None and context is not None:
        max_depth = context.opts.max_compare_depth
    return _DeepComparer(strict=strict, max_depth=max_depth, context=context).equal(a, b, 0)
