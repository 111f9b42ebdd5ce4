"""Closed enumeration of the value categories tripline can tell apart."""

import datetime
import enum
import inspect
import numbers
import re
from collections.abc import Mapping, Sequence, Set
from enum import StrEnum
from typing import Any, Self


class ValueType(StrEnum):
    """Category of a value as reported by `type_of`.

    Python has no separate runtime tag for "symbol", "undefined" or "bigint" values,
    so those categories do not exist here. Async functions and generator functions are
    regular functions at runtime, they are told apart by inspecting their code flags.
    """

    def __new__(cls, value: str, description: str) -> Self:
        # Each member is declared as `(tag, description)`, the description becomes its __doc__
        member = str.__new__(cls, value)
        member._value_ = value
        member.__doc__ = description
        return member

    NONE = "none", "The None singleton"
    BOOLEAN = "boolean", "True or False"
    NUMBER = "number", "Any numbers.Number other than bool (int, float, complex, Decimal, Fraction)"
    STRING = "string", "str"
    BYTES = "bytes", "bytes, bytearray or memoryview"
    ENUM = "enum", "A member of an Enum"
    FUNCTION = "function", "A plain function, method, builtin or lambda"
    ASYNC_FUNCTION = "asyncfunction", "A function defined with async def"
    GENERATOR_FUNCTION = "generatorfunction", "A function containing yield"
    CLASS = "class", "A class object"
    MODULE = "module", "A module object"
    GENERATOR = "generator", "A generator or async generator instance"
    COROUTINE = "coroutine", "A coroutine instance"
    EXCEPTION = "exception", "An exception instance"
    DATE = "date", "datetime, date or time"
    PATTERN = "pattern", "A compiled regular expression"
    MAPPING = "mapping", "Any Mapping (dict, OrderedDict, MappingProxyType, ...)"
    SET = "set", "Any AbstractSet (set, frozenset, dict views)"
    SEQUENCE = "sequence", "Any non-string Sequence (list, tuple, range, deque)"
    OBJECT = "object", "Anything else"


def type_of(value: Any) -> ValueType:  # noqa: C901, PLR0911, PLR0912
    """Return the category of a value."""
    if value is None:
        return ValueType.NONE
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, enum.Enum):
        return ValueType.ENUM
    if isinstance(value, numbers.Number):
        return ValueType.NUMBER
    if isinstance(value, str):
        return ValueType.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueType.BYTES
    if isinstance(value, type):
        return ValueType.CLASS
    if inspect.ismodule(value):
        return ValueType.MODULE
    if inspect.iscoroutinefunction(value) or inspect.isasyncgenfunction(value):
        return ValueType.ASYNC_FUNCTION
    if inspect.isgeneratorfunction(value):
        return ValueType.GENERATOR_FUNCTION
    if inspect.isroutine(value):
        return ValueType.FUNCTION
    if inspect.isgenerator(value) or inspect.isasyncgen(value):
        return ValueType.GENERATOR
    if inspect.iscoroutine(value):
        return ValueType.COROUTINE
    if isinstance(value, BaseException):
        return ValueType.EXCEPTION
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return ValueType.DATE
    if isinstance(value, re.Pattern):
        return ValueType.PATTERN
    if isinstance(value, Mapping):
        return ValueType.MAPPING
    if isinstance(value, Set):
        return ValueType.SET
    if isinstance(value, Sequence):
        return ValueType.SEQUENCE
    return ValueType.OBJECT
