"""Scope functions implementing the predicates of the assertion chain.

Every function takes the assert scope first, stores the values it compares in the
current context (so they are available to the message as `{expected}` etc.) and
evaluates through `context.eval`, which applies any negation of the chain.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping, Set, Sized
from typing import TYPE_CHECKING, Any

from tripline._context import MsgSource, Phrase
from tripline._equality import deep_equal
from tripline._path import PropertyPath, get_property, get_value_by_path
from tripline._types import ValueType, type_of

from ._adapters import create_eval_adapter

if TYPE_CHECKING:
    from tripline._context import ScopeContext

    from ._scope import AssertScope

DEEP = "deep"
STRICT = "strict"

_MISSING: Any = object()

ok_func = create_eval_adapter(
    bool,
    Phrase("expected {value} to be truthy", "expected {value} to be falsy"),
    "ok",
)
true_func = create_eval_adapter(
    lambda value: value is True,
    Phrase("expected {value} to be True", "expected {value} to not be True"),
    "true",
)
false_func = create_eval_adapter(
    lambda value: value is False,
    Phrase("expected {value} to be False", "expected {value} to not be False"),
    "false",
)
none_func = create_eval_adapter(
    lambda value: value is None,
    Phrase("expected {value} to be None", "expected {value} to not be None"),
    "none",
)
exists_func = create_eval_adapter(
    lambda value: value is not None,
    Phrase("expected {value} to exist", "expected {value} to not exist"),
    "exists",
)


def _strict_equals(actual: Any, expected: Any) -> bool:
    if actual is expected:
        return True
    if type(actual) is not type(expected):
        return False
    if isinstance(actual, float) and math.isnan(actual) and math.isnan(expected):
        return True
    return bool(actual == expected)


def _values_equal(context: ScopeContext, actual: Any, expected: Any) -> bool:
    """Equality used by include, one_of and property, following the deep/strict flags."""
    if context.get(DEEP):
        return deep_equal(actual, expected, bool(context.get(STRICT)), context=context)
    if context.get(STRICT):
        return _strict_equals(actual, expected)
    return bool(actual == expected)


def equal_func(scope: AssertScope, expected: Any, eval_msg: MsgSource = None) -> AssertScope:
    """Compare the subject with `expected`, honouring the `deep` and `strict` flags."""
    context = scope.context
    if context.get(DEEP):
        if context.get(STRICT):
            return deep_strict_equal_func(scope, expected, eval_msg)
        return deep_equal_func(scope, expected, eval_msg)
    if context.get(STRICT):
        return strict_equal_func(scope, expected, eval_msg)

    context.set("expected", expected)
    context.eval(
        context.value == expected,
        eval_msg or Phrase("expected {value} to equal {expected}", "expected {value} to not equal {expected}"),
    )
    return scope


def strict_equal_func(scope: AssertScope, expected: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", expected)
    context.eval(
        _strict_equals(context.value, expected),
        eval_msg
        or Phrase("expected {value} to strictly equal {expected}", "expected {value} to not strictly equal {expected}"),
    )
    return scope


def deep_equal_func(scope: AssertScope, expected: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", expected)
    context.eval(
        deep_equal(context.value, expected, context=context),
        eval_msg
        or Phrase("expected {value} to deeply equal {expected}", "expected {value} to not deeply equal {expected}"),
    )
    return scope


def deep_strict_equal_func(scope: AssertScope, expected: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", expected)
    context.eval(
        deep_equal(context.value, expected, strict=True, context=context),
        eval_msg
        or Phrase(
            "expected {value} to deeply and strictly equal {expected}",
            "expected {value} to not deeply and strictly equal {expected}",
        ),
    )
    return scope


def instance_of_func(scope: AssertScope, cls: type | tuple[type, ...], eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    if not isinstance(cls, (type, tuple)):
        context.fatal(f"expected {cls!r} to be a class or a tuple of classes")
    context.set("expected", cls)
    context.eval(
        isinstance(context.value, cls),
        eval_msg
        or Phrase("expected {value} to be an instance of {expected}", "expected {value} to not be an instance of {expected}"),
    )
    return scope


def type_of_func(scope: AssertScope, expected: ValueType | str, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    try:
        expected_type = ValueType(expected)
    except ValueError:
        context.fatal(f"{expected!r} is not a known value type")
    actual_type = type_of(context.value)
    context.set("expected", str(expected_type))
    context.set("type", str(actual_type))
    context.eval(
        actual_type == expected_type,
        eval_msg or Phrase("expected {value} to be of type {expected}", "expected {value} to not be of type {expected}"),
    )
    return scope


def _includes(context: ScopeContext, container: Any, item: Any) -> bool:
    if isinstance(container, str):
        if not isinstance(item, str):
            context.fatal(f"expected a string to search for in {container!r}, got {type(item).__name__}")
        return item in container
    if isinstance(container, Mapping):
        if isinstance(item, Mapping):
            # Subset of entries
            return all(key in container and _values_equal(context, container[key], value) for key, value in item.items())
        return item in container
    if context.get(DEEP) or context.get(STRICT):
        return any(_values_equal(context, member, item) for member in container)
    return item in container


def include_func(scope: AssertScope, item: Any, eval_msg: MsgSource = None) -> AssertScope:
    """Check that the subject contains `item`.

    Strings are searched for a substring, mappings for a key (or for every entry of
    a mapping `item`), other iterables for a member.
    """
    context = scope.context
    container = context.value
    if not isinstance(container, (str, Mapping, Set)) and not hasattr(container, "__iter__"):
        context.fatal("expected {value} to be a string, a mapping, a set or an iterable")
    context.set("expected", item)
    context.eval(
        _includes(context, container, item),
        eval_msg or Phrase("expected {value} to include {expected}", "expected {value} to not include {expected}"),
    )
    return scope


def _require_length(context: ScopeContext) -> int:
    value = context.value
    if not isinstance(value, Sized):
        context.fatal("expected {value} to have a length")
    return len(value)


def empty_func(scope: AssertScope, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    length = _require_length(context)
    context.eval(
        length == 0,
        eval_msg or Phrase("expected {value} to be empty", "expected {value} to not be empty"),
    )
    return scope


def length_of_func(scope: AssertScope, expected: int, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    length = _require_length(context)
    context.set("expected", expected)
    context.set("length", length)
    context.eval(
        length == expected,
        eval_msg
        or Phrase(
            "expected {value} to have a length of {expected} but got {length}",
            "expected {value} to not have a length of {expected}",
        ),
    )
    return scope


def _compare(context: ScopeContext, compare: Callable[[Any], bool], *bounds: Any) -> bool:
    try:
        return compare(context.value)
    except TypeError as e:
        context.fatal(f"expected {{value}} to be comparable with {', '.join(repr(b) for b in bounds)}: {e}")


def above_func(scope: AssertScope, bound: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", bound)
    context.eval(
        _compare(context, lambda value: value > bound, bound),
        eval_msg or Phrase("expected {value} to be above {expected}", "expected {value} to be at most {expected}"),
    )
    return scope


def below_func(scope: AssertScope, bound: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", bound)
    context.eval(
        _compare(context, lambda value: value < bound, bound),
        eval_msg or Phrase("expected {value} to be below {expected}", "expected {value} to be at least {expected}"),
    )
    return scope


def at_least_func(scope: AssertScope, bound: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", bound)
    context.eval(
        _compare(context, lambda value: value >= bound, bound),
        eval_msg or Phrase("expected {value} to be at least {expected}", "expected {value} to be below {expected}"),
    )
    return scope


def at_most_func(scope: AssertScope, bound: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", bound)
    context.eval(
        _compare(context, lambda value: value <= bound, bound),
        eval_msg or Phrase("expected {value} to be at most {expected}", "expected {value} to be above {expected}"),
    )
    return scope


def within_func(scope: AssertScope, low: Any, high: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("low", low)
    context.set("high", high)
    context.eval(
        _compare(context, lambda value: low <= value <= high, low, high),
        eval_msg
        or Phrase("expected {value} to be within {low}..{high}", "expected {value} to not be within {low}..{high}"),
    )
    return scope


def close_to_func(scope: AssertScope, expected: float, delta: float, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", expected)
    context.set("delta", delta)
    context.eval(
        _compare(context, lambda value: abs(value - expected) <= delta, expected, delta),
        eval_msg
        or Phrase(
            "expected {value} to be close to {expected} +/- {delta}",
            "expected {value} to not be close to {expected} +/- {delta}",
        ),
    )
    return scope


def match_func(scope: AssertScope, pattern: str | re.Pattern[str], eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    if not isinstance(context.value, str):
        context.fatal("expected {value} to be a string")
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    context.set("expected", regex)
    context.eval(
        regex.search(context.value) is not None,
        eval_msg or Phrase("expected {value} to match {expected}", "expected {value} to not match {expected}"),
    )
    return scope


def one_of_func(scope: AssertScope, options: Any, eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", options)
    value = context.value
    context.eval(
        any(_values_equal(context, value, option) for option in options),
        eval_msg or Phrase("expected {value} to be one of {expected}", "expected {value} to not be one of {expected}"),
    )
    return scope


def satisfy_func(scope: AssertScope, predicate: Callable[[Any], object], eval_msg: MsgSource = None) -> AssertScope:
    context = scope.context
    context.set("expected", predicate)
    caused_by: Exception | None = None
    try:
        result = bool(predicate(context.value))
    except Exception as e:  # noqa: BLE001 - reported as the cause of the failure
        result = False
        caused_by = e
    context.eval(
        result,
        eval_msg or Phrase("expected {value} to satisfy {expected}", "expected {value} to not satisfy {expected}"),
        caused_by,
    )
    return scope


def _check_property(  # noqa: PLR0913
    scope: AssertScope,
    name: str,
    lookup: Callable[[Any], tuple[bool, Any]],
    expected: Any,
    eval_msg: MsgSource,
    phrases: tuple[Phrase, Phrase],
) -> AssertScope:
    context = scope.context
    context.set("property", name)
    caused_by: Exception | None = None
    try:
        found, value = lookup(context.value)
    except Exception as e:  # noqa: BLE001 - a failing getter fails the check
        found, value, caused_by = False, None, e

    if expected is _MISSING:
        context.eval(found, eval_msg or phrases[0], caused_by)
    else:
        context.set("expected", expected)
        context.set("property_value", value)
        context.eval(found and _values_equal(context, value, expected), eval_msg or phrases[1], caused_by)

    if found:
        scope.update_ctx(value)
    return scope


def property_func(
    scope: AssertScope,
    name: str,
    expected: Any = _MISSING,
    eval_msg: MsgSource = None,
) -> AssertScope:
    """Check that the subject has the property `name`, and continue with its value.

    Mappings are checked for the key, other values for the attribute.
    """
    return _check_property(
        scope,
        name,
        lambda value: get_property(value, name),
        expected,
        eval_msg,
        (
            Phrase("expected {value} to have property {property}", "expected {value} to not have property {property}"),
            Phrase(
                "expected {value} to have property {property} of {expected}, but got {property_value}",
                "expected {value} to not have property {property} of {expected}",
            ),
        ),
    )


def nested_property_func(
    scope: AssertScope,
    path: str,
    expected: Any = _MISSING,
    eval_msg: MsgSource = None,
) -> AssertScope:
    """Check that the subject has a property at a dotted / indexed path such as `a.b[0]`."""
    context = scope.context
    try:
        parsed = PropertyPath.parse(path)
    except ValueError as e:
        context.fatal(f"invalid property path {path!r}: {e}")

    return _check_property(
        scope,
        path,
        lambda value: get_value_by_path(value, parsed),
        expected,
        eval_msg,
        (
            Phrase(
                "expected {value} to have nested property {property}",
                "expected {value} to not have nested property {property}",
            ),
            Phrase(
                "expected {value} to have nested property {property} of {expected}, but got {property_value}",
                "expected {value} to not have nested property {property} of {expected}",
            ),
        ),
    )


def _error_matches(error: BaseException, expected: Any) -> bool:
    match expected:
        case None:
            return True
        case type() if issubclass(expected, BaseException):
            return isinstance(error, expected)
        case tuple():
            return any(_error_matches(error, item) for item in expected)
        case BaseException():
            return error is expected
        case str():
            return expected in str(error)
        case re.Pattern():
            return expected.search(str(error)) is not None
        case _:
            return False


def raises_func(
    scope: AssertScope,
    expected: Any = None,
    match: str | re.Pattern[str] | None = None,
    eval_msg: MsgSource = None,
) -> AssertScope:
    """Call the subject and check that it raises.

    `expected` may be an exception class (or tuple of classes), an exception
    instance, a message substring or a compiled pattern. `match` is searched for in
    the message of the raised exception. The chain continues with the raised
    exception as its subject.
    """
    context = scope.context
    fn = context.value
    if not callable(fn):
        context.fatal("expected {value} to be a function")

    raised: Exception | None = None
    try:
        fn()
    except Exception as e:  # noqa: BLE001 - the raised exception is the subject of the check
        raised = e

    context.set("expected", expected)
    context.set("raised", raised)
    matched = raised is not None and _error_matches(raised, expected)
    if matched and match is not None:
        context.set("match", match)
        matched = re.search(match, str(raised)) is not None

    if expected is None:
        phrase = Phrase(
            "expected {value} to raise an error",
            "expected {value} to not raise an error but it raised {raised}",
        )
    else:
        phrase = Phrase(
            "expected {value} to raise {expected} but it raised {raised}",
            "expected {value} to not raise {expected} but it raised {raised}",
        )
    context.eval(matched, eval_msg or phrase)

    if raised is not None:
        scope.update_ctx(raised)
    return scope
