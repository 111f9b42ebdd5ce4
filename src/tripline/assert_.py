"""Function style assertions.

Every function evaluates one predicate on a fresh root context. The optional
`msg` prefixes the failure message like the init message of `expect`.

Example:
    >>> from tripline import assert_
    >>> assert_.deep_equal({"tea": "chai"}, {"tea": "chai"})
    >>> assert_.equal(1, 2, "counting")
    Traceback (most recent call last):
    ...
    tripline._errors.AssertionFailure: counting: expected 1 to equal 2

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

from ._chain import AssertScope, create_not_adapter
from ._chain import _funcs as funcs
from ._chain._scope import is_actual_expected_form
from ._context import create_context

if TYPE_CHECKING:
    import re
    from collections.abc import Callable, Mapping

    from ._chain import ScopeFn
    from ._context import MsgSource

_not_none_func = create_not_adapter(funcs.none_func)
_not_equal_func = create_not_adapter(funcs.equal_func)
_not_strict_equal_func = create_not_adapter(funcs.strict_equal_func)
_not_deep_equal_func = create_not_adapter(funcs.deep_equal_func)
_not_deep_strict_equal_func = create_not_adapter(funcs.deep_strict_equal_func)
_not_include_func = create_not_adapter(funcs.include_func)
_not_raises_func = create_not_adapter(funcs.raises_func)


def _run(
    name: str,
    entry: Callable[..., Any],
    actual: Any,
    msg: MsgSource,
    fn: ScopeFn,
    *args: Any,
) -> AssertScope:
    __tracebackhide__ = True
    context = create_context(actual, msg, stack_start=entry, org_args=(actual, *args))
    scope = AssertScope(context)
    context.set_op(name)
    scope.exec(fn, *args)
    return scope


def ok(value: Any, msg: MsgSource = None) -> None:
    _run("ok", ok, value, msg, funcs.ok_func)


def is_true(value: Any, msg: MsgSource = None) -> None:
    _run("is_true", is_true, value, msg, funcs.true_func)


def is_false(value: Any, msg: MsgSource = None) -> None:
    _run("is_false", is_false, value, msg, funcs.false_func)


def is_none(value: Any, msg: MsgSource = None) -> None:
    _run("is_none", is_none, value, msg, funcs.none_func)


def is_not_none(value: Any, msg: MsgSource = None) -> None:
    _run("is_not_none", is_not_none, value, msg, _not_none_func)


def equal(actual: Any, expected: Any, msg: MsgSource = None) -> None:
    """Assert `actual == expected`."""
    _run("equal", equal, actual, msg, funcs.equal_func, expected)


def not_equal(actual: Any, expected: Any, msg: MsgSource = None) -> None:
    _run("not_equal", not_equal, actual, msg, _not_equal_func, expected)


def strict_equal(actual: Any, expected: Any, msg: MsgSource = None) -> None:
    """Assert `actual` is `expected`, or equal to it with the exact same type."""
    _run("strict_equal", strict_equal, actual, msg, funcs.strict_equal_func, expected)


def not_strict_equal(actual: Any, expected: Any, msg: MsgSource = None) -> None:
    _run("not_strict_equal", not_strict_equal, actual, msg, _not_strict_equal_func, expected)


def deep_equal(actual: Any, expected: Any, msg: MsgSource = None) -> None:
    """Assert structural equality, numeric strings equal the numbers they spell."""
    _run("deep_equal", deep_equal, actual, msg, funcs.deep_equal_func, expected)


def not_deep_equal(actual: Any, expected: Any, msg: MsgSource = None) -> None:
    _run("not_deep_equal", not_deep_equal, actual, msg, _not_deep_equal_func, expected)


def deep_strict_equal(actual: Any, expected: Any, msg: MsgSource = None) -> None:
    """Assert structural equality with identical types throughout."""
    _run("deep_strict_equal", deep_strict_equal, actual, msg, funcs.deep_strict_equal_func, expected)


def not_deep_strict_equal(actual: Any, expected: Any, msg: MsgSource = None) -> None:
    _run("not_deep_strict_equal", not_deep_strict_equal, actual, msg, _not_deep_strict_equal_func, expected)


def is_instance(value: Any, cls: type | tuple[type, ...], msg: MsgSource = None) -> None:
    _run("is_instance", is_instance, value, msg, funcs.instance_of_func, cls)


def includes(container: Any, item: Any, msg: MsgSource = None) -> None:
    _run("includes", includes, container, msg, funcs.include_func, item)


def not_includes(container: Any, item: Any, msg: MsgSource = None) -> None:
    _run("not_includes", not_includes, container, msg, _not_include_func, item)


def throws(
    fn: Callable[[], Any],
    expected: Any = None,
    match: str | re.Pattern[str] | None = None,
    msg: MsgSource = None,
) -> BaseException:
    """Assert that calling `fn` raises, and return the raised exception."""
    scope = _run("throws", throws, fn, msg, funcs.raises_func, expected, match)
    return scope.context.value


def does_not_throw(fn: Callable[[], Any], msg: MsgSource = None) -> None:
    _run("does_not_throw", does_not_throw, fn, msg, _not_raises_func)


def fail(*args: Any) -> NoReturn:
    """Fail unconditionally.

    Called as `fail(msg=None, details=None)` or `fail(actual, expected, msg=None, operator=None)`.
    `fail(1, 2)` compares two operands, `fail("msg", {"key": 1})` attaches details.
    """
    __tracebackhide__ = True
    actual = args[0] if is_actual_expected_form(args) else None
    AssertScope(create_context(actual, stack_start=fail, org_args=args)).fail(*args)


def fatal(msg: MsgSource = None, details: Mapping[str, Any] | None = None) -> NoReturn:
    """Fail unconditionally with an `AssertionFatal`."""
    __tracebackhide__ = True
    AssertScope(create_context(None, stack_start=fatal, org_args=(msg, details))).fatal(msg, details)
