"""The assert scope owning the current context of an assertion chain."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, NoReturn, Protocol, Self

from tripline._context import ScopeContext, create_context, raise_assertion
from tripline._errors import AssertionFailure, AssertionFatal
from tripline._session import record_context

if TYPE_CHECKING:
    from tripline._context import MsgSource, ScopeContextOverrides

logger = logging.getLogger(__name__)

_MISSING: Any = object()


def is_actual_expected_form(args: tuple[Any, ...]) -> bool:
    """Tell `fail(actual, expected, ...)` apart from `fail(msg, details)`.

    Two arguments are the operands when the second one is not a details mapping.
    """
    if len(args) > 2:  # noqa: PLR2004
        return True
    return len(args) == 2 and args[1] is not None and not isinstance(args[1], Mapping)  # noqa: PLR2004


class ScopeFn(Protocol):
    """A function run against an assert scope, the scope is its first argument."""

    def __call__(self, scope: AssertScope, /, *args: Any, **kwargs: Any) -> Any: ...


class AssertScope:
    """Owns the current context of an assertion chain.

    Operations that change the subject or the message rules replace the current
    context with a child, so earlier contexts are never mutated.
    """

    __slots__ = ("_context",)

    def __init__(self, context: ScopeContext) -> None:
        self._context = context
        record_context(context)

    @property
    def context(self) -> ScopeContext:
        return self._context

    def update_ctx(self, value: Any, overrides: ScopeContextOverrides | None = None) -> Self:
        """Move to a child context when the value changes or overrides are supplied."""
        if value is not self._context.value or overrides:
            self._context = self._context.new(value, overrides)
            record_context(self._context)
        return self

    def new_scope(self, value: Any = _MISSING) -> AssertScope:
        """Create an independent scope on a child context, for the current value by default."""
        if value is _MISSING:
            value = self._context.value
        return AssertScope(self._context.new(value))

    def exec(self, fn: ScopeFn, *args: Any, func_name: str | None = None, **kwargs: Any) -> Any:
        """Run a scope function against this scope.

        The function's frames are excluded from the reported stack and its name is
        stored as `exec` (and added to the operation path in verbose mode).
        """
        __tracebackhide__ = True
        name = func_name or getattr(fn, "__name__", None) or "anonymous"
        context = self._context
        if context.opts.is_verbose:
            context.set_op(f"[[{name}]]")
        context.set("exec", name)
        context.push_stack_fn(fn)
        return fn(self, *args, **kwargs)

    def fail(self, *args: Any) -> NoReturn:
        """Fail the assertion.

        Accepts either `fail(msg=None, details=None)` or
        `fail(actual, expected, msg=None, operator=None)`. Two arguments are read as
        `actual, expected` unless the second one is a mapping or None. The message is
        composed without applying any override.
        """
        __tracebackhide__ = True
        context = self._context
        details: Mapping[str, Any] | None = None
        if is_actual_expected_form(args):
            actual, expected, *rest = args
            msg: MsgSource = rest[0] if rest else None
            context.set("actual", actual)
            context.set("expected", expected)
            if len(rest) > 1 and rest[1] is not None:
                context.set("operator", rest[1])
        else:
            msg = args[0] if args else None
            details = args[1] if len(args) > 1 else None

        raise_assertion(
            context,
            AssertionFailure,
            msg or context.opts.def_assert_msg,
            details,
            None,
            None,
            default_msg=context.opts.def_assert_msg,
            skip_overrides=True,
        )

    def fatal(self, msg: MsgSource = None, details: Mapping[str, Any] | None = None) -> NoReturn:
        __tracebackhide__ = True
        raise_assertion(
            self._context,
            AssertionFatal,
            msg or self._context.opts.def_fatal_msg,
            details,
            None,
            None,
            default_msg=self._context.opts.def_fatal_msg,
            skip_overrides=True,
        )


def get_scope_context(value: Any) -> ScopeContext:
    """Return the context of a context, a scope or an assertion chain.

    Any other value gets a new root context.
    """
    if isinstance(value, ScopeContext):
        return value
    if isinstance(value, AssertScope):
        return value.context
    scope = getattr(value, "scope", None)
    if isinstance(scope, AssertScope):
        return scope.context
    return create_context(value)
