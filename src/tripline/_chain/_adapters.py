"""Building scope functions from plain predicates, and negation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tripline._context import MsgSource, Phrase
from tripline._context._message import message_template

if TYPE_CHECKING:
    from collections.abc import Callable

    from tripline._context import ScopeContext

    from ._scope import AssertScope, ScopeFn


def _not_eval_message(ctx: ScopeContext, eval_msg: MsgSource = None) -> str:
    template = message_template(eval_msg)
    if isinstance(template, Phrase):
        return ctx.get_eval_message(template.negate())
    return "not " + ctx.get_eval_message(template)


def _not_eval(ctx: ScopeContext, expr: object, eval_msg: MsgSource = None, caused_by: BaseException | None = None) -> bool:
    __tracebackhide__ = True
    return ctx.eval(not expr, eval_msg, caused_by)


def not_op(scope: AssertScope) -> AssertScope:
    """Negate every following evaluation of the scope.

    The child context inverts `eval` and uses the negated template of a `Phrase`
    (or a "not " prefix for plain messages).
    """
    negate = not scope.context.get("negate")
    scope.update_ctx(
        scope.context.value,
        {"get_eval_message": _not_eval_message, "eval": _not_eval},
    )
    scope.context.set("negate", negate)
    return scope


def create_eval_adapter(
    eval_fn: Callable[..., object],
    eval_msg: MsgSource = None,
    func_name: str | None = None,
) -> ScopeFn:
    """Turn `eval_fn(actual, *args) -> bool` into a scope function.

    Example:
        >>> is_even = create_eval_adapter(lambda v: v % 2 == 0, "expected {value} to be even")
        >>> AssertScope(create_context(3)).exec(is_even)
        Traceback (most recent call last):
        ...
        tripline._errors.AssertionFailure: expected 3 to be even

    """
    name = func_name or getattr(eval_fn, "__name__", None) or "anonymous"

    def eval_adapter(scope: AssertScope, *args: Any) -> AssertScope:
        __tracebackhide__ = True
        context = scope.context
        context.push_stack_fn(eval_adapter)
        if context.opts.is_verbose:
            context.set_op(f"[[{name}]]")
        context.eval(eval_fn(context.value, *args), eval_msg)
        return scope

    eval_adapter.__name__ = name
    return eval_adapter


def create_not_adapter(scope_fn: ScopeFn) -> ScopeFn:
    """Wrap a scope function so it runs against a negated scope."""

    def not_adapter(scope: AssertScope, *args: Any, **kwargs: Any) -> Any:
        __tracebackhide__ = True
        context = scope.context
        context.push_stack_fn(not_adapter)
        if context.opts.is_verbose:
            context.set_op("[[not]]")
        not_op(scope)
        return scope.exec(scope_fn, *args, **kwargs)

    not_adapter.__name__ = f"not_{getattr(scope_fn, '__name__', 'anonymous')}"
    return not_adapter
