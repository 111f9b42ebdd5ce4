"""The scope context chain threading value, options and message rules through an assertion."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, NoReturn, Self, TypedDict

from tripline._config import Config, assert_config
from tripline._errors import AssertionFailure, AssertionFatal, StackStart
from tripline._format import finalize_message
from tripline._session import record_failure

from ._message import (
    MsgSource,
    default_get_details,
    default_get_eval_message,
    default_get_message,
    fallback_message,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class ScopeContextOverrides(TypedDict, total=False):
    """Functions a child context can supply to customize message and failure behaviour.

    Each override is called with the context the call started on as its first
    argument followed by the original arguments. Calling the same method on that
    context from inside the override reaches the behaviour of the ancestors.
    """

    get_message: Callable[..., str]
    get_eval_message: Callable[..., str]
    get_details: Callable[..., dict[str, Any]]
    eval: Callable[..., bool]
    fail: Callable[..., NoReturn]


def _as_stack_list(stack_start: StackStart | Iterable[StackStart] | None) -> list[StackStart]:
    if stack_start is None:
        return []
    if callable(stack_start) or not isinstance(stack_start, Iterable):
        return [stack_start]
    return list(stack_start)


def raise_assertion(  # noqa: PLR0913
    ctx: ScopeContext,
    error_cls: type[AssertionFailure],
    msg: MsgSource,
    details: Mapping[str, Any] | None,
    stack_start: StackStart | Iterable[StackStart] | None,
    caused_by: BaseException | None,
    *,
    default_msg: str,
    skip_overrides: bool,
) -> NoReturn:
    """Compose the final message and raise `error_cls`.

    The finalize step is applied here, once, to the complete message. If composing
    the message raises, the error is still raised with a fallback message and the
    composition error as its `__cause__`. `inner_exception` stays `caused_by` when
    one was given, otherwise it is the composition error.
    """
    __tracebackhide__ = True
    props = dict(details) if details is not None else ctx.get_details()
    stack = None if ctx.opts.full_stack else [*ctx.stack_fn, *_as_stack_list(stack_start)]

    try:
        message = ctx.get_message(msg, skip_overrides) or default_msg
        message = finalize_message(ctx.opts, message)
    except Exception as e:
        logger.debug("Failed to compose the assertion message", exc_info=True)
        error = error_cls(
            fallback_message(msg, default_msg),
            props,
            stack,
            inner_exception=caused_by if caused_by is not None else e,
        )
        if caused_by is not None and e.__context__ is None:
            e.__context__ = caused_by
        record_failure(error)
        raise error from e

    logger.debug(f"Raising {error_cls.__name__}: {message}")
    error = error_cls(message, props, stack, inner_exception=caused_by)
    record_failure(error)
    if caused_by is not None:
        raise error from caused_by
    raise error


def default_eval(
    ctx: ScopeContext,
    expr: object,
    eval_msg: MsgSource = None,
    caused_by: BaseException | None = None,
    *,
    skip_overrides: bool = False,  # noqa: ARG001
) -> bool:
    __tracebackhide__ = True
    if not expr:
        ctx.fail(eval_msg, ctx.get_details(), ctx.stack_fn, caused_by)
    return True


def default_fail(  # noqa: PLR0913
    ctx: ScopeContext,
    msg: MsgSource = None,
    details: Mapping[str, Any] | None = None,
    stack_start: StackStart | Iterable[StackStart] | None = None,
    caused_by: BaseException | None = None,
    *,
    skip_overrides: bool = False,
) -> NoReturn:
    __tracebackhide__ = True
    raise_assertion(
        ctx,
        AssertionFailure,
        msg,
        details,
        stack_start,
        caused_by,
        default_msg=ctx.opts.def_assert_msg,
        skip_overrides=skip_overrides,
    )


_DEFAULTS: dict[str, Callable[..., Any]] = {
    "get_message": default_get_message,
    "get_eval_message": default_get_eval_message,
    "get_details": default_get_details,
    "eval": default_eval,
    "fail": default_fail,
}


class ScopeContext:
    """A node of the evaluation chain.

    A context holds the subject value, the resolved options and a named value store
    whose lookups fall back to the parent. Children never mutate their parent:
    `set` only writes the local store, and list or dict values read from the parent
    are copied into the child before they are returned.
    """

    __slots__ = (
        "_calling",
        "_init_msg",
        "_opts",
        "_org_args",
        "_overrides",
        "_parent",
        "_stack_fn",
        "_store",
        "_value",
    )

    def __init__(  # noqa: PLR0913
        self,
        value: Any,
        opts: Config,
        *,
        parent: ScopeContext | None = None,
        overrides: ScopeContextOverrides | None = None,
        init_msg: MsgSource = None,
        org_args: Sequence[Any] = (),
        stack_fn: Iterable[StackStart] = (),
    ) -> None:
        self._value = value
        self._opts = opts
        self._parent = parent
        self._overrides: ScopeContextOverrides = overrides or {}
        self._init_msg = init_msg
        self._org_args = tuple(org_args)
        self._stack_fn: list[StackStart] = list(stack_fn)
        self._store: dict[str, Any] = {}
        self._calling: set[str] = set()

    def __repr__(self) -> str:
        return f"ScopeContext(value={self._value!r}, keys={self.keys()!r})"

    @property
    def value(self) -> Any:
        return self._value

    @property
    def opts(self) -> Config:
        return self._opts

    @property
    def org_args(self) -> tuple[Any, ...]:
        return self._org_args

    @property
    def stack_fn(self) -> list[StackStart]:
        """Functions whose frames are removed from the reported stack, only ever appended to."""
        return self._stack_fn

    @property
    def parent(self) -> ScopeContext | None:
        return self._parent

    @property
    def init_msg(self) -> MsgSource:
        return self._init_msg

    def push_stack_fn(self, fn: StackStart) -> None:
        if fn not in self._stack_fn:
            self._stack_fn.append(fn)

    def _dispatch(self, name: str, target: ScopeContext, *args: Any, skip_overrides: bool = False) -> Any:
        override = None if skip_overrides else self._overrides.get(name)
        if override is not None and name not in self._calling:
            self._calling.add(name)
            try:
                return override(target, *args)
            finally:
                self._calling.discard(name)

        if self._parent is not None:
            return self._parent._dispatch(name, target, *args, skip_overrides=skip_overrides)  # noqa: SLF001
        return _DEFAULTS[name](target, *args, skip_overrides=skip_overrides)

    def get_message(self, eval_msg: MsgSource = None, skip_overrides: bool = False) -> str:  # noqa: FBT001, FBT002
        """Compose the full message: the init message (if any), then the eval message."""
        return self._dispatch("get_message", self, eval_msg, skip_overrides=skip_overrides)

    def get_eval_message(self, eval_msg: MsgSource = None, skip_overrides: bool = False) -> str:  # noqa: FBT001, FBT002
        """Resolve the eval message, falling back to the operation path when it is empty."""
        return self._dispatch("get_eval_message", self, eval_msg, skip_overrides=skip_overrides)

    def get_details(self) -> dict[str, Any]:
        """Return the subject as `actual` together with every stored value."""
        return self._dispatch("get_details", self)

    def eval(self, expr: object, eval_msg: MsgSource = None, caused_by: BaseException | None = None) -> bool:
        """Return True if `expr` is truthy, otherwise fail with `eval_msg`.

        Raises:
            AssertionFailure: If `expr` is falsy.

        """
        __tracebackhide__ = True
        return self._dispatch("eval", self, expr, eval_msg, caused_by)

    def fail(
        self,
        msg: MsgSource = None,
        details: Mapping[str, Any] | None = None,
        stack_start: StackStart | Iterable[StackStart] | None = None,
        caused_by: BaseException | None = None,
    ) -> NoReturn:
        """Raise an `AssertionFailure` with the composed message."""
        __tracebackhide__ = True
        self._dispatch("fail", self, msg, details, stack_start, caused_by)
        error_msg = "fail override returned instead of raising"
        raise AssertionError(error_msg)

    def fatal(
        self,
        msg: MsgSource = None,
        details: Mapping[str, Any] | None = None,
        stack_start: StackStart | Iterable[StackStart] | None = None,
    ) -> NoReturn:
        """Raise an `AssertionFatal`.

        The message ignores every override of this context and its ancestors.
        """
        __tracebackhide__ = True
        raise_assertion(
            self,
            AssertionFatal,
            msg or self._opts.def_fatal_msg,
            details,
            stack_start,
            None,
            default_msg=self._opts.def_fatal_msg,
            skip_overrides=True,
        )

    def get(self, name: str) -> Any:
        if name in self._store:
            return self._store[name]
        if self._parent is None:
            return None

        value = self._parent.get(name)
        if type(value) is list:
            value = list(value)
            self._store[name] = value
        elif type(value) is dict:
            value = dict(value)
            self._store[name] = value
        return value

    def set(self, name: str, value: Any) -> Self:
        self._store[name] = value
        return self

    def keys(self) -> list[str]:
        keys = self._parent.keys() if self._parent is not None else []
        keys.extend(key for key in self._store if key not in keys)
        return keys

    def set_op(self, name: str) -> Self:
        """Record `name` as the current operation and append it to the operation path."""
        self.set("operation", name)
        op_path = self.get("op_path")
        if op_path is None:
            op_path = []
            self.set("op_path", op_path)
        op_path.append(name)
        return self

    def new(self, value: Any, overrides: ScopeContextOverrides | None = None) -> ScopeContext:
        """Create a child context for `value`."""
        return ScopeContext(
            value,
            self._opts,
            parent=self,
            overrides=overrides,
            init_msg=self._init_msg,
            org_args=self._org_args,
            stack_fn=self._stack_fn,
        )


def create_context(
    value: Any = None,
    init_msg: MsgSource = None,
    stack_start: StackStart | Iterable[StackStart] | None = None,
    org_args: Sequence[Any] | None = None,
    config: Config | Mapping[str, Any] | None = None,
) -> ScopeContext:
    """Create a root context.

    The options are cloned from `config` (or from `assert_config`, with `config`
    applied as overrides when it is a mapping) so later changes to the global
    configuration only affect contexts created afterwards.
    """
    if isinstance(config, Config):
        opts = config.clone()
    else:
        opts = assert_config.clone(config)

    logger.debug(f"Creating root context for {type(value).__name__} value")
    return ScopeContext(
        value,
        opts,
        init_msg=init_msg,
        org_args=org_args or (),
        stack_fn=_as_stack_list(stack_start),
    )
