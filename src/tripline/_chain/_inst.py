"""The chainable assertion grammar.

The grammar is a small set of chain states. `Assertion` carries every predicate,
`.deep`, `.strictly` and `.nested` move to a restricted state whose predicates
compare differently. Language words return the same chain, `.not_` negates the
rest of the chain.

Example:
    >>> expect({"tea": "chai"}).to.deep.equal({"tea": "chai"})
    >>> expect([1, 2, 3]).to.have.length_of(3).and_.to.include(2)
    >>> expect(5).to.not_.be.above(10)

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from tripline._context import MsgSource, create_context

from . import _funcs as funcs
from ._adapters import not_op
from ._scope import AssertScope

if TYPE_CHECKING:
    import re
    from collections.abc import Callable

    from tripline._context import ScopeContext
    from tripline._types import ValueType

    from ._scope import ScopeFn

_MISSING: Any = funcs._MISSING  # noqa: SLF001


class _Chain:
    __slots__ = ("_scope",)

    def __init__(self, scope: AssertScope) -> None:
        self._scope = scope

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._scope.context.value!r})"

    @property
    def scope(self) -> AssertScope:
        return self._scope

    @property
    def context(self) -> ScopeContext:
        return self._scope.context

    @property
    def value(self) -> Any:
        """The current subject of the chain."""
        return self._scope.context.value

    def _word(self, name: str) -> Self:
        self._scope.context.set_op(name)
        return self

    def _run(self, name: str, fn: ScopeFn, *args: Any) -> Assertion:
        __tracebackhide__ = True
        self._scope.context.set_op(name)
        self._scope.exec(fn, *args)
        return Assertion(self._scope)

    @property
    def to(self) -> Self:
        return self._word("to")

    @property
    def be(self) -> Self:
        return self._word("be")

    @property
    def been(self) -> Self:
        return self._word("been")

    @property
    def is_(self) -> Self:
        return self._word("is")

    @property
    def that(self) -> Self:
        return self._word("that")

    @property
    def and_(self) -> Self:
        return self._word("and")

    @property
    def has(self) -> Self:
        return self._word("has")

    @property
    def have(self) -> Self:
        return self._word("have")

    @property
    def does(self) -> Self:
        return self._word("does")

    @property
    def not_(self) -> Self:
        """Negate every following predicate of the chain."""
        self._scope.context.set_op("not")
        not_op(self._scope)
        return self


class Assertion(_Chain):
    """The full assertion grammar for a subject."""

    __slots__ = ()

    @property
    def deep(self) -> DeepAssertion:
        self._scope.context.set_op("deep").set(funcs.DEEP, True)  # noqa: FBT003
        return DeepAssertion(self._scope)

    @property
    def strictly(self) -> StrictAssertion:
        self._scope.context.set_op("strictly").set(funcs.STRICT, True)  # noqa: FBT003
        return StrictAssertion(self._scope)

    @property
    def nested(self) -> NestedAssertion:
        self._scope.context.set_op("nested")
        return NestedAssertion(self._scope)

    def ok(self) -> Assertion:
        return self._run("ok", funcs.ok_func)

    def true(self) -> Assertion:
        return self._run("true", funcs.true_func)

    def false(self) -> Assertion:
        return self._run("false", funcs.false_func)

    def none(self) -> Assertion:
        return self._run("none", funcs.none_func)

    def exists(self) -> Assertion:
        return self._run("exists", funcs.exists_func)

    def equal(self, expected: Any, msg: MsgSource = None) -> Assertion:
        return self._run("equal", funcs.equal_func, expected, msg)

    def strict_equal(self, expected: Any, msg: MsgSource = None) -> Assertion:
        return self._run("strict_equal", funcs.strict_equal_func, expected, msg)

    def deep_equal(self, expected: Any, msg: MsgSource = None) -> Assertion:
        return self._run("deep_equal", funcs.deep_equal_func, expected, msg)

    def deep_strict_equal(self, expected: Any, msg: MsgSource = None) -> Assertion:
        return self._run("deep_strict_equal", funcs.deep_strict_equal_func, expected, msg)

    def instance_of(self, cls: type | tuple[type, ...], msg: MsgSource = None) -> Assertion:
        return self._run("instance_of", funcs.instance_of_func, cls, msg)

    def type_of(self, expected: ValueType | str, msg: MsgSource = None) -> Assertion:
        return self._run("type_of", funcs.type_of_func, expected, msg)

    def include(self, item: Any, msg: MsgSource = None) -> Assertion:
        return self._run("include", funcs.include_func, item, msg)

    def empty(self, msg: MsgSource = None) -> Assertion:
        return self._run("empty", funcs.empty_func, msg)

    def length_of(self, expected: int, msg: MsgSource = None) -> Assertion:
        return self._run("length_of", funcs.length_of_func, expected, msg)

    def above(self, bound: Any, msg: MsgSource = None) -> Assertion:
        return self._run("above", funcs.above_func, bound, msg)

    def below(self, bound: Any, msg: MsgSource = None) -> Assertion:
        return self._run("below", funcs.below_func, bound, msg)

    def at_least(self, bound: Any, msg: MsgSource = None) -> Assertion:
        return self._run("at_least", funcs.at_least_func, bound, msg)

    def at_most(self, bound: Any, msg: MsgSource = None) -> Assertion:
        return self._run("at_most", funcs.at_most_func, bound, msg)

    def within(self, low: Any, high: Any, msg: MsgSource = None) -> Assertion:
        return self._run("within", funcs.within_func, low, high, msg)

    def close_to(self, expected: float, delta: float, msg: MsgSource = None) -> Assertion:
        return self._run("close_to", funcs.close_to_func, expected, delta, msg)

    def match(self, pattern: str | re.Pattern[str], msg: MsgSource = None) -> Assertion:
        return self._run("match", funcs.match_func, pattern, msg)

    def one_of(self, options: Any, msg: MsgSource = None) -> Assertion:
        return self._run("one_of", funcs.one_of_func, options, msg)

    def satisfy(self, predicate: Callable[[Any], object], msg: MsgSource = None) -> Assertion:
        return self._run("satisfy", funcs.satisfy_func, predicate, msg)

    def raises(
        self,
        expected: Any = None,
        match: str | re.Pattern[str] | None = None,
        msg: MsgSource = None,
    ) -> Assertion:
        """Call the subject and check that it raises, the chain continues with the exception."""
        return self._run("raises", funcs.raises_func, expected, match, msg)

    # Defined last, the name shadows the builtin decorator in the class body
    def property(self, name: str, expected: Any = _MISSING, msg: MsgSource = None) -> Assertion:
        """Check for a property (key or attribute), the chain continues with its value."""
        return self._run("property", funcs.property_func, name, expected, msg)


class DeepAssertion(_Chain):
    """Chain state after `.deep`: comparisons use deep equality."""

    __slots__ = ()

    @property
    def strictly(self) -> DeepAssertion:
        self._scope.context.set_op("strictly").set(funcs.STRICT, True)  # noqa: FBT003
        return self

    @property
    def nested(self) -> NestedAssertion:
        self._scope.context.set_op("nested")
        return NestedAssertion(self._scope)

    def equal(self, expected: Any, msg: MsgSource = None) -> Assertion:
        return self._run("equal", funcs.equal_func, expected, msg)

    def include(self, item: Any, msg: MsgSource = None) -> Assertion:
        return self._run("include", funcs.include_func, item, msg)

    def one_of(self, options: Any, msg: MsgSource = None) -> Assertion:
        return self._run("one_of", funcs.one_of_func, options, msg)

    def property(self, name: str, expected: Any = _MISSING, msg: MsgSource = None) -> Assertion:
        return self._run("property", funcs.property_func, name, expected, msg)


class StrictAssertion(_Chain):
    """Chain state after `.strictly`: comparisons also require identical types."""

    __slots__ = ()

    @property
    def deep(self) -> DeepAssertion:
        self._scope.context.set_op("deep").set(funcs.DEEP, True)  # noqa: FBT003
        return DeepAssertion(self._scope)

    def equal(self, expected: Any, msg: MsgSource = None) -> Assertion:
        return self._run("equal", funcs.equal_func, expected, msg)

    def include(self, item: Any, msg: MsgSource = None) -> Assertion:
        return self._run("include", funcs.include_func, item, msg)

    def one_of(self, options: Any, msg: MsgSource = None) -> Assertion:
        return self._run("one_of", funcs.one_of_func, options, msg)


class NestedAssertion(_Chain):
    """Chain state after `.nested`: property names are paths such as `a.b[0].c`."""

    __slots__ = ()

    def property(self, path: str, expected: Any = _MISSING, msg: MsgSource = None) -> Assertion:
        return self._run("property", funcs.nested_property_func, path, expected, msg)


def expect(value: Any, init_msg: MsgSource = None) -> Assertion:
    """Start an assertion chain for `value`.

    Args:
        value: The subject of the assertion.
        init_msg: Prefix for failure messages, a string or a function evaluated
            only when the assertion fails.

    """
    context = create_context(value, init_msg, stack_start=expect, org_args=(value, init_msg))
    return Assertion(AssertScope(context))
