"""Tests for the scope context chain in tripline._context."""

from typing import Any

import pytest

from tripline import (
    AssertionFailure,
    AssertionFatal,
    AssertScope,
    Phrase,
    ScopeContext,
    create_context,
)
from tripline._chain import not_op


def _boom() -> str:
    msg = "no message for you"
    raise RuntimeError(msg)


class TestStore:
    """Tests for the named value store."""

    def test_child_shadows_parent(self) -> None:
        """A child's set() shadows the parent without changing it."""
        parent = create_context(1)
        parent.set("k", "p")
        child = parent.new(2)

        assert child.get("k") == "p"
        child.set("k", "c")
        assert child.get("k") == "c"
        assert parent.get("k") == "p"

    def test_parent_list_is_copied_into_child(self) -> None:
        """Mutating a list read from the parent does not affect the parent."""
        parent = create_context(1)
        parent.set("items", [1])
        child = parent.new(1)

        child.get("items").append(2)

        assert parent.get("items") == [1]
        assert child.get("items") == [1, 2]

    def test_parent_dict_is_copied_into_child(self) -> None:
        """Mutating a dict read from the parent does not affect the parent."""
        parent = create_context(1)
        parent.set("meta", {"a": 1})
        child = parent.new(1)

        child.get("meta")["b"] = 2

        assert parent.get("meta") == {"a": 1}

    def test_missing_key(self) -> None:
        """Unknown keys read as None."""
        assert create_context(1).new(2).get("nope") is None

    def test_keys_are_unique_and_ordered(self) -> None:
        """keys() lists ancestor keys first, each key once."""
        parent = create_context(1)
        parent.set("a", 1).set("b", 2)
        child = parent.new(1)
        child.set("b", 3).set("c", 4)

        assert child.keys() == ["a", "b", "c"]

    def test_set_op_builds_path(self) -> None:
        """set_op() records the operation and extends the operation path."""
        context = create_context(1)
        context.set_op("to").set_op("equal")

        assert context.get("operation") == "equal"
        assert context.get("op_path") == ["to", "equal"]

    def test_child_op_path_does_not_leak(self) -> None:
        """Operations added on a child are not seen by the parent."""
        parent = create_context(1)
        parent.set_op("to")
        child = parent.new(1)
        child.set_op("be")

        assert child.get("op_path") == ["to", "be"]
        assert parent.get("op_path") == ["to"]

    def test_get_details(self) -> None:
        """Details hold the subject as actual plus every stored value."""
        context = create_context(5)
        context.set("expected", 6)

        assert context.get_details() == {"actual": 5, "expected": 6}

    def test_child_inherits_init_msg_and_stack(self) -> None:
        """A child keeps the root's init message and stack functions."""
        root = create_context(1, "init", stack_start=_boom)
        child = root.new(2)

        assert child.init_msg == "init"
        assert child.stack_fn == [_boom]
        assert child.parent is root


class TestEvalMessages:
    """Tests for message composition on failure."""

    def test_eval_passes(self) -> None:
        """A truthy expression returns True."""
        assert create_context(1).eval(True, "never shown") is True  # noqa: FBT003

    def test_eval_message(self) -> None:
        """The eval message is used as is."""
        with pytest.raises(AssertionFailure) as exc_info:
            create_context(1).eval(False, "msg")  # noqa: FBT003

        assert exc_info.value.message == "msg"

    def test_init_message_prefix(self) -> None:
        """The init message prefixes the eval message."""
        with pytest.raises(AssertionFailure) as exc_info:
            create_context(1, "ctx").eval(False, "msg")  # noqa: FBT003

        assert exc_info.value.message == "ctx: msg"

    def test_init_message_alone(self) -> None:
        """Without an eval message or operation path, the init message is the message."""
        with pytest.raises(AssertionFailure) as exc_info:
            create_context(1, "ctx").eval(False)  # noqa: FBT003

        assert exc_info.value.message == "ctx"

    def test_lazy_init_message(self) -> None:
        """A callable init message is evaluated only on failure."""
        calls: list[int] = []

        def init() -> str:
            calls.append(1)
            return "lazy"

        context = create_context(1, init)
        context.eval(True)  # noqa: FBT003
        assert calls == []

        with pytest.raises(AssertionFailure, match="lazy: msg"):
            context.eval(False, "msg")  # noqa: FBT003
        assert calls == [1]

    def test_operation_path_fallback(self) -> None:
        """Without a message, the operation path is used."""
        context = create_context(1)
        context.set_op("to").set_op("be")

        with pytest.raises(AssertionFailure) as exc_info:
            context.eval(False)  # noqa: FBT003

        assert exc_info.value.message == "to be"

    def test_default_message(self) -> None:
        """Without any message source, the configured default is used."""
        with pytest.raises(AssertionFailure) as exc_info:
            create_context(1).eval(False)  # noqa: FBT003

        assert exc_info.value.message == "assertion failure"

    def test_tokens(self) -> None:
        """Tokens are rendered through the formatter pipeline."""
        context = create_context({"tea": "chai"})
        context.set("expected", [1])

        with pytest.raises(AssertionFailure) as exc_info:
            context.eval(False, "expected {value} to be {expected}, {unknown} stays")  # noqa: FBT003

        assert exc_info.value.message == 'expected {tea:"chai"} to be [1], {unknown} stays'

    def test_escaped_brace_is_kept(self) -> None:
        """A double brace is not treated as a token."""
        with pytest.raises(AssertionFailure) as exc_info:
            create_context(1).eval(False, "{{value}}")  # noqa: FBT003

        assert exc_info.value.message == "{{value}}"

    def test_path_token(self) -> None:
        """{path} renders the operation path."""
        context = create_context(1)
        context.set_op("to").set_op("equal")

        with pytest.raises(AssertionFailure) as exc_info:
            context.eval(False, "failed at {path}")  # noqa: FBT003

        assert exc_info.value.message == 'failed at "to equal"'

    def test_phrase_uses_affirmative_form(self) -> None:
        """A Phrase renders its affirmative template."""
        with pytest.raises(AssertionFailure) as exc_info:
            create_context(3).eval(False, Phrase("expected {value} to be even", "expected {value} to be odd"))  # noqa: FBT003

        assert exc_info.value.message == "expected 3 to be even"

    def test_finalize_applies_to_whole_message(self) -> None:
        """The finalize step escapes control characters of the composed message."""
        context = create_context("\x1b[31m", "\x1b", config={"format": {"finalize": True}})

        with pytest.raises(AssertionFailure) as exc_info:
            context.eval(False, "got {value}")  # noqa: FBT003

        assert exc_info.value.message == '\\x1b: got "\\x1b[31m"'

    def test_failing_message_is_wrapped(self) -> None:
        """An error while composing the message becomes the cause of the failure."""
        with pytest.raises(AssertionFailure) as exc_info:
            create_context(1).eval(False, _boom)  # noqa: FBT003

        error = exc_info.value
        assert error.message == "assertion failure"
        assert isinstance(error.inner_exception, RuntimeError)
        assert error.__cause__ is error.inner_exception
        assert error.actual == 1

    def test_failing_init_message_keeps_caused_by(self) -> None:
        """A failing init message does not hide the cause passed to eval."""
        cause = ValueError("getter")

        with pytest.raises(AssertionFailure) as exc_info:
            create_context(1, _boom).eval(False, "msg", cause)  # noqa: FBT003

        error = exc_info.value
        assert error.message == "msg"
        assert error.inner_exception is cause
        assert isinstance(error.__cause__, RuntimeError)
        assert error.__cause__.__context__ is cause
        assert error.actual == 1

    def test_caused_by(self) -> None:
        """A cause passed to eval is attached to the failure."""
        cause = KeyError("k")

        with pytest.raises(AssertionFailure) as exc_info:
            create_context(1).eval(False, "msg", cause)  # noqa: FBT003

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.inner_exception is cause


class TestOverrides:
    """Tests for overriding message and evaluation behaviour on a child."""

    def test_get_message_override_reaches_parent(self) -> None:
        """An override calling the same method gets the ancestors' result."""

        def loud(ctx: ScopeContext, eval_msg: Any = None) -> str:
            return ctx.get_message(eval_msg) + "!"

        child = create_context(1).new(1, {"get_message": loud})

        with pytest.raises(AssertionFailure) as exc_info:
            child.eval(False, "msg")  # noqa: FBT003

        assert exc_info.value.message == "msg!"

    def test_overrides_stack(self) -> None:
        """Overrides of several generations are applied innermost first."""

        def suffix(text: str) -> Any:
            def get_message(ctx: ScopeContext, eval_msg: Any = None) -> str:
                return ctx.get_message(eval_msg) + text

            return get_message

        child = create_context(1).new(1, {"get_message": suffix("a")}).new(1, {"get_message": suffix("b")})

        with pytest.raises(AssertionFailure) as exc_info:
            child.eval(False, "msg")  # noqa: FBT003

        assert exc_info.value.message == "msgab"

    def test_override_sees_starting_context(self) -> None:
        """Overrides receive the context the call started on."""
        seen: list[Any] = []

        def get_details(ctx: ScopeContext) -> dict[str, Any]:
            seen.append(ctx.value)
            return {"actual": ctx.value}

        grandchild = create_context(1).new(2, {"get_details": get_details}).new(3)

        assert grandchild.get_details() == {"actual": 3}
        assert seen == [3]

    def test_eval_override(self) -> None:
        """eval can be replaced, for example to invert the result."""

        def inverted(ctx: ScopeContext, expr: object, eval_msg: Any = None, caused_by: Any = None) -> bool:
            return ctx.eval(not expr, eval_msg, caused_by)

        child = create_context(1).new(1, {"eval": inverted})

        assert child.eval(False) is True  # noqa: FBT003
        with pytest.raises(AssertionFailure, match="inverted"):
            child.eval(True, "inverted")  # noqa: FBT003

    def test_fatal_bypasses_overrides(self) -> None:
        """fatal() ignores get_message overrides of every ancestor."""

        def loud(ctx: ScopeContext, eval_msg: Any = None) -> str:
            return ctx.get_message(eval_msg) + "!"

        child = create_context(1, "ctx").new(1, {"get_message": loud}).new(2)

        with pytest.raises(AssertionFatal) as exc_info:
            child.fatal("boom")

        assert exc_info.value.message == "ctx: boom"

    def test_fatal_default_message(self) -> None:
        """fatal() without a message uses the configured fatal message."""
        with pytest.raises(AssertionFatal) as exc_info:
            create_context(1).fatal()

        assert exc_info.value.message == "fatal assertion failure"
        assert isinstance(exc_info.value, AssertionFailure)
        assert isinstance(exc_info.value, AssertionError)


class TestNegation:
    """Tests for the negating child context."""

    def test_negated_eval(self) -> None:
        """A negated context passes on falsy expressions."""
        scope = not_op(AssertScope(create_context(1)))

        assert scope.context.eval(False) is True  # noqa: FBT003
        assert scope.context.get("negate") is True

    def test_negated_phrase(self) -> None:
        """A negated context uses the negated template of a Phrase."""
        scope = not_op(AssertScope(create_context(1)))

        with pytest.raises(AssertionFailure) as exc_info:
            scope.context.eval(True, Phrase("expected {value} to be one", "expected {value} to not be one"))  # noqa: FBT003

        assert exc_info.value.message == "expected 1 to not be one"

    def test_negated_plain_message(self) -> None:
        """A plain message is negated with a "not " prefix."""
        scope = not_op(AssertScope(create_context(1)))

        with pytest.raises(AssertionFailure) as exc_info:
            scope.context.eval(True, "positive")  # noqa: FBT003

        assert exc_info.value.message == "not positive"

    def test_double_negation(self) -> None:
        """Negating twice restores the original behaviour."""
        scope = not_op(not_op(AssertScope(create_context(1))))

        assert scope.context.eval(True) is True  # noqa: FBT003
        assert scope.context.get("negate") is False
        with pytest.raises(AssertionFailure) as exc_info:
            scope.context.eval(False, Phrase("expected {value} to be one", "expected {value} to not be one"))  # noqa: FBT003

        assert exc_info.value.message == "expected 1 to be one"

    def test_negation_does_not_change_parent(self) -> None:
        """The root context keeps evaluating normally after negation."""
        root = create_context(1)
        not_op(AssertScope(root))

        with pytest.raises(AssertionFailure):
            root.eval(False)  # noqa: FBT003
