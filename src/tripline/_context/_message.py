"""Composition of assertion messages from an init message, an eval message and the context."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tripline._format import format_value

if TYPE_CHECKING:
    from ._scope import ScopeContext


@dataclass(frozen=True, slots=True)
class Phrase:
    """Message template of a predicate in its affirmative and negated form.

    Templates may contain `{name}` tokens. `{value}` renders the subject, `{path}`
    the operation path and any other name the matching assertion detail. Tokens
    are rendered through the formatter pipeline, `{{` is kept as is.

    Example:
        >>> Phrase("expected {value} to be truthy", "expected {value} to be falsy")

    """

    affirm: str
    negated: str | None = None

    def __str__(self) -> str:
        return self.affirm

    def negate(self) -> Phrase:
        """Return the phrase with its polarity inverted.

        A phrase without a negated template is negated by prefixing "not ".
        """
        if self.negated is None:
            return Phrase(f"not {self.affirm}", self.affirm)
        return Phrase(self.negated, self.affirm)


type MsgSource = str | Phrase | Callable[[], str | Phrase] | None


def message_template(msg: MsgSource) -> str | Phrase | None:
    """Evaluate a lazily supplied message."""
    if callable(msg) and not isinstance(msg, Phrase):
        return msg()
    return msg


def resolve_tokens(ctx: ScopeContext, message: str) -> str:
    """Replace the `{name}` tokens of a message, unknown tokens are kept verbatim."""
    if "{" not in message:
        return message

    details = ctx.get_details()
    start = 0
    while True:
        open_pos = message.find("{", start)
        if open_pos == -1:
            break
        if message[open_pos + 1 : open_pos + 2] == "{":
            start = open_pos + 2
            continue
        close_pos = message.find("}", open_pos)
        if close_pos == -1:
            break

        token = message[open_pos + 1 : close_pos]
        value: Any
        if token in details:
            value = details[token]
        elif token == "value":
            value = details.get("actual")
        elif token == "path":
            value = " ".join(ctx.get("op_path") or ())
        else:
            start = open_pos + 1
            continue

        prefix = message[:open_pos] + format_value(ctx.opts, value)
        message = prefix + message[close_pos + 1 :]
        start = len(prefix)

    return message


def resolve_message(ctx: ScopeContext, msg: MsgSource) -> str:
    template = message_template(msg)
    if not template:
        return ""
    return resolve_tokens(ctx, str(template))


def default_get_message(ctx: ScopeContext, eval_msg: MsgSource = None, *, skip_overrides: bool = False) -> str:
    init_msg = resolve_message(ctx, ctx.init_msg)
    message = ctx.get_eval_message(eval_msg, skip_overrides)
    if init_msg:
        return f"{init_msg}: {message}" if message else init_msg
    return message


def default_get_eval_message(ctx: ScopeContext, eval_msg: MsgSource = None, *, skip_overrides: bool = False) -> str:  # noqa: ARG001
    message = resolve_message(ctx, eval_msg)
    if message:
        return message
    op_path = ctx.get("op_path")
    return " ".join(op_path) if op_path else ""


def default_get_details(ctx: ScopeContext, *, skip_overrides: bool = False) -> dict[str, Any]:  # noqa: ARG001
    details: dict[str, Any] = {"actual": ctx.value}
    for key in ctx.keys():
        details[key] = ctx.get(key)
    return details


def fallback_message(msg: MsgSource, default_msg: str) -> str:
    """Message used when composing the real message failed. Never calls `msg`."""
    if isinstance(msg, str) and msg:
        return msg
    if isinstance(msg, Phrase):
        return msg.affirm
    return default_msg
