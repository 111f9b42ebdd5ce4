"""Scope contexts and message composition."""

__all__ = [
    "MsgSource",
    "Phrase",
    "ScopeContext",
    "ScopeContextOverrides",
    "create_context",
    "raise_assertion",
    "resolve_message",
]

from ._message import MsgSource, Phrase, resolve_message
from ._scope import ScopeContext, ScopeContextOverrides, create_context, raise_assertion
