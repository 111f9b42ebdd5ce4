"""Assertion chain grammar and the scope it runs on."""

__all__ = [
    "AssertScope",
    "Assertion",
    "DeepAssertion",
    "NestedAssertion",
    "ScopeFn",
    "StrictAssertion",
    "create_eval_adapter",
    "create_not_adapter",
    "expect",
    "get_scope_context",
    "not_op",
]

from ._adapters import create_eval_adapter, create_not_adapter, not_op
from ._inst import Assertion, DeepAssertion, NestedAssertion, StrictAssertion, expect
from ._scope import AssertScope, ScopeFn, get_scope_context
