"""Assertion evaluation engine with deep equality and pluggable value formatting."""

__all__ = [
    "AssertOptions",
    "AssertScope",
    "AssertSession",
    "Assertion",
    "AssertionFailure",
    "AssertionFatal",
    "Config",
    "ConfigError",
    "DeepAssertion",
    "FormatCtx",
    "FormatError",
    "FormatManager",
    "FormatOptions",
    "FormatResult",
    "FormattedValue",
    "Formatter",
    "MsgSource",
    "NestedAssertion",
    "Phrase",
    "PropertyPath",
    "ScopeContext",
    "ScopeContextOverrides",
    "StrictAssertion",
    "TriplineError",
    "ValueType",
    "assert_",
    "assert_config",
    "configure_from_pyproject",
    "create_context",
    "create_eval_adapter",
    "create_not_adapter",
    "deep_equal",
    "escape_ansi",
    "expect",
    "finalize_message",
    "find_pyproject_toml",
    "format_value",
    "get_scope_context",
    "load_config",
    "type_of",
]

from . import assert_
from ._chain import (
    AssertScope,
    Assertion,
    DeepAssertion,
    NestedAssertion,
    StrictAssertion,
    create_eval_adapter,
    create_not_adapter,
    expect,
    get_scope_context,
)
from ._config import (
    AssertOptions,
    Config,
    FormatOptions,
    assert_config,
    configure_from_pyproject,
    find_pyproject_toml,
    load_config,
)
from ._context import MsgSource, Phrase, ScopeContext, ScopeContextOverrides, create_context
from ._equality import deep_equal
from ._errors import AssertionFailure, AssertionFatal, ConfigError, FormatError, TriplineError
from ._format import (
    FormatCtx,
    FormatManager,
    FormatResult,
    FormattedValue,
    Formatter,
    escape_ansi,
    finalize_message,
    format_value,
)
from ._path import PropertyPath
from ._session import AssertSession
from ._types import ValueType, type_of
