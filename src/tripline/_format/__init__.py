"""Value formatting for assertion messages."""

__all__ = [
    "DEFAULT_FORMATTERS",
    "FormatCtx",
    "FormatManager",
    "FormatResult",
    "FormattedValue",
    "Formatter",
    "Removable",
    "escape_ansi",
    "finalize_message",
    "format_value",
]

from ._defaults import DEFAULT_FORMATTERS
from ._formatter import (
    FormatCtx,
    FormatResult,
    FormattedValue,
    Formatter,
    escape_ansi,
    finalize_message,
    format_value,
)
from ._manager import FormatManager, Removable
