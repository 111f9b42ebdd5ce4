"""Registry of custom formatters attached to a configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from ._formatter import Formatter

logger = logging.getLogger(__name__)


class Removable:
    """Handle returned by `FormatManager.add_formatter`, removes the registration once."""

    __slots__ = ("_formatters", "_manager")

    def __init__(self, manager: FormatManager, formatters: Sequence[Formatter]) -> None:
        self._manager: FormatManager | None = manager
        self._formatters = tuple(formatters)

    def rm(self) -> None:
        if self._manager is None:
            return
        self._manager.remove_formatter(self._formatters)
        self._manager = None


class FormatManager:
    """Ordered list of custom formatters with an optional parent manager.

    Formatters registered on this manager are tried before the ones of the parent,
    each group in registration order.
    """

    __slots__ = ("_formatters", "parent")

    def __init__(self, parent: FormatManager | None = None) -> None:
        self.parent = parent
        self._formatters: list[Formatter] = []

    def add_formatter(self, formatter: Formatter | Sequence[Formatter]) -> Removable:
        formatters = [formatter] if not isinstance(formatter, (list, tuple)) else list(formatter)
        self._formatters.extend(formatters)
        logger.debug(f"Registered formatters: {[f.name for f in formatters]}")
        return Removable(self, formatters)

    def remove_formatter(self, formatter: Formatter | Sequence[Formatter]) -> None:
        formatters = [formatter] if not isinstance(formatter, (list, tuple)) else formatter
        for item in formatters:
            for idx, registered in enumerate(self._formatters):
                if registered is item:
                    del self._formatters[idx]
                    break

    def __iter__(self) -> Iterator[Formatter]:
        yield from self._formatters
        if self.parent is not None:
            yield from self.parent

    def get_formatters(self) -> tuple[Formatter, ...]:
        return tuple(self)

    def reset(self) -> None:
        """Remove every formatter registered on this manager (the parent is untouched)."""
        self._formatters.clear()
