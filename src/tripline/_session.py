"""Explicit handle for inspecting the assertions evaluated in a block of code."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scoped_context import NoContextError, ScopedContext

if TYPE_CHECKING:
    from ._context import ScopeContext
    from ._errors import AssertionFailure

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssertSession(ScopedContext):
    """Records the contexts and failures of the assertions run while it is active.

    Only one thread may use a session. Nested sessions shadow the outer one.

    Example:
        >>> session = AssertSession()
        >>> with session:
        ...     expect(1).to.equal(1)
        >>> session.last_context.value
        1

    """

    last_context: ScopeContext | None = None
    failures: list[AssertionFailure] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


def current_session() -> AssertSession | None:
    try:
        return AssertSession.current()
    except NoContextError:
        return None


def record_context(context: ScopeContext) -> None:
    session = current_session()
    if session is not None:
        session.last_context = context


def record_failure(error: AssertionFailure) -> None:
    session = current_session()
    if session is not None:
        logger.debug(f"Recording failure in session: {error.message}")
        session.failures.append(error)
