"""
Build-pass context.

The tree builder activates the observer manager for the current build
pass with ``build_context``; observer components pick it up with
``get_observer_manager``.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from vantage.core.errors import BuildContextError

if TYPE_CHECKING:
    from vantage.observers.manager import ObserverManagerDeployment

_observer_manager: contextvars.ContextVar[ObserverManagerDeployment | None] = (
    contextvars.ContextVar("observer_manager", default=None)
)


def get_observer_manager() -> ObserverManagerDeployment:
    """Get the active build pass's observer manager."""
    manager = _observer_manager.get()
    if manager is None:
        raise BuildContextError("No observer manager is active for this build pass")
    return manager


@contextmanager
def build_context(manager: ObserverManagerDeployment) -> Iterator[ObserverManagerDeployment]:
    """Make ``manager`` the active observer manager inside the block."""
    token = _observer_manager.set(manager)
    try:
        yield manager
    finally:
        _observer_manager.reset(token)
