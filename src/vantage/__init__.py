"""
Vantage - observation layer for declarative infrastructure builds.

Build-time code queries external systems through observer schemas;
queries that need data not yet fetched are recorded so the observers
can fetch it before the next build pass.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import (
    DuplicateObserverError,
    ObservationReconstitutionError,
    QueryTransformError,
    UnknownObserverError,
    VantageError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "VantageError",
    "DuplicateObserverError",
    "UnknownObserverError",
    "ObservationReconstitutionError",
    "QueryTransformError",
]
