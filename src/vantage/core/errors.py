"""
Error types for Vantage observation, query transformation, and builds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from graphql import GraphQLError


class VantageError(Exception):
    """Base exception for all Vantage errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ConfigError(VantageError):
    """
    Raised when vantage.toml cannot be loaded.

    Examples:
    - Malformed TOML
    - Out-of-range values in the [observe] section
    """

    pass


class DuplicateObserverError(VantageError):
    """
    Raised when an observer name is registered twice.

    Registration is terminal: a name can only be bound once per
    manager or registry instance.
    """

    pass


class UnknownObserverError(VantageError):
    """Raised when a query targets an observer name that was never registered."""

    pass


class ObservationReconstitutionError(VantageError):
    """
    Raised when persisted observation state is malformed.

    Examples:
    - Extra keys in an observer response
    - A stored query that is not a string
    - Array-valued query variables
    """

    pass


class QueryTransformError(VantageError):
    """Raised when @all directive arguments fail validation."""

    def __init__(self, errors: list[GraphQLError], context: ErrorContext | None = None):
        self.errors = errors
        super().__init__("\n".join(e.message for e in errors), context)


class QueryExecutionError(VantageError):
    """Raised to a build continuation when a query produced genuine errors."""

    def __init__(self, errors: list[GraphQLError], context: ErrorContext | None = None):
        self.errors = errors
        super().__init__("\n".join(e.message for e in errors), context)


class ObservationError(VantageError):
    """
    Raised when one or more observer plugins fail to observe.

    The observations gathered from the plugins that did succeed are kept
    on ``observations`` so callers can persist partial results.
    """

    def __init__(self, message: str, observations: dict[str, Any] | None = None):
        self.observations = observations or {}
        super().__init__(message)


class BuildContextError(VantageError):
    """Raised when observer components are rendered outside a build pass."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error.

    Attributes:
        observer: Observer name the error relates to
        query: Printed query the error relates to
    """

    observer: str | None = None
    query: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            String like: "observer 'mock' (query Foo { ... })"
        """
        parts = []
        if self.observer:
            parts.append(f"observer '{self.observer}'")
        if self.query:
            parts.append(f"({' '.join(self.query.split())})")
        return " ".join(parts) if parts else "<unknown>"
