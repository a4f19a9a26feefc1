"""High-level operations built on the observer subsystem."""

from .observe import ObserveOutcome, build_with_observations, format_needs_data

__all__ = ["ObserveOutcome", "build_with_observations", "format_needs_data"]
