"""Core building blocks shared by the Vantage observer subsystem."""

from .config import ObserveConfig, load_observe_config
from .errors import ErrorContext, VantageError

__all__ = [
    "ErrorContext",
    "ObserveConfig",
    "VantageError",
    "load_observe_config",
]
