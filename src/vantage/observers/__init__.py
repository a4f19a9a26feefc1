"""
Observer subsystem.

Build-time code declares what data it needs as GraphQL queries against
observer schemas. Queries that cannot be answered yet are recorded, the
observer plugins fetch the data, and the build is re-run.
"""

from .component import Observer
from .context import build_context, get_observer_manager
from .errors import (
    NEEDS_DATA_MARKER,
    ErrorKind,
    ObserverNeedsData,
    classify_error,
    is_needs_data,
    split_errors,
)
from .manager import Observable, ObserverManagerDeployment
from .plugin import ObserverPlugin, ObserverResponse, as_graphql_schema, observer_name
from .query import ExecutedQuery, QueryLedger, gql, print_query
from .registry import ObserverObservations, Observations, ObserverRegistry, patch_in_new_queries
from .serialize import (
    FullObservations,
    parse_full_observations,
    prepare_all_observations_for_json,
    reconstitute_all_observations,
    stringify_full_observations,
)
from .transforms import ALL_DIRECTIVE, apply_transforms, validate_transforms

__all__ = [
    "ALL_DIRECTIVE",
    "NEEDS_DATA_MARKER",
    "ErrorKind",
    "ExecutedQuery",
    "FullObservations",
    "Observable",
    "Observations",
    "Observer",
    "ObserverManagerDeployment",
    "ObserverNeedsData",
    "ObserverObservations",
    "ObserverPlugin",
    "ObserverRegistry",
    "ObserverResponse",
    "QueryLedger",
    "apply_transforms",
    "as_graphql_schema",
    "build_context",
    "classify_error",
    "get_observer_manager",
    "gql",
    "is_needs_data",
    "observer_name",
    "parse_full_observations",
    "prepare_all_observations_for_json",
    "print_query",
    "reconstitute_all_observations",
    "split_errors",
    "stringify_full_observations",
    "validate_transforms",
]
