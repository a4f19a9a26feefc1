"""
Persisted observation state.

Observations are carried between CLI invocations as JSON:

    {
      "plugin": <opaque plugin observations>,
      "observer": {
        "<observer name>": {
          "observations": {"data": ..., "context": ...},
          "queries": [{"query": "<printed query>", "variables": {...}}]
        }
      }
    }

``reconstitute_*`` functions validate untrusted input and raise
``ObservationReconstitutionError`` naming the observer and the failed check.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from graphql import GraphQLSyntaxError

from vantage.core.errors import ErrorContext, ObservationReconstitutionError
from vantage.observers.plugin import ObserverResponse
from vantage.observers.query import ExecutedQuery, gql, print_query
from vantage.observers.registry import ObserverObservations, Observations

_RESPONSE_KEYS = ("data", "context")
_QUERY_KEYS = ("query", "variables")


@dataclass
class FullObservations:
    """Everything observed for a deployment: plugin blobs plus observer state."""

    plugin: Any = None
    observer: Observations = field(default_factory=dict)


def _fail(observer: str, message: str) -> ObservationReconstitutionError:
    return ObservationReconstitutionError(message, ErrorContext(observer=observer))


# =============================================================================
# Reconstitution
# =============================================================================


def reconstitute_observations(observer: str, candidate: Any) -> ObserverResponse:
    if not isinstance(candidate, dict):
        raise _fail(observer, "Stored observation is not an observer response")

    illegal = [key for key in candidate if key not in _RESPONSE_KEYS]
    if illegal:
        raise _fail(observer, f"Illegal keys {illegal} in observations")
    return ObserverResponse(data=candidate.get("data"), context=candidate.get("context"))


def reconstitute_executed_query(observer: str, candidate: Any) -> ExecutedQuery:
    if not isinstance(candidate, dict):
        raise _fail(observer, "Stored executed query is not a legal query")

    illegal = [key for key in candidate if key not in _QUERY_KEYS]
    if illegal:
        raise _fail(observer, f"Illegal keys {illegal} in stored queries")

    query = candidate.get("query")
    variables = candidate.get("variables")
    if not isinstance(query, str):
        raise _fail(observer, "Invalid shape for stored executed query: query must be a string")
    if variables is not None and not isinstance(variables, dict):
        raise _fail(
            observer, "Invalid shape for stored executed query: variables must be an object"
        )

    try:
        document = gql(query)
    except GraphQLSyntaxError as e:
        raise _fail(observer, f"Unparseable stored query: {e.message}") from e
    return ExecutedQuery(query=document, variables=variables)


def reconstitute_executed_queries(observer: str, candidate: Any) -> list[ExecutedQuery]:
    if not isinstance(candidate, list):
        raise _fail(observer, "Stored executed queries is not a list")
    return [reconstitute_executed_query(observer, q) for q in candidate]


def reconstitute_observer_observations(observer: str, candidate: Any) -> ObserverObservations:
    if not isinstance(candidate, dict):
        raise _fail(observer, "Stored observation is not an observer response")

    ret = ObserverObservations()
    for key, value in candidate.items():
        if key == "observations":
            ret.observations = reconstitute_observations(observer, value)
        elif key == "queries":
            ret.queries = reconstitute_executed_queries(observer, value)
        else:
            raise _fail(observer, f"Unknown key {key} for observations")
    return ret


def reconstitute_all_observations(candidate: Any) -> Observations:
    if not isinstance(candidate, dict):
        raise ObservationReconstitutionError(
            "Stored object is not a set of observations for all observers"
        )
    return {
        name: reconstitute_observer_observations(name, value) for name, value in candidate.items()
    }


# =============================================================================
# Preparation
# =============================================================================


def prepare_executed_query(query: ExecutedQuery) -> dict[str, Any]:
    out: dict[str, Any] = {"query": print_query(query.query)}
    if query.variables is not None:
        out["variables"] = query.variables
    return out


def prepare_all_observations_for_json(observations: Observations) -> dict[str, Any]:
    """Convert observations to their JSON-ready shape."""
    return {
        name: {
            "observations": o.observations.to_dict(),
            "queries": [prepare_executed_query(q) for q in o.queries],
        }
        for name, o in observations.items()
    }


# =============================================================================
# Full observations (plugin + observer)
# =============================================================================


def stringify_full_observations(full: FullObservations) -> str:
    out: dict[str, Any] = {}
    if full.plugin is not None:
        out["plugin"] = full.plugin
    if full.observer:
        out["observer"] = prepare_all_observations_for_json(full.observer)
    return json.dumps(out, indent=2)


def parse_full_observations(text: str) -> FullObservations:
    """
    Parse persisted full observations.

    Raises:
        ObservationReconstitutionError: If the JSON or its shape is invalid
    """
    try:
        candidate = json.loads(text)
    except json.JSONDecodeError as e:
        raise ObservationReconstitutionError(f"Invalid observations JSON: {e}") from e

    if not isinstance(candidate, dict):
        raise ObservationReconstitutionError("Stored object is not a set of full observations")
    illegal = [key for key in candidate if key not in ("plugin", "observer")]
    if illegal:
        raise ObservationReconstitutionError(f"Illegal keys {illegal} in full observations")

    observer = candidate.get("observer")
    return FullObservations(
        plugin=candidate.get("plugin"),
        observer=reconstitute_all_observations(observer) if observer is not None else {},
    )
