"""
Observer plugin interface.

An observer plugin owns a GraphQL schema describing some external system
(a cloud API, a container runtime, a cluster) and knows how to fetch the
data needed to answer queries against it. Resolvers of the schema read
from the ``data``/``context`` pair returned by ``observe`` and raise
``ObserverNeedsData`` when something they need is missing.

Plugins may describe their schema with graphql-core directly or with
Strawberry; ``as_graphql_schema`` unwraps the latter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, Union

import strawberry
from graphql import GraphQLSchema

if TYPE_CHECKING:
    from vantage.observers.query import ExecutedQuery

SchemaHandle = Union[GraphQLSchema, strawberry.Schema]


@dataclass
class ObserverResponse:
    """
    Snapshot of observed state for one observer.

    Attributes:
        data: Root value handed to the schema's resolvers
        context: Resolver context, typically a cache of fetched objects
    """

    data: Any = None
    context: Any = None

    def to_dict(self) -> dict[str, Any]:
        """JSON shape: only the keys that are set."""
        out: dict[str, Any] = {}
        if self.data is not None:
            out["data"] = self.data
        if self.context is not None:
            out["context"] = self.context
        return out


class ObserverNameHolder(Protocol):
    """Anything carrying an ``observer_name``: plugin classes, instances, components."""

    observer_name: str | None


ObserverRef = Union[str, ObserverNameHolder]


def observer_name(ref: ObserverRef, holders: Mapping[type, str] | None = None) -> str:
    """
    Resolve a name or name holder to an observer name.

    ``holders`` maps classes to the names they were registered under; a
    class found there, or an instance of one, resolves through it.
    """
    if isinstance(ref, str):
        return ref
    if holders:
        held = holders.get(ref if isinstance(ref, type) else type(ref))
        if held is not None:
            return held
    name = getattr(ref, "observer_name", None)
    if not name:
        raise TypeError(f"{ref!r} does not carry an observer_name")
    return name


def as_graphql_schema(schema: SchemaHandle) -> GraphQLSchema:
    """Return the graphql-core schema behind a schema handle."""
    if isinstance(schema, GraphQLSchema):
        return schema
    if isinstance(schema, strawberry.Schema):
        return schema._schema
    raise TypeError(f"Unsupported schema handle: {type(schema).__name__}")


class ObserverPlugin(ABC):
    """
    Base class for observer plugins.

    Subclasses expose ``schema`` and implement ``observe``. ``observe``
    may be called any number of times with any subset of queries and must
    not depend on query order.

    Example:
        class ClusterObserver(ObserverPlugin):
            @property
            def schema(self) -> GraphQLSchema:
                return CLUSTER_SCHEMA

            async def observe(self, possible_queries):
                pods = await list_pods()
                return ObserverResponse(context={"pods": pods})
    """

    observer_name: ClassVar[str | None] = None

    @property
    @abstractmethod
    def schema(self) -> SchemaHandle:
        """Schema queries against this observer are executed with."""

    @abstractmethod
    async def observe(self, possible_queries: Sequence[ExecutedQuery]) -> ObserverResponse:
        """
        Fetch enough data to answer ``possible_queries``.

        Args:
            possible_queries: Queries that may be asked on the next build pass

        Returns:
            Data/context snapshot to register for the next pass
        """
