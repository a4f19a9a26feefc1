"""
Query documents and the executed-query ledger.

Queries are graphql-core ``DocumentNode`` values. Two documents are the
same executed query when their printed forms match; variable bindings
are compared with ``variables_equal``, a deep structural comparison of
JSON-like values in which booleans never equal numbers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from graphql import DocumentNode, parse, print_ast

logger = logging.getLogger(__name__)

Variables = dict[str, Any]


def gql(source: str) -> DocumentNode:
    """Parse a query string into a document."""
    return parse(source)


def print_query(query: DocumentNode) -> str:
    """Canonical printed form of a query document."""
    return print_ast(query)


def variables_equal(a: Any, b: Any) -> bool:
    """Deep equality of JSON-like values; ``True`` and ``1`` differ."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, dict) or isinstance(b, dict):
        return (
            isinstance(a, dict)
            and isinstance(b, dict)
            and a.keys() == b.keys()
            and all(variables_equal(a[k], b[k]) for k in a)
        )
    if isinstance(a, (list, tuple)) or isinstance(b, (list, tuple)):
        return (
            isinstance(a, (list, tuple))
            and isinstance(b, (list, tuple))
            and len(a) == len(b)
            and all(variables_equal(x, y) for x, y in zip(a, b))
        )
    return a == b


@dataclass(eq=False)
class ExecutedQuery:
    """A query document plus the variables it was executed with."""

    query: DocumentNode
    variables: Variables | None = None

    @property
    def key(self) -> str:
        """Printed query, used as the deduplication key."""
        return print_query(self.query)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExecutedQuery):
            return NotImplemented
        return self.key == other.key and variables_equal(self.variables, other.variables)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ExecutedQuery(query={self.key!r}, variables={self.variables!r})"


@dataclass
class QueryRecord:
    """Every distinct set of variables one query document was executed with."""

    query: DocumentNode
    variables: list[Variables | None] = field(default_factory=list)

    def has(self, variables: Variables | None) -> bool:
        return any(variables_equal(variables, seen) for seen in self.variables)

    def add(self, variables: Variables | None) -> bool:
        if self.has(variables):
            return False
        self.variables.append(variables)
        return True


class QueryLedger:
    """
    Deduplicated record of executed queries for one observer.

    Keyed by printed query; each entry holds the set of variable bindings
    seen for that query.
    """

    def __init__(self) -> None:
        self._records: dict[str, QueryRecord] = {}

    def record(self, query: DocumentNode, variables: Variables | None = None) -> bool:
        """
        Record an execution.

        Returns:
            True if the (query, variables) pair had not been seen before
        """
        key = print_query(query)
        entry = self._records.get(key)
        if entry is None:
            entry = self._records[key] = QueryRecord(query=query)
        added = entry.add(variables)
        if added:
            logger.debug("Recorded query %s with variables %r", " ".join(key.split()), variables)
        return added

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, ExecutedQuery):
            return False
        entry = self._records.get(item.key)
        return entry is not None and entry.has(item.variables)

    def __len__(self) -> int:
        return sum(len(r.variables) for r in self._records.values())

    def flatten(self) -> list[ExecutedQuery]:
        """One ExecutedQuery per distinct (query, variables) pair."""
        return [
            ExecutedQuery(query=record.query, variables=variables)
            for record in self._records.values()
            for variables in record.variables
        ]
