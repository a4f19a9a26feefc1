"""
Per-deployment observer manager.

One manager is created for each build pass. It maps observer names to
their schema and currently observed data, executes queries against
them, and keeps two ledgers: every distinct query ever executed, and the
subset whose execution reported that more data is needed. The outer
control loop reads the second ledger to decide which observer plugins
to run before the next pass.

Usage:
    manager = ObserverManagerDeployment()
    manager.register_schema("mock", plugin.schema, ObserverResponse())

    result = await manager.execute_query("mock", gql("{ mockById(id: \\"1\\") { id } }"))
    manager.executed_queries_that_needed_data()
    # {"mock": [ExecutedQuery(...)]}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from inspect import isawaitable
from typing import Any

from graphql import DocumentNode, ExecutionResult, GraphQLSchema, execute

from vantage.core.errors import DuplicateObserverError, ErrorContext, UnknownObserverError
from vantage.observers.errors import is_needs_data
from vantage.observers.plugin import (
    ObserverRef,
    ObserverResponse,
    SchemaHandle,
    as_graphql_schema,
    observer_name,
)
from vantage.observers.query import ExecutedQuery, QueryLedger, Variables, print_query
from vantage.observers.transforms import apply_transforms

logger = logging.getLogger(__name__)


@dataclass
class Observable:
    """Registration for one observer name."""

    schema: GraphQLSchema
    data: Any = None
    context: Any = None
    executed: QueryLedger = field(default_factory=QueryLedger)


class ObserverManagerDeployment:
    """
    Registry of observables for a single deployment build pass.

    The ledgers are only touched between awaits, so concurrent
    ``execute_query`` calls on one event loop cannot interleave an insert.
    """

    def __init__(self) -> None:
        self._observables: dict[str, Observable] = {}
        self._needs_data: dict[str, QueryLedger] = {}
        self._holders: dict[type, str] = {}

    @property
    def observer_names(self) -> list[str]:
        return list(self._observables)

    def register_schema(
        self,
        ref: ObserverRef,
        schema: SchemaHandle,
        response: ObserverResponse | None = None,
    ) -> None:
        """
        Register an observer's schema and observed data.

        Args:
            ref: Observer name or name holder
            schema: Schema queries for this observer execute against
            response: Currently observed data/context (may be empty)

        Raises:
            DuplicateObserverError: If the name is already registered
        """
        name = self.resolve_name(ref)
        if name in self._observables:
            raise DuplicateObserverError(
                f"Attempt to register observer with duplicate name '{name}'",
                ErrorContext(observer=name),
            )
        response = response or ObserverResponse()
        self._observables[name] = Observable(
            schema=as_graphql_schema(schema),
            data=response.data,
            context=response.context,
        )
        logger.debug("Registered observer %s", name)

    def register_holder(self, holder: type, name: str) -> None:
        """Let a class (and its instances) stand for ``name`` in this manager."""
        self._holders[holder] = name

    def resolve_name(self, ref: ObserverRef) -> str:
        """Resolve a name, a registered holder class or instance, or any name holder."""
        return observer_name(ref, self._holders)

    def schema_for(self, ref: ObserverRef) -> GraphQLSchema:
        return self._observable(ref).schema

    async def execute_query(
        self,
        ref: ObserverRef,
        query: DocumentNode,
        variables: Variables | None = None,
        transform: bool = True,
    ) -> ExecutionResult:
        """
        Execute a query against a registered observer.

        @all directives are expanded against the observer schema before
        execution; the ledgers keep the query as written. The query is
        recorded before execution so that failing queries still show up
        in ``executed_queries``. Needs-data errors are left in
        ``result.errors``; the query is additionally recorded in the
        needs-data ledger.

        Args:
            ref: Observer name or name holder
            query: Query document as written by the caller
            variables: Variable bindings
            transform: Expand @all directives (default True)

        Raises:
            UnknownObserverError: If the observer was never registered
            QueryTransformError: If an @all directive is malformed
        """
        name = self.resolve_name(ref)
        observable = self._observable(name)
        document = apply_transforms(observable.schema, query) if transform else query
        observable.executed.record(query, variables)

        result = execute(
            observable.schema,
            document,
            root_value=observable.data,
            context_value=observable.context,
            variable_values=variables,
        )
        if isawaitable(result):
            result = await result

        if result.errors and any(is_needs_data(e) for e in result.errors):
            logger.debug("Observer %s needs data for %s", name, " ".join(print_query(query).split()))
            self._needs_data.setdefault(name, QueryLedger()).record(query, variables)
        return result

    def executed_queries(self) -> dict[str, list[ExecutedQuery]]:
        """Every distinct (query, variables) pair executed, per observer."""
        return {name: o.executed.flatten() for name, o in self._observables.items()}

    def executed_queries_that_needed_data(self) -> dict[str, list[ExecutedQuery]]:
        """Executed queries that reported missing data, per observer."""
        return {name: ledger.flatten() for name, ledger in self._needs_data.items()}

    def clear_needs_data(self) -> None:
        """Forget recorded needs-data queries before reusing the manager for another pass."""
        self._needs_data.clear()

    def _observable(self, ref: ObserverRef) -> Observable:
        name = self.resolve_name(ref)
        observable = self._observables.get(name)
        if observable is None:
            raise UnknownObserverError(
                f"Cannot find observer {name}", ErrorContext(observer=name)
            )
        return observable
