"""
Observer component for declarative build trees.

An ``Observer`` node runs a query against an observer while the tree is
being built and hands the outcome to a user continuation that produces
the node's children.

Example:
    node = Observer(
        observer="mock",
        query=gql('query { mockById(id: "1") { id } }'),
        build=lambda err, data: Empty() if err or data is None else Server(data),
    )
    with build_context(manager):
        child = await node.render()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from graphql import DocumentNode

from vantage.core.errors import ErrorContext, QueryExecutionError
from vantage.observers.context import get_observer_manager
from vantage.observers.errors import split_errors
from vantage.observers.manager import ObserverManagerDeployment
from vantage.observers.plugin import ObserverRef
from vantage.observers.query import Variables, print_query

logger = logging.getLogger(__name__)

T = TypeVar("T")

BuildFunc = Callable[[Exception | None, Any], T]


@dataclass
class Observer(Generic[T]):
    """
    Declarative node whose children depend on observed data.

    ``build`` receives ``(error, data)``:

    - ``(exc, None)`` if executing failed or returned genuine errors
    - ``(None, None)`` if the only errors were needs-data
    - ``(None, data)`` otherwise
    """

    observer: ObserverRef
    query: DocumentNode
    build: BuildFunc[T]
    variables: Variables | None = None
    transform: bool = True

    async def render(self, manager: ObserverManagerDeployment | None = None) -> T:
        manager = manager or get_observer_manager()
        name = manager.resolve_name(self.observer)

        try:
            result = await manager.execute_query(
                name, self.query, self.variables, transform=self.transform
            )
        except Exception as e:
            logger.debug("Query for observer %s failed: %s", name, e)
            return self.build(e, None)

        needs_data, genuine = split_errors(result.errors)
        if genuine:
            context = ErrorContext(observer=name, query=print_query(self.query))
            return self.build(QueryExecutionError(genuine, context), None)
        if needs_data:
            return self.build(None, None)
        return self.build(None, result.data)
