"""
Needs-data signalling and error classification for observer queries.

Resolvers raise ``ObserverNeedsData`` when the observed data they need is
not present yet. graphql-core turns it into an ordinary entry in the
execution result's ``errors``; nothing here escalates it. Callers use
``classify_error`` to tell "fetch more data and try again" apart from a
genuinely broken query.

Example:
    result = await manager.execute_query("mock", query)
    needs_data, genuine = split_errors(result.errors)
    if genuine:
        raise QueryExecutionError(genuine)
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from graphql import GraphQLError

NEEDS_DATA_MARKER = "Observer needs data"
NEEDS_DATA_CODE = "OBSERVER_NEEDS_DATA"


class ObserverNeedsData(Exception):
    """Raised by a resolver whose observed data has not been fetched yet."""

    def __init__(self, detail: str | None = None):
        self.detail = detail
        self.extensions = {"code": NEEDS_DATA_CODE}
        message = f"{NEEDS_DATA_MARKER}: {detail}" if detail else NEEDS_DATA_MARKER
        super().__init__(message)


class ErrorKind(Enum):
    """How a query error should be handled.

    - NEEDS_DATA: recoverable, observe and rebuild
    - QUERY: a real error to surface to the build
    """

    NEEDS_DATA = "needs_data"
    QUERY = "query"


def classify_error(error: GraphQLError) -> ErrorKind:
    """
    Classify a GraphQL execution error.

    The original exception is checked first; the extension code and the
    message marker cover errors that were serialized and read back.
    """
    if isinstance(error.original_error, ObserverNeedsData):
        return ErrorKind.NEEDS_DATA
    if (error.extensions or {}).get("code") == NEEDS_DATA_CODE:
        return ErrorKind.NEEDS_DATA
    if error.message.startswith(NEEDS_DATA_MARKER):
        return ErrorKind.NEEDS_DATA
    return ErrorKind.QUERY


def is_needs_data(error: GraphQLError) -> bool:
    return classify_error(error) is ErrorKind.NEEDS_DATA


def split_errors(
    errors: Iterable[GraphQLError] | None,
) -> tuple[list[GraphQLError], list[GraphQLError]]:
    """Split errors into (needs-data, genuine)."""
    needs_data: list[GraphQLError] = []
    genuine: list[GraphQLError] = []
    for error in errors or ():
        (needs_data if is_needs_data(error) else genuine).append(error)
    return needs_data, genuine
