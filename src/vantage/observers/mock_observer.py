"""
Mock observer plugin.

There is a MockObject for every integer id. Used by tests and by the CLI
to exercise the observe/build loop without any external system.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from inspect import isawaitable
from pathlib import Path
from typing import Any

from graphql import GraphQLResolveInfo, GraphQLSchema, build_schema, execute

from vantage.observers.errors import ObserverNeedsData
from vantage.observers.plugin import ObserverPlugin, ObserverResponse
from vantage.observers.query import ExecutedQuery
from vantage.observers.transforms import apply_transforms

SCHEMA_SDL = (Path(__file__).parent / "mock_observer.graphql").read_text()


def _integer_id(raw: str) -> int | None:
    try:
        value = float(raw)
    except ValueError:
        return None
    if not value.is_integer():
        return None
    return int(value)


def _mock_objects(context: Any) -> list[dict[str, Any]]:
    if not context:
        return []
    return context.get("mockObjects", [])


def _find(context: Any, id_: str) -> dict[str, Any] | None:
    return next((o for o in _mock_objects(context) if o["id"] == id_), None)


# Resolve from previously fetched results
async def _cached_mock_by_id(_obj: Any, info: GraphQLResolveInfo, id: str) -> Any:
    await asyncio.sleep(0)
    found = _find(info.context, id)
    if found is not None:
        return found
    if _integer_id(id) is None:
        return None
    raise ObserverNeedsData(f"no MockObject cached for id {id}")


# Fetch the data needed for a query
async def _fetch_mock_by_id(_obj: Any, info: GraphQLResolveInfo, id: str) -> Any:
    await asyncio.sleep(0)
    numeric_id = _integer_id(id)
    if numeric_id is None:
        return None
    # Deterministic delay between 0 and 10 ms
    await asyncio.sleep(min(max(numeric_id, 0), 10) / 1000)

    found = _find(info.context, id)
    if found is None:
        found = {"id": str(numeric_id), "numericId": numeric_id}
        info.context["mockObjects"].append(found)
    return found


async def _fetch_id_squared(obj: dict[str, Any], _info: GraphQLResolveInfo) -> int:
    obj["idSquared"] = obj["numericId"] * obj["numericId"]
    return obj["idSquared"]


async def _fetch_id_plus_one(obj: dict[str, Any], _info: GraphQLResolveInfo) -> int:
    obj["idPlusOne"] = obj["numericId"] + 1
    return obj["idPlusOne"]


def _build_cache_schema() -> GraphQLSchema:
    schema = build_schema(SCHEMA_SDL)
    schema.query_type.fields["mockById"].resolve = _cached_mock_by_id
    return schema


def _build_fetch_schema() -> GraphQLSchema:
    schema = build_schema(SCHEMA_SDL)
    schema.query_type.fields["mockById"].resolve = _fetch_mock_by_id
    mock_object = schema.get_type("MockObject")
    mock_object.fields["idSquared"].resolve = _fetch_id_squared
    mock_object.fields["idPlusOne"].resolve = _fetch_id_plus_one
    return schema


class MockObserver(ObserverPlugin):
    """Observer over an imaginary service with one object per integer id."""

    _schema = _build_cache_schema()
    _fetch_schema = _build_fetch_schema()

    @property
    def schema(self) -> GraphQLSchema:
        return MockObserver._schema

    async def observe(self, possible_queries: Sequence[ExecutedQuery]) -> ObserverResponse:
        cache: dict[str, Any] = {"mockObjects": []}
        results = [
            execute(
                MockObserver._fetch_schema,
                apply_transforms(MockObserver._fetch_schema, q.query),
                context_value=cache,
                variable_values=q.variables,
            )
            for q in possible_queries
        ]
        await asyncio.gather(*(r for r in results if isawaitable(r)))
        return ObserverResponse(context=cache)
