"""Shared pytest fixtures for Vantage tests."""

from __future__ import annotations

from typing import Any

import pytest
from graphql import GraphQLSchema, build_schema

from vantage.observers.errors import ObserverNeedsData
from vantage.observers.mock_observer import MockObserver

TRANSFORM_SDL = """
type Foo {
  x: Int!
  foo: Foo
  bar(y: Int = 3): Bar
}

type Bar {
  y: Int!
  foo: Foo
  bar(y: Int!): Bar
  barNull(y: Int): Bar
}

type Query {
  foo: Foo
}

type Mutation {
  bar: Bar
}
"""

WIDGET_SDL = """
type Widget {
  id: ID!
  name: String
}

type Query {
  widget(id: ID!): Widget
  broken: Widget
}
"""


def _resolve_widget(_obj: Any, info: Any, id: str) -> Any:
    widgets = (info.context or {}).get("widgets", {})
    if id not in widgets:
        raise ObserverNeedsData(f"widget {id}")
    return widgets[id]


def _resolve_broken(_obj: Any, _info: Any) -> Any:
    raise ValueError("widget service exploded")


@pytest.fixture
def transform_schema() -> GraphQLSchema:
    """Schema used by the @all transform tests."""
    return build_schema(TRANSFORM_SDL)


@pytest.fixture
def widget_schema() -> GraphQLSchema:
    """Schema whose widget resolver needs data and whose broken resolver always fails."""
    schema = build_schema(WIDGET_SDL)
    schema.query_type.fields["widget"].resolve = _resolve_widget
    schema.query_type.fields["broken"].resolve = _resolve_broken
    return schema


@pytest.fixture
def mock_observer() -> MockObserver:
    return MockObserver()
