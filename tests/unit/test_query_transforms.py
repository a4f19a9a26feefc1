"""Tests for the @all query transform."""

from textwrap import dedent

import pytest
from graphql import GraphQLSchema, build_schema

from vantage.core.errors import QueryTransformError
from vantage.observers.query import gql, print_query
from vantage.observers.transforms import (
    ALL_DIRECTIVE,
    apply_transforms,
    needs_no_args,
    validate_transforms,
)


def transform_and_print(schema: GraphQLSchema, source: str) -> str:
    return print_query(apply_transforms(schema, gql(source)))


def ref(text: str) -> str:
    return dedent(text).strip()


# =============================================================================
# Expansion
# =============================================================================


class TestAllExpansion:
    """Tests for field-level @all expansion."""

    def test_top_level_field_depth_1(self, transform_schema: GraphQLSchema) -> None:
        """Original selections stay first; new names follow in declaration order."""
        out = transform_and_print(transform_schema, "{ foo @all { baz } }")
        assert out == ref(
            """
            {
              foo @all {
                baz
                x
                foo
                bar
              }
            }
            """
        )

    def test_field_that_requires_args_with_args_provided(
        self, transform_schema: GraphQLSchema
    ) -> None:
        """A field needing args can carry @all when the caller supplies them."""
        out = transform_and_print(
            transform_schema, "{ foo { bar { bar(y: 10) @all(depth: 2) } } }"
        )
        assert out == ref(
            """
            {
              foo {
                bar {
                  bar(y: 10) @all(depth: 2) {
                    y
                    foo {
                      x
                      foo
                      bar
                    }
                    barNull {
                      y
                      foo
                      barNull
                    }
                  }
                }
              }
            }
            """
        )

    def test_depth_3(self, transform_schema: GraphQLSchema) -> None:
        out = transform_and_print(transform_schema, "{ foo @all(depth: 3) { baz } }")
        assert out == ref(
            """
            {
              foo @all(depth: 3) {
                baz
                x
                foo {
                  x
                  foo {
                    x
                    foo
                    bar
                  }
                  bar {
                    y
                    foo
                    barNull
                  }
                }
                bar {
                  y
                  foo {
                    x
                    foo
                    bar
                  }
                  barNull {
                    y
                    foo
                    barNull
                  }
                }
              }
            }
            """
        )

    def test_nested_fields_tagged_with_all(self, transform_schema: GraphQLSchema) -> None:
        """Explicit children keep their position and get their own expansion."""
        out = transform_and_print(
            transform_schema, "{ foo @all(depth: 3) { baz bar @all(depth: 3) } }"
        )
        assert out == ref(
            """
            {
              foo @all(depth: 3) {
                baz
                bar @all(depth: 3) {
                  y
                  foo {
                    x
                    foo {
                      x
                      foo
                      bar
                    }
                    bar {
                      y
                      foo
                      barNull
                    }
                  }
                  barNull {
                    y
                    foo {
                      x
                      foo
                      bar
                    }
                    barNull {
                      y
                      foo
                      barNull
                    }
                  }
                }
                x
                foo {
                  x
                  foo {
                    x
                    foo
                    bar
                  }
                  bar {
                    y
                    foo
                    barNull
                  }
                }
              }
            }
            """
        )

    def test_inner_field_depth_1(self, transform_schema: GraphQLSchema) -> None:
        out = transform_and_print(transform_schema, "{ foo { foo @all } }")
        assert out == ref(
            """
            {
              foo {
                foo @all {
                  x
                  foo
                  bar
                }
              }
            }
            """
        )

    def test_skips_fields_that_require_args(self, transform_schema: GraphQLSchema) -> None:
        """Bar.bar(y: Int!) cannot be invoked without arguments."""
        out = transform_and_print(transform_schema, "{ foo { bar @all } }")
        assert out == ref(
            """
            {
              foo {
                bar @all {
                  y
                  foo
                  barNull
                }
              }
            }
            """
        )

    def test_root_type_follows_operation_type(self, transform_schema: GraphQLSchema) -> None:
        out = transform_and_print(transform_schema, "mutation { bar @all }")
        assert out == ref(
            """
            mutation {
              bar @all {
                y
                foo
                barNull
              }
            }
            """
        )

    def test_aliases_count_as_present(self, transform_schema: GraphQLSchema) -> None:
        """An alias shadows the field of the same name; the aliased field is still added."""
        out = transform_and_print(transform_schema, "{ foo @all { x: foo } }")
        assert out == ref(
            """
            {
              foo @all {
                x: foo
                foo
                bar
              }
            }
            """
        )

    def test_unknown_field_is_left_alone(self, transform_schema: GraphQLSchema) -> None:
        out = transform_and_print(transform_schema, "{ nope @all { foo @all } }")
        assert out == ref(
            """
            {
              nope @all {
                foo @all
              }
            }
            """
        )

    def test_scalar_field_is_left_alone(self, transform_schema: GraphQLSchema) -> None:
        out = transform_and_print(transform_schema, "{ foo { x @all } }")
        assert out == ref(
            """
            {
              foo {
                x @all
              }
            }
            """
        )

    def test_input_document_not_mutated(self, transform_schema: GraphQLSchema) -> None:
        query = gql("{ foo @all(depth: 2) { baz } }")
        before = print_query(query)
        apply_transforms(transform_schema, query)
        assert print_query(query) == before


class TestOperationExpansion:
    """Tests for @all on an operation."""

    def test_operation_depth_1(self, transform_schema: GraphQLSchema) -> None:
        out = transform_and_print(transform_schema, "query @all { dummy }")
        assert out == ref(
            """
            query @all {
              dummy
              foo
            }
            """
        )

    def test_operation_without_root_type(self) -> None:
        schema = build_schema("type Query { a: Int }")
        out = transform_and_print(schema, "mutation @all { b }")
        assert out == ref(
            """
            mutation @all {
              b
            }
            """
        )


class TestExpansionProperties:
    """Behavioural properties of the transform."""

    def test_needs_no_args_selection(self) -> None:
        """Optional or defaulted args are fine; a required arg excludes the field."""
        schema = build_schema(
            """
            type Foo {
              a: Int
              b(x: Int = 1): Int
              c(x: Int!): Int
              d(x: Int): Int
            }
            type Query { foo: Foo }
            """
        )
        out = transform_and_print(schema, "{ foo @all { d } }")
        assert out == ref(
            """
            {
              foo @all {
                d
                a
                b
              }
            }
            """
        )
        foo = schema.get_type("Foo")
        assert needs_no_args(foo.fields["b"]) is True
        assert needs_no_args(foo.fields["c"]) is False

    def test_depth_2_stops_at_third_level(self) -> None:
        schema = build_schema(
            """
            type A { a: Int, b: B }
            type B { b: Int, c: C }
            type C { c: Int }
            type Query { a: A }
            """
        )
        out = transform_and_print(schema, "{ a @all(depth: 2) }")
        assert out == ref(
            """
            {
              a @all(depth: 2) {
                a
                b {
                  b
                  c
                }
              }
            }
            """
        )

    def test_child_with_only_required_arg_fields_is_bare(self) -> None:
        schema = build_schema(
            """
            type A { a: Int, b: B }
            type B { c(x: Int!): Int }
            type Query { a: A }
            """
        )
        out = transform_and_print(schema, "{ a @all(depth: 2) }")
        assert out == ref(
            """
            {
              a @all(depth: 2) {
                a
                b
              }
            }
            """
        )

    def test_list_and_non_null_types_are_unwrapped(self) -> None:
        schema = build_schema(
            """
            type Item { id: ID!, tags: [String!]! }
            type Query { items: [Item!]! }
            """
        )
        out = transform_and_print(schema, "{ items @all }")
        assert out == ref(
            """
            {
              items @all {
                id
                tags
              }
            }
            """
        )

    @pytest.mark.parametrize(
        "source",
        [
            "{ foo @all { baz } }",
            "{ foo @all(depth: 3) { baz bar @all(depth: 3) } }",
            "query @all { foo { bar @all(depth: 2) } }",
        ],
    )
    def test_transform_is_idempotent(self, transform_schema: GraphQLSchema, source: str) -> None:
        once = apply_transforms(transform_schema, gql(source))
        twice = apply_transforms(transform_schema, once)
        assert print_query(twice) == print_query(once)


# =============================================================================
# Validation
# =============================================================================


class TestAllValidation:
    """Tests for @all argument validation."""

    @pytest.mark.parametrize(
        ("source", "message"),
        [
            ("{ foo @all(depth: 0) }", "@all has depth < 1"),
            ("{ foo @all(depth: -2) }", "@all has depth < 1"),
            ('{ foo @all(depth: "2") }', "@all has a non-integer depth argument"),
            ("{ foo @all(depth: 1.5) }", "@all has a non-integer depth argument"),
            ("query Q($d: Int) { foo @all(depth: $d) }", "@all has a non-integer depth argument"),
            ("{ foo @all(levels: 2) }", "@all has unknown argument 'levels'"),
        ],
    )
    def test_malformed_arguments_rejected(
        self, transform_schema: GraphQLSchema, source: str, message: str
    ) -> None:
        errors = validate_transforms(transform_schema, gql(source))
        assert [e.message for e in errors] == [message]

        with pytest.raises(QueryTransformError, match=message):
            apply_transforms(transform_schema, gql(source))

    def test_operation_directive_validated(self, transform_schema: GraphQLSchema) -> None:
        errors = validate_transforms(transform_schema, gql("query @all(depth: 0) { foo }"))
        assert len(errors) == 1

    def test_valid_document_has_no_errors(self, transform_schema: GraphQLSchema) -> None:
        assert validate_transforms(transform_schema, gql("{ foo @all(depth: 2) @skip(if: false) }")) == []

    def test_directive_definition(self) -> None:
        assert ALL_DIRECTIVE.name == "all"
        assert ALL_DIRECTIVE.args["depth"].default_value == 1
