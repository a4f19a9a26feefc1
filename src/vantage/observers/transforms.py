"""
Query transforms applied before observer queries are executed.

The only transform today expands the ``@all`` directive. A field tagged
``@all`` has every field of its object type that can be invoked without
arguments appended to its selection set. ``@all(depth: N)`` repeats the
expansion N levels down, and explicitly selected children of an expanded
field inherit ``N - 1``. ``@all`` on an operation expands the root type.

Example:
    query = gql("{ foo @all { baz } }")
    print_query(apply_transforms(schema, query))
    # { foo @all { baz x foo bar } }
"""

from __future__ import annotations

from copy import copy

from graphql import (
    DirectiveLocation,
    DirectiveNode,
    DocumentNode,
    FieldNode,
    GraphQLArgument,
    GraphQLDirective,
    GraphQLError,
    GraphQLField,
    GraphQLInt,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    IntValueNode,
    NameNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
    Undefined,
    get_named_type,
    is_non_null_type,
    is_object_type,
    validate,
)
from graphql.validation import ASTValidationRule

from vantage.core.errors import QueryTransformError

ALL_DIRECTIVE_NAME = "all"

ALL_DIRECTIVE = GraphQLDirective(
    name=ALL_DIRECTIVE_NAME,
    locations=[
        DirectiveLocation.FIELD,
        DirectiveLocation.QUERY,
        DirectiveLocation.MUTATION,
        DirectiveLocation.SUBSCRIPTION,
    ],
    args={"depth": GraphQLArgument(GraphQLInt, default_value=1)},
    description="Select every field of the target type that needs no arguments.",
)


# =============================================================================
# Validation
# =============================================================================


class AllDirectiveDepthRule(ASTValidationRule):
    """Reject ``@all`` arguments other than a literal integer depth >= 1."""

    def enter_directive(self, node: DirectiveNode, *_args: object) -> None:
        if node.name.value != ALL_DIRECTIVE_NAME:
            return
        for arg in node.arguments or ():
            if arg.name.value != "depth":
                self.report_error(
                    GraphQLError(f"@all has unknown argument '{arg.name.value}'", arg)
                )
            elif not isinstance(arg.value, IntValueNode):
                self.report_error(GraphQLError("@all has a non-integer depth argument", arg))
            elif int(arg.value.value) < 1:
                self.report_error(GraphQLError("@all has depth < 1", arg))


def validate_transforms(schema: GraphQLSchema, document: DocumentNode) -> list[GraphQLError]:
    """Validate @all directive usage in a document."""
    return validate(schema, document, [AllDirectiveDepthRule])


# =============================================================================
# Expansion
# =============================================================================


def apply_transforms(schema: GraphQLSchema, document: DocumentNode) -> DocumentNode:
    """
    Expand every @all directive in a document.

    Args:
        schema: Schema the document will be executed against
        document: Query document; not modified

    Returns:
        A new document with expanded selection sets

    Raises:
        QueryTransformError: If any @all directive has malformed arguments
    """
    errors = validate_transforms(schema, document)
    if errors:
        raise QueryTransformError(errors)

    result = copy(document)
    result.definitions = [
        _transform_operation(schema, d) if isinstance(d, OperationDefinitionNode) else d
        for d in document.definitions
    ]
    return result


def needs_no_args(field: GraphQLField) -> bool:
    """True if every argument of the field has a default or is nullable."""
    return all(
        arg.default_value is not Undefined or not is_non_null_type(arg.type)
        for arg in field.args.values()
    )


def _all_depth(node: FieldNode | OperationDefinitionNode) -> int:
    depths = [0]
    for directive in node.directives or ():
        if directive.name.value != ALL_DIRECTIVE_NAME:
            continue
        depth = 1
        for arg in directive.arguments or ():
            if arg.name.value == "depth" and isinstance(arg.value, IntValueNode):
                depth = int(arg.value.value)
        depths.append(depth)
    return max(depths)


def _root_type(schema: GraphQLSchema, operation: OperationType) -> GraphQLObjectType | None:
    if operation == OperationType.MUTATION:
        return schema.mutation_type
    if operation == OperationType.SUBSCRIPTION:
        return schema.subscription_type
    return schema.query_type


def _field_type(parent: GraphQLNamedType | None, name: str) -> GraphQLNamedType | None:
    if parent is None or not is_object_type(parent):
        return None
    field = parent.fields.get(name)  # type: ignore[union-attr]
    if field is None:
        return None
    return get_named_type(field.type)


def _transform_operation(
    schema: GraphQLSchema, op: OperationDefinitionNode
) -> OperationDefinitionNode:
    root = _root_type(schema, op.operation)
    depth = _all_depth(op)
    selection_set = _transform_selection_set(root, op.selection_set, depth - 1)

    result = copy(op)
    result.selection_set = _expand(root, selection_set, depth)
    return result


def _transform_selection_set(
    parent: GraphQLNamedType | None,
    selection_set: SelectionSetNode,
    inherited_depth: int,
) -> SelectionSetNode:
    result = copy(selection_set)
    result.selections = [
        _transform_field(parent, s, inherited_depth) if isinstance(s, FieldNode) else s
        for s in selection_set.selections
    ]
    return result


def _transform_field(
    parent: GraphQLNamedType | None, field: FieldNode, inherited_depth: int
) -> FieldNode:
    depth = max(_all_depth(field), inherited_depth, 0)
    field_type = _field_type(parent, field.name.value)

    selection_set = field.selection_set
    if selection_set is not None:
        selection_set = _transform_selection_set(field_type, selection_set, depth - 1)

    result = copy(field)
    result.selection_set = _expand(field_type, selection_set, depth)
    return result


def _expand(
    type_: GraphQLNamedType | None, orig: SelectionSetNode | None, depth: int
) -> SelectionSetNode | None:
    """Append the needs-no-args fields of ``type_`` not already in ``orig``."""
    if depth <= 0 or type_ is None or not is_object_type(type_):
        return orig

    selections = list(orig.selections) if orig is not None else []
    present = {
        (s.alias or s.name).value for s in selections if isinstance(s, FieldNode)
    }
    for name, field in type_.fields.items():  # type: ignore[union-attr]
        if name in present or not needs_no_args(field):
            continue
        selections.append(
            FieldNode(
                alias=None,
                name=NameNode(value=name),
                arguments=[],
                directives=[],
                selection_set=_expand(get_named_type(field.type), None, depth - 1),
            )
        )

    if orig is not None:
        result = copy(orig)
        result.selections = selections
        return result
    if not selections:
        return None
    return SelectionSetNode(selections=selections)
