"""
Query commands for the Vantage CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from graphql import GraphQLError, GraphQLSyntaxError, build_schema
from rich.console import Console

from vantage.core.errors import QueryTransformError
from vantage.observers.query import gql, print_query
from vantage.observers.transforms import apply_transforms

query_app = typer.Typer(help="Work with observer queries", no_args_is_help=True)

console = Console()


@query_app.command(name="expand")
def query_expand(
    schema_file: Annotated[
        Path,
        typer.Argument(help="Schema SDL file", exists=True, dir_okay=False),
    ],
    query_file: Annotated[
        Path,
        typer.Argument(help="Query file", exists=True, dir_okay=False),
    ],
) -> None:
    """Print a query with its @all directives expanded."""
    try:
        schema = build_schema(schema_file.read_text())
    except (GraphQLError, TypeError) as e:
        console.print("[red]Invalid schema:[/red]")
        console.print(str(e), markup=False, soft_wrap=True)
        raise typer.Exit(1) from e

    try:
        expanded = apply_transforms(schema, gql(query_file.read_text()))
    except (GraphQLSyntaxError, QueryTransformError) as e:
        console.print("[red]Cannot expand query:[/red]")
        console.print(str(e), markup=False, soft_wrap=True)
        raise typer.Exit(1) from e

    typer.echo(print_query(expanded))
