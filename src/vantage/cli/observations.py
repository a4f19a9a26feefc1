"""
Observation state commands for the Vantage CLI.

Inspect and validate persisted observations files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from vantage.core.errors import ObservationReconstitutionError
from vantage.observers.query import print_query
from vantage.observers.serialize import FullObservations, parse_full_observations

observations_app = typer.Typer(
    help="Inspect persisted observation state",
    no_args_is_help=True,
)

console = Console()

PathArg = Annotated[
    Path,
    typer.Argument(help="Observations JSON file", exists=True, dir_okay=False),
]


def _load(path: Path) -> FullObservations:
    try:
        return parse_full_observations(path.read_text())
    except ObservationReconstitutionError as e:
        console.print(f"[red]Invalid observations file:[/red] {path}", soft_wrap=True)
        console.print(str(e), markup=False, soft_wrap=True)
        raise typer.Exit(1) from e


@observations_app.command(name="show")
def observations_show(path: PathArg) -> None:
    """Show observers and the queries recorded for them."""
    full = _load(path)
    if not full.observer:
        console.print("[dim]No observer state recorded[/dim]")
        return

    table = Table(title="Observers")
    table.add_column("Observer", style="cyan")
    table.add_column("Queries", justify="right")
    table.add_column("Query")
    table.add_column("Variables", style="dim")

    for name, obs in full.observer.items():
        if not obs.queries:
            table.add_row(name, "0", "", "")
            continue
        for i, q in enumerate(obs.queries):
            table.add_row(
                name if i == 0 else "",
                str(len(obs.queries)) if i == 0 else "",
                " ".join(print_query(q.query).split()),
                json.dumps(q.variables) if q.variables is not None else "",
            )
    console.print(table)


@observations_app.command(name="validate")
def observations_validate(path: PathArg) -> None:
    """Check that an observations file can be loaded."""
    full = _load(path)
    count = sum(len(o.queries) for o in full.observer.values())
    console.print(
        f"[green]OK[/green] {len(full.observer)} observer(s), {count} stored query(ies)"
    )
