"""
Vantage CLI.

- observations.py: persisted observation state commands
- query.py: query transform commands
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from vantage import __version__
from vantage.cli.observations import observations_app
from vantage.cli.query import query_app
from vantage.core.config import DEFAULT_CONFIG_FILE, load_observe_config
from vantage.core.errors import ConfigError

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

app = typer.Typer(
    help="Vantage - observe live infrastructure state for declarative builds",
    no_args_is_help=True,
)
app.add_typer(observations_app, name="observations")
app.add_typer(query_app, name="query")


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"vantage {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = False,
) -> None:
    try:
        config = load_observe_config(Path(DEFAULT_CONFIG_FILE))
    except ConfigError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.logging_level, format=LOG_FORMAT
    )


def main() -> None:
    app()


__all__ = ["app", "main", "observations_app", "query_app"]
