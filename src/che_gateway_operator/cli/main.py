"""Main CLI entry point using Typer."""

from __future__ import annotations

import typer
from rich.console import Console

from che_gateway_operator import __version__
from che_gateway_operator.cli.commands import reconcile, render
from che_gateway_operator.logging.config import configure_logging

app = typer.Typer(
    name="che-gateway",
    help="Che gateway operator: reconcile CheManager resources.",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"che-gateway version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit logs as JSON lines.",
    ),
) -> None:
    """Che gateway operator - keep the gateway in line with CheManager resources."""
    configure_logging(verbose=verbose, debug=debug, json_output=json_logs)


app.command()(reconcile.reconcile)
app.command()(render.render)


if __name__ == "__main__":
    app()
