"""Render the objects a CheManager manifest would produce, without a cluster."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from rich.console import Console

from che_gateway_operator.integrations.kubernetes.config import OperatorConfig
from che_gateway_operator.integrations.kubernetes.infrastructure import EntryPointFlavor
from che_gateway_operator.models.che_manager import CheManager, RoutingType
from che_gateway_operator.services.entrypoint import ENTRY_POINTS
from che_gateway_operator.services.gateway import get_gateway_objects

console = Console()
err_console = Console(stderr=True)


def render(
    file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="YAML file holding a CheManager resource.",
    ),
    entry_point: EntryPointFlavor | None = typer.Option(
        None,
        "--entry-point",
        help=(
            "Entry point flavor to render (defaults to CHE_GATEWAY_ENTRYPOINT, "
            "or ingress when that is unset or auto)."
        ),
    ),
) -> None:
    """Print the managed objects a CheManager resolves to, as YAML."""
    try:
        document = yaml.safe_load(file.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        err_console.print(f"[red]Failed to parse {file}:[/red] {e}")
        raise typer.Exit(1) from e

    if not isinstance(document, dict):
        err_console.print(f"[red]{file} does not contain a YAML mapping[/red]")
        raise typer.Exit(1)

    config = OperatorConfig.from_env()
    document.setdefault("metadata", {}).setdefault("namespace", config.namespace)
    manager = CheManager.from_k8s_object(document)

    if not manager.name:
        err_console.print("[red]metadata.name is required[/red]")
        raise typer.Exit(1)

    if manager.spec.routing == RoutingType.MULTI_HOST:
        err_console.print(
            "[yellow]Routing is multihost: no gateway or shared entry point is managed.[/yellow]"
        )
        return

    if entry_point is None:
        # Offline: no cluster to detect the flavor against
        entry_point = (
            EntryPointFlavor.INGRESS
            if config.entry_point == "auto"
            else EntryPointFlavor(config.entry_point)
        )

    objects = [obj for obj, _ in get_gateway_objects(manager, config.gateway)]
    objects.append(ENTRY_POINTS[entry_point].build(manager))
    console.print(
        yaml.safe_dump_all(objects, default_flow_style=False, sort_keys=False),
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
        end="",
    )
