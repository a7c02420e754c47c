"""One-shot reconciliation of a CheManager against the current cluster."""

from __future__ import annotations

from enum import StrEnum

import typer
from rich.console import Console
from rich.table import Table

from che_gateway_operator.integrations.kubernetes.client import KubernetesClient
from che_gateway_operator.integrations.kubernetes.config import OperatorConfig
from che_gateway_operator.integrations.kubernetes.context import ReconcileContext
from che_gateway_operator.integrations.kubernetes.exceptions import KubernetesError
from che_gateway_operator.integrations.kubernetes.infrastructure import (
    detect_entry_point_flavor,
)
from che_gateway_operator.integrations.kubernetes.store import KubernetesObjectStore
from che_gateway_operator.logging.config import get_logger
from che_gateway_operator.models.che_manager import CheManager
from che_gateway_operator.services.controller import CheManagerReconciler

console = Console()


class EntryPointChoice(StrEnum):
    AUTO = "auto"
    ROUTE = "route"
    INGRESS = "ingress"


def reconcile(
    name: str = typer.Argument(..., help="Name of the CheManager resource."),
    namespace: str | None = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Namespace of the CheManager (defaults to CHE_GATEWAY_NAMESPACE or 'default').",
    ),
    entry_point: EntryPointChoice | None = typer.Option(
        None,
        "--entry-point",
        help="Entry point flavor; 'auto' probes the cluster for the route API.",
    ),
    timeout: float = typer.Option(
        120.0,
        "--timeout",
        min=1.0,
        help="Give up after this many seconds.",
    ),
) -> None:
    """Run a single reconciliation pass for a CheManager."""
    config = OperatorConfig.from_env()
    if entry_point is not None:
        config = config.model_copy(update={"entry_point": str(entry_point)})
    ns = namespace or config.namespace
    key = CheManager.key_for(name, ns)

    log = get_logger(__name__, command="reconcile")
    log.info("reconcile_requested", manager=f"{ns}/{name}")
    try:
        with KubernetesClient(config) as client:
            flavor = detect_entry_point_flavor(client, config.entry_point)
            reconciler = CheManagerReconciler(KubernetesObjectStore(client), flavor, config.gateway)
            result = reconciler.reconcile(key, ReconcileContext.with_timeout(timeout))
    except KubernetesError as e:
        console.print(f"[red]Reconciliation failed:[/red] {e}")
        raise typer.Exit(1) from e

    table = Table(title=f"CheManager {ns}/{name}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    table.add_row("Entry point", str(flavor))
    table.add_row("Phase", str(result.phase) if result.phase else "-")
    table.add_row("Requeue", "yes" if result.requeue else "no")
    console.print(table)

    if result.phase is None:
        console.print("[yellow]CheManager not found or being deleted; nothing to do.[/yellow]")
