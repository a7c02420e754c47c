"""Detection of the entry point flavor supported by the target cluster."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from che_gateway_operator.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()

ROUTE_API_GROUP = "route.openshift.io"


class EntryPointFlavor(StrEnum):
    """Kind of object used to expose the gateway outside the cluster.

    Resolved once at startup and fixed for the lifetime of the process.
    """

    ROUTE = "route"
    INGRESS = "ingress"


def detect_entry_point_flavor(client: KubernetesClient, override: str = "auto") -> EntryPointFlavor:
    """Resolve the entry point flavor for the cluster behind ``client``.

    Clusters serving the OpenShift route API get routes, everything else
    gets ingresses. Discovery is retried on connection errors.

    Args:
        client: Connected Kubernetes client.
        override: ``route`` or ``ingress`` to skip discovery, ``auto`` to probe.

    Returns:
        The flavor to use.

    Raises:
        KubernetesConnectionError: If discovery keeps failing.
    """
    if override != "auto":
        flavor = EntryPointFlavor(override)
        logger.info("entry_point_flavor_configured", flavor=str(flavor))
        return flavor

    list_groups = client.make_retry_decorator()(client.list_api_groups)
    groups = list_groups()
    flavor = EntryPointFlavor.ROUTE if ROUTE_API_GROUP in groups else EntryPointFlavor.INGRESS
    logger.info("entry_point_flavor_detected", flavor=str(flavor))
    return flavor
