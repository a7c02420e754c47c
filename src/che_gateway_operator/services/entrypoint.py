"""External entry point of the gateway: an OpenShift route or an ingress.

Which one is used is decided once per process from the cluster's
capabilities (see :mod:`che_gateway_operator.integrations.kubernetes.infrastructure`).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from che_gateway_operator.integrations.kubernetes.infrastructure import EntryPointFlavor
from che_gateway_operator.models.base import ObjectKey
from che_gateway_operator.models.che_manager import RoutingType
from che_gateway_operator.services.defaults import (
    EXTERNAL_ACCESS_COMPONENT,
    GATEWAY_PORT,
    gateway_service_name,
    labels_for_component,
)
from che_gateway_operator.services.sync import DiffOptions

if TYPE_CHECKING:
    from che_gateway_operator.integrations.kubernetes.context import ReconcileContext
    from che_gateway_operator.models.che_manager import CheManager
    from che_gateway_operator.services.sync import Syncer

logger = structlog.get_logger()

# Long-lived connections (websockets, language servers) go through the gateway
PROXY_TIMEOUT_SECONDS = "3600"

ROUTE_DIFF_OPTS = DiffOptions(
    compare=("spec",),
    # defaulted by the router
    ignore=("spec.wildcardPolicy", "spec.to.weight"),
)
INGRESS_DIFF_OPTS = DiffOptions(compare=("spec",))


def get_route_spec(manager: CheManager) -> dict[str, Any]:
    """Edge-terminated route redirecting plain HTTP to HTTPS."""
    return {
        "apiVersion": "route.openshift.io/v1",
        "kind": "Route",
        "metadata": {
            "name": manager.name,
            "namespace": manager.namespace,
            "labels": labels_for_component(manager, EXTERNAL_ACCESS_COMPONENT),
        },
        "spec": {
            "host": manager.spec.host,
            "to": {
                "kind": "Service",
                "name": gateway_service_name(manager),
            },
            "port": {"targetPort": GATEWAY_PORT},
            "tls": {
                "termination": "edge",
                "insecureEdgeTerminationPolicy": "Redirect",
            },
        },
    }


def get_ingress_spec(manager: CheManager) -> dict[str, Any]:
    """Nginx ingress sending every path of the host to the gateway."""
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": {
            "name": manager.name,
            "namespace": manager.namespace,
            "labels": labels_for_component(manager, EXTERNAL_ACCESS_COMPONENT),
            "annotations": {
                "kubernetes.io/ingress.class": "nginx",
                "nginx.ingress.kubernetes.io/proxy-read-timeout": PROXY_TIMEOUT_SECONDS,
                "nginx.ingress.kubernetes.io/proxy-connect-timeout": PROXY_TIMEOUT_SECONDS,
            },
        },
        "spec": {
            "rules": [
                {
                    "host": manager.spec.host,
                    "http": {
                        "paths": [
                            {
                                "path": "/",
                                "pathType": "ImplementationSpecific",
                                "backend": {
                                    "service": {
                                        "name": gateway_service_name(manager),
                                        "port": {"number": GATEWAY_PORT},
                                    }
                                },
                            }
                        ]
                    },
                }
            ]
        },
    }


@dataclass(frozen=True)
class EntryPoint:
    """Desired-state builder and diff mask of one entry point flavor."""

    flavor: EntryPointFlavor
    build: Callable[[CheManager], dict[str, Any]]
    diff_options: DiffOptions


ENTRY_POINTS: dict[EntryPointFlavor, EntryPoint] = {
    EntryPointFlavor.ROUTE: EntryPoint(EntryPointFlavor.ROUTE, get_route_spec, ROUTE_DIFF_OPTS),
    EntryPointFlavor.INGRESS: EntryPoint(
        EntryPointFlavor.INGRESS, get_ingress_spec, INGRESS_DIFF_OPTS
    ),
}


class EntryPointReconciler:
    """Keeps the shared entry point present for single-host routing only."""

    _entity_name = "entry_point"

    def __init__(self, syncer: Syncer, flavor: EntryPointFlavor) -> None:
        self._syncer = syncer
        self._entry_point = ENTRY_POINTS[flavor]
        self._log = logger.bind(entity=self._entity_name, flavor=str(flavor))

    @property
    def flavor(self) -> EntryPointFlavor:
        return self._entry_point.flavor

    def desired_object(self, manager: CheManager) -> dict[str, Any]:
        return self._entry_point.build(manager)

    def reconcile(self, ctx: ReconcileContext, manager: CheManager) -> bool:
        """Sync or remove the entry point depending on the routing mode.

        Removal always reports a change so the phase reflects the disabled
        gateway.
        """
        desired = self.desired_object(manager)
        if manager.spec.routing == RoutingType.SINGLE_HOST:
            return self._syncer.sync(ctx, manager, desired, self._entry_point.diff_options)

        self._syncer.delete(ctx, ObjectKey.from_manifest(desired))
        self._log.debug("entry_point_removed", manager=str(manager.key))
        return True
