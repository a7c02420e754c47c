"""The single-host gateway bundle.

A Traefik deployment fronted by a service. Its routing table is fed by the
``configbump`` sidecar, which copies config maps labelled as gateway
configuration into a directory Traefik watches. The bundle also carries the
service account, role and role binding the sidecar needs to read those
config maps, and the config map with Traefik's static configuration.

:class:`CheGateway` synchronizes or tears down the bundle as a unit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
import yaml

from che_gateway_operator.integrations.kubernetes.config import GatewayConfig
from che_gateway_operator.models.base import ObjectKey
from che_gateway_operator.services.defaults import (
    COMPONENT_LABEL,
    GATEWAY_COMPONENT,
    GATEWAY_CONFIG_COMPONENT,
    GATEWAY_PORT,
    PART_OF_LABEL,
    gateway_service_name,
    labels_for_component,
)
from che_gateway_operator.services.sync import DiffOptions

if TYPE_CHECKING:
    from che_gateway_operator.integrations.kubernetes.context import ReconcileContext
    from che_gateway_operator.models.che_manager import CheManager
    from che_gateway_operator.services.sync import Syncer

logger = structlog.get_logger()

SINK_PORT = 8090
STATIC_CONFIG_FILE = "traefik.yml"
STATIC_CONFIG_DIR = "/etc/traefik"
DYNAMIC_CONFIG_DIR = "/dynamic-config"

SERVICE_ACCOUNT_DIFF_OPTS = DiffOptions(compare=("automountServiceAccountToken",))
ROLE_DIFF_OPTS = DiffOptions(compare=("rules",))
ROLE_BINDING_DIFF_OPTS = DiffOptions(compare=("roleRef", "subjects"))
CONFIG_MAP_DIFF_OPTS = DiffOptions(compare=("data",))
DEPLOYMENT_DIFF_OPTS = DiffOptions(
    compare=(
        "spec.replicas",
        "spec.selector",
        "spec.strategy.type",
        "spec.template.metadata.labels",
        "spec.template.spec.serviceAccountName",
        "spec.template.spec.containers",
        "spec.template.spec.volumes",
    ),
    ignore=(
        "spec.template.spec.containers.*.terminationMessagePath",
        "spec.template.spec.containers.*.terminationMessagePolicy",
        "spec.template.spec.containers.*.resources",
        "spec.template.spec.containers.*.env.*.valueFrom.fieldRef.apiVersion",
        "spec.template.spec.volumes.*.configMap.defaultMode",
    ),
)
SERVICE_DIFF_OPTS = DiffOptions(compare=("spec.ports", "spec.selector"))


def _metadata(manager: CheManager, component: str = GATEWAY_COMPONENT) -> dict[str, Any]:
    return {
        "name": manager.name,
        "namespace": manager.namespace,
        "labels": labels_for_component(manager, component),
    }


def get_service_account_spec(manager: CheManager) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": _metadata(manager),
    }


def get_role_spec(manager: CheManager) -> dict[str, Any]:
    """Role letting the config sidecar read config maps in the namespace."""
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "Role",
        "metadata": _metadata(manager),
        "rules": [
            {
                "apiGroups": [""],
                "resources": ["configmaps"],
                "verbs": ["get", "watch", "list"],
            }
        ],
    }


def get_role_binding_spec(manager: CheManager) -> dict[str, Any]:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "RoleBinding",
        "metadata": _metadata(manager),
        "roleRef": {
            "apiGroup": "rbac.authorization.k8s.io",
            "kind": "Role",
            "name": manager.name,
        },
        "subjects": [
            {
                "kind": "ServiceAccount",
                "name": manager.name,
                "namespace": manager.namespace,
            }
        ],
    }


def get_traefik_static_config() -> str:
    """Traefik's static configuration as YAML.

    Serves HTTP on the gateway port, answers health pings on a separate
    ``sink`` entry point and loads routes from the watched dynamic directory.
    """
    config = {
        "entrypoints": {
            "http": {
                "address": f":{GATEWAY_PORT}",
                "forwardedHeaders": {"insecure": True},
            },
            "sink": {"address": f":{SINK_PORT}"},
        },
        "ping": {"entryPoint": "sink"},
        "providers": {
            "file": {
                "directory": DYNAMIC_CONFIG_DIR,
                "watch": True,
            },
        },
    }
    return yaml.safe_dump(config, default_flow_style=False, sort_keys=False)


def get_config_map_spec(manager: CheManager) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": _metadata(manager),
        "data": {STATIC_CONFIG_FILE: get_traefik_static_config()},
    }


def get_deployment_spec(manager: CheManager, config: GatewayConfig) -> dict[str, Any]:
    """Gateway deployment: Traefik plus the configbump sidecar."""
    labels = labels_for_component(manager, GATEWAY_COMPONENT)
    config_labels = (
        f"{PART_OF_LABEL}={manager.name},{COMPONENT_LABEL}={GATEWAY_CONFIG_COMPONENT}"
    )
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": _metadata(manager),
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": labels},
            "strategy": {"type": "Recreate"},
            "template": {
                "metadata": {"labels": labels},
                "spec": {
                    "serviceAccountName": manager.name,
                    "containers": [
                        {
                            "name": "gateway",
                            "image": config.image,
                            "imagePullPolicy": "IfNotPresent",
                            "ports": [
                                {
                                    "name": "http",
                                    "containerPort": GATEWAY_PORT,
                                    "protocol": "TCP",
                                }
                            ],
                            "volumeMounts": [
                                {"name": "static-config", "mountPath": STATIC_CONFIG_DIR},
                                {"name": "dynamic-config", "mountPath": DYNAMIC_CONFIG_DIR},
                            ],
                        },
                        {
                            "name": "configbump",
                            "image": config.configurer_image,
                            "imagePullPolicy": "IfNotPresent",
                            "env": [
                                {"name": "CONFIG_BUMP_DIR", "value": DYNAMIC_CONFIG_DIR},
                                {"name": "CONFIG_BUMP_LABELS", "value": config_labels},
                                {
                                    "name": "CONFIG_BUMP_NAMESPACE",
                                    "valueFrom": {
                                        "fieldRef": {"fieldPath": "metadata.namespace"},
                                    },
                                },
                            ],
                            "volumeMounts": [
                                {"name": "dynamic-config", "mountPath": DYNAMIC_CONFIG_DIR},
                            ],
                        },
                    ],
                    "volumes": [
                        {"name": "static-config", "configMap": {"name": manager.name}},
                        {"name": "dynamic-config", "emptyDir": {}},
                    ],
                },
            },
        },
    }


def get_service_spec(manager: CheManager) -> dict[str, Any]:
    metadata = _metadata(manager)
    metadata["name"] = gateway_service_name(manager)
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": metadata,
        "spec": {
            "selector": labels_for_component(manager, GATEWAY_COMPONENT),
            "ports": [
                {
                    "name": "gateway",
                    "protocol": "TCP",
                    "port": GATEWAY_PORT,
                    "targetPort": GATEWAY_PORT,
                }
            ],
        },
    }


def get_gateway_objects(
    manager: CheManager,
    config: GatewayConfig,
) -> list[tuple[dict[str, Any], DiffOptions]]:
    """Desired bundle manifests paired with their diff masks, in sync order."""
    return [
        (get_service_account_spec(manager), SERVICE_ACCOUNT_DIFF_OPTS),
        (get_role_spec(manager), ROLE_DIFF_OPTS),
        (get_role_binding_spec(manager), ROLE_BINDING_DIFF_OPTS),
        (get_config_map_spec(manager), CONFIG_MAP_DIFF_OPTS),
        (get_deployment_spec(manager, config), DEPLOYMENT_DIFF_OPTS),
        (get_service_spec(manager), SERVICE_DIFF_OPTS),
    ]


class CheGateway:
    """Synchronizes the gateway bundle of a CheManager.

    Bundle members are handled in a fixed order: service account, role,
    role binding, config map, deployment, service.
    """

    _entity_name = "gateway"

    def __init__(self, syncer: Syncer, config: GatewayConfig | None = None) -> None:
        """Initialize the engine.

        Args:
            syncer: Syncer writing to the object store.
            config: Gateway images; defaults apply when omitted.
        """
        self._syncer = syncer
        self._config = config or GatewayConfig()
        self._log = logger.bind(entity=self._entity_name)

    def desired_objects(self, manager: CheManager) -> list[tuple[dict[str, Any], DiffOptions]]:
        """Desired bundle manifests paired with their diff masks, in sync order."""
        return get_gateway_objects(manager, self._config)

    def sync(self, ctx: ReconcileContext, manager: CheManager) -> bool:
        """Create or update every bundle member.

        Stops at the first error; members synchronized before it stay in place.

        Returns:
            True if any member was created or updated.
        """
        log = self._log.bind(manager=str(manager.key))
        changed = False
        for desired, diff_opts in self.desired_objects(manager):
            # every member is synced, even after one reported a change
            changed = self._syncer.sync(ctx, manager, desired, diff_opts) or changed
        log.debug("gateway_synced", changed=changed)
        return changed

    def delete(self, ctx: ReconcileContext, manager: CheManager) -> None:
        """Delete every bundle member; members already gone are skipped."""
        log = self._log.bind(manager=str(manager.key))
        for desired, _ in self.desired_objects(manager):
            self._syncer.delete(ctx, ObjectKey.from_manifest(desired))
        log.debug("gateway_deleted")
