"""Naming, labelling and port conventions shared by the desired-state builders."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from che_gateway_operator.models.che_manager import CheManager

GATEWAY_PORT = 8080

APP_NAME = "che"
NAME_LABEL = "app.kubernetes.io/name"
PART_OF_LABEL = "app.kubernetes.io/part-of"
COMPONENT_LABEL = "app.kubernetes.io/component"

GATEWAY_COMPONENT = "gateway"
GATEWAY_CONFIG_COMPONENT = "gateway-config"
EXTERNAL_ACCESS_COMPONENT = "external-access"


def labels_for_component(manager: CheManager, component: str) -> dict[str, str]:
    """Labels identifying ``component`` of the given manager.

    Example:
        >>> labels_for_component(manager, "gateway")
        {'app.kubernetes.io/name': 'che', 'app.kubernetes.io/part-of': 'che',
         'app.kubernetes.io/component': 'gateway'}
    """
    return {
        NAME_LABEL: APP_NAME,
        PART_OF_LABEL: manager.name,
        COMPONENT_LABEL: component,
    }


def gateway_service_name(manager: CheManager) -> str:
    """Name of the service fronting the gateway pods."""
    return manager.name
