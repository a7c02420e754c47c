"""Data models for the CheManager resource and object identities."""

from che_gateway_operator.models.base import ObjectKey
from che_gateway_operator.models.che_manager import (
    CHE_MANAGER_API_VERSION,
    CHE_MANAGER_KIND,
    CheManager,
    CheManagerSpec,
    CheManagerStatus,
    GatewayPhase,
    RoutingType,
)

__all__ = [
    "CHE_MANAGER_API_VERSION",
    "CHE_MANAGER_KIND",
    "CheManager",
    "CheManagerSpec",
    "CheManagerStatus",
    "GatewayPhase",
    "ObjectKey",
    "RoutingType",
]
