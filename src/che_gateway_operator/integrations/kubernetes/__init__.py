"""Kubernetes integration - API client, object store and configuration models."""

from che_gateway_operator.integrations.kubernetes.client import KubernetesClient
from che_gateway_operator.integrations.kubernetes.config import (
    GatewayConfig,
    OperatorConfig,
)
from che_gateway_operator.integrations.kubernetes.context import ReconcileContext
from che_gateway_operator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
    ReconcileCancelledError,
)
from che_gateway_operator.integrations.kubernetes.infrastructure import (
    EntryPointFlavor,
    detect_entry_point_flavor,
)
from che_gateway_operator.integrations.kubernetes.store import (
    KubernetesObjectStore,
    ObjectStore,
)

__all__ = [
    "EntryPointFlavor",
    "GatewayConfig",
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesObjectStore",
    "KubernetesValidationError",
    "ObjectStore",
    "OperatorConfig",
    "ReconcileCancelledError",
    "ReconcileContext",
    "detect_entry_point_flavor",
]
