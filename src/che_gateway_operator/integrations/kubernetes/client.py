"""Kubernetes API client wrapper.

Wraps the official kubernetes Python client with kubeconfig / in-cluster
loading, a lazily created dynamic client, API group discovery, retry for
startup calls and consistent error translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from che_gateway_operator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)

if TYPE_CHECKING:
    from kubernetes.client import ApiClient, ApisApi
    from kubernetes.dynamic import DynamicClient

    from che_gateway_operator.integrations.kubernetes.config import OperatorConfig

logger = structlog.get_logger()


class KubernetesClient:
    """Kubernetes API client used by the operator.

    Example:
        ```python
        from che_gateway_operator.integrations.kubernetes import KubernetesClient
        from che_gateway_operator.integrations.kubernetes.config import OperatorConfig

        with KubernetesClient(OperatorConfig.from_env()) as client:
            store = KubernetesObjectStore(client)
        ```
    """

    def __init__(self, config: OperatorConfig) -> None:
        """Initialize the client and load cluster credentials.

        Args:
            config: Operator configuration.
        """
        self._config = config
        self._retries = config.retry_attempts
        self._current_context: str | None = None

        self._api_client: ApiClient | None = None
        self._dynamic: DynamicClient | None = None
        self._apis_api: ApisApi | None = None

        self._load_config()

        logger.info(
            "Kubernetes client initialized",
            context=self._current_context,
            default_namespace=config.namespace,
        )

    def _load_config(self) -> None:
        """Load configuration from kubeconfig, falling back to in-cluster."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        try:
            config.load_kube_config(
                config_file=self._config.kubeconfig,
                context=self._config.context,
            )
            self._current_context = self._config.context or "current-context"
            logger.debug(
                "loaded_kubeconfig",
                context=self._config.context,
                kubeconfig=self._config.kubeconfig,
            )
        except ConfigException:
            try:
                config.load_incluster_config()
                self._current_context = "in-cluster"
                logger.debug("loaded_incluster_config")
            except ConfigException as e:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration. "
                    "Ensure kubeconfig exists or running inside a cluster.",
                    original_error=e,
                ) from e

        self._invalidate_api_cache()

    def _invalidate_api_cache(self) -> None:
        """Drop cached API objects."""
        self._api_client = None
        self._dynamic = None
        self._apis_api = None

    # =========================================================================
    # Lazy API Accessors
    # =========================================================================

    @property
    def api_client(self) -> ApiClient:
        """Shared low-level ApiClient."""
        if self._api_client is None:
            from kubernetes.client import ApiClient

            self._api_client = ApiClient()
        return self._api_client

    @property
    def dynamic(self) -> DynamicClient:
        """DynamicClient for working with manifest dicts of any kind.

        Creating it performs API discovery, so it is built on first use.
        """
        if self._dynamic is None:
            from kubernetes.dynamic import DynamicClient

            try:
                self._dynamic = DynamicClient(self.api_client)
            except Exception as e:
                raise KubernetesConnectionError(
                    message="Failed to discover Kubernetes API resources",
                    original_error=e,
                ) from e
        return self._dynamic

    @property
    def apis_api(self) -> ApisApi:
        """ApisApi instance for API group discovery."""
        if self._apis_api is None:
            from kubernetes.client import ApisApi

            self._apis_api = ApisApi(self.api_client)
        return self._apis_api

    # =========================================================================
    # Discovery
    # =========================================================================

    def list_api_groups(self) -> set[str]:
        """Names of the API groups served by the cluster.

        Raises:
            KubernetesConnectionError: If the API server cannot be reached.
        """
        from kubernetes.client import ApiException

        try:
            groups = self.apis_api.get_api_versions().groups or []
        except ApiException as e:
            raise self.translate_api_exception(e) from e
        except Exception as e:
            raise KubernetesConnectionError(
                message="Failed to list API groups",
                original_error=e,
            ) from e
        return {group.name for group in groups}

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Translate a kubernetes ApiException to a custom exception.

        Args:
            e: The original ApiException.
            resource_type: Kind of the object being operated on.
            resource_name: Name of the object.
            namespace: Namespace of the object.

        Returns:
            An appropriate KubernetesError subclass.
        """
        from kubernetes.client import ApiException

        if not isinstance(e, ApiException):
            return KubernetesError(
                message=str(e),
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        status = e.status

        if status in (401, 403):
            return KubernetesAuthError(
                message=e.reason or "Authentication/authorization failed",
                status_code=status,
                reason=e.reason,
            )

        if status == 404:
            return KubernetesNotFoundError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status == 409:
            return KubernetesConflictError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status in (400, 422):
            return KubernetesValidationError(
                message=e.reason or "Validation failed",
                status_code=status,
            )

        return KubernetesError(
            message=e.reason or f"Kubernetes API error: {status}",
            status_code=status,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )

    # =========================================================================
    # Retry Decorator
    # =========================================================================

    def make_retry_decorator(self) -> Any:
        """Create a retry decorator for transient connection errors.

        Only startup calls (discovery) use it; reconciliation never retries
        on its own and leaves that to whoever requeues it.

        Returns:
            A tenacity retry decorator configured with exponential backoff.
        """
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def default_namespace(self) -> str:
        """Default namespace from config."""
        return self._config.namespace

    @property
    def timeout(self) -> int:
        """Request timeout in seconds."""
        return self._config.request_timeout

    def get_current_context(self) -> str:
        """Current context name, or 'in-cluster' inside a pod."""
        return self._current_context or "unknown"

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the client and release resources."""
        if self._api_client is not None:
            self._api_client.close()
        self._invalidate_api_cache()
        logger.debug("Kubernetes client closed")

    def __enter__(self) -> KubernetesClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
