"""Object store backed by the Kubernetes dynamic client.

The reconciler only talks to the cluster through :class:`ObjectStore`, so it
works with any implementation honouring the same error contract: a missing
object raises :class:`KubernetesNotFoundError`, everything else raises
another :class:`KubernetesError` subclass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn, Protocol

import structlog

from che_gateway_operator.integrations.kubernetes.exceptions import KubernetesNotFoundError
from che_gateway_operator.models.base import ObjectKey

if TYPE_CHECKING:
    from che_gateway_operator.integrations.kubernetes.client import KubernetesClient
    from che_gateway_operator.integrations.kubernetes.context import ReconcileContext

logger = structlog.get_logger()


class ObjectStore(Protocol):
    """Read/write access to namespaced objects as manifest dicts."""

    def get(self, ctx: ReconcileContext, key: ObjectKey) -> dict[str, Any]: ...

    def create(self, ctx: ReconcileContext, obj: dict[str, Any]) -> dict[str, Any]: ...

    def update(self, ctx: ReconcileContext, obj: dict[str, Any]) -> dict[str, Any]: ...

    def delete(self, ctx: ReconcileContext, key: ObjectKey) -> None: ...

    def update_status(self, ctx: ReconcileContext, obj: dict[str, Any]) -> dict[str, Any]: ...


class KubernetesObjectStore:
    """ObjectStore implementation over ``kubernetes.dynamic.DynamicClient``.

    Every call checks the reconcile context first and bounds the HTTP request
    by the time left on its deadline.
    """

    _entity_name = "object_store"

    def __init__(self, client: KubernetesClient) -> None:
        """Initialize the store.

        Args:
            client: Kubernetes API client instance.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    def get(self, ctx: ReconcileContext, key: ObjectKey) -> dict[str, Any]:
        """Read an object.

        Raises:
            KubernetesNotFoundError: If the object (or its API) does not exist.
        """
        ctx.raise_if_cancelled()
        resource = self._resource(key)
        try:
            result = resource.get(
                name=key.name,
                namespace=key.namespace,
                _request_timeout=self._timeout(ctx),
            )
        except Exception as e:
            self._handle_api_error(e, key)
        return result.to_dict()

    def create(self, ctx: ReconcileContext, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object from a manifest dict."""
        key = ObjectKey.from_manifest(obj)
        ctx.raise_if_cancelled()
        resource = self._resource(key)
        self._log.debug("creating_object", object=str(key))
        try:
            result = resource.create(
                body=obj,
                namespace=key.namespace,
                _request_timeout=self._timeout(ctx),
            )
        except Exception as e:
            self._handle_api_error(e, key)
        return result.to_dict()

    def update(self, ctx: ReconcileContext, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object; ``metadata.resourceVersion`` guards concurrent writes."""
        key = ObjectKey.from_manifest(obj)
        ctx.raise_if_cancelled()
        resource = self._resource(key)
        self._log.debug("replacing_object", object=str(key))
        try:
            result = resource.replace(
                body=obj,
                namespace=key.namespace,
                _request_timeout=self._timeout(ctx),
            )
        except Exception as e:
            self._handle_api_error(e, key)
        return result.to_dict()

    def delete(self, ctx: ReconcileContext, key: ObjectKey) -> None:
        """Delete an object.

        Raises:
            KubernetesNotFoundError: If there is nothing to delete.
        """
        ctx.raise_if_cancelled()
        resource = self._resource(key)
        self._log.debug("deleting_object", object=str(key))
        try:
            resource.delete(
                name=key.name,
                namespace=key.namespace,
                _request_timeout=self._timeout(ctx),
            )
        except Exception as e:
            self._handle_api_error(e, key)

    def update_status(self, ctx: ReconcileContext, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace the status subresource of an object."""
        key = ObjectKey.from_manifest(obj)
        ctx.raise_if_cancelled()
        resource = self._resource(key)
        self._log.debug("replacing_status", object=str(key))
        try:
            result = resource.status.replace(
                body=obj,
                namespace=key.namespace,
                _request_timeout=self._timeout(ctx),
            )
        except Exception as e:
            self._handle_api_error(e, key)
        return result.to_dict()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resource(self, key: ObjectKey) -> Any:
        """Look up the dynamic resource serving ``key``'s apiVersion and kind."""
        from kubernetes.dynamic.exceptions import ResourceNotFoundError

        try:
            return self._client.dynamic.resources.get(api_version=key.api_version, kind=key.kind)
        except ResourceNotFoundError as e:
            raise KubernetesNotFoundError(
                message=f"API {key.api_version} does not serve {key.kind}",
            ) from e

    def _timeout(self, ctx: ReconcileContext) -> float:
        remaining = ctx.remaining()
        if remaining is None:
            return float(self._client.timeout)
        return min(remaining, float(self._client.timeout))

    def _handle_api_error(self, e: Exception, key: ObjectKey) -> NoReturn:
        """Translate an API exception and re-raise."""
        raise self._client.translate_api_exception(
            e,
            resource_type=key.kind,
            resource_name=key.name,
            namespace=key.namespace,
        ) from e
