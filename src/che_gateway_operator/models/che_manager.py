"""The CheManager custom resource."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from che_gateway_operator.models.base import ObjectKey, _safe_get

CHE_MANAGER_GROUP = "che.eclipse.org"
CHE_MANAGER_VERSION = "v1alpha1"
CHE_MANAGER_API_VERSION = f"{CHE_MANAGER_GROUP}/{CHE_MANAGER_VERSION}"
CHE_MANAGER_KIND = "CheManager"
CHE_MANAGER_PLURAL = "chemanagers"


class RoutingType(StrEnum):
    """How workspace endpoints are exposed."""

    SINGLE_HOST = "singlehost"
    MULTI_HOST = "multihost"


class GatewayPhase(StrEnum):
    """Derived convergence state of the shared gateway.

    ``UNKNOWN`` is the empty value of a status that was never written.
    """

    UNKNOWN = ""
    INACTIVE = "Inactive"
    INITIALIZING = "Initializing"
    ESTABLISHED = "Established"


class CheManagerSpec(BaseModel):
    """Desired routing configuration."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    host: str = Field(default="", description="External hostname to expose")
    routing: RoutingType = Field(default=RoutingType.SINGLE_HOST, description="Routing mode")


class CheManagerStatus(BaseModel):
    """Status written back by the reconciler."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    gateway_phase: GatewayPhase = Field(
        default=GatewayPhase.UNKNOWN,
        alias="gatewayPhase",
        description="Gateway phase",
    )


class CheManager(BaseModel):
    """A CheManager resource as read from the cluster.

    The raw object is kept so that status write-backs carry the
    ``resourceVersion`` and every field the model does not know about.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    namespace: str
    uid: str | None = None
    deletion_timestamp: str | None = None
    spec: CheManagerSpec = Field(default_factory=CheManagerSpec)
    status: CheManagerStatus = Field(default_factory=CheManagerStatus)
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> CheManager:
        """Create from the JSON-shaped dict returned by the API."""
        deletion = _safe_get(obj, "metadata", "deletionTimestamp")
        return cls(
            name=_safe_get(obj, "metadata", "name", default=""),
            namespace=_safe_get(obj, "metadata", "namespace", default=""),
            uid=_safe_get(obj, "metadata", "uid"),
            deletion_timestamp=str(deletion) if deletion else None,
            spec=CheManagerSpec.model_validate(obj.get("spec") or {}),
            status=CheManagerStatus.model_validate(obj.get("status") or {}),
            raw=obj,
        )

    @staticmethod
    def key_for(name: str, namespace: str) -> ObjectKey:
        """Identity of the CheManager called ``name`` in ``namespace``."""
        return ObjectKey(
            api_version=CHE_MANAGER_API_VERSION,
            kind=CHE_MANAGER_KIND,
            namespace=namespace,
            name=name,
        )

    @property
    def key(self) -> ObjectKey:
        return self.key_for(self.name, self.namespace)

    @property
    def being_deleted(self) -> bool:
        """Whether the resource carries a deletion marker."""
        return self.deletion_timestamp is not None

    def owner_reference(self) -> dict[str, Any]:
        """Controller owner reference pointing at this resource."""
        ref: dict[str, Any] = {
            "apiVersion": CHE_MANAGER_API_VERSION,
            "kind": CHE_MANAGER_KIND,
            "name": self.name,
            "controller": True,
            "blockOwnerDeletion": True,
        }
        if self.uid:
            ref["uid"] = self.uid
        return ref

    def status_body(self, phase: GatewayPhase) -> dict[str, Any]:
        """Copy of the raw object with ``status.gatewayPhase`` set to ``phase``."""
        body = dict(self.raw)
        body.setdefault("apiVersion", CHE_MANAGER_API_VERSION)
        body.setdefault("kind", CHE_MANAGER_KIND)
        body.setdefault("metadata", {"name": self.name, "namespace": self.namespace})
        body["status"] = {**(self.raw.get("status") or {}), "gatewayPhase": str(phase)}
        return body
