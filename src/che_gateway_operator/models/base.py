"""Base models shared by the reconciler and the object store."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ObjectKey(BaseModel):
    """Identity of a namespaced object: apiVersion, kind, namespace and name."""

    model_config = ConfigDict(frozen=True)

    api_version: str = Field(description="API group/version, e.g. apps/v1")
    kind: str = Field(description="Object kind, e.g. Deployment")
    namespace: str = Field(description="Object namespace")
    name: str = Field(description="Object name")

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> ObjectKey:
        """Extract the identity of a manifest dict.

        Raises:
            ValueError: If any identity field is missing.
        """
        metadata = manifest.get("metadata") or {}
        api_version = manifest.get("apiVersion")
        kind = manifest.get("kind")
        name = metadata.get("name")
        namespace = metadata.get("namespace")
        if not (api_version and kind and name and namespace):
            raise ValueError(
                f"manifest is missing identity fields: {kind or 'Unknown'}/{name or 'unnamed'}"
            )
        return cls(api_version=api_version, kind=kind, namespace=namespace, name=name)

    def __str__(self) -> str:
        return f"{self.kind}/{self.namespace}/{self.name}"


def _safe_get(obj: Any, *keys: str, default: Any = None) -> Any:
    """Safely traverse nested keys of a JSON-shaped dict."""
    current = obj
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
    return current if current is not None else default
