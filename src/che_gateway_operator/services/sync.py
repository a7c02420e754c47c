"""Declarative create-or-update of managed objects.

:class:`Syncer` makes one stored object match a desired manifest. Stored and
desired objects are compared through a per-kind :class:`DiffOptions` field
mask; fields outside the mask (metadata, status, platform defaults) never
cause an update.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from che_gateway_operator.integrations.kubernetes.exceptions import KubernetesNotFoundError
from che_gateway_operator.models.base import ObjectKey

if TYPE_CHECKING:
    from che_gateway_operator.integrations.kubernetes.context import ReconcileContext
    from che_gateway_operator.integrations.kubernetes.store import ObjectStore
    from che_gateway_operator.models.che_manager import CheManager

logger = structlog.get_logger()

WILDCARD = "*"

# Metadata the server owns; never sent back on update
SERVER_MANAGED_METADATA_FIELDS = ("managedFields",)


def _split(path: str) -> list[str]:
    return path.split(".")


def _select(value: Any, segments: list[str]) -> Any:
    """Value at ``segments``; ``*`` maps over every list item or mapping value."""
    if not segments:
        return value
    head, rest = segments[0], segments[1:]
    if head == WILDCARD:
        if isinstance(value, list):
            return [_select(item, rest) for item in value]
        if isinstance(value, dict):
            return {k: _select(v, rest) for k, v in value.items()}
        return None
    if isinstance(value, dict):
        return _select(value.get(head), rest)
    return None


def _drop(value: Any, segments: list[str]) -> None:
    """Remove the field(s) at ``segments`` from ``value`` in place."""
    head, rest = segments[0], segments[1:]
    if head == WILDCARD:
        if isinstance(value, dict):
            children = list(value.values())
        elif isinstance(value, list):
            children = value
        else:
            return
        if not rest:
            value.clear()
            return
        for child in children:
            _drop(child, rest)
        return
    if not isinstance(value, dict) or head not in value:
        return
    if not rest:
        del value[head]
        return
    _drop(value[head], rest)


def _normalize(value: Any) -> Any:
    """Strip None-valued mapping entries so absent and null compare equal."""
    if isinstance(value, dict):
        return {k: _normalize(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    return value


@dataclass(frozen=True)
class DiffOptions:
    """Field mask for comparing a stored object with its desired state.

    Attributes:
        compare: Dotted paths that are compared, e.g. ``spec.ports``.
        ignore: Dotted paths removed before comparing, e.g.
            ``spec.template.spec.containers.*.imagePullPolicy``.
    """

    compare: tuple[str, ...]
    ignore: tuple[str, ...] = ()

    def comparable(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Project ``obj`` onto the compared paths, minus the ignored ones."""
        pruned = copy.deepcopy(obj)
        for path in self.ignore:
            _drop(pruned, _split(path))
        return {path: _normalize(_select(pruned, _split(path))) for path in self.compare}

    def diff(self, current: dict[str, Any], desired: dict[str, Any]) -> list[str]:
        """Compared paths whose values differ between ``current`` and ``desired``."""
        actual = self.comparable(current)
        wanted = self.comparable(desired)
        return [path for path in self.compare if actual[path] != wanted[path]]


class Syncer:
    """Creates, updates or deletes single objects in an :class:`ObjectStore`.

    Holds no state of its own. Store errors other than not-found on delete
    propagate unchanged; retrying is up to whoever invoked the
    reconciliation.
    """

    _entity_name = "syncer"

    def __init__(self, store: ObjectStore) -> None:
        self._store = store
        self._log = logger.bind(entity=self._entity_name)

    def sync(
        self,
        ctx: ReconcileContext,
        owner: CheManager,
        desired: dict[str, Any],
        diff_options: DiffOptions,
    ) -> bool:
        """Make the stored object match ``desired``.

        Args:
            ctx: Reconcile context.
            owner: CheManager that owns the object.
            desired: Desired manifest.
            diff_options: Field mask used to decide whether an update is needed.

        Returns:
            True if the object was created or updated, False if it already matched.
        """
        key = ObjectKey.from_manifest(desired)
        log = self._log.bind(object=str(key))
        log.debug("syncing_object")

        try:
            current = self._store.get(ctx, key)
        except KubernetesNotFoundError:
            current = None

        if current is None:
            self._store.create(ctx, self._with_owner(desired, owner))
            log.info("object_created")
            return True

        changed_paths = diff_options.diff(current, desired)
        if not changed_paths:
            if self._is_owned_by(current, owner):
                log.debug("object_unchanged")
                return False
            # Matching object without our owner reference
            self._store.update(ctx, self._merge_onto_current(current, desired, owner))
            log.info("object_adopted")
            return True

        self._store.update(ctx, self._merge_onto_current(current, desired, owner))
        log.info("object_updated", fields=changed_paths)
        return True

    def delete(self, ctx: ReconcileContext, key: ObjectKey) -> None:
        """Delete the object identified by ``key``; a missing object is fine."""
        log = self._log.bind(object=str(key))
        try:
            self._store.delete(ctx, key)
        except KubernetesNotFoundError:
            log.debug("object_already_absent")
            return
        log.info("object_deleted")

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _is_same_owner(ref: dict[str, Any], owner_ref: dict[str, Any]) -> bool:
        return (ref.get("kind"), ref.get("name")) == (owner_ref["kind"], owner_ref["name"])

    @classmethod
    def _is_owned_by(cls, current: dict[str, Any], owner: CheManager) -> bool:
        owner_ref = owner.owner_reference()
        return any(
            cls._is_same_owner(ref, owner_ref) and ref.get("uid") == owner_ref.get("uid")
            for ref in (current.get("metadata") or {}).get("ownerReferences") or []
        )

    @staticmethod
    def _with_owner(desired: dict[str, Any], owner: CheManager) -> dict[str, Any]:
        body = copy.deepcopy(desired)
        body.setdefault("metadata", {})["ownerReferences"] = [owner.owner_reference()]
        return body

    @classmethod
    def _merge_onto_current(
        cls,
        current: dict[str, Any],
        desired: dict[str, Any],
        owner: CheManager,
    ) -> dict[str, Any]:
        """Desired content on top of the stored object's identity and metadata.

        Our owner reference replaces any stale one for the same manager. If
        another owner already holds the controller reference it keeps it, and
        ours is added with ``controller: false``; the API rejects two.
        """
        current_meta = current.get("metadata") or {}
        desired_meta = desired.get("metadata") or {}

        metadata = copy.deepcopy(current_meta)
        for meta_field in SERVER_MANAGED_METADATA_FIELDS:
            metadata.pop(meta_field, None)
        for meta_field in ("labels", "annotations"):
            if desired_meta.get(meta_field):
                metadata[meta_field] = {
                    **(current_meta.get(meta_field) or {}),
                    **desired_meta[meta_field],
                }

        owner_ref = owner.owner_reference()
        foreign_refs = [
            ref
            for ref in current_meta.get("ownerReferences") or []
            if not cls._is_same_owner(ref, owner_ref)
        ]
        if any(ref.get("controller") for ref in foreign_refs):
            owner_ref["controller"] = False
        metadata["ownerReferences"] = foreign_refs + [owner_ref]

        body = copy.deepcopy(desired)
        body["metadata"] = metadata
        return body
