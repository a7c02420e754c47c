"""CheManager reconciliation loop.

:meth:`CheManagerReconciler.reconcile` is invoked by an external scheduler
whenever a CheManager or one of the objects it owns may have changed. Each
call recomputes the desired state from scratch and holds no state between
calls, so concurrent calls for different managers need no locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from che_gateway_operator.integrations.kubernetes.context import ReconcileContext
from che_gateway_operator.integrations.kubernetes.exceptions import KubernetesNotFoundError
from che_gateway_operator.models.che_manager import CheManager, GatewayPhase, RoutingType
from che_gateway_operator.services.entrypoint import EntryPointReconciler
from che_gateway_operator.services.gateway import CheGateway
from che_gateway_operator.services.phase import next_phase
from che_gateway_operator.services.sync import Syncer

if TYPE_CHECKING:
    from che_gateway_operator.integrations.kubernetes.config import GatewayConfig
    from che_gateway_operator.integrations.kubernetes.infrastructure import EntryPointFlavor
    from che_gateway_operator.integrations.kubernetes.store import ObjectStore
    from che_gateway_operator.models.base import ObjectKey

logger = structlog.get_logger()


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of one reconciliation pass.

    Attributes:
        requeue: Ask the scheduler to reconcile the same key again.
        phase: Gateway phase computed by the pass, None when the pass
            stopped before computing one (missing or deleted manager).
    """

    requeue: bool = False
    phase: GatewayPhase | None = None


class CheManagerReconciler:
    """Reconciles the gateway bundle and entry point of CheManager resources.

    Example:
        ```python
        store = KubernetesObjectStore(client)
        flavor = detect_entry_point_flavor(client)
        reconciler = CheManagerReconciler(store, flavor)
        result = reconciler.reconcile(CheManager.key_for("che", "default"))
        ```
    """

    _entity_name = "che_manager"

    def __init__(
        self,
        store: ObjectStore,
        flavor: EntryPointFlavor,
        gateway_config: GatewayConfig | None = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            store: Object store for reads and writes.
            flavor: Entry point flavor supported by the cluster.
            gateway_config: Gateway images; defaults apply when omitted.
        """
        self._store = store
        self._syncer = Syncer(store)
        self._gateway = CheGateway(self._syncer, gateway_config)
        self._entry_point = EntryPointReconciler(self._syncer, flavor)
        self._log = logger.bind(entity=self._entity_name)

    @property
    def gateway(self) -> CheGateway:
        return self._gateway

    @property
    def entry_point(self) -> EntryPointReconciler:
        return self._entry_point

    def reconcile(self, key: ObjectKey, ctx: ReconcileContext | None = None) -> ReconcileResult:
        """Run one reconciliation pass for the CheManager identified by ``key``.

        Args:
            key: Identity of the CheManager.
            ctx: Cancellation context; a fresh one without deadline when omitted.

        Returns:
            Whether to requeue and the resulting phase.

        Raises:
            KubernetesError: Any store error other than the manager being
                gone; no status is written in that case.
        """
        ctx = ctx or ReconcileContext()
        log = self._log.bind(manager=f"{key.namespace}/{key.name}")

        try:
            manager = CheManager.from_k8s_object(self._store.get(ctx, key))
        except KubernetesNotFoundError:
            # owned objects are garbage collected through their owner references
            log.debug("manager_not_found")
            return ReconcileResult()

        if manager.being_deleted:
            self.finalize(manager)
            return ReconcileResult()

        any_changed = self._reconcile_gateway(ctx, manager)
        any_changed = self._entry_point.reconcile(ctx, manager) or any_changed

        return self._update_status(ctx, manager, any_changed)

    def finalize(self, manager: CheManager) -> None:
        """Pre-deletion hook; owner references already cover every managed object."""
        self._log.debug("manager_finalized", manager=str(manager.key))

    def _reconcile_gateway(self, ctx: ReconcileContext, manager: CheManager) -> bool:
        if manager.spec.routing == RoutingType.SINGLE_HOST:
            return self._gateway.sync(ctx, manager)

        self._gateway.delete(ctx, manager)
        return True

    def _update_status(
        self,
        ctx: ReconcileContext,
        manager: CheManager,
        any_changed: bool,
    ) -> ReconcileResult:
        previous = manager.status.gateway_phase
        decision = next_phase(manager.spec.routing, any_changed, previous)

        if decision.write_status:
            self._store.update_status(ctx, manager.status_body(decision.phase))
            self._log.info(
                "gateway_phase_changed",
                manager=str(manager.key),
                previous=str(previous) or None,
                phase=str(decision.phase),
            )

        return ReconcileResult(requeue=decision.requeue, phase=decision.phase)
