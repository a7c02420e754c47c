"""Gateway phase derived from the outcome of a reconciliation pass."""

from __future__ import annotations

from typing import NamedTuple

from che_gateway_operator.models.che_manager import GatewayPhase, RoutingType


class PhaseDecision(NamedTuple):
    """New phase and whether the reconciliation should run again."""

    phase: GatewayPhase
    requeue: bool
    write_status: bool


def next_phase(routing: RoutingType, any_changed: bool, previous: GatewayPhase) -> PhaseDecision:
    """Compute the gateway phase from the current inputs alone.

    * multi-host routing -> ``Inactive``
    * something was created, updated or removed -> ``Initializing``
    * nothing to do -> ``Established``

    A requeue is requested when the phase moved or is still ``Initializing``;
    status is written only when the phase moved.

    Example:
        >>> next_phase(RoutingType.SINGLE_HOST, False, GatewayPhase.INITIALIZING)
        PhaseDecision(phase=<GatewayPhase.ESTABLISHED: 'Established'>, requeue=True, write_status=True)
    """
    if routing == RoutingType.MULTI_HOST:
        phase = GatewayPhase.INACTIVE
    elif any_changed:
        phase = GatewayPhase.INITIALIZING
    else:
        phase = GatewayPhase.ESTABLISHED

    moved = phase != previous
    return PhaseDecision(
        phase=phase,
        requeue=moved or phase == GatewayPhase.INITIALIZING,
        write_status=moved,
    )
