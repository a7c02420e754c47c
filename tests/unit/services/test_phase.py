"""Unit tests for gateway phase transitions."""

from __future__ import annotations

import pytest

from che_gateway_operator.models.che_manager import GatewayPhase, RoutingType
from che_gateway_operator.services.phase import PhaseDecision, next_phase

SINGLE = RoutingType.SINGLE_HOST
MULTI = RoutingType.MULTI_HOST

UNKNOWN = GatewayPhase.UNKNOWN
INACTIVE = GatewayPhase.INACTIVE
INIT = GatewayPhase.INITIALIZING
ESTABLISHED = GatewayPhase.ESTABLISHED


class TestNextPhase:
    """Tests for next_phase."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("routing", "any_changed", "previous", "expected"),
        [
            # single-host, something changed
            (SINGLE, True, UNKNOWN, PhaseDecision(INIT, True, True)),
            (SINGLE, True, INIT, PhaseDecision(INIT, True, False)),
            (SINGLE, True, ESTABLISHED, PhaseDecision(INIT, True, True)),
            (SINGLE, True, INACTIVE, PhaseDecision(INIT, True, True)),
            # single-host, nothing to do
            (SINGLE, False, UNKNOWN, PhaseDecision(ESTABLISHED, True, True)),
            (SINGLE, False, INIT, PhaseDecision(ESTABLISHED, True, True)),
            (SINGLE, False, ESTABLISHED, PhaseDecision(ESTABLISHED, False, False)),
            # multi-host
            (MULTI, True, UNKNOWN, PhaseDecision(INACTIVE, True, True)),
            (MULTI, True, ESTABLISHED, PhaseDecision(INACTIVE, True, True)),
            (MULTI, True, INACTIVE, PhaseDecision(INACTIVE, False, False)),
            (MULTI, False, INACTIVE, PhaseDecision(INACTIVE, False, False)),
        ],
    )
    def test_transition_table(
        self,
        routing: RoutingType,
        any_changed: bool,
        previous: GatewayPhase,
        expected: PhaseDecision,
    ) -> None:
        """Phase, requeue and status write follow from the inputs alone."""
        assert next_phase(routing, any_changed, previous) == expected

    @pytest.mark.unit
    def test_status_written_only_when_phase_moves(self) -> None:
        """write_status is exactly phase != previous."""
        for previous in GatewayPhase:
            for any_changed in (True, False):
                decision = next_phase(SINGLE, any_changed, previous)
                assert decision.write_status == (decision.phase != previous)

    @pytest.mark.unit
    def test_initializing_always_requeues(self) -> None:
        """An unsettled gateway is always looked at again."""
        for previous in GatewayPhase:
            assert next_phase(SINGLE, True, previous).requeue is True
