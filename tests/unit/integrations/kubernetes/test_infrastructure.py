"""Unit tests for entry point flavor detection."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from tenacity import retry, stop_after_attempt

from che_gateway_operator.integrations.kubernetes.exceptions import KubernetesConnectionError
from che_gateway_operator.integrations.kubernetes.infrastructure import (
    ROUTE_API_GROUP,
    EntryPointFlavor,
    detect_entry_point_flavor,
)


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Client whose retry decorator retries connection errors without sleeping."""
    client = MagicMock()
    client.make_retry_decorator.return_value = retry(
        stop=stop_after_attempt(3),
        reraise=True,
    )
    return client


class TestDetectEntryPointFlavor:
    """Tests for detect_entry_point_flavor."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_route_api_means_route(self, mock_k8s_client: MagicMock) -> None:
        """Clusters serving route.openshift.io get routes."""
        mock_k8s_client.list_api_groups.return_value = {"apps", ROUTE_API_GROUP}

        assert detect_entry_point_flavor(mock_k8s_client) == EntryPointFlavor.ROUTE

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_plain_cluster_means_ingress(self, mock_k8s_client: MagicMock) -> None:
        """Everything else gets ingresses."""
        mock_k8s_client.list_api_groups.return_value = {"apps", "networking.k8s.io"}

        assert detect_entry_point_flavor(mock_k8s_client) == EntryPointFlavor.INGRESS

    @pytest.mark.unit
    @pytest.mark.kubernetes
    @pytest.mark.parametrize(
        ("override", "expected"),
        [("route", EntryPointFlavor.ROUTE), ("ingress", EntryPointFlavor.INGRESS)],
    )
    def test_override_skips_discovery(
        self,
        mock_k8s_client: MagicMock,
        override: str,
        expected: EntryPointFlavor,
    ) -> None:
        """An explicit flavor never touches the API."""
        assert detect_entry_point_flavor(mock_k8s_client, override) == expected
        mock_k8s_client.list_api_groups.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_discovery_is_retried(self, mock_k8s_client: MagicMock) -> None:
        """Discovery goes through the client's retry decorator."""
        mock_k8s_client.list_api_groups.side_effect = [
            KubernetesConnectionError(),
            {ROUTE_API_GROUP},
        ]

        with patch("time.sleep"):
            flavor = detect_entry_point_flavor(mock_k8s_client)

        assert flavor == EntryPointFlavor.ROUTE
        assert mock_k8s_client.list_api_groups.call_count == 2

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_discovery_failure_propagates(self, mock_k8s_client: MagicMock) -> None:
        """Persistent failures reach the caller."""
        mock_k8s_client.list_api_groups.side_effect = KubernetesConnectionError("down")

        with patch("time.sleep"), pytest.raises(KubernetesConnectionError, match="down"):
            detect_entry_point_flavor(mock_k8s_client)

    @pytest.mark.unit
    def test_flavor_values(self) -> None:
        """Flavors are plain strings usable in config and CLI options."""
        assert EntryPointFlavor("route") is EntryPointFlavor.ROUTE
        assert str(EntryPointFlavor.INGRESS) == "ingress"
