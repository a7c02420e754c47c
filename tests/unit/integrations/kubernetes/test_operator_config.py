"""Unit tests for operator configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from che_gateway_operator.integrations.kubernetes.config import (
    DEFAULT_CONFIGURER_IMAGE,
    DEFAULT_GATEWAY_IMAGE,
    GatewayConfig,
    OperatorConfig,
)


class TestGatewayConfig:
    """Tests for GatewayConfig."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        """Pinned Traefik and configbump images are used by default."""
        config = GatewayConfig()
        assert config.image == DEFAULT_GATEWAY_IMAGE
        assert config.configurer_image == DEFAULT_CONFIGURER_IMAGE

    @pytest.mark.unit
    def test_blank_image_rejected(self) -> None:
        """Empty image references are invalid."""
        with pytest.raises(ValidationError):
            GatewayConfig(image="   ")

    @pytest.mark.unit
    def test_image_is_stripped(self) -> None:
        """Surrounding whitespace is removed."""
        assert GatewayConfig(image=" traefik:v2 ").image == "traefik:v2"


class TestOperatorConfig:
    """Tests for OperatorConfig validation."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        """Defaults detect the entry point and use the default namespace."""
        config = OperatorConfig()
        assert config.kubeconfig is None
        assert config.namespace == "default"
        assert config.entry_point == "auto"
        assert config.request_timeout == 30
        assert config.retry_attempts == 3

    @pytest.mark.unit
    def test_kubeconfig_expands_home(self) -> None:
        """A leading ~ is expanded."""
        config = OperatorConfig(kubeconfig="~/.kube/config")
        assert config.kubeconfig == str(Path("~/.kube/config").expanduser())

    @pytest.mark.unit
    @pytest.mark.parametrize("timeout", [0, -5])
    def test_request_timeout_must_be_positive(self, timeout: int) -> None:
        """Non-positive timeouts are rejected."""
        with pytest.raises(ValidationError, match="request_timeout must be positive"):
            OperatorConfig(request_timeout=timeout)

    @pytest.mark.unit
    def test_retry_attempts_at_least_one(self) -> None:
        """At least one attempt is required."""
        with pytest.raises(ValidationError, match="retry_attempts must be at least 1"):
            OperatorConfig(retry_attempts=0)

    @pytest.mark.unit
    def test_unknown_entry_point_rejected(self) -> None:
        """Only auto, route and ingress are accepted."""
        with pytest.raises(ValidationError):
            OperatorConfig(entry_point="gateway-api")

    @pytest.mark.unit
    def test_extra_fields_forbidden(self) -> None:
        """Typos in configuration keys are errors."""
        with pytest.raises(ValidationError):
            OperatorConfig(namesapce="che")


class TestOperatorConfigFromEnv:
    """Tests for OperatorConfig.from_env."""

    @pytest.mark.unit
    def test_no_environment(self) -> None:
        """Without variables the defaults apply."""
        assert OperatorConfig.from_env() == OperatorConfig()

    @pytest.mark.unit
    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Every supported variable is applied."""
        monkeypatch.setenv("CHE_GATEWAY_KUBECONFIG", "/tmp/kubeconfig")
        monkeypatch.setenv("CHE_GATEWAY_CONTEXT", "kind-che")
        monkeypatch.setenv("CHE_GATEWAY_NAMESPACE", "eclipse-che")
        monkeypatch.setenv("CHE_GATEWAY_ENTRYPOINT", "ROUTE")
        monkeypatch.setenv("CHE_GATEWAY_TIMEOUT", "12")
        monkeypatch.setenv("CHE_GATEWAY_RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("RELATED_IMAGE_gateway", "mirror/traefik:1")
        monkeypatch.setenv("RELATED_IMAGE_gateway_configurer", "mirror/bump:1")

        config = OperatorConfig.from_env()

        assert config.kubeconfig == "/tmp/kubeconfig"
        assert config.context == "kind-che"
        assert config.namespace == "eclipse-che"
        assert config.entry_point == "route"
        assert config.request_timeout == 12
        assert config.retry_attempts == 5
        assert config.gateway == GatewayConfig(
            image="mirror/traefik:1", configurer_image="mirror/bump:1"
        )

    @pytest.mark.unit
    def test_environment_wins_over_base_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Variables override values passed in, others are kept."""
        monkeypatch.setenv("CHE_GATEWAY_NAMESPACE", "from-env")
        base = {"namespace": "from-base", "request_timeout": 7, "gateway": {"image": "base:1"}}

        config = OperatorConfig.from_env(base)

        assert config.namespace == "from-env"
        assert config.request_timeout == 7
        assert config.gateway.image == "base:1"
        assert base["namespace"] == "from-base"

    @pytest.mark.unit
    def test_invalid_timeout_in_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Non-numeric timeouts fail loudly."""
        monkeypatch.setenv("CHE_GATEWAY_TIMEOUT", "soon")

        with pytest.raises(ValueError):
            OperatorConfig.from_env()
