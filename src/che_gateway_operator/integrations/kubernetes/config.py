"""Operator configuration models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_GATEWAY_IMAGE = "docker.io/traefik:v2.2.8"
DEFAULT_CONFIGURER_IMAGE = "quay.io/che-incubator/configbump:0.1.4"


class GatewayConfig(BaseModel):
    """Images used by the gateway deployment."""

    model_config = ConfigDict(extra="forbid")

    image: str = DEFAULT_GATEWAY_IMAGE
    configurer_image: str = DEFAULT_CONFIGURER_IMAGE

    @field_validator("image", "configurer_image")
    @classmethod
    def validate_image(cls, v: str) -> str:
        """Reject blank image references."""
        if not v.strip():
            raise ValueError("image must not be empty")
        return v.strip()


class OperatorConfig(BaseModel):
    """Complete operator configuration."""

    model_config = ConfigDict(extra="forbid")

    kubeconfig: str | None = None
    context: str | None = None
    namespace: str = "default"
    entry_point: Literal["auto", "route", "ingress"] = "auto"
    request_timeout: int = 30
    retry_attempts: int = 3
    gateway: GatewayConfig = GatewayConfig()

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str | None) -> str | None:
        """Expand ~ in kubeconfig path."""
        if v is None:
            return None
        return str(Path(v).expanduser())

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: int) -> int:
        """Validate request_timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts allows at least one attempt."""
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> OperatorConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            CHE_GATEWAY_KUBECONFIG: Path to the kubeconfig file
            CHE_GATEWAY_CONTEXT: Kubeconfig context to use
            CHE_GATEWAY_NAMESPACE: Default namespace for CLI commands
            CHE_GATEWAY_ENTRYPOINT: Entry point flavor (auto, route, ingress)
            CHE_GATEWAY_TIMEOUT: API request timeout in seconds
            CHE_GATEWAY_RETRY_ATTEMPTS: Connection attempts during startup
            RELATED_IMAGE_gateway: Gateway (Traefik) image
            RELATED_IMAGE_gateway_configurer: Config-bump sidecar image
        """
        config_dict = base_config.copy() if base_config else {}
        gateway = dict(config_dict.get("gateway") or {})

        if kubeconfig := os.environ.get("CHE_GATEWAY_KUBECONFIG"):
            config_dict["kubeconfig"] = kubeconfig

        if context := os.environ.get("CHE_GATEWAY_CONTEXT"):
            config_dict["context"] = context

        if namespace := os.environ.get("CHE_GATEWAY_NAMESPACE"):
            config_dict["namespace"] = namespace

        if entry_point := os.environ.get("CHE_GATEWAY_ENTRYPOINT"):
            config_dict["entry_point"] = entry_point.lower()

        if timeout := os.environ.get("CHE_GATEWAY_TIMEOUT"):
            config_dict["request_timeout"] = int(timeout)

        if attempts := os.environ.get("CHE_GATEWAY_RETRY_ATTEMPTS"):
            config_dict["retry_attempts"] = int(attempts)

        # Operator bundles pin images through RELATED_IMAGE_* variables
        if image := os.environ.get("RELATED_IMAGE_gateway"):
            gateway["image"] = image

        if configurer := os.environ.get("RELATED_IMAGE_gateway_configurer"):
            gateway["configurer_image"] = configurer

        config_dict["gateway"] = gateway
        return cls.model_validate(config_dict)
