"""Shared pytest fixtures for che_gateway_operator tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import typer
from typer.testing import CliRunner

from che_gateway_operator.cli.main import app
from che_gateway_operator.integrations.kubernetes.context import ReconcileContext
from che_gateway_operator.models.che_manager import CheManager
from tests.fakes import FakeObjectStore, che_manager_manifest

ENV_PREFIXES = ("CHE_GATEWAY_", "RELATED_IMAGE_")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset operator environment variables for each test."""
    for key in list(os.environ.keys()):
        if key.startswith(ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def ctx() -> ReconcileContext:
    """A live reconcile context without deadline."""
    return ReconcileContext()


@pytest.fixture
def store() -> FakeObjectStore:
    """Empty in-memory object store."""
    return FakeObjectStore()


@pytest.fixture
def seed_manager(store: FakeObjectStore) -> Callable[..., dict[str, Any]]:
    """Store a CheManager and return the stored manifest."""

    def _seed(**kwargs: Any) -> dict[str, Any]:
        return store.seed(che_manager_manifest(**kwargs))

    return _seed


@pytest.fixture
def manager() -> CheManager:
    """A single-host CheManager as read from the cluster."""
    manifest = che_manager_manifest()
    manifest["metadata"]["uid"] = "manager-uid"
    manifest["metadata"]["resourceVersion"] = "1"
    return CheManager.from_k8s_object(manifest)


@pytest.fixture
def manager_file(tmp_path: Path) -> Callable[..., Path]:
    """Write a CheManager manifest to a YAML file."""
    import yaml

    def _write(**kwargs: Any) -> Path:
        path = tmp_path / "chemanager.yaml"
        path.write_text(yaml.safe_dump(che_manager_manifest(**kwargs)), encoding="utf-8")
        return path

    return _write
