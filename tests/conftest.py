"""Shared test fixtures for kubeseal-sync tests."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import yaml

from kubeseal_sync.core.context import RunContext
from kubeseal_sync.exceptions import EncryptionCommandError
from kubeseal_sync.models import ControllerInfo, Environment
from kubeseal_sync.secrets.prompts import ChoiceGroup


class StubEncryptor:
    """Deterministic encryptor: ``ENC(<value>)``, or a failure for values in ``fail_on``."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self.fail_on: set[str] = set()

    def seal(self, namespace: str, name: str, value: str) -> str:
        self.calls.append((namespace, name, value))
        if value in self.fail_on:
            raise EncryptionCommandError("kubeseal failed (exit code 1)")
        return f"ENC({value})"


class ScriptedPrompter:
    """Prompter answering from a queue and recording every question.

    An answer may be a list of values or a callable receiving the groups.
    """

    def __init__(self, answers: Sequence[Any] = ()) -> None:
        self.answers: list[Any] = list(answers)
        self.questions: list[tuple[str, list[ChoiceGroup]]] = []

    def select_many(self, message: str, groups: Sequence[ChoiceGroup]) -> list[Any]:
        self.questions.append((message, list(groups)))
        answer = self.answers.pop(0)
        if callable(answer):
            return answer(groups)
        return list(answer)


def checked_values(groups: Sequence[ChoiceGroup]) -> list[Any]:
    """Accept the pre-checked choices, like pressing enter straight away."""
    return [choice.value for group in groups for choice in group.choices if choice.checked]


def secret_doc(name: str, namespace: str, data: dict[str, str] | None = None, **extra: Any) -> dict[str, Any]:
    """Return a Secret document."""
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": name, "namespace": namespace},
        "type": "Opaque",
        "data": data or {},
        **extra,
    }


def sealed_secret_doc(name: str, namespace: str, encrypted_data: dict[str, str]) -> dict[str, Any]:
    """Return a SealedSecret document."""
    return {
        "apiVersion": "bitnami.com/v1alpha1",
        "kind": "SealedSecret",
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"encryptedData": encrypted_data, "template": {"metadata": {"name": name, "namespace": namespace}}},
    }


@pytest.fixture
def encryptor():
    """Deterministic stand-in for kubeseal."""
    return StubEncryptor()


@pytest.fixture
def prompter():
    """Prompter with an empty answer queue."""
    return ScriptedPrompter()


@pytest.fixture
def env_root(tmp_path) -> Path:
    """Generated manifests root of the local environment."""
    root = tmp_path / "generatedManifests" / "local"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def write_manifest(env_root) -> Callable[..., Path]:
    """Write YAML documents below the local environment root."""

    def _write(relative: str, *documents: Any) -> Path:
        path = env_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump_all(documents, sort_keys=False))
        return path

    return _write


@pytest.fixture
def manifest_tree(write_manifest) -> dict[str, Path]:
    """A small local environment with two Secrets and one SealedSecret."""
    return {
        "graphql_secret": write_manifest(
            "services/graphql-surrealdb/1-manifest/secret-graphql-surrealdb.yaml",
            secret_doc("graphql-surrealdb", "applications", {"REDIS_PASSWORD": "cmVkaXM=", "DB_PASS": "ZGI="}),
        ),
        "graphql_deployment": write_manifest(
            "services/graphql-surrealdb/1-manifest/deployment-graphql-surrealdb.yaml",
            {
                "apiVersion": "apps/v1",
                "kind": "Deployment",
                "metadata": {"name": "graphql-surrealdb", "namespace": "applications"},
            },
        ),
        "argocd_secret": write_manifest(
            "infrastructure/argocd/1-manifest/secret-argocd.yaml",
            secret_doc("argocd-secret", "argocd", {"ADMIN_PASSWORD": "YWRtaW4="}),
        ),
        "argocd_sealed": write_manifest(
            "infrastructure/argocd/sealed-secrets/sealed-secret-argocd-secret-argocd.yaml",
            sealed_secret_doc("argocd-secret", "argocd", {"ADMIN_PASSWORD": "OLD-ADMIN"}),
        ),
    }


@pytest.fixture
def run_context(tmp_path, env_root, encryptor, prompter) -> RunContext:  # noqa: ARG001
    """Run context over the local environment with test doubles."""
    return RunContext(
        environment=Environment.LOCAL,
        base_dir=tmp_path,
        encryptor=encryptor,
        prompter=prompter,
    )


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([{"name": "test-context"}], {"name": "test-context"})
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes config loading."""
    with patch("kubernetes.config.load_kube_config") as mock:
        yield mock


@pytest.fixture
def mock_controller():
    """Mock SealedSecrets controller discovery."""
    with patch("kubeseal_sync.cluster.Cluster._find_sealed_secrets_controller") as mock:
        mock.return_value = ControllerInfo(
            name="sealed-secrets-controller",
            namespace="kube-system",
            version="v0.26.0",
        )
        yield mock


@pytest.fixture
def mock_core_v1_api():
    """Mock CoreV1Api for service listing."""
    with patch("kubernetes.client.CoreV1Api") as mock:
        api_instance = MagicMock()
        mock.return_value = api_instance
        yield api_instance


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for command execution."""
    with patch("subprocess.run") as mock:
        mock.return_value = MagicMock(returncode=0, stdout=b"", stderr=b"")
        yield mock


@pytest.fixture
def cluster_mocks(mock_kube_contexts, mock_kube_config, mock_controller):
    """Combined fixture for creating a Cluster instance without cluster access.

    Note: This fixture is used for its side effects (setting up mocks).
    Tests that use it may not directly reference the returned dict.
    """
    return {
        "contexts": mock_kube_contexts,
        "config": mock_kube_config,
        "controller": mock_controller,
    }
