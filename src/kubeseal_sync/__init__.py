"""kubeseal-sync: Seal generated Kubernetes Secrets into SealedSecrets.

This package loads the generated manifests of an environment, lets the
operator pick which secret fields to seal and merges the new ciphertexts
into previously generated SealedSecrets.

Example usage:
    from pathlib import Path

    from kubeseal_sync import Environment, RunContext, SecretsSync
    from kubeseal_sync.core import create_encryptor
    from kubeseal_sync.secrets import QuestionaryPrompter

    context = RunContext(
        environment=Environment.LOCAL,
        base_dir=Path("kubernetes"),
        encryptor=create_encryptor(certificate="sealing.crt"),
        prompter=QuestionaryPrompter(),
    )
    SecretsSync(context).sync_sealed_secrets_with_prompt()
"""

__version__ = "0.1.0"

from kubeseal_sync.cli import cli
from kubeseal_sync.cluster import Cluster
from kubeseal_sync.core.context import RunContext
from kubeseal_sync.core.sync import SecretsSync
from kubeseal_sync.exceptions import (
    BinaryNotFoundError,
    ClusterConnectionError,
    ControllerNotFoundError,
    DirectoryNotFoundError,
    EmptySelectionError,
    EncryptionCommandError,
    InvalidSecretError,
    KubesealSyncError,
    ManifestParseError,
    PlainConfigError,
    SerializationError,
)
from kubeseal_sync.manifests import ManifestStore
from kubeseal_sync.models import Environment, KubeObject, ResourceKind, SecretSelection

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "Cluster",
    "Environment",
    "KubeObject",
    "ManifestStore",
    "ResourceKind",
    "RunContext",
    "SecretSelection",
    "SecretsSync",
    # Exceptions
    "KubesealSyncError",
    "BinaryNotFoundError",
    "ClusterConnectionError",
    "ControllerNotFoundError",
    "DirectoryNotFoundError",
    "EmptySelectionError",
    "EncryptionCommandError",
    "InvalidSecretError",
    "ManifestParseError",
    "PlainConfigError",
    "SerializationError",
]
