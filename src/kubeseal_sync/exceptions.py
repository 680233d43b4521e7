"""Custom exceptions for kubeseal-sync.

This module defines the exception hierarchy used throughout the application.
Errors scoped to a single document or field are recoverable and reported by
the caller; errors scoped to a whole environment abort the run.
"""


class KubesealSyncError(Exception):
    """Base exception for all kubeseal-sync errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all kubeseal-sync errors with a single
    except clause if desired.
    """

    pass


class DirectoryNotFoundError(KubesealSyncError):
    """Raised when the generated manifests directory of an environment is missing.

    This is fatal: without generated manifests there is nothing to seal.
    Run the manifest generation for the environment first.
    """

    pass


class ManifestParseError(KubesealSyncError):
    """Raised when a manifest file cannot be parsed.

    This can occur when:
    - The file is not valid YAML
    - A document in the file is not a mapping
    - A document is missing its ``kind`` or ``apiVersion``

    Only the offending file is skipped; other manifests still load.
    """

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class InvalidSecretError(KubesealSyncError):
    """Raised when a Secret document lacks its name or namespace.

    A SealedSecret is bound to both, so such a Secret cannot be sealed.
    """

    pass


class EmptySelectionError(KubesealSyncError):
    """Raised when the operator confirms a selection with nothing chosen."""

    pass


class EncryptionCommandError(KubesealSyncError):
    """Raised when sealing a single secret value fails.

    This can occur when:
    - kubeseal exits with a non-zero status
    - kubeseal does not answer within the configured timeout
    - The stored value is not valid base64

    The previous ciphertext of the field, if any, is kept.
    """

    pass


class SerializationError(KubesealSyncError):
    """Raised when a SealedSecret document cannot be written to disk."""

    pass


class BinaryNotFoundError(KubesealSyncError):
    """Raised when the kubeseal binary cannot be found on PATH."""

    pass


class ClusterConnectionError(KubesealSyncError):
    """Raised when connection to the Kubernetes cluster fails.

    This can occur when:
    - The kubeconfig is invalid or missing
    - The cluster is unreachable
    - Authentication fails
    """

    pass


class ControllerNotFoundError(KubesealSyncError):
    """Raised when the SealedSecrets controller is not found in the cluster.

    This typically means:
    - The sealed-secrets controller is not installed
    - The controller is installed but not properly labeled
    - The user doesn't have permission to list services
    """

    pass


class PlainConfigError(KubesealSyncError):
    """Raised when a plain secret config does not match the declared schema."""

    pass
