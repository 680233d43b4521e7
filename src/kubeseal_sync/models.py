"""Data models for kubeseal-sync.

This module provides type-safe data structures for the application:
environments, Kubernetes objects loaded from generated manifests, and the
selection of secret fields to seal.
"""

import base64
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple

from kubeseal_sync.exceptions import ManifestParseError


class Environment(str, Enum):
    """Deployment targets with independent manifests and secret configs.

    Inherits from str to allow direct use in paths and CLI choices.
    """

    TEST = "test"
    LOCAL = "local"
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class ResourceKind(str, Enum):
    """Kubernetes kinds the sealing pipeline cares about."""

    SECRET = "Secret"
    SEALED_SECRET = "SealedSecret"
    CUSTOM_RESOURCE_DEFINITION = "CustomResourceDefinition"
    DEPLOYMENT = "Deployment"
    SERVICE = "Service"
    CONFIG_MAP = "ConfigMap"
    POD = "Pod"


class ControllerInfo(NamedTuple):
    """Information about the SealedSecrets controller.

    Attributes:
        name: The controller service name.
        namespace: The namespace where the controller is deployed.
        version: The controller version string (may include 'v' prefix).

    """

    name: str
    namespace: str
    version: str


SecretIdentity = tuple[str, str]


def _as_text(value: Any) -> str:
    # Unquoted YAML scalars such as `PIN: 1234` load as int
    return "" if value is None else str(value)


@dataclass(slots=True)
class KubeObject:
    """A single Kubernetes object read from a generated manifest.

    Attributes:
        kind: The object kind, e.g. ``Secret`` or ``SealedSecret``.
        api_version: The object apiVersion.
        document: The parsed YAML document.
        path: Absolute path of the file the object was read from.
        resource_base_dir: Directory of the resource owning the manifest,
            i.e. the parent of the manifest's own directory.

    """

    kind: str
    api_version: str
    document: dict[str, Any]
    path: Path
    resource_base_dir: Path

    @classmethod
    def from_document(cls, document: Any, path: Path) -> "KubeObject":
        """Build a KubeObject from a parsed YAML document.

        For Secrets, ``stringData`` is base64-encoded and merged over
        ``data`` so that ``data`` is the only place holding secret values.

        Args:
            document: The parsed YAML document.
            path: Absolute path of the source file.

        Returns:
            The KubeObject.

        Raises:
            ManifestParseError: If the document is not a Kubernetes object.

        """
        if not isinstance(document, dict):
            raise ManifestParseError(f"Manifest '{path}' contains a document that is not a mapping", str(path))

        kind = document.get("kind")
        api_version = document.get("apiVersion")
        if not kind or not api_version:
            raise ManifestParseError(f"Manifest '{path}' contains a document without kind or apiVersion", str(path))

        if not isinstance(document.get("metadata") or {}, dict):
            raise ManifestParseError(f"Manifest '{path}' has invalid metadata", str(path))

        if kind == ResourceKind.SECRET:
            raw_data = document.get("data") or {}
            string_data = document.pop("stringData", None) or {}
            if not isinstance(raw_data, dict) or not isinstance(string_data, dict):
                raise ManifestParseError(f"Manifest '{path}' has a Secret whose data is not a mapping", str(path))

            data = {str(key): _as_text(value) for key, value in raw_data.items()}
            for key, value in string_data.items():
                data[str(key)] = base64.b64encode(_as_text(value).encode()).decode()
            document["data"] = data

        if kind == ResourceKind.SEALED_SECRET:
            spec = document.get("spec") or {}
            if not isinstance(spec, dict) or not isinstance(spec.get("encryptedData") or {}, dict):
                raise ManifestParseError(f"Manifest '{path}' has a SealedSecret with invalid encryptedData", str(path))

        return cls(
            kind=str(kind),
            api_version=str(api_version),
            document=document,
            path=path,
            resource_base_dir=path.parent.parent,
        )

    @property
    def metadata(self) -> dict[str, Any]:
        """The object metadata (empty if missing)."""
        return self.document.get("metadata") or {}

    @property
    def name(self) -> str:
        return str(self.metadata.get("name") or "")

    @property
    def namespace(self) -> str:
        return str(self.metadata.get("namespace") or "")

    @property
    def identity(self) -> SecretIdentity:
        """The ``(namespace, name)`` pair a SealedSecret is bound to."""
        return self.namespace, self.name

    @property
    def annotations(self) -> dict[str, str]:
        return self.metadata.get("annotations") or {}

    @property
    def secret_type(self) -> str | None:
        return self.document.get("type")

    @property
    def data(self) -> dict[str, str]:
        """Secret data (base64 values), empty for other kinds."""
        return self.document.get("data") or {}

    @property
    def spec(self) -> dict[str, Any]:
        return self.document.get("spec") or {}

    @property
    def encrypted_data(self) -> dict[str, str]:
        """SealedSecret ciphertexts, empty for other kinds."""
        return self.spec.get("encryptedData") or {}

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"KubeObject(kind={self.kind!r}, namespace={self.namespace!r}, name={self.name!r}, path={str(self.path)!r})"


def find_by_identity(objects: Iterable[KubeObject], identity: SecretIdentity) -> KubeObject | None:
    """Return the first object bound to ``(namespace, name)``, in load order."""
    return next((obj for obj in objects if obj.identity == identity), None)


@dataclass
class SecretSelection:
    """Secret fields chosen for sealing, keyed by ``(namespace, name)``.

    Only Secrets with at least one selected field are kept. Field order
    carries no meaning; duplicates are dropped.
    """

    fields: dict[SecretIdentity, list[str]] = field(default_factory=dict)

    @classmethod
    def for_all_fields(cls, secrets: Iterable[KubeObject]) -> "SecretSelection":
        """Select every data field of every Secret.

        Args:
            secrets: Secret objects to select.

        Returns:
            A selection covering all fields.

        """
        selection = cls()
        for secret in secrets:
            selection.add(secret.identity, secret.data.keys())
        return selection

    def add(self, identity: SecretIdentity, keys: Iterable[str]) -> None:
        unique = list(dict.fromkeys(keys))
        if unique:
            self.fields[identity] = unique

    def fields_for(self, identity: SecretIdentity) -> list[str]:
        return self.fields.get(identity, [])

    def __contains__(self, identity: object) -> bool:
        return identity in self.fields

    def __iter__(self) -> Iterator[SecretIdentity]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)
