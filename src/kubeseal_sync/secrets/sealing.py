"""Secret sealing operations.

This module seals selected Secret fields with kubeseal and merges the new
ciphertexts into the SealedSecret previously generated for the same
Secret, keeping the ciphertext of every field that was not selected.
"""

import base64
import binascii
import copy
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from icecream import ic
from rich.markup import escape

from kubeseal_sync import console
from kubeseal_sync.exceptions import (
    BinaryNotFoundError,
    EncryptionCommandError,
    InvalidSecretError,
    SerializationError,
)
from kubeseal_sync.models import KubeObject, SecretSelection, find_by_identity
from kubeseal_sync.paths import sealed_secret_path
from kubeseal_sync.secrets.parsing import with_argo_sync_option, write_manifest

if TYPE_CHECKING:
    from kubeseal_sync.core.context import RunContext

SEALED_SECRET_API_VERSION = "bitnami.com/v1alpha1"
MANAGED_ANNOTATION = "sealedsecrets.bitnami.com/managed"


class Encryptor(Protocol):
    """Seals one secret value for a given Secret."""

    def seal(self, namespace: str, name: str, value: str) -> str:
        """Return the ciphertext of a Secret data value.

        Raises:
            EncryptionCommandError: If the value cannot be sealed.

        """
        ...


class KubesealEncryptor:
    """Encryptor running ``kubeseal --raw`` once per value.

    Attributes:
        kubeseal_cmd: Base kubeseal command with controller or certificate flags.
        timeout: Seconds to wait for kubeseal, None to wait forever.

    """

    def __init__(self, kubeseal_cmd: list[str], *, timeout: float | None = 60) -> None:
        self.kubeseal_cmd = kubeseal_cmd
        self.timeout = timeout

    def seal(self, namespace: str, name: str, value: str) -> str:
        """Seal a base64 Secret data value.

        The decoded value is passed on stdin to keep it out of process listings.

        Args:
            namespace: The Secret namespace.
            name: The Secret name.
            value: The value as stored in the Secret ``data`` (base64).

        Returns:
            The raw ciphertext printed by kubeseal.

        Raises:
            EncryptionCommandError: If the value is not base64, kubeseal fails
                or does not answer in time.
            BinaryNotFoundError: If the kubeseal binary does not exist.

        """
        try:
            plaintext = base64.b64decode(value, validate=True)
        except (binascii.Error, TypeError, ValueError) as err:
            raise EncryptionCommandError("value is not valid base64") from err

        cmd = [
            *self.kubeseal_cmd,
            "--raw",
            "--from-file=/dev/stdin",
            f"--namespace={namespace}",
            f"--name={name}",
        ]
        ic(cmd)

        try:
            result = subprocess.run(
                cmd,
                input=plaintext,
                capture_output=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as err:
            raise BinaryNotFoundError(f"kubeseal binary '{self.kubeseal_cmd[0]}' not found") from err
        except subprocess.TimeoutExpired as err:
            raise EncryptionCommandError(f"kubeseal did not answer within {self.timeout} seconds") from err
        except subprocess.CalledProcessError as err:
            stderr_msg = err.stderr.decode().strip() if err.stderr else ""
            details = f" - {stderr_msg}" if stderr_msg else ""
            raise EncryptionCommandError(f"kubeseal failed (exit code {err.returncode}){details}") from err

        return result.stdout.decode().strip()


def build_sealed_secret(
    secret: KubeObject,
    existing: KubeObject | None,
    ciphertexts: dict[str, str],
    *,
    argocd_skip_dry_run: bool = True,
) -> dict[str, Any]:
    """Build the SealedSecret document for a Secret.

    New ciphertexts replace old ones for the same key, every other old
    ciphertext is carried over, and keys no longer in the Secret data are
    dropped.

    Args:
        secret: The Secret being sealed.
        existing: The SealedSecret previously generated for it, if any.
        ciphertexts: Newly sealed values by data key.
        argocd_skip_dry_run: Add the ArgoCD SkipDryRunOnMissingResource option.

    Returns:
        The SealedSecret document.

    """
    previous = existing.encrypted_data if existing is not None else {}
    merged = {key: value for key, value in previous.items() if isinstance(value, str)}
    merged.update(ciphertexts)
    encrypted_data = {key: value for key, value in merged.items() if key in secret.data}

    existing_metadata = copy.deepcopy(existing.metadata) if existing is not None else {}
    annotations = {MANAGED_ANNOTATION: "true", **existing_metadata.get("annotations", {})}
    if argocd_skip_dry_run:
        annotations = with_argo_sync_option(annotations)

    template = copy.deepcopy(existing.spec.get("template") or {}) if existing is not None else {}
    template["metadata"] = copy.deepcopy(secret.metadata)
    if secret.secret_type is not None:
        template["type"] = secret.secret_type

    return {
        "apiVersion": SEALED_SECRET_API_VERSION,
        "kind": "SealedSecret",
        "metadata": {
            "name": secret.name,
            "namespace": secret.namespace,
            **existing_metadata,
            "annotations": annotations,
        },
        "spec": {
            "encryptedData": encrypted_data,
            "template": template,
        },
    }


@dataclass(frozen=True, slots=True)
class SealedSecretWrite:
    """A SealedSecret written during a run."""

    namespace: str
    name: str
    fields: tuple[str, ...]
    path: Path


@dataclass
class SealReport:
    """Outcome of a sealing run.

    Attributes:
        written: SealedSecrets written to disk.
        failed_fields: ``(namespace, name, field, reason)`` of fields not sealed.
        skipped: ``(namespace, name, reason)`` of Secrets not written.

    """

    written: list[SealedSecretWrite] = field(default_factory=list)
    failed_fields: list[tuple[str, str, str, str]] = field(default_factory=list)
    skipped: list[tuple[str, str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_fields and not self.skipped


class SealingEngine:
    """Seals selected Secret fields and writes the merged SealedSecrets.

    Attributes:
        encryptor: Seals single values.
        argocd_skip_dry_run: Add the ArgoCD sync option to written documents.

    """

    def __init__(self, encryptor: Encryptor, *, argocd_skip_dry_run: bool = True) -> None:
        self.encryptor = encryptor
        self.argocd_skip_dry_run = argocd_skip_dry_run

    @classmethod
    def from_context(cls, context: "RunContext") -> "SealingEngine":
        return cls(context.encryptor, argocd_skip_dry_run=context.argocd_skip_dry_run)

    def seal(
        self,
        secrets: Sequence[KubeObject],
        sealed_secrets: Sequence[KubeObject],
        selection: SecretSelection,
    ) -> SealReport:
        """Seal the selected fields of every selected Secret.

        A failure scoped to one Secret or field is reported and the run
        goes on with the rest.

        Args:
            secrets: Loaded Secret objects.
            sealed_secrets: Loaded SealedSecret objects.
            selection: Fields to seal per ``(namespace, name)``.

        Returns:
            The report of what was written, failed and skipped.

        """
        report = SealReport()
        for secret in secrets:
            fields = selection.fields_for(secret.identity)
            if not fields:
                continue

            try:
                self._seal_secret(secret, sealed_secrets, fields, report)
            except InvalidSecretError as err:
                report.skipped.append((secret.namespace, secret.name, str(err)))
                console.skipped(f"{err} ({secret.path})", console.secret_ref(secret.namespace, secret.name))
            except SerializationError as err:
                report.skipped.append((secret.namespace, secret.name, str(err)))
                target = console.secret_ref(secret.namespace, secret.name)
                console.error(f"Failed to write {target}: {escape(str(err))}")

        return report

    def _seal_secret(
        self,
        secret: KubeObject,
        sealed_secrets: Sequence[KubeObject],
        fields: list[str],
        report: SealReport,
    ) -> None:
        namespace, name = secret.identity
        if not name or not namespace:
            raise InvalidSecretError("Name and namespace not provided in the secret")

        # First match in load order wins if several SealedSecrets share the identity
        existing = find_by_identity(sealed_secrets, secret.identity)
        ic(secret, existing, fields)

        ciphertexts: dict[str, str] = {}
        with console.spinner(f"Sealing {namespace}/{name}..."):
            for key in fields:
                if key not in secret.data:
                    report.failed_fields.append((namespace, name, key, "not present in secret data"))
                    console.skipped("not present in secret data", console.secret_ref(namespace, name, key))
                    continue
                try:
                    ciphertexts[key] = self.encryptor.seal(namespace, name, secret.data[key])
                except EncryptionCommandError as err:
                    report.failed_fields.append((namespace, name, key, str(err)))
                    console.skipped(f"{err}; previous value kept", console.secret_ref(namespace, name, key))

        if existing is None and not ciphertexts:
            report.skipped.append((namespace, name, "no field could be sealed"))
            console.skipped("no field could be sealed", console.secret_ref(namespace, name))
            return

        document = build_sealed_secret(
            secret,
            existing,
            ciphertexts,
            argocd_skip_dry_run=self.argocd_skip_dry_run,
        )
        output_path = sealed_secret_path(secret.resource_base_dir, name, namespace)
        write_manifest(document, output_path)

        report.written.append(SealedSecretWrite(namespace, name, tuple(ciphertexts), output_path))
        console.step(f"Wrote {console.secret_ref(namespace, name)} to {escape(str(output_path))}")
