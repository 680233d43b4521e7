"""SecretsSync facade class.

This module provides the SecretsSync class which serves as the main entry
point for a sealing run, coordinating the manifest store, the interactive
selector, the sealing engine and the plain secret configs.
"""

import shutil
from pathlib import Path

from icecream import ic
from rich.markup import escape

from kubeseal_sync import console
from kubeseal_sync.cluster import Cluster
from kubeseal_sync.core.context import RunContext
from kubeseal_sync.exceptions import BinaryNotFoundError, EmptySelectionError
from kubeseal_sync.manifests import ManifestStore
from kubeseal_sync.models import KubeObject, ResourceKind, SecretSelection
from kubeseal_sync.secrets.plain import PlainSecretConfigSync
from kubeseal_sync.secrets.prompts import SecretSelector
from kubeseal_sync.secrets.sealing import KubesealEncryptor, SealingEngine, SealReport


def find_kubeseal_binary(binary: str = "kubeseal") -> str:
    """Resolve the kubeseal binary on PATH.

    Args:
        binary: Binary name or path.

    Returns:
        The full path to the binary.

    Raises:
        BinaryNotFoundError: If kubeseal is not found.

    """
    found = shutil.which(binary)
    if found is None:
        raise BinaryNotFoundError(
            "kubeseal binary not found. Please install kubeseal or ensure it's in your PATH. "
            "See: https://github.com/bitnami-labs/sealed-secrets#installation"
        )
    return found


def build_kubeseal_cmd(
    binary: str,
    *,
    certificate: str | None = None,
    cluster: Cluster | None = None,
) -> list[str]:
    """Build the kubeseal command shared by every sealed value.

    Args:
        binary: Path to the kubeseal binary.
        certificate: Sealing certificate, for detached mode.
        cluster: Cluster to seal against, for cluster mode.

    Returns:
        List of command arguments ready for subprocess execution.

    Raises:
        ValueError: If neither a certificate nor a cluster is given.

    """
    cmd: list[str] = [binary]

    if certificate is not None:
        cmd.append(f"--cert={certificate}")
    elif cluster is not None:
        cmd.extend(
            [
                f"--context={cluster.context}",
                f"--controller-namespace={cluster.controller_namespace}",
                f"--controller-name={cluster.controller_name}",
            ]
        )
    else:
        raise ValueError("Either a certificate or a cluster is required")

    return cmd


def create_encryptor(
    *,
    certificate: str | None = None,
    select_context: bool = False,
    controller_name: str | None = None,
    controller_namespace: str | None = None,
    timeout: float | None = 60,
) -> KubesealEncryptor:
    """Create the kubeseal encryptor for detached or cluster mode.

    Args:
        certificate: Path to a sealing certificate. If provided, operates
            without connecting to a cluster.
        select_context: Prompt for the kube context (cluster mode).
        controller_name: Controller name override (cluster mode).
        controller_namespace: Controller namespace override (cluster mode).
        timeout: Seconds to wait for each kubeseal call.

    Returns:
        The encryptor.

    Raises:
        BinaryNotFoundError: If kubeseal is not installed.
        ClusterConnectionError: If the cluster cannot be reached.
        ControllerNotFoundError: If no controller is found.

    """
    binary = find_kubeseal_binary()

    if certificate is not None:
        console.info("Working in detached mode")
        cmd = build_kubeseal_cmd(binary, certificate=certificate)
    else:
        cluster = Cluster(
            select_context=select_context,
            controller_name=controller_name,
            controller_namespace=controller_namespace,
        )
        ic(cluster)
        cmd = build_kubeseal_cmd(binary, cluster=cluster)

    return KubesealEncryptor(cmd, timeout=timeout)


class SecretsSync:
    """Seals the Secrets of one environment into SealedSecrets.

    Attributes:
        context: The run context.
        store: Manifests of the context's environment.
        selector: Interactive field picker.
        engine: Sealing engine.
        plain_config: Plain secret config files.

    """

    def __init__(self, context: RunContext) -> None:
        """Load the environment's manifests.

        Args:
            context: The run context.

        Raises:
            DirectoryNotFoundError: If the environment has no generated manifests.

        """
        self.context = context
        self.store: ManifestStore = ManifestStore.from_context(context)
        self.selector = SecretSelector(context.prompter)
        self.engine = SealingEngine.from_context(context)
        self.plain_config = PlainSecretConfigSync(context.base_dir)
        console.info(
            f"Loaded {len(self.store)} objects from {console.highlight(str(context.manifests_dir))}"
        )

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"SecretsSync(environment={self.context.environment.value!r}, store={self.store!r})"

    @property
    def secrets(self) -> list[KubeObject]:
        return self.store.get_by_kind(ResourceKind.SECRET)

    @property
    def sealed_secrets(self) -> list[KubeObject]:
        return self.store.get_by_kind(ResourceKind.SEALED_SECRET)

    def sync_sealed_secrets(self) -> SealReport:
        """Seal every field of every Secret without prompting.

        Returns:
            The sealing report.

        """
        return self.seal(SecretSelection.for_all_fields(self.secrets))

    def sync_sealed_secrets_with_prompt(self) -> SealReport:
        """Ask which Secrets and fields to seal, then seal them.

        An empty first-stage answer is reported and asked again.

        Returns:
            The sealing report.

        """
        if not self.secrets:
            console.info("No Secret found in the generated manifests")
            return SealReport()

        while True:
            try:
                selection = self.selector.select(self.secrets, self.sealed_secrets)
                break
            except EmptySelectionError as err:
                console.warning(escape(str(err)))

        return self.seal(selection)

    def seal(self, selection: SecretSelection) -> SealReport:
        """Seal a selection and reload the manifests.

        Args:
            selection: Fields to seal per Secret.

        Returns:
            The sealing report.

        """
        ic(selection)
        if not selection:
            console.info("Nothing selected, no SealedSecret written")
            return SealReport()

        report = self.engine.seal(self.secrets, self.sealed_secrets, selection)
        self.store.reload()
        self._print_summary(report)
        return report

    def delete_plain_secret_manifests(self, report: SealReport) -> list[Path]:
        """Delete plaintext Secret manifests whose SealedSecret was written.

        Secrets with a failed field keep their manifest so the run can be
        retried. Files also holding other kinds of objects are kept.

        Args:
            report: Report of the sealing run.

        Returns:
            The deleted files.

        """
        failed = {(namespace, name) for namespace, name, _, _ in report.failed_fields}
        sealed = {(written.namespace, written.name) for written in report.written} - failed
        by_path: dict[Path, list[KubeObject]] = {}
        for obj in self.store.get_all():
            by_path.setdefault(obj.path, []).append(obj)

        deleted: list[Path] = []
        for manifest_path, objects in by_path.items():
            if not all(obj.kind == ResourceKind.SECRET for obj in objects):
                continue
            if not all(obj.identity in sealed for obj in objects):
                continue
            console.action(f"Removing plain secret manifest {escape(str(manifest_path))}")
            manifest_path.unlink(missing_ok=True)
            deleted.append(manifest_path)

        if deleted:
            self.store.reload()
        return deleted

    def reset_plain_config(self) -> None:
        self.plain_config.reset_values(self.context.environment)

    def _print_summary(self, report: SealReport) -> None:
        console.newline()
        if report.written:
            console.sealed_secrets_table(
                (written.namespace, written.name, ", ".join(written.fields) or "-", str(written.path))
                for written in report.written
            )

        console.summary_panel(
            "Sealing summary",
            {
                "Environment": self.context.environment.value,
                "Written": str(len(report.written)),
                "Failed fields": str(len(report.failed_fields)),
                "Skipped secrets": str(len(report.skipped)),
            },
            failed=not report.ok,
        )
