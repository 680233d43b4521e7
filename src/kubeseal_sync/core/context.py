"""Run context threaded through every pipeline component."""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from kubeseal_sync import paths
from kubeseal_sync.models import Environment

if TYPE_CHECKING:
    from kubeseal_sync.secrets.prompts import Prompter
    from kubeseal_sync.secrets.sealing import Encryptor


@dataclass(frozen=True, slots=True)
class RunContext:
    """Everything one invocation needs, passed explicitly instead of globals.

    Attributes:
        environment: The environment whose manifests are processed.
        base_dir: The infrastructure repository base directory.
        encryptor: Seals single secret values.
        prompter: Asks the operator to pick from grouped choices.
        argocd_skip_dry_run: Add the ArgoCD SkipDryRunOnMissingResource
            sync option to written SealedSecrets.

    """

    environment: Environment
    base_dir: Path
    encryptor: "Encryptor"
    prompter: "Prompter"
    argocd_skip_dry_run: bool = True

    @property
    def manifests_dir(self) -> Path:
        return paths.generated_manifests_dir(self.base_dir, self.environment)
