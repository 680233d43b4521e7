"""Locations of generated manifests, sealed secrets and plain secret configs."""

from pathlib import Path

from kubeseal_sync.models import Environment

GENERATED_MANIFESTS_DIRNAME = "generatedManifests"
PLAIN_SECRETS_DIRNAME = ".secrets"
SEALED_SECRETS_DIRNAME = "sealed-secrets"


def generated_manifests_dir(base_dir: Path, environment: Environment) -> Path:
    """Return the generated manifests root of an environment.

    Args:
        base_dir: The infrastructure repository base directory.
        environment: The environment.

    Returns:
        ``<base_dir>/generatedManifests/<environment>``.

    """
    return base_dir / GENERATED_MANIFESTS_DIRNAME / environment.value


def plain_secrets_dir(base_dir: Path) -> Path:
    return base_dir / PLAIN_SECRETS_DIRNAME


def plain_secrets_path(base_dir: Path, environment: Environment) -> Path:
    return plain_secrets_dir(base_dir) / f"{environment.value}.json"


def sealed_secret_path(resource_base_dir: Path, name: str, namespace: str) -> Path:
    """Return where the SealedSecret for a Secret is written.

    Args:
        resource_base_dir: Base directory of the resource owning the Secret.
        name: The Secret name.
        namespace: The Secret namespace.

    Returns:
        ``<resource_base_dir>/sealed-secrets/sealed-secret-<name>-<namespace>.yaml``.

    """
    return resource_base_dir / SEALED_SECRETS_DIRNAME / f"sealed-secret-{name}-{namespace}.yaml"
