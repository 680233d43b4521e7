"""Manifest file parsing, writing and annotation utilities.

This module provides functions for reading YAML manifest files,
writing SealedSecret documents and adding ArgoCD annotations.
"""

from pathlib import Path
from typing import Any

import yaml

from kubeseal_sync.exceptions import ManifestParseError, SerializationError

ARGOCD_SYNC_OPTIONS = "argocd.argoproj.io/sync-options"
_SKIP_DRY_RUN_OPTION = "SkipDryRunOnMissingResource=true"


def parse_manifest_file(manifest_path: Path) -> list[Any]:
    """Parse every YAML document of a manifest file.

    Args:
        manifest_path: Path to the manifest file.

    Returns:
        The non-empty documents in file order.

    Raises:
        ManifestParseError: If the file does not exist or contains malformed YAML.

    """
    try:
        with manifest_path.open() as stream:
            return [doc for doc in yaml.safe_load_all(stream) if doc is not None]
    except FileNotFoundError as err:
        raise ManifestParseError(f"Manifest '{manifest_path}' does not exist", str(manifest_path)) from err
    except yaml.YAMLError as err:
        raise ManifestParseError(
            f"Manifest '{manifest_path}' contains malformed YAML: {err}", str(manifest_path)
        ) from err


def write_manifest(document: dict[str, Any], output_path: Path) -> None:
    """Serialize a document to a YAML file, replacing any previous content.

    Args:
        document: The document to write.
        output_path: Destination file; parent directories are created.

    Raises:
        SerializationError: If the document cannot be serialized or written.

    """
    try:
        rendered = yaml.safe_dump(document, sort_keys=True, default_flow_style=False)
    except yaml.YAMLError as err:
        raise SerializationError(f"Cannot serialize '{output_path}': {err}") from err

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered)
    except OSError as err:
        raise SerializationError(f"Cannot write to output path '{output_path}': {err.strerror}") from err


def with_argo_sync_option(annotations: dict[str, str]) -> dict[str, str]:
    """Return annotations with the ArgoCD SkipDryRunOnMissingResource option.

    This allows ArgoCD to process repositories with SealedSecrets
    before the controller is deployed in the cluster.

    Args:
        annotations: Existing annotations, left untouched.

    Returns:
        A copy of the annotations with the sync option first.

    """
    updated = dict(annotations)

    # Split and drop empty entries left by stray commas
    options_list = [opt.strip() for opt in updated.get(ARGOCD_SYNC_OPTIONS, "").split(",") if opt.strip()]
    filtered_options = [opt for opt in options_list if not opt.startswith("SkipDryRunOnMissingResource=")]

    updated[ARGOCD_SYNC_OPTIONS] = ",".join([_SKIP_DRY_RUN_OPTION, *filtered_options])
    return updated
