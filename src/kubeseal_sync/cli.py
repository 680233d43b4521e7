#!/usr/bin/env python
"""Command-line interface for kubeseal-sync.

This module provides the main CLI entry point for the kubeseal-sync tool,
handling command-line argument parsing and orchestrating a sealing run
over the generated manifests of one environment.
"""

import sys
from pathlib import Path

import click
from icecream import ic
from rich.markup import escape

from kubeseal_sync import __version__, console
from kubeseal_sync.core.context import RunContext
from kubeseal_sync.core.sync import SecretsSync, create_encryptor
from kubeseal_sync.exceptions import ClusterConnectionError, KubesealSyncError
from kubeseal_sync.models import Environment
from kubeseal_sync.secrets.plain import PlainSecretConfigSync
from kubeseal_sync.secrets.prompts import QuestionaryPrompter
from kubeseal_sync.secrets.sealing import SealReport


def run_sync(
    sync: SecretsSync,
    *,
    seal_all: bool,
    keep_plain_secrets: bool,
    reset_plain_config: bool,
) -> SealReport:
    """Seal Secrets and clean up plaintext inputs and outputs.

    Cleanup only happens for what was sealed successfully; the plain
    config is reset only if every selected field was sealed.

    Args:
        sync: SecretsSync instance for the environment.
        seal_all: Seal every field without prompting.
        keep_plain_secrets: Keep the plaintext Secret manifests.
        reset_plain_config: Empty the environment's plain secret config.

    Returns:
        The sealing report.

    """
    report = sync.sync_sealed_secrets() if seal_all else sync.sync_sealed_secrets_with_prompt()
    ic(report)

    if not keep_plain_secrets:
        sync.delete_plain_secret_manifests(report)

    if reset_plain_config:
        if report.ok:
            sync.reset_plain_config()
        else:
            console.warning("Some secrets were not sealed, keeping the plain secret config")

    return report


@click.command(help="Seal the Secrets of generated Kubernetes manifests into SealedSecrets")
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option(
    "--environment",
    "-e",
    required=False,
    type=click.Choice([env.value for env in Environment]),
    help="environment whose manifests are sealed",
)
@click.option(
    "--base-dir",
    required=False,
    default=".",
    show_default=True,
    envvar="KUBESEAL_SYNC_BASE_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    help="directory holding generatedManifests/ and .secrets/",
)
@click.option("--all", "seal_all", required=False, is_flag=True, help="seal every field of every secret")
@click.option(
    "--keep-plain-secrets/--delete-plain-secrets",
    default=False,
    show_default=True,
    help="keep plaintext Secret manifests after sealing",
)
@click.option("--reset-plain-config", required=False, is_flag=True, help="empty the plain secret config after sealing")
@click.option("--sync-config", required=False, is_flag=True, help="only sync plain secret configs of all environments")
@click.option("--cert", "-c", required=False, help="certificate to seal secrets with")
@click.option("--select", required=False, is_flag=True, default=False, help="prompt for context select")
@click.option("--controller-name", required=False, help="SealedSecrets controller name")
@click.option("--controller-namespace", required=False, help="SealedSecrets controller namespace")
@click.option(
    "--timeout",
    required=False,
    default=60.0,
    show_default=True,
    type=click.FloatRange(min=0, min_open=True),
    help="seconds to wait for kubeseal per field",
)
@click.option(
    "--argocd-annotation/--no-argocd-annotation",
    default=True,
    show_default=True,
    help="add the ArgoCD SkipDryRunOnMissingResource sync option",
)
def cli(
    version: bool,
    debug: bool,
    environment: str | None,
    base_dir: Path,
    seal_all: bool,
    keep_plain_secrets: bool,
    reset_plain_config: bool,
    sync_config: bool,
    cert: str | None,
    select: bool,
    controller_name: str | None,
    controller_namespace: str | None,
    timeout: float,
    argocd_annotation: bool,
) -> None:
    """Process CLI arguments and execute the appropriate action.

    Args:
        version: Print version and exit.
        debug: Enable debug output.
        environment: Environment whose manifests are sealed.
        base_dir: Directory holding generated manifests and plain configs.
        seal_all: Seal every field of every Secret without prompting.
        keep_plain_secrets: Keep plaintext Secret manifests after sealing.
        reset_plain_config: Empty the environment's plain config after sealing.
        sync_config: Only sync the plain configs of all environments.
        cert: Path to certificate for detached mode.
        select: Prompt for Kubernetes context selection.
        controller_name: Controller name override.
        controller_namespace: Controller namespace override.
        timeout: Seconds to wait for kubeseal per field.
        argocd_annotation: Add the ArgoCD sync option to SealedSecrets.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        return

    base_dir = base_dir.absolute()

    try:
        if sync_config:
            PlainSecretConfigSync(base_dir).sync_all()
            console.success("Plain secret configs are in sync")
            return

        if environment is None:
            raise click.UsageError("Missing option '--environment' / '-e'.")

        encryptor = create_encryptor(
            certificate=cert,
            select_context=select,
            controller_name=controller_name,
            controller_namespace=controller_namespace,
            timeout=timeout,
        )
        context = RunContext(
            environment=Environment(environment),
            base_dir=base_dir,
            encryptor=encryptor,
            prompter=QuestionaryPrompter(),
            argocd_skip_dry_run=argocd_annotation,
        )
        ic(context)

        report = run_sync(
            SecretsSync(context),
            seal_all=seal_all,
            keep_plain_secrets=keep_plain_secrets,
            reset_plain_config=reset_plain_config,
        )
    except ClusterConnectionError as e:
        console.error(f"Cluster connection failed: {escape(str(e))}")
        sys.exit(1)
    except KubesealSyncError as e:
        raise click.ClickException(str(e)) from None

    if not report.ok:
        sys.exit(1)


if __name__ == "__main__":
    cli()
