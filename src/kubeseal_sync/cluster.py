"""Kubernetes cluster interaction utilities.

This module provides the Cluster class used in cluster mode to pick the
kube context and find the SealedSecrets controller kubeseal talks to.
"""

from typing import Any

import click
import questionary
from icecream import ic
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError

from kubeseal_sync import console
from kubeseal_sync.exceptions import ClusterConnectionError, ControllerNotFoundError
from kubeseal_sync.models import ControllerInfo
from kubeseal_sync.styles import POINTER, PROMPT_STYLE, QMARK

CONTROLLER_LABEL_SELECTOR = "app.kubernetes.io/name=sealed-secrets"


class Cluster:
    """Kube context and SealedSecrets controller used for sealing.

    Attributes:
        context: The active Kubernetes context name.
        controller: ControllerInfo containing controller metadata.

    """

    def __init__(
        self,
        *,
        select_context: bool,
        controller_name: str | None = None,
        controller_namespace: str | None = None,
    ) -> None:
        """Initialize Cluster with context selection.

        The controller is discovered through the API unless both its name
        and namespace are given; a single override replaces the matching
        discovered value.

        Args:
            select_context: If True, prompt user to select a context.
                           If False, use the current context.
            controller_name: Controller service name override.
            controller_namespace: Controller namespace override.

        Raises:
            ClusterConnectionError: If the kubeconfig cannot be loaded or the
                cluster is unreachable.
            ControllerNotFoundError: If discovery finds no controller.

        """
        self.context: str = self._set_context(select_context=select_context)
        try:
            config.load_kube_config(context=self.context)
        except ConfigException as e:
            raise ClusterConnectionError(f"Cannot load kube context '{self.context}': {e}") from e

        if controller_name and controller_namespace:
            self.controller: ControllerInfo = ControllerInfo(controller_name, controller_namespace, "")
            console.info(f"Using controller {console.highlight(f'{controller_namespace}/{controller_name}')}")
        else:
            overrides = {"name": controller_name, "namespace": controller_namespace}
            self.controller = self._find_sealed_secrets_controller()._replace(
                **{key: value for key, value in overrides.items() if value}
            )
        ic(self.controller)

    @staticmethod
    def _set_context(*, select_context: bool) -> str:
        """Set the Kubernetes context to use.

        Args:
            select_context: If True, prompt user to select a context.
                           Must be passed as a keyword argument.

        Returns:
            The selected or current context name.

        Raises:
            ClusterConnectionError: If kubeconfig is invalid or missing.
            click.Abort: If user cancels context selection.

        """
        try:
            contexts, current_context = config.list_kube_config_contexts()
        except ConfigException as e:
            raise ClusterConnectionError(f"Invalid or missing kubeconfig: {e}") from e
        if select_context:
            context_names: list[str] = [context["name"] for context in contexts]
            context: str | None = questionary.select(
                "Select context to work with",
                choices=context_names,
                style=PROMPT_STYLE,
                pointer=POINTER,
                qmark=QMARK,
            ).ask()
            if context is None:
                console.warning("Context selection cancelled.")
                raise click.Abort()
        else:
            context = str(current_context["name"])
        console.action(f"Working with {console.highlight(context)} cluster")
        return context

    @staticmethod
    def _find_sealed_secrets_controller() -> ControllerInfo:
        """Find the SealedSecrets controller in the cluster.

        Searches for services with the 'app.kubernetes.io/name=sealed-secrets' label.

        Returns:
            ControllerInfo with controller name, namespace, and version.

        Raises:
            ClusterConnectionError: If the cluster is unreachable.
            ControllerNotFoundError: If no SealedSecrets controller is found.

        """
        with console.spinner("Searching for SealedSecrets controller..."):
            core_v1_api = client.CoreV1Api()

            try:
                found_services: list[Any] = core_v1_api.list_service_for_all_namespaces(
                    label_selector=CONTROLLER_LABEL_SELECTOR
                ).items
            except MaxRetryError as e:
                raise ClusterConnectionError(f"Failed to connect to the Kubernetes cluster: {e.reason}") from e

            # Metrics services carry the same label
            found_services = [svc for svc in found_services if "metrics" not in svc.metadata.name]

        if not found_services:
            console.error("No controller found")
            raise ControllerNotFoundError("SealedSecrets controller not found in the cluster")

        service = found_services[0]
        version: str = (service.metadata.labels or {}).get("app.kubernetes.io/version", "")

        if len(found_services) > 1:
            console.warning(
                f"Multiple services found. Using [yellow]{service.metadata.name}[/yellow] "
                f"in [yellow]{service.metadata.namespace}[/yellow]."
            )

        console.success(
            f"Found controller: {console.highlight(f'{service.metadata.namespace}/{service.metadata.name}')}"
        )
        if version:
            console.info(f"Controller version: {console.highlight(version)}")

        return ControllerInfo(
            name=service.metadata.name,
            namespace=service.metadata.namespace,
            version=version,
        )

    @property
    def controller_name(self) -> str:
        """The SealedSecrets controller name."""
        return self.controller.name

    @property
    def controller_namespace(self) -> str:
        """The namespace where the controller is deployed."""
        return self.controller.namespace

    @property
    def controller_version(self) -> str:
        """The controller version without the 'v' prefix, empty if unknown."""
        return self.controller.version.removeprefix("v")

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Cluster(context={self.context!r}, controller={self.controller!r})"
