"""Interactive selection of the secret fields to seal.

Selection happens in two stages. The first prompt lists every Secret,
grouped by namespace, and answers "which secrets to review". A second
prompt per chosen Secret lists its data keys and answers "which fields to
actually update". A Secret with no field chosen in the second stage is
left out of the result.

Example of the first prompt::

    ? Which of the secrets do you want to update?
      ---------------
      Namespace ==> applications
    ❯ ○ graphql-surrealdb
      ○ react-web
      ---------------
      Namespace ==> argocd
      ○ argocd-secret
"""

from collections.abc import Hashable, Iterable, Sequence
from typing import Any, NamedTuple, Protocol

import questionary
from icecream import ic

from kubeseal_sync import console
from kubeseal_sync.exceptions import EmptySelectionError
from kubeseal_sync.models import KubeObject, SecretIdentity, SecretSelection, find_by_identity
from kubeseal_sync.styles import GROUP_MARKER, POINTER, PROMPT_STYLE, QMARK

APPLICATIONS_NAMESPACE = "applications"


class Choice(NamedTuple):
    """One selectable entry.

    Attributes:
        title: Text shown to the operator.
        value: Value returned when the entry is selected.
        checked: Whether the entry starts selected.

    """

    title: str
    value: Hashable
    checked: bool = False


class ChoiceGroup(NamedTuple):
    """Choices listed under a common label (empty label for no header)."""

    label: str
    choices: list[Choice]


class Prompter(Protocol):
    """Asks the operator to pick any number of grouped choices."""

    def select_many(self, message: str, groups: Sequence[ChoiceGroup]) -> list[Any]:
        """Return the values of the selected choices."""
        ...


class QuestionaryPrompter:
    """Terminal prompter backed by a questionary checkbox."""

    def select_many(self, message: str, groups: Sequence[ChoiceGroup]) -> list[Any]:
        """Show a checkbox prompt with one separator header per group.

        Args:
            message: The question.
            groups: Grouped choices.

        Returns:
            The values of the selected choices.

        Raises:
            KeyboardInterrupt: If the operator cancels the prompt.

        """
        choices: list[questionary.Choice | questionary.Separator] = []
        for group in groups:
            if group.label:
                choices.append(questionary.Separator())
                choices.append(questionary.Separator(f"{GROUP_MARKER}{group.label}"))
            choices.extend(
                questionary.Choice(title=choice.title, value=choice.value, checked=choice.checked)
                for choice in group.choices
            )

        selected: list[Any] = questionary.checkbox(
            message,
            choices=choices,
            style=PROMPT_STYLE,
            pointer=POINTER,
            qmark=QMARK,
        ).unsafe_ask()
        return selected


def group_by_namespace(secrets: Iterable[KubeObject]) -> list[tuple[str, list[KubeObject]]]:
    """Group Secrets by namespace for display.

    The ``applications`` namespace comes first; the other namespaces follow
    in the order they are first seen. Order within a namespace is kept.

    Args:
        secrets: Secret objects.

    Returns:
        ``(namespace, secrets)`` pairs.

    """
    grouped: dict[str, list[KubeObject]] = {}
    for secret in secrets:
        grouped.setdefault(secret.namespace, []).append(secret)

    if APPLICATIONS_NAMESPACE in grouped:
        applications = grouped.pop(APPLICATIONS_NAMESPACE)
        grouped = {APPLICATIONS_NAMESPACE: applications, **grouped}

    return list(grouped.items())


def _unsealed_fields(secret: KubeObject, sealed_secrets: Sequence[KubeObject]) -> list[str]:
    sealed = find_by_identity(sealed_secrets, secret.identity)
    encrypted = sealed.encrypted_data if sealed is not None else {}
    return [key for key in secret.data if key not in encrypted]


class SecretSelector:
    """Two-stage interactive picker producing a SecretSelection.

    Attributes:
        prompter: The prompter used to ask the operator.

    """

    def __init__(self, prompter: Prompter) -> None:
        self.prompter = prompter

    def select(
        self,
        secrets: Sequence[KubeObject],
        sealed_secrets: Sequence[KubeObject] = (),
    ) -> SecretSelection:
        """Run both selection stages.

        Args:
            secrets: Loaded Secret objects.
            sealed_secrets: Loaded SealedSecret objects, used for defaults.

        Returns:
            Selected fields per Secret, Secrets without fields left out.

        Raises:
            EmptySelectionError: If no Secret is chosen in the first stage.

        """
        chosen = self.select_secrets(secrets, sealed_secrets)
        return self.select_fields(chosen, sealed_secrets)

    def select_secrets(
        self,
        secrets: Sequence[KubeObject],
        sealed_secrets: Sequence[KubeObject] = (),
    ) -> list[KubeObject]:
        """Ask which Secrets to review.

        Secrets without a SealedSecret, or with fields not sealed yet,
        start selected. Secrets lacking a name or namespace cannot be
        sealed and are not offered.

        Args:
            secrets: Loaded Secret objects.
            sealed_secrets: Loaded SealedSecret objects.

        Returns:
            The chosen Secrets, empty if none can be offered.

        Raises:
            EmptySelectionError: If nothing is chosen.

        """
        offered: list[KubeObject] = []
        for secret in secrets:
            if not secret.name or not secret.namespace:
                console.skipped("name and namespace are required", console.secret_ref(secret.namespace, secret.name))
                continue
            offered.append(secret)

        if not offered:
            return []

        groups = [
            ChoiceGroup(
                label=namespace,
                choices=[
                    Choice(
                        title=secret.name,
                        value=secret.identity,
                        checked=bool(_unsealed_fields(secret, sealed_secrets)),
                    )
                    for secret in namespace_secrets
                ],
            )
            for namespace, namespace_secrets in group_by_namespace(offered)
        ]

        answer: list[SecretIdentity] = self.prompter.select_many("Which of the secrets do you want to update?", groups)
        ic(answer)
        if not answer:
            raise EmptySelectionError("You must choose at least one secret")

        chosen = set(answer)
        return [secret for secret in offered if secret.identity in chosen]

    def select_fields(
        self,
        secrets: Sequence[KubeObject],
        sealed_secrets: Sequence[KubeObject] = (),
    ) -> SecretSelection:
        """Ask, for each Secret, which data fields to seal.

        Fields missing from the Secret's existing SealedSecret start selected.

        Args:
            secrets: Secrets chosen in the first stage.
            sealed_secrets: Loaded SealedSecret objects.

        Returns:
            The selection; Secrets with no field chosen are left out.

        """
        selection = SecretSelection()
        for secret in secrets:
            unsealed = _unsealed_fields(secret, sealed_secrets)
            group = ChoiceGroup(
                label="",
                choices=[Choice(title=key, value=key, checked=key in unsealed) for key in secret.data],
            )
            keys: list[str] = self.prompter.select_many(
                f"Select secrets from {secret.name} in the {secret.namespace} namespace",
                [group],
            )
            if not keys:
                console.step(f"No fields selected for {console.secret_ref(*secret.identity)}, leaving it untouched")
            selection.add(secret.identity, keys)

        return selection
