"""Plain secret config files, one per environment.

Each environment keeps its unencrypted secret inputs in a git-ignored
``.secrets/<environment>.json`` file shaped like::

    {
      "services": {"graphql-surrealdb": {"REDIS_PASSWORD": "..."}},
      "infrastructure": {"argocd": {"ADMIN_PASSWORD": "..."}}
    }

The shape is declared once by ``PLAIN_SECRET_RESOURCES``. Syncing merges
the operator's values into that shape, so new variables appear and stale
ones disappear without losing anything already filled in.
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from icecream import ic
from rich.markup import escape

from kubeseal_sync import console, paths
from kubeseal_sync.exceptions import PlainConfigError
from kubeseal_sync.models import Environment

PlainConfig = dict[str, dict[str, dict[str, str]]]


class ResourceCategory(str, Enum):
    """Top-level sections of a plain secret config."""

    SERVICES = "services"
    INFRASTRUCTURE = "infrastructure"


@dataclass(frozen=True, slots=True)
class ResourceSecrets:
    """Secret variables one resource reads from the plain config.

    Attributes:
        category: Section the resource belongs to.
        resource: Resource name, e.g. ``graphql-surrealdb``.
        variables: Variables the operator fills in.
        defaults: Variables with a fixed initial value.

    """

    category: ResourceCategory
    resource: str
    variables: tuple[str, ...]
    defaults: Mapping[str, str] = field(default_factory=dict)

    def sample(self) -> dict[str, str]:
        return {**dict.fromkeys(self.variables, ""), **self.defaults}


_SURREALDB_AND_OAUTH = (
    "SURREALDB_ROOT_USERNAME",
    "SURREALDB_ROOT_PASSWORD",
    "OAUTH_GITHUB_CLIENT_ID",
    "OAUTH_GITHUB_CLIENT_SECRET",
    "OAUTH_GOOGLE_CLIENT_ID",
    "OAUTH_GOOGLE_CLIENT_SECRET",
)

PLAIN_SECRET_RESOURCES: tuple[ResourceSecrets, ...] = (
    ResourceSecrets(
        ResourceCategory.SERVICES,
        "graphql-surrealdb",
        (*_SURREALDB_AND_OAUTH, "REDIS_USERNAME", "REDIS_PASSWORD"),
    ),
    ResourceSecrets(ResourceCategory.SERVICES, "grpc-surrealdb", _SURREALDB_AND_OAUTH),
    ResourceSecrets(
        ResourceCategory.INFRASTRUCTURE,
        "argocd",
        (
            "ADMIN_PASSWORD",
            "CONTAINER_REGISTRY_PASSWORD",
            "CONTAINER_REGISTRY_USERNAME",
            "GITHUB_PASSWORD",
            "GITHUB_USERNAME",
        ),
        defaults={"type": "git", "url": "https://github.com/Oyelowo/modern-distributed-app-template"},
    ),
    ResourceSecrets(ResourceCategory.INFRASTRUCTURE, "linkerd-viz", ("PASSWORD",)),
)


def secrets_sample(resources: Iterable[ResourceSecrets] = PLAIN_SECRET_RESOURCES) -> PlainConfig:
    """Return the all-empty plain config, fixed defaults aside."""
    sample: PlainConfig = {category.value: {} for category in ResourceCategory}
    for record in resources:
        sample[record.category.value][record.resource] = record.sample()
    return sample


def merge_left(existing: Any, sample: Any) -> Any:
    """Deep-merge a sample into existing values, existing values winning.

    An existing value only wins where its type matches the sample's:
    a mapping where the sample has a mapping, a string where it has a
    string. Anything else is replaced by the sample value.

    Args:
        existing: Parsed content of the current file.
        sample: The canonical shape.

    Returns:
        The merged structure; keys absent from the sample are kept.

    """
    if isinstance(sample, dict):
        if not isinstance(existing, dict):
            return sample
        merged = dict(existing)
        for key, sample_value in sample.items():
            merged[key] = merge_left(existing[key], sample_value) if key in existing else sample_value
        return merged

    if isinstance(existing, type(sample)):
        return existing
    return sample


def parse_plain_config(
    obj: Any,
    *,
    require_values: bool = False,
    resources: Iterable[ResourceSecrets] = PLAIN_SECRET_RESOURCES,
) -> PlainConfig:
    """Validate a plain config against the declared resources.

    Keys that are not declared are dropped.

    Args:
        obj: Parsed JSON content.
        require_values: Reject empty values.
        resources: The declared resources.

    Returns:
        The config restricted to declared keys.

    Raises:
        PlainConfigError: If a declared key is missing, not a string, or
            empty while values are required.

    """
    if not isinstance(obj, dict):
        raise PlainConfigError("Plain secret config must be a JSON object")

    parsed: PlainConfig = {category.value: {} for category in ResourceCategory}
    for record in resources:
        category = record.category.value
        section = obj.get(category)
        if not isinstance(section, dict):
            raise PlainConfigError(f"'{category}' must be an object")

        values = section.get(record.resource)
        if not isinstance(values, dict):
            raise PlainConfigError(f"'{category}.{record.resource}' must be an object")

        resource_values: dict[str, str] = {}
        for variable in record.sample():
            value = values.get(variable)
            location = f"{category}.{record.resource}.{variable}"
            if not isinstance(value, str):
                raise PlainConfigError(f"'{location}' must be a string")
            if require_values and not value:
                raise PlainConfigError(f"'{location}' must not be empty")
            resource_values[variable] = value

        parsed[category][record.resource] = resource_values

    return parsed


class PlainSecretConfigSync:
    """Keeps the plain secret config of every environment in shape.

    Attributes:
        base_dir: The infrastructure repository base directory.
        environments: Environments with a config file.

    """

    def __init__(self, base_dir: Path, environments: Iterable[Environment] = tuple(Environment)) -> None:
        self.base_dir = base_dir
        self.environments: tuple[Environment, ...] = tuple(environments)

    def path_for(self, environment: Environment) -> Path:
        return paths.plain_secrets_path(self.base_dir, environment)

    def sync_all(self) -> None:
        """Refresh every environment's file to the declared shape.

        Existing values are kept, missing variables are added empty and
        undeclared ones are dropped. A missing or unparsable file counts
        as empty. Running it again without edits changes nothing.
        """
        sample = secrets_sample()
        for environment in self.environments:
            console.step(f"Syncing plain secret config for {console.highlight(environment.value)}")
            existing = self._read(environment)
            merged = parse_plain_config(merge_left(existing, sample))
            self._write(environment, merged)

    def reset_values(self, environment: Environment) -> None:
        """Overwrite one environment's file with the empty sample."""
        console.step(f"Emptying plain secret config for {console.highlight(environment.value)}")
        self._write(environment, secrets_sample())

    def reset_all(self) -> None:
        for environment in self.environments:
            self.reset_values(environment)

    def get_secrets(
        self,
        category: ResourceCategory | str,
        resource: str,
        environment: Environment,
    ) -> dict[str, str]:
        """Return one resource's plain values for an environment.

        Args:
            category: The resource category.
            resource: The resource name.
            environment: The environment.

        Returns:
            Variable name to value, empty values included.

        Raises:
            PlainConfigError: If the file does not match the declared shape
                or the resource is not declared.

        """
        config = parse_plain_config(self._read(environment))
        try:
            return config[ResourceCategory(category).value][resource]
        except (KeyError, ValueError) as err:
            raise PlainConfigError(f"No plain secrets declared for '{category}.{resource}'") from err

    def _read(self, environment: Environment) -> Any:
        config_path = self.path_for(environment)
        try:
            return json.loads(config_path.read_text())
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as err:
            ic(config_path, err)
            console.warning(f"Plain secret config '{escape(str(config_path))}' is not valid JSON, starting from an empty one")
            return {}

    def _write(self, environment: Environment, config: PlainConfig) -> None:
        config_path = self.path_for(environment)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(config, indent=2) + "\n")
