"""Generated manifests of one environment, loaded as KubeObjects.

The manifests tree looks like::

    generatedManifests/<environment>/<resourceType>/<resourceName>/<subdir>/<file>.yaml

Every YAML document found below the environment root becomes a
``KubeObject`` tagged with its source path and resource base directory.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from icecream import ic

from kubeseal_sync import console, paths
from kubeseal_sync.exceptions import DirectoryNotFoundError, ManifestParseError
from kubeseal_sync.models import Environment, KubeObject, ResourceKind
from kubeseal_sync.secrets.parsing import parse_manifest_file

if TYPE_CHECKING:
    from kubeseal_sync.core.context import RunContext

_MANIFEST_SUFFIXES = (".yaml", ".yml")


class ManifestStore:
    """In-memory view over the generated manifests of an environment.

    Attributes:
        base_dir: The infrastructure repository base directory.
        environment: The environment loaded last, if any.
        objects: Loaded objects in directory traversal order.
        errors: Manifest files skipped during the last load.

    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir: Path = base_dir
        self.environment: Environment | None = None
        self.objects: list[KubeObject] = []
        self.errors: list[ManifestParseError] = []

    @classmethod
    def from_context(cls, context: "RunContext") -> "ManifestStore":
        """Create a store and load the context's environment.

        Args:
            context: The run context.

        Returns:
            The loaded store.

        """
        return cls(context.base_dir).load(context.environment)

    @property
    def root(self) -> Path:
        if self.environment is None:
            raise RuntimeError("No environment loaded")
        return paths.generated_manifests_dir(self.base_dir, self.environment)

    def load(self, environment: Environment) -> "ManifestStore":
        """Load every manifest of an environment, replacing loaded objects.

        A malformed file is reported and skipped; it does not stop the load.

        Args:
            environment: The environment to load.

        Returns:
            The store itself.

        Raises:
            DirectoryNotFoundError: If the environment has no generated manifests.

        """
        self.environment = environment
        root = self.root
        if not root.is_dir():
            raise DirectoryNotFoundError(
                f"Generated manifests directory '{root}' does not exist. "
                f"Generate the manifests for the {environment.value} environment first."
            )

        manifest_paths = self._find_manifests(root)
        ic(len(manifest_paths))

        objects: list[KubeObject] = []
        errors: list[ManifestParseError] = []
        with console.create_task_progress() as progress:
            task = progress.add_task("Extracting kube objects from manifests", total=len(manifest_paths))
            for manifest_path in manifest_paths:
                try:
                    objects.extend(self._load_file(manifest_path))
                except ManifestParseError as err:
                    errors.append(err)
                    console.skipped(str(err), console.highlight(str(manifest_path)))
                progress.update(task, advance=1)

        self.objects = objects
        self.errors = errors
        return self

    def reload(self) -> "ManifestStore":
        """Load the current environment again, e.g. after writing SealedSecrets."""
        if self.environment is None:
            raise RuntimeError("No environment loaded")
        return self.load(self.environment)

    @staticmethod
    def _find_manifests(root: Path) -> list[Path]:
        return sorted(
            path.absolute() for path in root.rglob("*") if path.suffix in _MANIFEST_SUFFIXES and path.is_file()
        )

    @staticmethod
    def _load_file(manifest_path: Path) -> list[KubeObject]:
        return [KubeObject.from_document(doc, manifest_path) for doc in parse_manifest_file(manifest_path)]

    def get_all(self) -> list[KubeObject]:
        return list(self.objects)

    def get_by_kind(self, kind: ResourceKind | str) -> list[KubeObject]:
        """Return loaded objects of a kind, in load order.

        Args:
            kind: The kind to match, e.g. ``ResourceKind.SECRET``.

        Returns:
            Matching objects.

        """
        return [obj for obj in self.objects if obj.kind == kind]

    def get_for_resource(self, output_directory: str) -> list[KubeObject]:
        """Return the objects of one resource.

        Args:
            output_directory: Resource directory relative to the environment
                root, e.g. ``services/graphql-surrealdb``.

        Returns:
            Objects whose manifest lies below that resource directory.

        """
        resource_dir = (self.root / output_directory).absolute()
        return [obj for obj in self.objects if obj.path.is_relative_to(resource_dir)]

    def __len__(self) -> int:
        return len(self.objects)

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"ManifestStore(root={str(self.root) if self.environment else None!r}, objects={len(self.objects)})"
