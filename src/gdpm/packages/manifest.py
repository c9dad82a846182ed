"""Manifest persistence and pure manifest mutations."""
from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Callable

from gdpm import filesystem
from gdpm.errors import GdpmError, ManifestError, ValidationError
from gdpm.logging import get_logger
from gdpm.packages.models import (
    DEFAULT_PROJECT_VERSION,
    Dependency,
    Manifest,
    Package,
    PackageType,
    parse_dependency,
)

logger = get_logger("manifest")

MANIFEST_FILE_NAME = "godot-package.json"
PROJECT_DIR = "project"
IGNORE_MARKER = ".gdignore"


def manifest_path(root: Path) -> Path:
    """Where the manifest (or a package descriptor) lives under *root*."""
    return root / PROJECT_DIR / MANIFEST_FILE_NAME


def serialize(manifest: Manifest) -> str:
    return json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False) + "\n"


def find_dependency(manifest: Manifest, name: str) -> Dependency | None:
    """
    Return the normalized dependency stored under *name*.

    Missing entries and entries that do not parse as a dependency value both
    return ``None``.
    """
    value: Any = manifest.dependencies.get(name)
    if value is None:
        return None
    try:
        return parse_dependency(value)
    except ValidationError:
        logger.debug("Ignoring malformed dependency %r: %r", name, value)
        return None


def with_dependency(manifest: Manifest, key: str, dependency: Dependency) -> Manifest:
    """Copy of *manifest* with *key* set to *dependency*, replacing any entry."""
    dependencies = dict(manifest.dependencies)
    dependencies[key] = dependency
    return dataclasses.replace(manifest, dependencies=dependencies)


def without_dependency(manifest: Manifest, key: str) -> Manifest:
    """Copy of *manifest* without *key*. Missing keys are not an error."""
    dependencies = {k: v for k, v in manifest.dependencies.items() if k != key}
    return dataclasses.replace(manifest, dependencies=dependencies)


class ManifestStore:
    """
    Reads and writes ``project/godot-package.json`` for one project.

    Every mutation re-reads the file, so callers always work against what is
    on disk. Writes are full overwrites; there is no locking.
    """

    def __init__(
        self,
        project_root: Path | None = None,
        schema_url: str | None = None,
    ) -> None:
        self._root = Path(project_root) if project_root else Path.cwd()
        self._schema_url = schema_url

    @property
    def project_root(self) -> Path:
        return self._root

    @property
    def path(self) -> Path:
        return manifest_path(self._root)

    def exists(self) -> bool:
        return filesystem.path_exists(self.path)

    def read(self) -> Manifest:
        """
        Load and validate the manifest.

        Raises:
            ManifestError: The manifest is missing or violates the data model.
            FilesystemError: The file could not be read or parsed.
        """
        if not self.exists():
            raise ManifestError(f"Manifest not found: {self.path}")

        content = filesystem.read_json_file(self.path)
        try:
            return Manifest.from_dict(content)
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest file: {self.path}") from e

    def write(self, manifest: Manifest) -> None:
        try:
            filesystem.write_text_file(self.path, serialize(manifest))
        except (GdpmError, TypeError, ValueError) as e:
            raise ManifestError(f"Failed to write manifest file: {self.path}") from e
        logger.debug("Wrote manifest %s", self.path)

    def install(self, pkg: Package, key: str | None = None) -> Manifest:
        """Re-read the manifest and record *pkg* under *key* (default: its name)."""
        return with_dependency(self.read(), key or pkg.name, pkg.to_dependency())

    def uninstall(self, pkg: Package) -> Manifest:
        """Re-read the manifest and drop the entry for *pkg*, if any."""
        return without_dependency(self.read(), pkg.name)

    def update(self, mutate: Callable[[Manifest], Manifest]) -> Manifest:
        """Read, apply *mutate*, write. Returns the written manifest."""
        manifest = mutate(self.read())
        self.write(manifest)
        return manifest

    def init(self, type: PackageType | None = None) -> Manifest:
        """
        Create a default manifest and the ``project/.gdignore`` marker.

        Raises:
            ManifestError: A manifest already exists.
        """
        if self.exists():
            raise ManifestError(f"{MANIFEST_FILE_NAME} already exists: {self.path}")

        manifest = Manifest(
            name=filesystem.current_folder_name(self._root),
            version=DEFAULT_PROJECT_VERSION,
            dependencies={},
            schema=self._schema_url,
            type=type,
        )

        filesystem.create_directory(self.path.parent)
        self.write(manifest)
        filesystem.write_text_file(self.path.parent / IGNORE_MARKER, "")

        logger.info("Initialized manifest for %s", manifest.name)
        return manifest
