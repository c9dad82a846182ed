"""Install and uninstall packages into a Godot project."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from gdpm import filesystem
from gdpm.config import GdpmConfig
from gdpm.errors import FilesystemError, PackageServiceError
from gdpm.logging import get_logger
from gdpm.packages.classify import (
    ADDONS_DIR,
    DEFAULT_STRATEGIES,
    SOURCE_DIR,
    ClassificationStrategy,
    classify,
)
from gdpm.packages.manifest import (
    ManifestStore,
    find_dependency,
    with_dependency,
    without_dependency,
)
from gdpm.packages.models import Manifest, Package, PackageType
from gdpm.packages.source import candidate_paths, expand_path, read_descriptor, resolve_package_dir

logger = get_logger("installer")

MODULES_DIR = "godot_modules"
DEFAULT_SOURCE_ROOT = "."


@dataclass
class BatchResult:
    """Outcome of installing several dependencies one after another."""

    installed: list[str] = field(default_factory=list)
    failed: dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total(self) -> int:
        return len(self.installed) + len(self.failed)


def _checked_name(name: str) -> str:
    """Reject names that would escape the install directory."""
    if not name or name in (".", "..") or Path(name).name != name or "\\" in name:
        raise PackageServiceError(f"Invalid package name: {name!r}")
    return name


class PackageInstaller:
    """
    Installs packages from a local source root into a project.

    Module packages copy ``<package>/src`` into ``godot_modules/<name>``.
    Addon packages copy ``<package>/addons/<name>`` into ``addons/<name>``,
    or every folder under ``<package>/addons`` when there is no folder
    matching that name. ``<name>`` is always the manifest key, so install,
    reinstall and uninstall agree on where a package lives.
    """

    def __init__(
        self,
        project_root: Path | None = None,
        store: ManifestStore | None = None,
        config: GdpmConfig | None = None,
        strategies: Sequence[ClassificationStrategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self._config = config or GdpmConfig()
        self._root = Path(project_root) if project_root else Path.cwd()
        self._store = store or ManifestStore(self._root, schema_url=self._config.schema_url)
        self._strategies = strategies

    @property
    def store(self) -> ManifestStore:
        return self._store

    @property
    def modules_dir(self) -> Path:
        return self._root / MODULES_DIR

    @property
    def addons_dir(self) -> Path:
        return self._root / ADDONS_DIR

    def source_root(self, manifest: Manifest) -> Path:
        """Source root for *manifest*, relative roots anchored at the project."""
        raw = manifest.default_source or self._config.default_source or DEFAULT_SOURCE_ROOT
        root = expand_path(raw)
        return root if root.is_absolute() else self._root / root

    def _read_or_init(self) -> Manifest:
        if not self._store.exists():
            logger.info("No manifest found, initializing %s", self._store.path)
            self._store.init()
        return self._store.read()

    def resolve(self, package_input: str) -> tuple[Package, Path, str]:
        """
        Find *package_input* under the source root and read its descriptor.

        Returns the package, its directory and its default manifest key. A
        package found in its own subfolder is keyed by *package_input*; a
        source root that is itself the package is keyed by its descriptor
        name. Either key resolves back to the same directory.
        """
        manifest = self._read_or_init()
        source_root = self.source_root(manifest)

        package_dir = resolve_package_dir(package_input, source_root)
        if package_dir is None:
            direct, nested = candidate_paths(package_input, source_root)
            raise PackageServiceError(
                f'Package "{package_input}" not found. Expected project/godot-package.json '
                f'in "{direct}" or "{nested}"'
            )

        pkg = read_descriptor(package_dir, package_input)
        key = pkg.name if package_dir == source_root else package_input
        return pkg, package_dir, key

    def install(self, package_input: str, key: str | None = None) -> Package:
        """
        Resolve *package_input* and install it under *key* (default: the
        key chosen by :meth:`resolve`). The manifest is only written after
        the payload has been copied.
        """
        pkg, package_dir, default_key = self.resolve(package_input)
        self.install_package(pkg, package_dir, key=key or default_key)
        return pkg

    def install_package(self, pkg: Package, package_dir: Path, key: str | None = None) -> PackageType:
        """
        Copy an already-resolved package and record it in the manifest.

        *key* (default: ``pkg.name``) names both the manifest entry and the
        directories under ``godot_modules/`` and ``addons/``.
        """
        if not filesystem.path_exists(package_dir):
            raise PackageServiceError(f"Package source path does not exist: {package_dir}")

        name = _checked_name(key or pkg.name)
        package_type = classify(pkg, package_dir, self._strategies)
        logger.debug("Installing %s from %s as %s", pkg.label, package_dir, package_type.value)

        if package_type is PackageType.ADDON:
            self._install_addon(name, package_dir)
        else:
            self._install_module(name, package_dir)

        self._store.update(lambda manifest: with_dependency(manifest, name, pkg.to_dependency()))
        logger.info("Installed %s as %s", pkg.label, name)
        return package_type

    def _install_module(self, name: str, package_dir: Path) -> None:
        payload = package_dir / SOURCE_DIR
        if not filesystem.path_exists(payload):
            raise PackageServiceError(f"Package source must contain a 'src' directory: {payload}")

        filesystem.copy_directory_contents(payload, self.modules_dir / name)

    def _install_addon(self, name: str, package_dir: Path) -> None:
        payload = package_dir / ADDONS_DIR
        if not filesystem.path_exists(payload):
            raise PackageServiceError(
                f"Package source must contain an 'addons' directory: {payload}"
            )

        filesystem.create_directory(self.addons_dir)

        named = payload / name
        if filesystem.path_exists(named):
            filesystem.copy_directory_contents(named, self.addons_dir / name)
            return

        bundle = filesystem.list_subdirectories(payload)
        if not bundle:
            raise PackageServiceError(f"No addon directories found in: {payload}")

        logger.debug("No addons/%s folder, installing bundle of %d", name, len(bundle))
        for addon in bundle:
            filesystem.copy_directory_contents(addon, self.addons_dir / addon.name)


    def _install_each(self, keys: Sequence[str]) -> BatchResult:
        result = BatchResult()
        for key in keys:
            try:
                self.install(key, key=key)
            except (PackageServiceError, FilesystemError) as e:
                logger.error("Failed to install %s: %s", key, e)
                result.failed[key] = e
            else:
                result.installed.append(key)
        return result

    def install_all(self) -> BatchResult:
        """
        Install every dependency in the manifest.

        A failing package is recorded in the result and does not stop the
        remaining installs.
        """
        keys = list(self._store.read().dependencies)
        if not keys:
            logger.info("No dependencies found in manifest")
            return BatchResult()
        return self._install_each(keys)

    def install_other_dependencies(self, just_installed: str) -> BatchResult:
        """Reinstall every dependency except *just_installed*. Does not cascade."""
        keys = [key for key in self._store.read().dependencies if key != just_installed]
        return self._install_each(keys)

    def uninstall(self, package_name: str) -> Package:
        """
        Remove the ``addons/`` and ``godot_modules/`` directories named after
        *package_name* and its manifest entry.

        Entries that are listed in the manifest but missing on disk are
        removed from the manifest without error.
        """
        if not self._store.exists():
            raise PackageServiceError("No manifest found. Run `gdpm init` to create one.")

        dependency = find_dependency(self._store.read(), package_name)
        if dependency is None:
            raise PackageServiceError(f'Package "{package_name}" is not installed')

        name = _checked_name(package_name)
        pkg = Package.from_dependency(name, dependency)

        filesystem.remove_directory(self.addons_dir / name)
        filesystem.remove_directory(self.modules_dir / name)

        if filesystem.is_empty(self.modules_dir):
            filesystem.remove_directory(self.modules_dir)

        self._store.update(lambda manifest: without_dependency(manifest, name))
        logger.info("Uninstalled %s", pkg.label)
        return pkg
