"""Package source resolution."""
from __future__ import annotations

from pathlib import Path

from gdpm import filesystem
from gdpm.errors import PackageServiceError, ValidationError
from gdpm.packages.manifest import manifest_path
from gdpm.packages.models import Package


def expand_path(raw: str) -> Path:
    """Expand a leading ``~/`` to the home directory; otherwise use as given."""
    if raw.startswith("~/"):
        return Path.home() / raw[2:]
    return Path(raw)


def candidate_paths(package_name: str, source_root: str | Path) -> tuple[Path, Path]:
    """The two directories probed for *package_name*, in lookup order."""
    root = expand_path(source_root) if isinstance(source_root, str) else source_root
    return root, root / package_name


def resolve_package_dir(package_name: str, source_root: str | Path) -> Path | None:
    """
    Find the directory holding *package_name* under a source root.

    Supported layouts:
    - ``<root>/project/godot-package.json``: the root is a single package
    - ``<root>/<name>/project/godot-package.json``: one package per subfolder
    """
    for candidate in candidate_paths(package_name, source_root):
        if filesystem.path_exists(manifest_path(candidate)):
            return candidate
    return None


def read_descriptor(package_dir: Path, fallback_name: str) -> Package:
    """Read the package descriptor in *package_dir*."""
    data = filesystem.read_json_file(manifest_path(package_dir))
    try:
        return Package.from_descriptor(data, fallback_name)
    except ValidationError as e:
        raise PackageServiceError(
            f"Invalid package descriptor: {manifest_path(package_dir)}"
        ) from e
