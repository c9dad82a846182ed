"""
Addon vs. module classification.

Classification runs an ordered list of strategies. Each one looks at the
package and its source directory and either returns a :class:`PackageType`
or ``None`` to defer to the next strategy. When nobody decides, the package
is a module.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from gdpm import filesystem
from gdpm.packages.models import Package, PackageType

ClassificationStrategy = Callable[[Package, Path], Optional[PackageType]]

ADDONS_DIR = "addons"
SOURCE_DIR = "src"


def explicit_type(pkg: Package, source_dir: Path) -> PackageType | None:
    """A type declared by the package always wins."""
    return pkg.type


@dataclass(frozen=True)
class FolderProbe:
    """Classify as *result* when *folder* exists in the source directory."""

    folder: str
    result: PackageType

    def __call__(self, pkg: Package, source_dir: Path) -> PackageType | None:
        if filesystem.path_exists(source_dir / self.folder):
            return self.result
        return None


DEFAULT_STRATEGIES: tuple[ClassificationStrategy, ...] = (
    explicit_type,
    FolderProbe(ADDONS_DIR, PackageType.ADDON),
    FolderProbe(SOURCE_DIR, PackageType.MODULE),
)


def classify(
    pkg: Package,
    source_dir: Path,
    strategies: Sequence[ClassificationStrategy] = DEFAULT_STRATEGIES,
) -> PackageType:
    for strategy in strategies:
        result = strategy(pkg, source_dir)
        if result is not None:
            return result
    return PackageType.MODULE
