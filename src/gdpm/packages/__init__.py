"""Manifest store, source resolution, classification and installation."""
from __future__ import annotations

from gdpm.packages.classify import DEFAULT_STRATEGIES, FolderProbe, classify, explicit_type
from gdpm.packages.installer import BatchResult, PackageInstaller
from gdpm.packages.manifest import (
    MANIFEST_FILE_NAME,
    ManifestStore,
    find_dependency,
    with_dependency,
    without_dependency,
)
from gdpm.packages.models import (
    Dependency,
    Detailed,
    Manifest,
    Package,
    PackageType,
    VersionOnly,
    parse_dependency,
    validate_version,
)
from gdpm.packages.source import expand_path, read_descriptor, resolve_package_dir

__all__ = [
    "Manifest",
    "Package",
    "PackageType",
    "Dependency",
    "VersionOnly",
    "Detailed",
    "parse_dependency",
    "validate_version",
    "MANIFEST_FILE_NAME",
    "ManifestStore",
    "find_dependency",
    "with_dependency",
    "without_dependency",
    "expand_path",
    "resolve_package_dir",
    "read_descriptor",
    "classify",
    "explicit_type",
    "FolderProbe",
    "DEFAULT_STRATEGIES",
    "BatchResult",
    "PackageInstaller",
]
