"""
gdpm: a package manager for Godot projects.

Installs reusable source packages into ``godot_modules/`` or ``addons/`` and
keeps ``project/godot-package.json`` in sync with what is installed.

Example:
    from gdpm import PackageInstaller

    installer = PackageInstaller()
    installer.install("lib")
    result = installer.install_all()
    if not result.ok:
        print(result.failed)
"""

from gdpm.config import GdpmConfig, load_config
from gdpm.errors import (
    ConfigError,
    FilesystemError,
    GdpmError,
    ManifestError,
    PackageServiceError,
    ValidationError,
)
from gdpm.logging import get_logger, setup_logging
from gdpm.packages import (
    BatchResult,
    Detailed,
    Manifest,
    ManifestStore,
    Package,
    PackageInstaller,
    PackageType,
    VersionOnly,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "GdpmConfig",
    "load_config",
    # Errors
    "GdpmError",
    "ConfigError",
    "FilesystemError",
    "ManifestError",
    "PackageServiceError",
    "ValidationError",
    # Logging
    "setup_logging",
    "get_logger",
    # Models
    "Manifest",
    "Package",
    "PackageType",
    "VersionOnly",
    "Detailed",
    # Services
    "ManifestStore",
    "PackageInstaller",
    "BatchResult",
]
