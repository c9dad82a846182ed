"""Shared pytest fixtures for gdpm tests."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from gdpm.config import ENV_DEFAULT_SOURCE, ENV_LOG_LEVEL, GdpmConfig
from gdpm.packages.installer import PackageInstaller
from gdpm.packages.manifest import ManifestStore


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


def read_json(path: Path) -> Any:
    return json.loads(path.read_text())


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GDPM_* variables from the developer's shell out of tests."""
    monkeypatch.delenv(ENV_DEFAULT_SOURCE, raising=False)
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """An empty Godot project directory."""
    path = tmp_path / "game"
    path.mkdir()
    return path


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """A multi-package source root with no packages yet."""
    path = tmp_path / "packages"
    path.mkdir()
    return path


@pytest.fixture
def write_manifest(project_dir: Path) -> Callable[..., Path]:
    """Write ``project/godot-package.json`` in the project directory."""

    def _write(
        dependencies: dict[str, Any] | None = None,
        default_source: str | None = None,
        **extra: Any,
    ) -> Path:
        data: dict[str, Any] = {"name": "game", "version": "1.0.0"}
        data.update(extra)
        if default_source is not None:
            data["defaultSource"] = default_source
        data["dependencies"] = dependencies or {}
        return write_json(project_dir / "project" / "godot-package.json", data)

    return _write


@pytest.fixture
def make_package(source_root: Path) -> Callable[..., Path]:
    """
    Create a package under the source root.

    ``src`` maps relative file paths to contents for a module payload;
    ``addons`` maps addon folder names to ``{relative path: contents}``.
    """

    def _make(
        folder: str,
        descriptor: dict[str, Any] | None = None,
        src: dict[str, str] | None = None,
        addons: dict[str, dict[str, str]] | None = None,
        root: Path | None = None,
    ) -> Path:
        package_dir = (root or source_root) / folder
        if descriptor is None:
            descriptor = {"name": folder, "version": "1.0.0", "dependencies": {}}
        write_json(package_dir / "project" / "godot-package.json", descriptor)

        for rel, content in (src or {}).items():
            target = package_dir / "src" / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)

        for addon, files in (addons or {}).items():
            addon_dir = package_dir / "addons" / addon
            addon_dir.mkdir(parents=True, exist_ok=True)
            for rel, content in files.items():
                target = addon_dir / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)

        return package_dir

    return _make


@pytest.fixture
def store(project_dir: Path) -> ManifestStore:
    return ManifestStore(project_dir)


@pytest.fixture
def installer(project_dir: Path, source_root: Path) -> PackageInstaller:
    """Installer whose fallback source root is the ``source_root`` fixture."""
    return PackageInstaller(
        project_root=project_dir,
        config=GdpmConfig(default_source=str(source_root)),
    )
