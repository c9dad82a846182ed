"""
Filesystem primitives used by the manifest store and the installer.

Directory copies are staged into a sibling ``<destination>.installing``
directory and renamed into place, so readers see either the old or the new
contents of an install directory, never a mix.
"""

from __future__ import annotations

import json
import os
import shutil
import stat
import sys
from pathlib import Path
from typing import Any, Union

import yaml

from gdpm.errors import FilesystemError
from gdpm.logging import get_logger

logger = get_logger("filesystem")

PathLike = Union[str, os.PathLike]

STAGING_SUFFIX = ".installing"
JSON_EXTENSIONS = frozenset({".json"})
YAML_EXTENSIONS = frozenset({".yaml", ".yml"})


class JsonObject(dict):
    """A parsed JSON object that remembers keys repeated in the raw text."""

    duplicate_keys: tuple[str, ...] = ()


def _object_pairs(pairs: list[tuple[str, Any]]) -> JsonObject:
    obj = JsonObject()
    duplicates: list[str] = []
    for key, value in pairs:
        if key in obj:
            duplicates.append(key)
        obj[key] = value
    if duplicates:
        obj.duplicate_keys = tuple(duplicates)
    return obj


def staging_path(destination: PathLike) -> Path:
    """Sibling path a copy into *destination* is staged in."""
    destination = Path(destination)
    return destination.with_name(destination.name + STAGING_SUFFIX)


def path_exists(path: PathLike) -> bool:
    """Check whether *path* exists. Never raises."""
    try:
        return os.path.lexists(path)
    except (OSError, ValueError):
        return False


def current_folder_name(path: PathLike | None = None) -> str:
    """Base name of *path*, or of the current working directory."""
    return Path(path if path is not None else Path.cwd()).resolve().name


def create_directory(path: PathLike) -> None:
    """Create *path* and any missing parents. Existing directories are fine."""
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create directory: {path}") from e


def _make_writable_and_retry(func: Any, path: str, _exc: Any) -> None:
    """rmtree error handler: clear read-only bits and try once more."""
    parent = os.path.dirname(path)
    if parent:
        os.chmod(parent, os.stat(parent).st_mode | stat.S_IWUSR | stat.S_IXUSR)
    if not os.path.islink(path):
        os.chmod(path, os.stat(path).st_mode | stat.S_IWUSR)
    func(path)


def _rmtree(path: Path) -> None:
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_make_writable_and_retry)
    else:
        shutil.rmtree(path, onerror=_make_writable_and_retry)


def remove_directory(path: PathLike) -> None:
    """
    Recursively delete *path*.

    Missing paths are ignored. When *path* itself is a symbolic link only the
    link is removed; its target is left alone.
    """
    path = Path(path)
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
            return
        if not path.exists():
            return
        _rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory: {path}") from e


def _discard_staging(staging: Path) -> None:
    if not path_exists(staging):
        return
    try:
        remove_directory(staging)
    except FilesystemError:
        logger.warning("Could not remove staging directory %s", staging, exc_info=True)


def copy_directory_contents(source: PathLike, destination: PathLike) -> None:
    """
    Replace *destination* with a recursive copy of every entry in *source*.

    The copy is assembled in ``<destination>.installing`` and renamed onto
    *destination* only after every entry has been copied. On failure the
    staging directory is removed and *destination* is left as it was.

    Raises:
        FilesystemError: *source* is missing or unreadable, or a copy, remove
            or rename step failed.
    """
    source = Path(source)
    destination = Path(destination)
    staging = staging_path(destination)

    if not source.is_dir():
        raise FilesystemError(
            f"Failed to copy directory contents from {source} to {destination}: "
            "source is not a directory"
        )

    logger.debug("Copying %s -> %s (via %s)", source, destination, staging)

    try:
        if path_exists(staging):
            # Left over from an interrupted run
            remove_directory(staging)
        staging.mkdir(parents=True)

        for entry in sorted(source.iterdir()):
            target = staging / entry.name
            if entry.is_symlink():
                os.symlink(os.readlink(entry), target)
            elif entry.is_dir():
                shutil.copytree(entry, target, symlinks=True, copy_function=shutil.copy2)
            else:
                shutil.copy2(entry, target)

        if path_exists(destination):
            remove_directory(destination)
        staging.rename(destination)
    except (OSError, FilesystemError) as e:
        _discard_staging(staging)
        raise FilesystemError(
            f"Failed to copy directory contents from {source} to {destination}"
        ) from e


def is_empty(path: PathLike) -> bool:
    """True iff *path* is an existing directory with no entries."""
    path = Path(path)
    if not path.is_dir():
        return False
    try:
        return next(path.iterdir(), None) is None
    except OSError as e:
        raise FilesystemError(f"Failed to list directory: {path}") from e


def list_subdirectories(path: PathLike) -> list[Path]:
    """Immediate subdirectories of *path*, sorted by name."""
    path = Path(path)
    try:
        return sorted(entry for entry in path.iterdir() if entry.is_dir())
    except OSError as e:
        raise FilesystemError(f"Failed to list directory: {path}") from e


def read_json_file(path: PathLike) -> Any:
    """
    Read a structured data file.

    ``.json`` files are parsed as JSON, ``.yaml``/``.yml`` as YAML. JSON
    objects come back as :class:`JsonObject`.

    Raises:
        FilesystemError: Unsupported extension, unreadable file or
            unparsable content.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix not in JSON_EXTENSIONS and suffix not in YAML_EXTENSIONS:
        raise FilesystemError(f"File {path} is not a JSON or YAML file")

    try:
        content = path.read_text(encoding="utf-8")
        if suffix in YAML_EXTENSIONS:
            return yaml.safe_load(content)
        return json.loads(content, object_pairs_hook=_object_pairs)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
        raise FilesystemError(f"Failed to read structured data file: {path}") from e


def write_text_file(path: PathLike, content: str) -> None:
    """Overwrite *path* with *content* (UTF-8)."""
    try:
        Path(path).write_text(content, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Failed to write file: {path}") from e
