"""Package and manifest data models."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from gdpm.errors import ValidationError

VERSION_PATTERN = re.compile(r"\d+\.\d+\.\d+", re.ASCII)
DEFAULT_PACKAGE_VERSION = "1.0.0"
DEFAULT_PROJECT_VERSION = "0.0.0"


class PackageType(str, Enum):
    """How a package is laid out in the host project."""

    ADDON = "addon"  # addons/<name> or an addons bundle
    MODULE = "module"  # godot_modules/<name>


def validate_version(value: Any) -> str:
    """Return *value* if it is a ``MAJOR.MINOR.PATCH`` string."""
    if not isinstance(value, str) or not VERSION_PATTERN.fullmatch(value):
        raise ValidationError(f"Invalid version {value!r}: expected MAJOR.MINOR.PATCH")
    return value


def is_valid_version(value: Any) -> bool:
    try:
        validate_version(value)
    except ValidationError:
        return False
    return True


def _parse_type(value: Any) -> PackageType | None:
    if value is None:
        return None
    try:
        return PackageType(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid package type {value!r}: expected 'addon' or 'module'"
        ) from e


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"Field {key!r} must be a string")
    return value


def _required_name(data: dict[str, Any]) -> str:
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ValidationError("Field 'name' must be a non-empty string")
    return name


@dataclass(frozen=True)
class VersionOnly:
    """Dependency written as a bare version string."""

    version: str

    def to_json(self) -> str:
        return self.version


@dataclass(frozen=True)
class Detailed:
    """Dependency written as an object with optional source and type."""

    version: str
    source: str | None = None
    type: PackageType | None = None

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"version": self.version}
        if self.source is not None:
            data["source"] = self.source
        if self.type is not None:
            data["type"] = self.type.value
        return data


Dependency = Union[VersionOnly, Detailed]


def parse_dependency(value: Any) -> Dependency:
    """
    Normalize a raw manifest dependency value.

    Accepts a version string or an object with ``version`` and optional
    ``source``/``type``. Already-parsed values pass through.
    """
    if isinstance(value, (VersionOnly, Detailed)):
        return value
    if isinstance(value, str):
        return VersionOnly(validate_version(value))
    if isinstance(value, dict):
        return Detailed(
            version=validate_version(value.get("version")),
            source=_optional_str(value, "source"),
            type=_parse_type(value.get("type")),
        )
    raise ValidationError(
        f"Invalid dependency value {value!r}: expected a version string or object"
    )


@dataclass
class Package:
    """A package as seen by the installer."""

    name: str
    version: str = DEFAULT_PACKAGE_VERSION
    source: str | None = None
    type: PackageType | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError("Package name must be a non-empty string")
        validate_version(self.version)
        if self.type is not None and not isinstance(self.type, PackageType):
            self.type = _parse_type(self.type)

    @classmethod
    def from_descriptor(cls, data: Any, fallback_name: str) -> Package:
        """
        Build a package from a package descriptor.

        ``name`` falls back to *fallback_name* and ``version`` to ``1.0.0``
        when the descriptor omits them.
        """
        if not isinstance(data, dict):
            raise ValidationError("Package descriptor must be an object")
        return cls(
            name=data.get("name") or fallback_name,
            version=data.get("version") or DEFAULT_PACKAGE_VERSION,
            source=_optional_str(data, "source"),
            type=_parse_type(data.get("type")),
        )

    @classmethod
    def from_dependency(cls, name: str, dependency: Any) -> Package:
        """Rebuild a package from a manifest entry."""
        dep = parse_dependency(dependency)
        if isinstance(dep, VersionOnly):
            return cls(name=name, version=dep.version)
        return cls(name=name, version=dep.version, source=dep.source, type=dep.type)

    def to_dependency(self) -> Detailed:
        """The manifest value recorded for this package; the name is the key."""
        return Detailed(version=self.version, source=self.source, type=self.type)

    @property
    def label(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class Manifest:
    """
    The project's dependency manifest (``project/godot-package.json``).

    Example JSON::

        {
          "$schema": "https://example.org/godot-package.schema.json",
          "name": "my-game",
          "version": "0.1.0",
          "defaultSource": "~/godot/packages",
          "dependencies": {
            "lib": "2.1.0",
            "ui-kit": {"version": "1.0.0", "type": "addon"}
          }
        }
    """

    name: str
    version: str = DEFAULT_PROJECT_VERSION
    dependencies: dict[str, Dependency] = field(default_factory=dict)
    default_source: str | None = None
    schema: str | None = None
    type: PackageType | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Manifest:
        """Validate and build a manifest from parsed JSON."""
        if not isinstance(data, dict):
            raise ValidationError("Manifest must be an object")

        raw_dependencies = data.get("dependencies", {})
        if not isinstance(raw_dependencies, dict):
            raise ValidationError("Field 'dependencies' must be an object")

        duplicates = getattr(raw_dependencies, "duplicate_keys", ())
        if duplicates:
            raise ValidationError(
                f"Duplicate dependency keys: {', '.join(sorted(set(duplicates)))}"
            )

        dependencies: dict[str, Dependency] = {}
        for key, value in raw_dependencies.items():
            try:
                dependencies[key] = parse_dependency(value)
            except ValidationError as e:
                raise ValidationError(f"Invalid dependency {key!r}: {e}") from e

        return cls(
            name=_required_name(data),
            version=validate_version(data.get("version")),
            dependencies=dependencies,
            default_source=_optional_str(data, "defaultSource"),
            schema=_optional_str(data, "$schema"),
            type=_parse_type(data.get("type")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.schema is not None:
            data["$schema"] = self.schema
        data["name"] = self.name
        data["version"] = self.version
        if self.type is not None:
            data["type"] = self.type.value
        if self.default_source is not None:
            data["defaultSource"] = self.default_source
        data["dependencies"] = {
            key: parse_dependency(value).to_json()
            for key, value in self.dependencies.items()
        }
        return data
