"""
Configuration for gdpm.

Settings can be loaded from a YAML file, overridden through environment
variables, or constructed programmatically.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from gdpm.errors import ConfigError

ENV_DEFAULT_SOURCE = "GDPM_DEFAULT_SOURCE"
ENV_LOG_LEVEL = "GDPM_LOG_LEVEL"


def default_config_paths() -> list[Path]:
    """Config file search paths, highest priority first."""
    return [
        Path.cwd() / "gdpm.yaml",
        Path.cwd() / "gdpm-config.yaml",
        Path.home() / ".config" / "gdpm" / "config.yaml",
    ]


@dataclass
class GdpmConfig:
    """
    User-level settings for gdpm.

    Example YAML:
        default_source: ~/godot/packages
        schema_url: https://example.org/godot-package.schema.json
        log_level: INFO
        log_file: gdpm.log
    """

    default_source: str | None = None  # Used when the manifest has no defaultSource
    schema_url: str | None = None  # Written as "$schema" by init
    log_level: str = "WARNING"
    log_file: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> GdpmConfig:
        """Create config from a dictionary."""
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config must be a mapping of settings, got {type(data).__name__}"
            )
        return cls(
            default_source=data.get("default_source"),
            schema_url=data.get("schema_url"),
            log_level=data.get("log_level", "WARNING"),
            log_file=data.get("log_file"),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> GdpmConfig:
        """Load config from a YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config file: {path}") from e
        try:
            return cls.from_dict(data or {})
        except ConfigError as e:
            raise ConfigError(f"Invalid config file: {path}") from e

    @classmethod
    def from_yaml_string(cls, content: str) -> GdpmConfig:
        """Load config from a YAML string."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError("Failed to parse config") from e
        return cls.from_dict(data or {})

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "default_source": self.default_source,
            "schema_url": self.schema_url,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }

    def apply_env(self) -> GdpmConfig:
        """Override fields from ``GDPM_*`` environment variables."""
        if os.environ.get(ENV_DEFAULT_SOURCE):
            self.default_source = os.environ[ENV_DEFAULT_SOURCE]
        if os.environ.get(ENV_LOG_LEVEL):
            self.log_level = os.environ[ENV_LOG_LEVEL].upper()
        return self


def find_config_file(paths: list[Path] | None = None) -> Path | None:
    """Return the first existing config file from the search paths."""
    for path in paths if paths is not None else default_config_paths():
        if path.is_file():
            return path
    return None


def load_config(paths: list[Path] | None = None) -> GdpmConfig:
    """
    Load config from the first existing file, then apply env overrides.

    Falls back to defaults when no config file exists.

    Raises:
        ConfigError: The config file is unreadable, not YAML, or not a mapping.
    """
    path = find_config_file(paths)
    config = GdpmConfig.from_yaml(path) if path else GdpmConfig()
    return config.apply_env()
