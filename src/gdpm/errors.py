"""
Exception hierarchy for gdpm.

Every error that wraps a lower-level failure is raised with
``raise ... from cause`` so the original exception stays available on
``__cause__``.
"""

from __future__ import annotations


class GdpmError(Exception):
    """Base class for all gdpm errors."""


class ConfigError(GdpmError):
    """The gdpm config file could not be loaded."""


class FilesystemError(GdpmError):
    """Directory create/copy/remove or file read/write failure."""


class ManifestError(GdpmError):
    """Manifest is missing, already exists, invalid, or could not be written."""


class PackageServiceError(GdpmError):
    """An install or uninstall precondition was not met."""


class ValidationError(GdpmError, ValueError):
    """A value does not satisfy the manifest data model."""


def format_error_chain(error: BaseException) -> str:
    """
    Render an error and its cause chain as indented lines.

    Example:
        Failed to install package
          caused by: Failed to copy directory contents from a to b
          caused by: [Errno 13] Permission denied: 'b.installing'
    """
    lines = [str(error) or type(error).__name__]
    seen = {id(error)}
    cause = error.__cause__

    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"  caused by: {cause or type(cause).__name__}")
        cause = cause.__cause__

    return "\n".join(lines)
