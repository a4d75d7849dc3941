"""Error hierarchy for backup operations."""
from __future__ import annotations


class BackupError(RuntimeError):
    """Base exception for backup related failures."""


class ConfigurationError(BackupError):
    """Raised when the backup path or connection settings are missing or invalid."""


class UnsupportedDriverError(BackupError):
    """Raised when no dump command is known for a database driver."""


class InvalidParametersError(BackupError):
    """Raised when connection parameters are too incomplete to build a dump command."""


__all__ = [
    "BackupError",
    "ConfigurationError",
    "InvalidParametersError",
    "UnsupportedDriverError",
]
