"""Scheduled database snapshots with tiered retention."""
from __future__ import annotations

from .api import BackupService
from .errors import BackupError, ConfigurationError, InvalidParametersError, UnsupportedDriverError
from .retention import apply_retention
from .types import BackupConfig, BackupFile, ConnectionParams, MonthBucket, RetentionSummary, RunSummary

__version__ = "0.1.0"

__all__ = [
    "BackupConfig",
    "BackupError",
    "BackupFile",
    "BackupService",
    "ConfigurationError",
    "ConnectionParams",
    "InvalidParametersError",
    "MonthBucket",
    "RetentionSummary",
    "RunSummary",
    "UnsupportedDriverError",
    "apply_retention",
]
