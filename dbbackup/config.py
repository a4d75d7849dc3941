"""Turn settings dictionaries into validated backup configuration values."""
from __future__ import annotations

from typing import Any, Dict, Mapping

from core.paths import normalize_directory, normalize_executable_prefix

from .dsn import parse_dsn
from .errors import ConfigurationError
from .types import BackupConfig, ConnectionParams


def _section(settings: Mapping[str, Any], key: str) -> Dict[str, Any]:
    raw = settings.get(key)
    return raw if isinstance(raw, dict) else {}


def load_backup_config(settings: Mapping[str, Any]) -> BackupConfig:
    backup = _section(settings, "backup")
    raw_path = backup.get("path")
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise ConfigurationError('You need to set a valid "path" key under the "backup" section of settings.json')
    directory = normalize_directory(raw_path)
    if not directory.is_dir():
        raise ConfigurationError(f"Backup path {directory} does not exist or is not a directory")
    prefix = backup.get("path_to_exec")
    return BackupConfig(
        directory=directory,
        executable_prefix=normalize_executable_prefix(prefix if isinstance(prefix, str) else None),
    )


def load_connection(settings: Mapping[str, Any], name: str = "default") -> ConnectionParams:
    databases = _section(settings, "databases")
    entry = databases.get(name)
    if not isinstance(entry, dict):
        known = ", ".join(sorted(databases)) or "none"
        raise ConfigurationError(f"Unknown connection {name!r} (configured: {known})")
    return parse_dsn(entry.get("dsn"), entry.get("username"), entry.get("password"))


__all__ = ["load_backup_config", "load_connection"]
