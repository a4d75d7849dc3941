"""Public API for backup runs."""
from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from core.paths import resolve_working_dir
from core.settings import load_settings, resolve_profile

from .config import load_backup_config, load_connection
from .create import create_snapshot
from .errors import BackupError
from .logs import BackupLogger
from .retention import apply_retention
from .types import BackupConfig, ConnectionParams, RetentionSummary, RunSummary, SnapshotResult


class BackupService:
    """Coordinate the snapshot and retention phases of a backup run."""

    def __init__(
        self,
        *,
        working_dir: Optional[Path] = None,
        settings: Optional[Dict[str, Any]] = None,
        application: Optional[str] = None,
        env: Optional[str] = None,
    ) -> None:
        self._working_dir = Path(working_dir or resolve_working_dir())
        raw = dict(settings) if settings is not None else load_settings(self._working_dir)
        self._application = application
        self._env = env
        self._settings = resolve_profile(raw, application=application, env=env)
        self._logger = BackupLogger(self._working_dir)
        self._config: Optional[BackupConfig] = None

    # ------------------------------------------------------------------
    @property
    def working_dir(self) -> Path:
        return self._working_dir

    @property
    def config(self) -> BackupConfig:
        if self._config is None:
            self._config = load_backup_config(self._settings)
        return self._config

    def connection(self, name: str = "default") -> ConnectionParams:
        return load_connection(self._settings, name)

    # ------------------------------------------------------------------
    def create_snapshot(self, connection: str = "default", *, today: Optional[date] = None) -> SnapshotResult:
        config = self.config
        params = self.connection(connection)
        return create_snapshot(config, params, today or date.today(), logger=self._logger)

    def apply_retention(self, *, today: Optional[date] = None) -> RetentionSummary:
        return apply_retention(self.config, today or date.today(), logger=self._logger)

    def run(self, connection: str = "default", *, today: Optional[date] = None) -> RunSummary:
        """Take a snapshot, then prune older ones."""

        day = today or date.today()
        try:
            snapshot = self.create_snapshot(connection, today=day)
            retention = self.apply_retention(today=day)
        except (BackupError, OSError) as exc:
            self._logger.event(
                event="run_failed",
                phase="run",
                ok=False,
                error=str(exc),
                application=self._application,
                env=self._env,
            )
            raise
        return RunSummary(snapshot=snapshot, retention=retention)


__all__ = ["BackupService"]
