"""Create database snapshots by running the vendor dump tool."""
from __future__ import annotations

import os
import subprocess
from datetime import date

from core.logging_utils import redact_secret

from .drivers import build_dump_command, get_driver
from .logs import BackupLogger
from .naming import next_snapshot_path
from .types import BackupConfig, ConnectionParams, SnapshotResult


def create_snapshot(
    config: BackupConfig,
    params: ConnectionParams,
    today: date,
    *,
    logger: BackupLogger,
) -> SnapshotResult:
    output = next_snapshot_path(config.directory, today)
    command = build_dump_command(params, output, executable_prefix=config.executable_prefix)
    driver = get_driver(str(params.driver))
    env = dict(os.environ)
    env.update(driver.environment(params))
    shown = build_dump_command(params, output, executable_prefix=config.executable_prefix, redact=True)

    logger.event(
        event="backup_start",
        phase="create",
        ok=True,
        path=str(output),
        driver=driver.name,
        host=params.host,
        user=params.user,
        password=redact_secret(params.password),
        command=shown,
    )
    # The dump tool redirects into the snapshot file itself, hence the shell.
    completed = subprocess.run(command, shell=True, check=False, env=env)
    if completed.returncode != 0:
        logger.warning("dump_failed_status", path=str(output), status=completed.returncode)

    logger.section(
        "backup_done",
        "backup",
        f"Backup done for {today.strftime('%d %b %Y')}",
        path=str(output),
        status=completed.returncode,
    )
    return SnapshotResult(path=output, command=shown, returncode=completed.returncode)


__all__ = ["create_snapshot"]
