from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from core.logging_utils import configure_console_logging, configure_json_logging

from .api import BackupService
from .errors import BackupError
from .types import RunSummary

LOGGER = logging.getLogger("dbbackup.cli")


def summary_payload(summary: RunSummary) -> Dict[str, Any]:
    return {
        "snapshot": {
            "path": str(summary.snapshot.path),
            "command": summary.snapshot.command,
            "returncode": summary.snapshot.returncode,
        },
        "retention": [
            {
                "tier": outcome.tier.value,
                "bucket": outcome.bucket.prefix,
                "status": outcome.status.value,
                "removed": list(outcome.removed),
                "kept": list(outcome.kept),
            }
            for outcome in summary.retention.tiers
        ],
    }


def format_summary(summary: RunSummary) -> str:
    lines = [f"snapshot {summary.snapshot.path.name} (exit {summary.snapshot.returncode})"]
    for outcome in summary.retention.tiers:
        line = f" - {outcome.tier.value} {outcome.bucket.prefix}: {outcome.status.value}"
        if outcome.removed:
            line += f", removed {len(outcome.removed)}"
        if outcome.kept:
            line += f", kept {len(outcome.kept)}"
        lines.append(line)
    return "\n".join(lines)


def cli(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Take a database snapshot and prune older snapshots "
        "(weekly two months back, monthly three months back)"
    )
    parser.add_argument("--application", default="front", help="The application name")
    parser.add_argument("--env", default="dev", help="The environment")
    parser.add_argument("--connection", default="default", help="The connection name")
    parser.add_argument("--working-dir", type=Path, default=None, help="Override working directory")
    parser.add_argument("--json", action="store_true", help="Output the run summary as JSON")
    args = parser.parse_args(argv)

    configure_console_logging()
    service = BackupService(working_dir=args.working_dir, application=args.application, env=args.env)
    configure_json_logging(working_dir=service.working_dir)
    try:
        summary = service.run(args.connection)
    except BackupError as exc:
        LOGGER.error("backup failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        LOGGER.exception("backup aborted by I/O error")
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(summary_payload(summary), indent=2))
    else:
        print(format_summary(summary))
    return 0


__all__ = ["cli", "format_summary", "summary_payload"]
