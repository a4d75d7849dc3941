"""Snapshot filenames: ``YYYY-MM-DD_NN.sql``."""
from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, List, Optional

from .types import BackupFile, MonthBucket

SNAPSHOT_SUFFIX = ".sql"
_SNAPSHOT_PATTERN = re.compile(r"^(?P<day>\d{4}-\d{2}-\d{2})_(?P<seq>\d+)\.sql$")
_NON_ALNUM = re.compile(r"[\W_]+", re.UNICODE)
_LEADING_DIGITS = re.compile(r"^\d+")


def format_sequence(sequence: int) -> str:
    # Only single digits are padded: the tenth snapshot is "_10", the hundredth "_100".
    return f"0{sequence}" if sequence < 10 else str(sequence)


def snapshot_name(day: date, sequence: int) -> str:
    return f"{day.isoformat()}_{format_sequence(sequence)}{SNAPSHOT_SUFFIX}"


def parse_snapshot(path: Path) -> Optional[BackupFile]:
    """Return a :class:`BackupFile` for *path*, or ``None`` if the name is not a snapshot name."""

    match = _SNAPSHOT_PATTERN.match(path.name)
    if not match:
        return None
    try:
        created = datetime.strptime(match.group("day"), "%Y-%m-%d").date()
    except ValueError:
        return None
    return BackupFile(created_at=created, sequence=int(match.group("seq")), path=path)


def numeric_value(name: str) -> int:
    """Collapse a filename into a comparable integer.

    Everything that is not a letter or digit is dropped and the leading run of
    digits is read, so ``2024-06-01_02.sql`` becomes ``2024060102``.
    """

    collapsed = _NON_ALNUM.sub("", Path(name).name)
    match = _LEADING_DIGITS.match(collapsed)
    return int(match.group(0)) if match else 0


def _iter_matching(directory: Path, pattern: str) -> Iterator[Path]:
    for candidate in directory.glob(pattern):
        if candidate.is_file():
            yield candidate


def snapshots_for_day(directory: Path, day: date) -> List[Path]:
    return sorted(_iter_matching(directory, f"{day.isoformat()}_*{SNAPSHOT_SUFFIX}"))


def snapshots_for_month(directory: Path, bucket: MonthBucket) -> List[BackupFile]:
    """List parsed snapshots of *bucket*, ordered by filename."""

    if not directory.is_dir():
        raise FileNotFoundError(f"backup directory not found: {directory}")
    found: List[BackupFile] = []
    for candidate in _iter_matching(directory, f"{bucket.prefix}-*{SNAPSHOT_SUFFIX}"):
        parsed = parse_snapshot(candidate)
        if parsed is not None:
            found.append(parsed)
    found.sort(key=lambda item: item.name)
    return found


def next_snapshot_path(directory: Path, today: date) -> Path:
    """Return the path the next dump of *today* should be written to."""

    if not directory.is_dir():
        raise FileNotFoundError(f"backup directory not found: {directory}")
    existing = snapshots_for_day(directory, today)
    return directory / snapshot_name(today, len(existing) + 1)


__all__ = [
    "SNAPSHOT_SUFFIX",
    "format_sequence",
    "next_snapshot_path",
    "numeric_value",
    "parse_snapshot",
    "snapshot_name",
    "snapshots_for_day",
    "snapshots_for_month",
]
