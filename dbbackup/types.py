"""Common dataclasses shared across backup modules."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import List, Optional


class Tier(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TierStatus(str, Enum):
    DONE = "done"
    ALREADY_DONE = "already_done"
    NOTHING_TO_CLEAN = "nothing_to_clean"


@dataclass(frozen=True, slots=True)
class MonthBucket:
    """Year-month identifier used to group backups and markers."""

    year: int
    month: int

    @classmethod
    def of(cls, day: date) -> "MonthBucket":
        return cls(day.year, day.month)

    def shift(self, months: int) -> "MonthBucket":
        index = self.year * 12 + (self.month - 1) + months
        return MonthBucket(index // 12, index % 12 + 1)

    @property
    def prefix(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")

    def __str__(self) -> str:
        return self.prefix


@dataclass(frozen=True, slots=True)
class BackupFile:
    """Single dump persisted in the backup directory."""

    created_at: date
    sequence: int
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class RetentionMarker:
    month_bucket: MonthBucket
    tier: Tier

    @property
    def filename(self) -> str:
        return f"{self.month_bucket.prefix}.saved.{self.tier.value}"


@dataclass(frozen=True, slots=True)
class BackupConfig:
    """Resolved, validated settings for one backup run."""

    directory: Path
    executable_prefix: str = ""


@dataclass(frozen=True, slots=True)
class ConnectionParams:
    driver: Optional[str]
    host: Optional[str]
    user: Optional[str]
    password: Optional[str]
    dbname: Optional[str]
    socket: Optional[str] = None


@dataclass(slots=True)
class TierOutcome:
    tier: Tier
    bucket: MonthBucket
    status: TierStatus
    removed: List[str] = field(default_factory=list)
    kept: List[str] = field(default_factory=list)


@dataclass(slots=True)
class RetentionSummary:
    tiers: List[TierOutcome] = field(default_factory=list)

    @property
    def removed(self) -> List[str]:
        return [name for outcome in self.tiers for name in outcome.removed]

    @property
    def kept(self) -> List[str]:
        return [name for outcome in self.tiers for name in outcome.kept]


@dataclass(slots=True)
class SnapshotResult:
    path: Path
    command: str
    returncode: int


@dataclass(slots=True)
class RunSummary:
    snapshot: SnapshotResult
    retention: RetentionSummary


__all__ = [
    "BackupConfig",
    "BackupFile",
    "ConnectionParams",
    "MonthBucket",
    "RetentionMarker",
    "RetentionSummary",
    "RunSummary",
    "SnapshotResult",
    "Tier",
    "TierOutcome",
    "TierStatus",
]
