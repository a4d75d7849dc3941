"""Retention policy enforcement for database snapshots.

Snapshots of the current and previous month are never touched. Two tiers then
thin out older months, each guarded by a marker file so it runs at most once
per month:

* weekly: for the month two months ago, keep the latest snapshot of each ISO week;
* monthly: for the month three months ago, keep only the latest of the weekly survivors.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Tuple

from .logs import BackupLogger
from .markers import has_marker, write_marker
from .naming import numeric_value, snapshots_for_month
from .types import BackupConfig, BackupFile, MonthBucket, RetentionSummary, Tier, TierOutcome, TierStatus

WEEKLY_OFFSET_MONTHS = 2
MONTHLY_OFFSET_MONTHS = 3


def _delete(backup: BackupFile, *, logger: BackupLogger) -> None:
    logger.warning("backup_removed", name=backup.name, reason="retention")
    backup.path.unlink()


def _pick_survivor(current: BackupFile, candidate: BackupFile) -> Tuple[BackupFile, BackupFile]:
    """Return ``(survivor, loser)`` for two snapshots of the same week."""

    current_value = numeric_value(current.name)
    candidate_value = numeric_value(candidate.name)
    if candidate_value > current_value:
        return candidate, current
    if candidate_value == current_value and candidate.name > current.name:
        return candidate, current
    return current, candidate


def clean_weekly(config: BackupConfig, bucket: MonthBucket, *, logger: BackupLogger) -> TierOutcome:
    directory = config.directory
    if has_marker(directory, bucket, Tier.WEEKLY):
        logger.section(
            "weekly_already_done",
            "cleaning",
            f"The weekly archive for {bucket.label} already exists.",
            bucket=bucket.prefix,
        )
        return TierOutcome(tier=Tier.WEEKLY, bucket=bucket, status=TierStatus.ALREADY_DONE)

    logger.section("weekly_cleaning_start", "cleaning", f"Weekly cleaning for {bucket.label}", bucket=bucket.prefix)
    weeks: Dict[int, BackupFile] = {}
    removed: List[str] = []
    for backup in snapshots_for_month(directory, bucket):
        _, week, _ = backup.created_at.isocalendar()
        current = weeks.get(week)
        if current is None:
            weeks[week] = backup
            continue
        survivor, loser = _pick_survivor(current, backup)
        weeks[week] = survivor
        _delete(loser, logger=logger)
        removed.append(loser.name)

    write_marker(directory, bucket, Tier.WEEKLY)
    kept = sorted(backup.name for backup in weeks.values())
    logger.section(
        "weekly_cleaning_done",
        "cleaning",
        f"Weekly cleaning done for {bucket.label}",
        bucket=bucket.prefix,
        removed=len(removed),
        kept=len(kept),
    )
    return TierOutcome(tier=Tier.WEEKLY, bucket=bucket, status=TierStatus.DONE, removed=removed, kept=kept)


def clean_monthly(config: BackupConfig, bucket: MonthBucket, *, logger: BackupLogger) -> TierOutcome:
    directory = config.directory
    if has_marker(directory, bucket, Tier.MONTHLY):
        logger.section(
            "monthly_already_done",
            "passing",
            f"The archive for {bucket.label} already exists.",
            bucket=bucket.prefix,
        )
        return TierOutcome(tier=Tier.MONTHLY, bucket=bucket, status=TierStatus.ALREADY_DONE)

    # Only weekly survivors are consolidated; without a weekly pass there is nothing to reduce.
    if not has_marker(directory, bucket, Tier.WEEKLY):
        logger.section("nothing_to_clean", "nothing to clean", f"No weekly for {bucket.label}", bucket=bucket.prefix)
        return TierOutcome(tier=Tier.MONTHLY, bucket=bucket, status=TierStatus.NOTHING_TO_CLEAN)

    logger.section("monthly_cleaning_start", "cleaning", f"Monthly cleaning for {bucket.label}", bucket=bucket.prefix)
    backups = snapshots_for_month(directory, bucket)
    removed: List[str] = []
    kept: List[str] = []
    if backups:
        latest = max(backups, key=lambda backup: backup.name)
        for backup in backups:
            if backup.name == latest.name:
                continue
            _delete(backup, logger=logger)
            removed.append(backup.name)
        kept.append(latest.name)

    write_marker(directory, bucket, Tier.MONTHLY)
    logger.section(
        "monthly_cleaning_done",
        "cleaning",
        f"Monthly cleaning done for {bucket.label}",
        bucket=bucket.prefix,
        removed=len(removed),
        kept=len(kept),
    )
    return TierOutcome(tier=Tier.MONTHLY, bucket=bucket, status=TierStatus.DONE, removed=removed, kept=kept)


def apply_retention(config: BackupConfig, today: date, *, logger: BackupLogger) -> RetentionSummary:
    if not config.directory.is_dir():
        raise FileNotFoundError(f"backup directory not found: {config.directory}")
    current = MonthBucket.of(today)
    summary = RetentionSummary()
    summary.tiers.append(clean_weekly(config, current.shift(-WEEKLY_OFFSET_MONTHS), logger=logger))
    summary.tiers.append(clean_monthly(config, current.shift(-MONTHLY_OFFSET_MONTHS), logger=logger))
    logger.event(
        event="retention_applied",
        phase="retention",
        ok=True,
        removed=len(summary.removed),
        kept=len(summary.kept),
    )
    return summary


__all__ = [
    "MONTHLY_OFFSET_MONTHS",
    "WEEKLY_OFFSET_MONTHS",
    "apply_retention",
    "clean_monthly",
    "clean_weekly",
]
