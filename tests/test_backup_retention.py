from datetime import date
from pathlib import Path

import pytest

from dbbackup.retention import _pick_survivor, apply_retention, clean_monthly, clean_weekly
from dbbackup.types import BackupConfig, BackupFile, MonthBucket, Tier, TierStatus


class StubLogger:
    def __init__(self) -> None:
        self.events = []

    def warning(self, event: str, **extra):  # pragma: no cover - simple recorder
        self.events.append(("warning", event, extra))

    def event(self, *, event: str, phase: str, ok: bool, **extra):  # pragma: no cover - simple recorder
        self.events.append(("event", event, phase, ok, extra))

    def section(self, event: str, section: str, message: str, **extra):  # pragma: no cover - simple recorder
        self.events.append(("section", event, section, message, extra))

    def names(self):
        return [entry[1] for entry in self.events]


TODAY = date(2024, 8, 15)
JUNE = MonthBucket(2024, 6)
MAY = MonthBucket(2024, 5)


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_text("-- dump", encoding="utf-8")


def _remaining(directory: Path, prefix: str):
    return sorted(path.name for path in directory.glob(f"{prefix}-*.sql"))


@pytest.fixture()
def backups(tmp_path):
    directory = tmp_path / "backups"
    directory.mkdir()
    return directory


def test_weekly_keeps_latest_snapshot_of_each_iso_week(backups):
    _touch(
        backups,
        # ISO week 22
        "2024-06-01_01.sql",
        "2024-06-01_02.sql",
        "2024-06-02_01.sql",
        # ISO week 23
        "2024-06-03_01.sql",
        "2024-06-05_01.sql",
        "2024-06-05_02.sql",
        # ISO week 24
        "2024-06-10_01.sql",
        "2024-07-01_01.sql",
    )
    logger = StubLogger()

    outcome = clean_weekly(BackupConfig(directory=backups), JUNE, logger=logger)

    assert outcome.status is TierStatus.DONE
    assert outcome.kept == ["2024-06-02_01.sql", "2024-06-05_02.sql", "2024-06-10_01.sql"]
    assert sorted(outcome.removed) == [
        "2024-06-01_01.sql",
        "2024-06-01_02.sql",
        "2024-06-03_01.sql",
        "2024-06-05_01.sql",
    ]
    assert _remaining(backups, "2024-06") == outcome.kept
    assert (backups / "2024-07-01_01.sql").exists()
    assert (backups / "2024-06.saved.weekly").read_text(encoding="utf-8") == "saved"
    assert logger.names().count("backup_removed") == 4
    assert "weekly_cleaning_done" in logger.names()


def test_weekly_same_day_keeps_higher_sequence(backups):
    _touch(backups, "2024-06-03_01.sql", "2024-06-03_02.sql")

    clean_weekly(BackupConfig(directory=backups), JUNE, logger=StubLogger())

    assert _remaining(backups, "2024-06") == ["2024-06-03_02.sql"]


def test_weekly_compares_sequences_numerically(backups):
    _touch(backups, "2024-06-03_99.sql", "2024-06-03_100.sql")

    clean_weekly(BackupConfig(directory=backups), JUNE, logger=StubLogger())

    assert _remaining(backups, "2024-06") == ["2024-06-03_100.sql"]


def test_weekly_is_skipped_when_marker_exists(backups):
    _touch(backups, "2024-06-03_01.sql", "2024-06-04_01.sql", "2024-06.saved.weekly")
    logger = StubLogger()

    outcome = clean_weekly(BackupConfig(directory=backups), JUNE, logger=logger)

    assert outcome.status is TierStatus.ALREADY_DONE
    assert outcome.removed == []
    assert _remaining(backups, "2024-06") == ["2024-06-03_01.sql", "2024-06-04_01.sql"]
    assert logger.names() == ["weekly_already_done"]


def test_weekly_ignores_files_that_are_not_snapshots(backups):
    _touch(backups, "2024-06-03_01.sql", "2024-06-04-notes.sql")
    (backups / "2024-06-05_01.sql.gz").write_bytes(b"")

    outcome = clean_weekly(BackupConfig(directory=backups), JUNE, logger=StubLogger())

    assert outcome.kept == ["2024-06-03_01.sql"]
    assert (backups / "2024-06-04-notes.sql").exists()
    assert (backups / "2024-06-05_01.sql.gz").exists()


def test_monthly_without_weekly_marker_does_nothing(backups):
    _touch(backups, "2024-05-06_01.sql", "2024-05-20_01.sql")
    logger = StubLogger()

    outcome = clean_monthly(BackupConfig(directory=backups), MAY, logger=logger)

    assert outcome.status is TierStatus.NOTHING_TO_CLEAN
    assert _remaining(backups, "2024-05") == ["2024-05-06_01.sql", "2024-05-20_01.sql"]
    assert not (backups / "2024-05.saved.monthly").exists()
    assert logger.names() == ["nothing_to_clean"]


def test_monthly_keeps_single_latest_snapshot(backups):
    _touch(
        backups,
        "2024-05.saved.weekly",
        "2024-05-06_01.sql",
        "2024-05-13_02.sql",
        "2024-05-27_01.sql",
    )

    outcome = clean_monthly(BackupConfig(directory=backups), MAY, logger=StubLogger())

    assert outcome.status is TierStatus.DONE
    assert outcome.kept == ["2024-05-27_01.sql"]
    assert sorted(outcome.removed) == ["2024-05-06_01.sql", "2024-05-13_02.sql"]
    assert _remaining(backups, "2024-05") == ["2024-05-27_01.sql"]
    assert (backups / "2024-05.saved.monthly").exists()


def test_monthly_picks_by_raw_filename_order(backups):
    _touch(backups, "2024-05.saved.weekly", "2024-05-20_99.sql", "2024-05-20_100.sql")

    clean_monthly(BackupConfig(directory=backups), MAY, logger=StubLogger())

    assert _remaining(backups, "2024-05") == ["2024-05-20_99.sql"]


def test_monthly_is_skipped_when_marker_exists(backups):
    _touch(backups, "2024-05.saved.weekly", "2024-05.saved.monthly", "2024-05-06_01.sql", "2024-05-20_01.sql")

    outcome = clean_monthly(BackupConfig(directory=backups), MAY, logger=StubLogger())

    assert outcome.status is TierStatus.ALREADY_DONE
    assert len(_remaining(backups, "2024-05")) == 2


class VanishingLogger(StubLogger):
    """Removes the file being deleted first, so the retention ``unlink`` fails."""

    def __init__(self, directory: Path) -> None:
        super().__init__()
        self.directory = directory

    def warning(self, event: str, **extra):
        super().warning(event, **extra)
        if event == "backup_removed":
            (self.directory / extra["name"]).unlink()


def test_weekly_failed_delete_propagates_without_marker(backups):
    _touch(backups, "2024-06-03_01.sql", "2024-06-05_01.sql")
    logger = VanishingLogger(backups)

    with pytest.raises(OSError):
        clean_weekly(BackupConfig(directory=backups), JUNE, logger=logger)

    assert not (backups / "2024-06.saved.weekly").exists()
    assert "weekly_cleaning_done" not in logger.names()


def test_monthly_failed_delete_propagates_without_marker(backups):
    _touch(backups, "2024-05.saved.weekly", "2024-05-06_01.sql", "2024-05-20_01.sql")
    logger = VanishingLogger(backups)

    with pytest.raises(OSError):
        clean_monthly(BackupConfig(directory=backups), MAY, logger=logger)

    assert not (backups / "2024-05.saved.monthly").exists()
    assert (backups / "2024-05-20_01.sql").exists()
    assert "monthly_cleaning_done" not in logger.names()


def test_apply_retention_targets_two_and_three_months_back(backups):
    _touch(
        backups,
        "2024-08-14_01.sql",
        "2024-08-14_02.sql",
        "2024-07-01_01.sql",
        "2024-07-02_01.sql",
        "2024-06-03_01.sql",
        "2024-06-04_01.sql",
        "2024-05-06_01.sql",
        "2024-05-13_01.sql",
    )
    logger = StubLogger()

    summary = apply_retention(BackupConfig(directory=backups), TODAY, logger=logger)

    assert [(outcome.tier, outcome.bucket, outcome.status) for outcome in summary.tiers] == [
        (Tier.WEEKLY, JUNE, TierStatus.DONE),
        (Tier.MONTHLY, MAY, TierStatus.NOTHING_TO_CLEAN),
    ]
    assert summary.removed == ["2024-06-03_01.sql"]
    assert _remaining(backups, "2024-08") == ["2024-08-14_01.sql", "2024-08-14_02.sql"]
    assert _remaining(backups, "2024-07") == ["2024-07-01_01.sql", "2024-07-02_01.sql"]
    assert _remaining(backups, "2024-05") == ["2024-05-06_01.sql", "2024-05-13_01.sql"]
    assert logger.names()[-1] == "retention_applied"


def test_consecutive_months_thin_out_to_one_snapshot(backups):
    _touch(backups, "2024-06-03_01.sql", "2024-06-04_01.sql", "2024-06-12_01.sql", "2024-06-13_01.sql")
    config = BackupConfig(directory=backups)

    apply_retention(config, date(2024, 8, 1), logger=StubLogger())
    assert _remaining(backups, "2024-06") == ["2024-06-04_01.sql", "2024-06-13_01.sql"]

    # Rerunning within the same month changes nothing.
    apply_retention(config, date(2024, 8, 20), logger=StubLogger())
    assert _remaining(backups, "2024-06") == ["2024-06-04_01.sql", "2024-06-13_01.sql"]

    summary = apply_retention(config, date(2024, 9, 2), logger=StubLogger())
    assert summary.tiers[1].status is TierStatus.DONE
    assert _remaining(backups, "2024-06") == ["2024-06-13_01.sql"]
    assert (backups / "2024-06.saved.monthly").exists()


def test_apply_retention_crosses_year_boundary(backups):
    _touch(backups, "2024-12-02_01.sql", "2024-12-03_01.sql", "2024-11.saved.weekly", "2024-11-04_01.sql", "2024-11-25_01.sql")

    summary = apply_retention(BackupConfig(directory=backups), date(2025, 2, 10), logger=StubLogger())

    assert [outcome.bucket.prefix for outcome in summary.tiers] == ["2024-12", "2024-11"]
    assert _remaining(backups, "2024-12") == ["2024-12-03_01.sql"]
    assert _remaining(backups, "2024-11") == ["2024-11-25_01.sql"]


def test_apply_retention_requires_backup_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        apply_retention(BackupConfig(directory=tmp_path / "missing"), TODAY, logger=StubLogger())


@pytest.mark.parametrize("first, second", [
    ("2024-06-03_01.sql", "2024-06-0301.sql"),
    ("2024-06-0301.sql", "2024-06-03_01.sql"),
])
def test_equal_numeric_values_keep_later_filename(first, second):
    day = date(2024, 6, 3)
    current = BackupFile(created_at=day, sequence=1, path=Path(first))
    candidate = BackupFile(created_at=day, sequence=1, path=Path(second))

    survivor, loser = _pick_survivor(current, candidate)

    assert survivor.name == "2024-06-03_01.sql"
    assert loser.name == "2024-06-0301.sql"


def test_month_bucket_shift():
    assert MonthBucket(2024, 8).shift(-2) == MonthBucket(2024, 6)
    assert MonthBucket(2024, 2).shift(-3) == MonthBucket(2023, 11)
    assert MonthBucket(2024, 12).shift(1) == MonthBucket(2025, 1)
    assert MonthBucket.of(date(2024, 3, 31)).shift(-1).prefix == "2024-02"
