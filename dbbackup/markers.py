"""Marker files recording that a retention tier already ran for a month."""
from __future__ import annotations

from pathlib import Path

from .types import MonthBucket, RetentionMarker, Tier

MARKER_CONTENT = "saved"


def marker_path(directory: Path, bucket: MonthBucket, tier: Tier) -> Path:
    return directory / RetentionMarker(bucket, tier).filename


def has_marker(directory: Path, bucket: MonthBucket, tier: Tier) -> bool:
    return marker_path(directory, bucket, tier).exists()


def write_marker(directory: Path, bucket: MonthBucket, tier: Tier) -> Path:
    path = marker_path(directory, bucket, tier)
    path.write_text(MARKER_CONTENT, encoding="utf-8")
    return path


__all__ = ["MARKER_CONTENT", "has_marker", "marker_path", "write_marker"]
