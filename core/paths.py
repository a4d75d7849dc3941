from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

__all__ = [
    "ensure_working_dir_structure",
    "get_default_settings_paths",
    "get_logs_dir",
    "normalize_directory",
    "normalize_executable_prefix",
    "resolve_working_dir",
]

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_HOME_ENV = "DBBACKUP_HOME"


def _expand_path(value: str) -> Path:
    expanded = os.path.expandvars(os.path.expanduser(value))
    return Path(expanded).resolve()


def _ensure_writable_dir(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False
    test_file = path / f".write_test_{os.getpid()}"
    try:
        with open(test_file, "w", encoding="utf-8") as handle:
            handle.write("ok")
        test_file.unlink(missing_ok=True)
        return True
    except OSError:
        try:
            if test_file.exists():
                test_file.unlink()
        except OSError:  # pragma: no cover - cleanup of the write test file
            pass
        return False


def _prepare_working_dir(candidate: Path) -> Optional[Path]:
    if not _ensure_writable_dir(candidate):
        return None
    get_logs_dir(candidate).mkdir(parents=True, exist_ok=True)
    return candidate


def resolve_working_dir() -> Path:
    """Resolve the directory holding settings.json and logs, creating it if required."""

    env_home = os.environ.get(_HOME_ENV)
    if env_home:
        prepared = _prepare_working_dir(_expand_path(env_home))
        if prepared is not None:
            return prepared

    prepared = _prepare_working_dir(Path.home() / ".dbbackup")
    if prepared is not None:
        return prepared

    fallback = _PROJECT_ROOT / ".dbbackup"
    ensure_working_dir_structure(fallback)
    return fallback


def get_logs_dir(working_dir: Path) -> Path:
    return working_dir / "logs"


def ensure_working_dir_structure(working_dir: Path) -> None:
    for directory in (working_dir, get_logs_dir(working_dir)):
        directory.mkdir(parents=True, exist_ok=True)


def get_default_settings_paths(working_dir: Path) -> list[Path]:
    """Return the search order for settings.json files."""

    return [working_dir / "settings.json", _PROJECT_ROOT / "settings.json"]


def normalize_directory(value: str | os.PathLike[str]) -> Path:
    """Expand ``~`` and variables and drop trailing separators."""

    text = os.path.expandvars(os.path.expanduser(str(value))).strip()
    stripped = text.rstrip("/\\")
    return Path(stripped or text)


def normalize_executable_prefix(value: Optional[str]) -> str:
    """Return *value* with exactly one trailing separator, or ``""`` when unset."""

    text = (value or "").strip()
    if not text:
        return ""
    if text.endswith(("/", "\\")):
        return text
    return text + os.sep
