from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .settings_schema import SETTINGS_VALIDATOR

from .paths import get_default_settings_paths, get_logs_dir

__all__ = [
    "DEFAULT_SETTINGS",
    "SETTINGS_VERSION",
    "load_settings",
    "merge_defaults",
    "resolve_profile",
]

SETTINGS_VERSION = 1


DEFAULT_SETTINGS: Dict[str, Any] = {
    "version": SETTINGS_VERSION,
    "backup": {
        "path": None,
        "path_to_exec": "",
    },
    "databases": {
        "default": {
            "dsn": None,
            "username": None,
            "password": None,
        },
    },
    "applications": {},
    "environments": {},
}

_OVERLAY_SECTIONS = ("applications", "environments")


def _merge(default: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in default.items():
        if isinstance(value, dict):
            current = payload.get(key)
            if isinstance(current, dict):
                result[key] = _merge(value, current)
            else:
                result[key] = _merge(value, {})
        elif isinstance(value, list):
            current = payload.get(key)
            result[key] = list(current) if isinstance(current, list) else list(value)
        else:
            result[key] = payload.get(key, value)
    for key, value in payload.items():
        if key not in result:
            result[key] = value
    return result


def merge_defaults(data: Dict[str, Any]) -> Dict[str, Any]:
    return _merge(DEFAULT_SETTINGS, data or {})


def resolve_profile(settings: Dict[str, Any], *, application: Optional[str] = None, env: Optional[str] = None) -> Dict[str, Any]:
    """Layer the ``applications.<application>`` then ``environments.<env>`` overlays on *settings*."""

    resolved = {key: value for key, value in settings.items() if key not in _OVERLAY_SECTIONS}
    for section, name in zip(_OVERLAY_SECTIONS, (application, env)):
        if not name:
            continue
        overlays = settings.get(section)
        overlay = overlays.get(name) if isinstance(overlays, dict) else None
        if isinstance(overlay, dict):
            resolved = _merge(resolved, overlay)
    return resolved


def _apply_migrations(settings: Dict[str, Any], working_dir: Path) -> Dict[str, Any]:
    version = settings.get("version")
    try:
        version_int = int(version)
    except (TypeError, ValueError):
        version_int = 0
    if version_int < SETTINGS_VERSION:
        settings["version"] = SETTINGS_VERSION
    return settings


def _log_unknown_keys(settings: Dict[str, Any], working_dir: Path) -> None:
    unknown = list(SETTINGS_VALIDATOR.unknown_keys(settings))
    if not unknown:
        return
    logs_dir = get_logs_dir(working_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    payload = {
        "ts": time.time(),
        "unknown": unknown,
    }
    target = logs_dir / "settings_unknown.json"
    try:
        with open(target, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
    except OSError:
        return


def load_settings(working_dir: Path) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for candidate in get_default_settings_paths(working_dir):
        try:
            with open(candidate, "r", encoding="utf-8") as handle:
                loaded = json.load(handle)
        except FileNotFoundError:
            continue
        except json.JSONDecodeError:
            continue
        except OSError:
            continue
        if isinstance(loaded, dict):
            data = loaded
            break
    merged = merge_defaults(data)
    merged = _apply_migrations(merged, working_dir)
    merged.setdefault("working_dir", str(working_dir))
    _log_unknown_keys(merged, working_dir)
    return merged

