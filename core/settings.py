"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(env or os.environ)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(environ.get("APPDATA") or home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


APP_NAME = "Household"


DATA_DIR = Path(os.environ.get("HOUSEHOLD_DATA_DIR") or get_default_data_dir(APP_NAME))
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "offline.db"
SYNC_LOG_PATH = LOG_DIR / "sync.log"


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = os.environ.get("HOUSEHOLD_API_URL", "http://localhost:3000")
    timeout_sec: float = _env_float("HOUSEHOLD_API_TIMEOUT", 10.0)
    ping_timeout_sec: float = 2.0


API = ApiSettings()


@dataclass(frozen=True)
class OfflineSyncSettings:
    enabled: bool = True
    interval_sec: float = _env_float("HOUSEHOLD_SYNC_INTERVAL", 5.0)
    purge_synced_after_tick: bool = False
    # None keeps replaying a failing action on every tick
    max_attempts: Optional[int] = None


OFFLINE_SYNC = OfflineSyncSettings()


@dataclass(frozen=True)
class ToastSettings:
    duration_sec: float = 5.0


@dataclass(frozen=True)
class UISettings:
    app_title: str = APP_NAME
    theme_mode: str = "system"
    color_scheme_seed: str = "#4F46E5"
    window_min_width: int = 420
    window_min_height: int = 600
    toast: ToastSettings = field(default_factory=ToastSettings)


UI = UISettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "DB_PATH",
    "SYNC_LOG_PATH",
    "API",
    "OFFLINE_SYNC",
    "UI",
    "get_default_data_dir",
]
