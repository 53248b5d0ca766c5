"""Shared utility functions."""

from __future__ import annotations

import hashlib
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

log = logging.getLogger(__name__)


def home_dir() -> Path:
    """Return the user's home directory, honouring $HOME."""
    home = os.environ.get("HOME")
    return Path(home) if home else Path.home()


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", home_dir() / ".config"))


def file_id(path: Path | str) -> str:
    """Stable, URL-safe identifier for an absolute path."""
    return hashlib.sha256(str(path).encode("utf-8")).hexdigest()[:16]


def home_relative(path: Path | str, home: Path | None = None) -> str:
    """Display form of *path* with the home directory shortened to ``~``."""
    text = str(path)
    home_text = str(home or home_dir())
    if text == home_text or text.startswith(home_text + os.sep):
        return "~" + text[len(home_text):]
    return text


def is_writable(path: Path) -> bool:
    """Check whether the current user may write to *path*."""
    return os.access(path, os.W_OK)


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def days_since(moment: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed between *moment* and *now*."""
    now = now or datetime.now(timezone.utc)
    return int((now - moment).total_seconds() // 86400)


def format_relative_time(moment: datetime, now: datetime | None = None) -> str:
    """Format a timestamp as relative time ('2h ago')."""
    now = now or datetime.now(timezone.utc)
    seconds = int((now - moment).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 7 * 86400:
        return f"{seconds // 86400}d ago"
    return moment.astimezone().strftime("%Y-%m-%d")
