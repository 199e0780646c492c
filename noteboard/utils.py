"""Utility functions for Note Board."""

import sys
from datetime import date, datetime, timedelta
from pathlib import Path


def get_app_data_path() -> Path:
    """
    Get the per-user data directory for Note Board.

    - On Windows, this is ``AppData/Local/noteboard``.
    - On macOS, this is ``~/Library/Application Support/noteboard``.
    - On Linux, this is ``~/.config/noteboard``.
    - If the platform is not supported, raise a ValueError.

    Returns:
        Path to the data directory (created if missing)

    """
    if sys.platform not in ["win32", "darwin", "linux"]:
        msg = f"Unsupported platform: {sys.platform}"
        raise ValueError(msg)
    if sys.platform == "win32":
        data_path = Path.home() / "AppData" / "Local" / "noteboard"
    elif sys.platform == "darwin":
        data_path = Path.home() / "Library" / "Application Support" / "noteboard"
    else:
        data_path = Path.home() / ".config" / "noteboard"
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def to_iso(dt: datetime | None) -> str | None:
    """
    Convert a naive local datetime to an ISO format string.

    Args:
        dt: Datetime object to convert, or None

    Returns:
        ISO format string, or None

    """
    if dt is None:
        return None
    return dt.isoformat()


def from_iso(iso_str: str | None) -> datetime | None:
    """
    Parse an ISO format string coming from the backend.

    Timezone-aware values are converted to local time; naive values are taken
    as local time already.  The result is always naive, which is what the
    column layout works with.

    Args:
        iso_str: ISO format string, or None

    Returns:
        Naive local datetime, or None

    """
    if not iso_str:
        return None
    dt = datetime.fromisoformat(iso_str)
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def day_key(value: date | datetime) -> str:
    """
    Return the ``YYYY-MM-DD`` key used to index date columns.

    Args:
        value: A date or datetime

    Returns:
        The calendar date as a string

    """
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def days_between(start: date, end: date) -> int:
    """
    Number of whole days from ``start`` to ``end`` (negative if ``end`` is
    earlier).
    """
    return (end - start) // timedelta(days=1)
