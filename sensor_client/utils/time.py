"""Utility functions for time handling.

All timestamps are UTC and timezone-aware. Persist UTC timestamps as
ISO-8601 strings with timezone offsets (e.g., "+00:00") via iso_now().
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()
