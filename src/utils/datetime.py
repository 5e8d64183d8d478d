"""Datetime helpers."""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as an aware UTC datetime, used for row timestamps."""
    return datetime.now(timezone.utc)
