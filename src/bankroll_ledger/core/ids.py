"""Canonical ID and timestamp factories.

All modules import from here instead of defining local _uuid()/_now() copies.

Timestamp Rule
--------------
All stored timestamps are ``datetime`` with ``tzinfo`` set.  Naive values
coming from outside are read as UTC.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Generate a new UUID v4 string.  Use for all wager / withdrawal IDs."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(ts: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values pass through."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts
