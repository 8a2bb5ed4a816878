"""Expiry predicate for API keys.

Expiry is advisory: nothing in keyforge deletes or disables a key when
``expires_at`` passes. Callers that gate access must call ``is_expired``.
"""

from __future__ import annotations

from datetime import datetime

from keyforge.utils.datetime import as_naive_utc


def is_expired(now: datetime, expires_at: datetime | None) -> bool:
    """Return True if ``expires_at`` is set and ``now`` is past it."""
    if expires_at is None:
        return False
    return as_naive_utc(now) > as_naive_utc(expires_at)
