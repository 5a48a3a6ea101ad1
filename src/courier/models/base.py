"""Shared helpers for Courier models."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4


def generate_id() -> str:
    """Generate a random UUID string.

    Delivery ids double as the receiver's idempotency key, so they are
    plain UUIDs rather than prefixed short ids.
    """
    return str(uuid4())


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)
