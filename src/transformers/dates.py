# src/transformers/dates.py
"""Timestamp helpers shared by the classifiers and projections."""
from datetime import datetime, timezone
from typing import Optional

import pytz

SECONDS_PER_DAY = 24 * 60 * 60


def parse_shopify_datetime(date_str: Optional[str]) -> Optional[datetime]:
    """Parse a Shopify ISO-8601 timestamp into an aware UTC datetime."""
    if not date_str:
        return None

    try:
        dt = datetime.fromisoformat(str(date_str).replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None

    # Naive timestamps are taken as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_since(created_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    """Whole days elapsed since ``created_at`` (floor division, never negative)."""
    if created_at is None:
        return 0

    now = now or utc_now()
    elapsed = (now - created_at).total_seconds()
    if elapsed <= 0:
        return 0
    return int(elapsed // SECONDS_PER_DAY)


def to_store_timezone(
    dt: Optional[datetime], tz_name: str = "America/Sao_Paulo"
) -> Optional[datetime]:
    """Convert datetime to the store's local timezone."""
    if not dt:
        return None

    return dt.astimezone(pytz.timezone(tz_name))


def isoformat(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None
