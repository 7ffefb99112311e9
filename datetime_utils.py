from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


UTC = timezone.utc


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def epoch_millis(dt: Optional[datetime] = None) -> int:
    """Milliseconds since the Unix epoch for ``dt`` (now by default)."""

    value = ensure_utc(dt) or utc_now()
    return int(value.timestamp() * 1000)


def from_epoch_millis(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def parse_iso_date(value: Optional[str | date | datetime]) -> Optional[date]:
    """Accept ``YYYY-MM-DD`` or a full ISO timestamp and return the date part."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return date.fromisoformat(text[:10])


__all__ = [
    "UTC",
    "utc_now",
    "ensure_utc",
    "epoch_millis",
    "from_epoch_millis",
    "parse_iso_date",
]
