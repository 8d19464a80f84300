"""
UTC timestamp helpers shared by ingestion and storage.
"""

from datetime import datetime, timezone


ZERO_TIMESTAMP = datetime(1, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage(value: datetime) -> str:
    """
    Serialize for SQLite.
    
    Fixed-width UTC with microseconds, so string order equals time order.
    """
    naive = ensure_utc(value).replace(tzinfo=None)
    return naive.isoformat(timespec="microseconds") + "Z"


def from_storage(value: str) -> datetime:
    return datetime.fromisoformat(value.rstrip("Z")).replace(tzinfo=timezone.utc)
