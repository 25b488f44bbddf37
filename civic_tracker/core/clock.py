"""
Time helpers. All timestamps in this service are UTC.

SQLite hands back naive datetimes even for TIMESTAMP(timezone=True) columns,
so anything read from the database goes through as_utc() before arithmetic.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
