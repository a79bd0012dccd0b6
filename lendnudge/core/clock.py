"""Injectable time source.

Reminder rules depend on "now"; everything that needs it receives a clock
instead of reading the wall clock so tests can pin time.
"""
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a timestamp to aware UTC.

    Naive values are taken to already be UTC (SQLite drops tzinfo on the way
    back from the database).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
