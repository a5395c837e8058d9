"""Calendar helpers for epoch-millisecond timestamps.

Day bucketing always goes through local calendar dates rather than
fixed 24h offsets, so DST changes do not shift activities between days.
"""

from datetime import date, datetime, time, timedelta, tzinfo


def local_datetime(ms: int, tz: tzinfo | None = None) -> datetime:
    """Epoch milliseconds as a datetime in ``tz`` (system local when None)."""
    if tz is None:
        return datetime.fromtimestamp(ms / 1000)
    return datetime.fromtimestamp(ms / 1000, tz)


def local_date(ms: int, tz: tzinfo | None = None) -> date:
    """Calendar date of an epoch-millisecond timestamp."""
    return local_datetime(ms, tz).date()


def day_start_ms(day: date, tz: tzinfo | None = None) -> int:
    """Epoch milliseconds at local midnight of ``day``."""
    return int(datetime.combine(day, time.min, tzinfo=tz).timestamp() * 1000)


def day_end_ms(day: date, tz: tzinfo | None = None) -> int:
    """Last epoch millisecond belonging to ``day``."""
    return day_start_ms(day + timedelta(days=1), tz) - 1


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def parse_iso_date(value: str) -> date:
    return date.fromisoformat(value)
