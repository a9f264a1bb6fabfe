"""Day-granularity clock helpers.

Reminder decisions are made per calendar day in UTC. Timestamps are stored as
naive UTC datetimes, so anything read back from the database without tzinfo
is treated as UTC.
"""
from datetime import UTC, date, datetime, time, timedelta


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form stored in DateTime columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(UTC).date()


def as_utc_date(value: datetime) -> date:
    """Calendar date of a timestamp, converting aware values to UTC first."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.date()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Naive UTC [start, end) of a calendar day, for range filters on DateTime columns."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def stamp_for(day: date, now: datetime | None = None) -> datetime:
    """Naive UTC timestamp guaranteed to fall on `day`.

    Uses `now` when it already falls on `day`; otherwise keeps its time of
    day and moves it onto `day`. This keeps an injected run date and the
    recorded send time consistent.
    """
    if now is None:
        now = utcnow()
    elif now.tzinfo is not None:
        now = now.astimezone(UTC).replace(tzinfo=None)
    if now.date() == day:
        return now
    return datetime.combine(day, now.time())


def parse_iso_date(raw: str) -> date:
    """Parse YYYY-MM-DD, raising ValueError for anything else."""
    return date.fromisoformat(raw.strip())
