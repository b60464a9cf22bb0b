"""
time.py - time utilities
Single responsibility: common time helpers.
"""
from datetime import date, datetime, time


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def now_minutes() -> str:
    """Current time at minute precision (datetime-local input format)."""
    return datetime.now().isoformat(timespec="minutes")


def parse_iso(value) -> datetime | None:
    """Parse an ISO date/datetime string (or pass through datetime/date); None on failure."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def is_date_only(value) -> bool:
    if isinstance(value, datetime):
        return False
    if isinstance(value, date):
        return True
    return isinstance(value, str) and len(value.strip()) == 10


def parse_bound(value, end: bool = False) -> datetime | None:
    """Parse a filter boundary; a date-only end bound covers the whole day."""
    dt = parse_iso(value)
    if dt is None:
        return None
    if end and is_date_only(value):
        return datetime.combine(dt.date(), time.max)
    return dt


def to_epoch_seconds(value, end: bool = False) -> int | None:
    dt = parse_bound(value, end=end)
    if dt is None:
        return None
    return int(dt.timestamp())


def format_datetime(value) -> str:
    """ISO 8601 string to "YYYY-MM-DD HH:MM"; fallback to raw on error."""
    dt = parse_iso(value)
    if dt is None:
        return "" if value is None else str(value)
    return dt.strftime("%Y-%m-%d %H:%M")
