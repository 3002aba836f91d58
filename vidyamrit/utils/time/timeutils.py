"""Time utilities - DRY principle"""
from datetime import datetime, date, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

IST = ZoneInfo("Asia/Kolkata")


def now_ist() -> datetime:
    return datetime.now(IST)


def ensure_aware(dt: datetime) -> datetime:
    """MongoDB hands back naive UTC datetimes; attach UTC so they compare with IST values"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def epoch_millis(dt: Optional[datetime] = None) -> int:
    dt = dt or now_ist()
    return int(ensure_aware(dt).timestamp() * 1000)


def parse_date_safe(date_str: str) -> datetime:
    """Parse date with ISO format for performance"""
    try:
        return datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except ValueError:
        return datetime.strptime(date_str, "%Y-%m-%d")


def to_datetime(value: Any) -> Optional[datetime]:
    """Coerce request values (ISO strings, dates) into aware datetimes"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = parse_date_safe(value.strip())
        except ValueError:
            raise ValueError(f"Invalid date: {value}")
        return ensure_aware(parsed)
    raise ValueError(f"Invalid date: {value}")


def to_local_date(value: Any) -> Optional[date]:
    """Calendar day of a timestamp in IST"""
    dt = to_datetime(value)
    if dt is None:
        return None
    return dt.astimezone(IST).date()


def is_sunday(day: date) -> bool:
    return day.weekday() == 6
