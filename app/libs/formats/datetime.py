from datetime import datetime, timedelta, timezone


def now() -> datetime:
    """Current UTC time without tzinfo (naive).
    All timestamps stored by the project go through this function.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_tzinfo() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(dt: datetime) -> datetime:
    """Weeks start on Sunday."""
    days_since_sunday = (dt.weekday() + 1) % 7
    return start_of_day(dt - timedelta(days=days_since_sunday))


def start_of_month(dt: datetime) -> datetime:
    return start_of_day(dt).replace(day=1)

