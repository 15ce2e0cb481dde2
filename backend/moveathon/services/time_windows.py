from __future__ import annotations
from datetime import date, datetime, time, timedelta, timezone as dt_tz
from zoneinfo import ZoneInfo


def civil_datetime(instant: datetime, tz_name: str) -> datetime:
    """Wall-clock view of an aware instant in the challenge's civil zone."""
    return instant.astimezone(ZoneInfo(tz_name))


def civil_date(instant: datetime, tz_name: str) -> date:
    return civil_datetime(instant, tz_name).date()


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5  # Sat=5, Sun=6


def local_window_to_utc(d: date, start_local: time, end_local: time, tz_name: str) -> tuple[datetime, datetime]:
    """
    Convert a wall-clock window (start->end) on civil date `d` in `tz_name`
    to UTC datetimes.

    Both bounds are taken with fold=0. A window whose end does not fall
    after its start on the same day is treated as running past midnight.

    Args:
        d: The civil date for the window
        start_local: Start time (wall clock)
        end_local: End time (wall clock)
        tz_name: IANA timezone name (e.g., "Asia/Kolkata")

    Returns:
        Tuple of (start_utc, end_utc) datetime objects

    Examples:
        >>> from datetime import date, time
        >>> d = date(2025, 10, 17)  # IST = UTC+5:30
        >>> start, end = local_window_to_utc(d, time(7, 30), time(15, 45), "Asia/Kolkata")
        >>> (start.hour, start.minute), (end.hour, end.minute)
        ((2, 0), (10, 15))
    """
    tz = ZoneInfo(tz_name)

    def _aware(t: time) -> datetime:
        return datetime(d.year, d.month, d.day, t.hour, t.minute, t.second, t.microsecond, tzinfo=tz, fold=0)

    start_dt_local = _aware(start_local)
    end_dt_local = _aware(end_local)
    if end_local <= start_local:
        end_dt_local += timedelta(days=1)

    start_utc = start_dt_local.astimezone(dt_tz.utc)
    end_utc = end_dt_local.astimezone(dt_tz.utc)
    if end_utc <= start_utc:
        # DST gap swallowed the window; keep it non-empty
        end_utc += timedelta(hours=1)
    return start_utc, end_utc
