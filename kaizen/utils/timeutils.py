"""Time helpers shared by the API services and the timer client."""
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from kaizen.errors import InvalidInputError


def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    MongoDB stores UTC; drivers configured without ``tz_aware`` hand back
    naive values, which are therefore read as UTC.

    Example:
        >>> ensure_utc(datetime(2024, 1, 5, 12, 0)).tzinfo
        datetime.timezone.utc
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def calculate_duration(start_time: datetime, end_time: datetime) -> int:
    """
    Whole seconds between two instants, floored.

    Example:
        >>> start = datetime(2024, 1, 5, 23, 30, tzinfo=timezone.utc)
        >>> calculate_duration(start, start + timedelta(minutes=45, milliseconds=900))
        2700
    """
    delta = ensure_utc(end_time) - ensure_utc(start_time)
    return int(delta.total_seconds() // 1)


def format_hhmmss(seconds: int) -> str:
    """
    Format a second count as HH:MM:SS.

    Example:
        >>> format_hhmmss(3725)
        '01:02:05'
    """
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_short(seconds: int) -> str:
    """
    Format a second count as e.g. "2h 30m" or "45m".

    Example:
        >>> format_short(9000)
        '2h 30m'
    """
    if not seconds:
        return "0m"
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    if hours:
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"
    return f"{minutes}m"


def resolve_past_interval(
    day: date,
    start: time,
    end: time,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """
    Resolve wall-clock times on a given day into a closed UTC interval.

    An end time numerically earlier than the start time is taken to cross
    midnight, so the end date moves to the following day.

    Args:
        day: Calendar day the interval starts on
        start: Wall-clock start time
        end: Wall-clock end time
        tz: Zone the wall-clock times are expressed in; when omitted, the
            system's local zone rules for each date apply
        now: Reference instant for the future check (defaults to now)

    Returns:
        (start_time, end_time) as aware UTC datetimes

    Raises:
        InvalidInputError: If the interval is empty or not in the past
    """
    if now is None:
        now = utc_now()

    end_day = day + timedelta(days=1) if end < start else day
    if tz is None:
        # astimezone() on a naive value picks the local offset for that date
        start_time = datetime.combine(day, start).astimezone()
        end_time = datetime.combine(end_day, end).astimezone()
    else:
        start_time = datetime.combine(day, start, tzinfo=tz)
        end_time = datetime.combine(end_day, end, tzinfo=tz)

    if end_time <= start_time:
        raise InvalidInputError("End time must be after start time")
    if start_time > now or end_time > now:
        raise InvalidInputError("Time entries cannot be in the future")

    return ensure_utc(start_time), ensure_utc(end_time)
