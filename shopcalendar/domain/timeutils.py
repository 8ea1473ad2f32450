"""
Time primitives: wall-clock times, calendar dates and the explicit "now".

Dates and times here are shop-local wall-clock values. Converting from UTC
timestamps is the caller's job; nothing in this module reads the system clock
except ``Now.current``.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Union

import pendulum
from pendulum import Date, DateTime

from .exceptions import InvalidFormatError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")
_TIME_12H_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})\s*(AM|PM)$", re.IGNORECASE)


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    A wall-clock time with minute resolution.

    Invariant: 0 <= minutes < 1440. Equality and ordering are by
    minutes since midnight.
    """
    minutes: int

    def __post_init__(self):
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise ValueError(f"Minutes since midnight out of range: {self.minutes}")

    @classmethod
    def of(cls, hour: int, minute: int = 0) -> "TimeOfDay":
        if not 0 <= hour <= 23 or not 0 <= minute <= 59:
            raise ValueError(f"Invalid time {hour}:{minute}")
        return cls(hour * 60 + minute)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def to_time(self) -> time:
        return time(hour=self.hour, minute=self.minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


MIDNIGHT = TimeOfDay(0)

TimeLike = Union[TimeOfDay, time, str]
DateLike = Union[date, str]


def parse_time(value: TimeLike) -> TimeOfDay:
    """
    Parse ``HH:MM`` or ``HH:MM:SS`` into a TimeOfDay.

    Seconds are truncated. ``datetime.time`` and TimeOfDay values are
    accepted as-is.

    Raises:
        InvalidFormatError: If the value does not describe a valid time
    """
    if isinstance(value, TimeOfDay):
        return value
    if isinstance(value, time):
        return TimeOfDay.of(value.hour, value.minute)
    if not isinstance(value, str):
        raise InvalidFormatError(f"Expected a time string, got {type(value).__name__}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidFormatError(f"Invalid time format: '{value}' (expected HH:MM)")

    hour, minute = int(match.group(1)), int(match.group(2))
    seconds = match.group(3)
    if hour > 23 or minute > 59 or (seconds is not None and int(seconds) > 59):
        raise InvalidFormatError(f"Time out of range: '{value}'")

    return TimeOfDay.of(hour, minute)


def parse_time_or_default(value, default: TimeOfDay = MIDNIGHT) -> TimeOfDay:
    """
    Lenient parse for persisted data: malformed input yields ``default``.

    A calendar view must keep rendering when a stored row is corrupt, so the
    failure is logged instead of raised.
    """
    if value is None:
        return default
    try:
        return parse_time(value)
    except InvalidFormatError as exc:
        logger.warning("Falling back to %s for malformed time: %s", default, exc)
        return default


def format_time(value: TimeOfDay) -> str:
    """Format as zero-padded 24-hour ``HH:MM``."""
    return str(value)


def format_time_12h(value: TimeLike) -> str:
    """Format as ``h:MM AM`` / ``h:MM PM``."""
    t = parse_time(value)
    period = "PM" if t.hour >= 12 else "AM"
    hour12 = t.hour % 12 or 12
    return f"{hour12}:{t.minute:02d} {period}"


def parse_time_12h(value: str) -> TimeOfDay:
    """
    Parse ``h:MM AM`` / ``h:MM PM`` into a TimeOfDay.

    Raises:
        InvalidFormatError: If the value is not a 12-hour time
    """
    match = _TIME_12H_PATTERN.match(value.strip())
    if not match:
        raise InvalidFormatError(f"Invalid 12-hour time: '{value}'")

    hour, minute = int(match.group(1)), int(match.group(2))
    if not 1 <= hour <= 12 or minute > 59:
        raise InvalidFormatError(f"Time out of range: '{value}'")

    period = match.group(3).upper()
    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0

    return TimeOfDay.of(hour, minute)


def compare_time(a: TimeLike, b: TimeLike) -> int:
    """Return -1, 0 or 1 comparing minutes since midnight."""
    left, right = parse_time(a).minutes, parse_time(b).minutes
    return (left > right) - (left < right)


def add_minutes(value: TimeLike, delta: int) -> TimeOfDay:
    """
    Shift a time by ``delta`` minutes, wrapping around midnight.

    Day overflow is dropped; callers needing a day carry must compare the
    result with the input themselves.
    """
    return TimeOfDay((parse_time(value).minutes + delta) % MINUTES_PER_DAY)


def diff_minutes(a: TimeLike, b: TimeLike) -> int:
    """
    Minutes from ``a`` forward to ``b``.

    If ``b`` is earlier than ``a`` it is taken to be on the next day.
    """
    return (parse_time(b).minutes - parse_time(a).minutes) % MINUTES_PER_DAY


def format_duration(minutes: int) -> str:
    """Human readable duration: ``45 min``, ``1 hour``, ``1h 30min``."""
    if minutes < 60:
        return f"{minutes} min"

    hours, mins = divmod(minutes, 60)
    if mins == 0:
        return f"{hours} hour{'s' if hours > 1 else ''}"
    return f"{hours}h {mins}min"


def parse_date(value: DateLike) -> Date:
    """
    Parse a ``YYYY-MM-DD`` string into a calendar date.

    ``datetime.date`` values (including pendulum dates) pass through; a
    ``datetime`` is truncated to its date.

    Raises:
        InvalidFormatError: If the value is not a valid Gregorian date
    """
    if isinstance(value, datetime):
        return pendulum.date(value.year, value.month, value.day)
    if isinstance(value, Date):
        return value
    if isinstance(value, date):
        return pendulum.date(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise InvalidFormatError(f"Expected a date string, got {type(value).__name__}")

    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidFormatError(f"Invalid date: '{value}' (expected YYYY-MM-DD)") from exc


def format_date(value: DateLike) -> str:
    """Format as ``YYYY-MM-DD``."""
    return parse_date(value).isoformat()


def day_of_week(value: DateLike) -> int:
    """Day of week with 0=Sunday .. 6=Saturday."""
    return parse_date(value).isoweekday() % 7


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return parse_date(end).toordinal() - parse_date(start).toordinal()


def date_range(start: DateLike, end: DateLike) -> List[Date]:
    """All dates from ``start`` to ``end`` inclusive; empty if end < start."""
    current = parse_date(start)
    last = parse_date(end)
    dates: List[Date] = []

    while current <= last:
        dates.append(current)
        current = current.add(days=1)

    return dates


@dataclass(frozen=True)
class Now:
    """
    The current instant as a shop-local date and wall-clock time.

    Passed explicitly into every temporal decision so results are
    deterministic.
    """
    date: Date
    time: TimeOfDay

    @classmethod
    def of(cls, date_value: DateLike, time_value: TimeLike) -> "Now":
        return cls(date=parse_date(date_value), time=parse_time(time_value))

    @classmethod
    def from_datetime(cls, dt: datetime) -> "Now":
        return cls(date=parse_date(dt), time=TimeOfDay.of(dt.hour, dt.minute))

    @classmethod
    def current(cls, timezone: str) -> "Now":
        """Read the clock in the shop's timezone."""
        return cls.from_datetime(pendulum.now(timezone))

    @classmethod
    def parse(cls, value: str, timezone: str = "UTC") -> "Now":
        """Parse ``YYYY-MM-DD HH:MM`` as a shop-local instant."""
        try:
            dt: DateTime = pendulum.from_format(value.strip(), "YYYY-MM-DD HH:mm", tz=timezone)
        except ValueError as exc:
            raise InvalidFormatError(f"Invalid instant: '{value}' (expected YYYY-MM-DD HH:MM)") from exc
        return cls.from_datetime(dt)


def is_date_today(value: DateLike, now: Now) -> bool:
    return parse_date(value) == now.date


def is_date_in_past(value: DateLike, now: Now) -> bool:
    return parse_date(value) < now.date


def is_date_in_future(value: DateLike, now: Now) -> bool:
    return parse_date(value) > now.date
