"""
Temporal status of appointments relative to an explicit "now".
"""

from enum import Enum
from typing import Iterable, Optional, Tuple

from pendulum import Date

from .models import ExistingAppointment
from .timeutils import (
    DateLike,
    Now,
    TimeLike,
    TimeOfDay,
    is_date_in_past,
    is_date_today,
    parse_date,
    parse_time,
)


class TemporalStatus(str, Enum):
    PAST = "past"
    HAPPENING_NOW = "happening-now"
    FUTURE = "future"


def classify(
    date: DateLike,
    start_time: TimeLike,
    end_time: Optional[TimeLike],
    now: Now
) -> TemporalStatus:
    """
    Classify an appointment as past, happening now or future.

    On another day the date alone decides. On the current day the
    appointment is happening now while ``start <= now <= end``. A missing
    end time collapses the appointment to its start minute.
    """
    if not is_date_today(date, now):
        return TemporalStatus.PAST if is_date_in_past(date, now) else TemporalStatus.FUTURE

    start = parse_time(start_time)
    effective_end = parse_time(end_time) if end_time is not None else start

    if start <= now.time <= effective_end:
        return TemporalStatus.HAPPENING_NOW
    if effective_end < now.time:
        return TemporalStatus.PAST
    return TemporalStatus.FUTURE


def classify_appointment(appointment: ExistingAppointment, now: Now) -> TemporalStatus:
    return classify(appointment.date, appointment.start_time, appointment.end_time, now)


def can_modify(
    date: DateLike,
    start_time: TimeLike,
    end_time: Optional[TimeLike],
    now: Now
) -> bool:
    """Past appointments are read-only."""
    return classify(date, start_time, end_time, now) is not TemporalStatus.PAST


def sort_key(appointment: ExistingAppointment) -> Tuple[Date, TimeOfDay, TimeOfDay]:
    return (parse_date(appointment.date), appointment.start_time, appointment.end_time)


def next_appointment(
    appointments: Iterable[ExistingAppointment],
    now: Now
) -> Optional[ExistingAppointment]:
    """
    The earliest appointment that is happening now or still ahead.

    Cancelled and no-show appointments are skipped.
    """
    upcoming = [
        appointment for appointment in appointments
        if appointment.blocks_time
        and classify_appointment(appointment, now) is not TemporalStatus.PAST
    ]
    if not upcoming:
        return None
    return min(upcoming, key=sort_key)
