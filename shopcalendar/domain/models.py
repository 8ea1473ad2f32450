"""
Domain models for appointments, working hours and payments.

Every model can be built from a persisted row via ``from_record``. Rows are
plain mappings with the backend's snake_case column names; columns this
engine does not use are ignored.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from pendulum import Date

from .exceptions import TransactionDataError
from .timeutils import TimeOfDay, parse_date, parse_time, parse_time_or_default

logger = logging.getLogger(__name__)

DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def blocks_time(self) -> bool:
        """Cancelled and no-show appointments free their slot."""
        return self not in (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)


@dataclass(frozen=True)
class TimeInterval:
    """
    Half-open interval [start, end) in minutes since midnight.

    Bounds may fall outside the day when padded by a buffer. A zero-length
    interval overlaps nothing.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Interval start {self.start} must not be after end {self.end}")

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def duration_minutes(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps with another."""
        if self.is_empty or other.is_empty:
            return False
        return self.start < other.end and other.start < self.end

    def padded(self, minutes: int) -> "TimeInterval":
        return TimeInterval(start=self.start - minutes, end=self.end + minutes)


@dataclass(frozen=True)
class WorkingHoursRule:
    """
    Opening hours for one day of the week (0=Sunday .. 6=Saturday).

    Invariant: a closed day has no times; an open day has both, with
    open before close.
    """
    day_of_week: int
    open_time: Optional[TimeOfDay] = None
    close_time: Optional[TimeOfDay] = None
    is_closed: bool = False

    def __post_init__(self):
        if not 0 <= self.day_of_week <= 6:
            raise ValueError(f"day_of_week must be between 0 and 6, got {self.day_of_week}")

        if self.is_closed:
            if self.open_time is not None or self.close_time is not None:
                raise ValueError(f"Closed day {self.day_of_week} must not define open/close times")
            return

        if self.open_time is None or self.close_time is None:
            raise ValueError(f"Open day {self.day_of_week} requires both open and close times")
        if self.open_time >= self.close_time:
            raise ValueError(
                f"Open time {self.open_time} must be before close time {self.close_time}"
            )

    @classmethod
    def closed(cls, day_of_week: int) -> "WorkingHoursRule":
        return cls(day_of_week=day_of_week, is_closed=True)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "WorkingHoursRule":
        """Build a rule from a ``shop_hours`` row."""
        day = int(record["day_of_week"])
        if record.get("is_closed"):
            return cls.closed(day)
        return cls(
            day_of_week=day,
            open_time=parse_time(record["open_time"]),
            close_time=parse_time(record["close_time"]),
        )

    def open_interval(self) -> Optional[TimeInterval]:
        """The open period of the day, or None when closed."""
        if self.is_closed:
            return None
        return TimeInterval(start=self.open_time.minutes, end=self.close_time.minutes)

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    def format_display(self) -> str:
        if self.is_closed:
            return f"{self.day_name}: closed"
        return f"{self.day_name}: {self.open_time} - {self.close_time}"


@dataclass(frozen=True)
class AppointmentWindow:
    """
    A proposed appointment on one day.

    ``exclude_id`` names the appointment being edited so it does not
    conflict with itself. A window with start == end is a point probe.
    """
    date: Date
    start_time: TimeOfDay
    end_time: TimeOfDay
    exclude_id: Optional[str] = None

    def __post_init__(self):
        if self.start_time > self.end_time:
            raise ValueError(
                f"Start time {self.start_time} must not be after end time {self.end_time}"
            )

    @classmethod
    def create(cls, date, start_time, end_time, exclude_id: Optional[str] = None) -> "AppointmentWindow":
        """Build a window from strings or already-parsed values."""
        return cls(
            date=parse_date(date),
            start_time=parse_time(start_time),
            end_time=parse_time(end_time),
            exclude_id=exclude_id,
        )

    @property
    def is_point(self) -> bool:
        return self.start_time == self.end_time

    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time.minutes, end=self.end_time.minutes)

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.start_time} - {self.end_time}"


@dataclass(frozen=True)
class ExistingAppointment:
    """An appointment already on the books."""
    id: str
    date: Date
    start_time: TimeOfDay
    end_time: TimeOfDay
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    def __post_init__(self):
        if not isinstance(self.status, AppointmentStatus):
            object.__setattr__(self, "status", AppointmentStatus(self.status))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ExistingAppointment":
        """
        Build an appointment from an ``appointments`` row.

        Malformed stored times fall back to 00:00 rather than failing, so one
        corrupt row cannot break a calendar view. A row whose end lands
        before its start after that fallback collapses to a point.
        """
        start = parse_time_or_default(record.get("start_time"))
        end = parse_time_or_default(record.get("end_time"))
        if end < start:
            logger.warning("Appointment %s ends before it starts; treating as a point", record.get("id"))
            end = start
        return cls(
            id=str(record["id"]),
            date=parse_date(record["date"]),
            start_time=start,
            end_time=end,
            status=AppointmentStatus(record.get("status") or AppointmentStatus.SCHEDULED.value),
        )

    @property
    def blocks_time(self) -> bool:
        return self.status.blocks_time

    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start_time.minutes, end=self.end_time.minutes)


@dataclass(frozen=True)
class SlotRequest:
    """Everything needed to compute the offerable slots of one day."""
    date: Date
    working_hours: WorkingHoursRule
    duration_minutes: int
    buffer_minutes: int = 0
    existing: Sequence[ExistingAppointment] = field(default_factory=tuple)

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be greater than zero, got {self.duration_minutes}")
        if self.buffer_minutes < 0:
            raise ValueError(f"buffer_minutes must not be negative, got {self.buffer_minutes}")


class TransactionType(str, Enum):
    PAYMENT = "payment"
    REFUND = "refund"


@dataclass(frozen=True)
class PaymentTransaction:
    """
    One row of an order's payment history.

    A refund-typed row is a negative adjustment whose amount is already
    carried by its parent payment's ``refunded_amount_cents``.
    """
    id: str
    amount_cents: int
    refunded_amount_cents: int = 0
    status: str = "completed"
    type: Optional[TransactionType] = None

    def __post_init__(self):
        if self.type is not None and not isinstance(self.type, TransactionType):
            object.__setattr__(self, "type", TransactionType(self.type))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PaymentTransaction":
        """
        Build a transaction from a payments row.

        Raises:
            TransactionDataError: If ``amount_cents`` is missing or not numeric
        """
        amount = record.get("amount_cents")
        if amount is None:
            raise TransactionDataError(f"Payment {record.get('id')!r} is missing amount_cents")

        raw_type = record.get("type")
        try:
            return cls(
                id=str(record.get("id", "")),
                amount_cents=int(amount),
                refunded_amount_cents=int(record.get("refunded_amount_cents") or 0),
                status=str(record.get("status") or ""),
                type=TransactionType(raw_type) if raw_type else None,
            )
        except (TypeError, ValueError) as exc:
            raise TransactionDataError(f"Malformed payment {record.get('id')!r}: {exc}") from exc

    @property
    def is_refund(self) -> bool:
        return self.type is TransactionType.REFUND

    @property
    def refundable_cents(self) -> int:
        """What can still be refunded against this payment."""
        if self.is_refund:
            return 0
        return max(self.amount_cents - self.refunded_amount_cents, 0)


def appointments_from_records(records: Iterable[Mapping[str, Any]]) -> List[ExistingAppointment]:
    return [ExistingAppointment.from_record(record) for record in records]


def transactions_from_records(records: Iterable[Mapping[str, Any]]) -> List[PaymentTransaction]:
    return [PaymentTransaction.from_record(record) for record in records]
