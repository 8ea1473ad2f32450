"""
Application services for booking checks, slot offers and order balances.

The service fetches a fresh snapshot from a store adapter on every call and
delegates all decisions to the pure domain functions. Keeping the store
behind a protocol lets tests plug in a stub and the CLI plug in the
in-memory adapter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Protocol

from ..config import CalendarSettings
from ..domain.conflicts import has_conflict
from ..domain.models import (
    AppointmentWindow,
    ExistingAppointment,
    PaymentTransaction,
    SlotRequest,
)
from ..domain.payments import PaymentSummary, calculate
from ..domain.slot_generator import SlotGenerator
from ..domain.timeutils import DateLike, Now, TimeOfDay, parse_date
from ..domain.working_hours import WorkingHours

logger = logging.getLogger(__name__)


class ShopDataProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    async def get_working_hours(self, shop_id: str) -> WorkingHours:
        """Return the shop's weekly opening hours."""

    async def get_appointments(self, shop_id: str, date: DateLike) -> List[ExistingAppointment]:
        """Return every appointment of the shop on ``date``, any status."""

    async def get_transactions(self, order_id: str) -> List[PaymentTransaction]:
        """Return the payment history of an order."""


class BookingRejection(str, Enum):
    INVALID_RANGE = "invalid_range"
    IN_PAST = "in_past"
    OUT_OF_HOURS = "out_of_hours"
    CONFLICT = "conflict"


_REJECTION_MESSAGES = {
    BookingRejection.INVALID_RANGE: "End time must be after start time",
    BookingRejection.IN_PAST: "Cannot create appointments in the past",
    BookingRejection.OUT_OF_HOURS: "Appointment is outside working hours",
    BookingRejection.CONFLICT: "This time slot conflicts with another appointment",
}


@dataclass(frozen=True)
class BookingCheck:
    """Outcome of validating a proposed appointment before it is written."""
    window: AppointmentWindow
    reason: Optional[BookingRejection] = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> str:
        if self.reason is None:
            return "Time slot is available"
        return _REJECTION_MESSAGES[self.reason]


def check_window(
    window: AppointmentWindow,
    working_hours: WorkingHours,
    existing: Iterable[ExistingAppointment],
    buffer_minutes: int = 0,
    now: Optional[Now] = None
) -> BookingCheck:
    """
    Validate a proposed booking against hours and booked appointments.

    Rejections are returned, not raised: being out of hours or overlapping
    is an ordinary outcome of user input.
    """
    if window.is_point:
        return BookingCheck(window, BookingRejection.INVALID_RANGE)

    if now is not None and (
        window.date < now.date
        or (window.date == now.date and window.start_time < now.time)
    ):
        return BookingCheck(window, BookingRejection.IN_PAST)

    if not working_hours.is_window_within_hours(window):
        return BookingCheck(window, BookingRejection.OUT_OF_HOURS)

    if has_conflict(window, existing, buffer_minutes=buffer_minutes):
        return BookingCheck(window, BookingRejection.CONFLICT)

    return BookingCheck(window)


class SchedulingService:
    """
    Orchestrates data retrieval and the scheduling/payment calculations.

    Holds no state between calls; every method reads a fresh snapshot so a
    booking commit re-validates against the latest appointments.
    """

    def __init__(
        self,
        store: ShopDataProtocol,
        settings: Optional[CalendarSettings] = None,
    ) -> None:
        self._store = store
        self._settings = settings or CalendarSettings()
        self._slot_generator = SlotGenerator(
            granularity_minutes=self._settings.slot_granularity_minutes
        )

    @property
    def settings(self) -> CalendarSettings:
        return self._settings

    async def available_slots(
        self,
        shop_id: str,
        date: DateLike,
        *,
        duration_minutes: Optional[int] = None,
        now: Optional[Now] = None,
    ) -> List[TimeOfDay]:
        """Offerable slot starts for ``date``."""
        day = parse_date(date)
        working_hours = await self._store.get_working_hours(shop_id)
        existing = await self._store.get_appointments(shop_id, day)

        request = SlotRequest(
            date=day,
            working_hours=working_hours.rule_for(day),
            duration_minutes=duration_minutes or self._settings.default_appointment_duration,
            buffer_minutes=self._settings.buffer_time_minutes,
            existing=tuple(existing),
        )

        slots = self._slot_generator.generate(request, now=now)
        logger.debug("Computed %d slot(s) for shop %s on %s", len(slots), shop_id, day)
        return slots

    async def check_booking(
        self,
        shop_id: str,
        window: AppointmentWindow,
        *,
        now: Optional[Now] = None,
    ) -> BookingCheck:
        """Validate a proposed booking immediately before it is persisted."""
        working_hours = await self._store.get_working_hours(shop_id)
        existing = await self._store.get_appointments(shop_id, window.date)

        result = check_window(
            window,
            working_hours,
            existing,
            buffer_minutes=self._settings.buffer_time_minutes,
            now=now,
        )

        if not result.ok:
            logger.debug("Rejected booking %s for shop %s: %s", window, shop_id, result.reason.value)
        return result

    async def order_balance(self, order_id: str, order_total_cents: int) -> PaymentSummary:
        """Reconcile an order's payment history into its balance."""
        transactions = await self._store.get_transactions(order_id)
        return calculate(order_total_cents, transactions)


def summary_to_dict(summary: PaymentSummary) -> Mapping[str, Any]:
    """Serializable view using the field names UI consumers expect."""
    return {
        "totalPaid": summary.total_paid,
        "totalRefunded": summary.total_refunded,
        "netPaid": summary.net_paid,
        "amountDue": summary.amount_due,
        "percentage": summary.percentage,
        "status": summary.status.value,
    }
