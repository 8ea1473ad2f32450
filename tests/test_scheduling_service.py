"""
Tests for the SchedulingService orchestration layer.
"""

import asyncio
from typing import Dict, List

from shopcalendar.config import CalendarSettings
from shopcalendar.domain.models import (
    AppointmentStatus,
    AppointmentWindow,
    ExistingAppointment,
    PaymentTransaction,
    TransactionType,
    WorkingHoursRule,
)
from shopcalendar.domain.payments import PaymentStatus
from shopcalendar.domain.timeutils import Now, parse_date, parse_time
from shopcalendar.domain.working_hours import WorkingHours
from shopcalendar.services.scheduler import (
    BookingRejection,
    SchedulingService,
    check_window,
    summary_to_dict,
)

TUESDAY = "2024-01-09"


class StubShopStore:
    """Minimal stub matching ShopDataProtocol."""

    def __init__(self, appointments: List[ExistingAppointment], transactions: Dict[str, List[PaymentTransaction]] = None):
        self._appointments = appointments
        self._transactions = transactions or {}
        self.calls: List[tuple] = []

    async def get_working_hours(self, shop_id):
        self.calls.append(("hours", shop_id))
        return WorkingHours(
            [WorkingHoursRule(day_of_week=2, open_time=parse_time("09:00"), close_time=parse_time("17:00"))]
        )

    async def get_appointments(self, shop_id, date):
        self.calls.append(("appointments", shop_id, str(date)))
        return [a for a in self._appointments if a.date == parse_date(date)]

    async def get_transactions(self, order_id):
        self.calls.append(("transactions", order_id))
        return self._transactions.get(order_id, [])


def _appointment(id, start, end, status=AppointmentStatus.CONFIRMED):
    return ExistingAppointment(
        id=id,
        date=parse_date(TUESDAY),
        start_time=parse_time(start),
        end_time=parse_time(end),
        status=status,
    )


def _build_service(appointments=None, transactions=None, **settings) -> SchedulingService:
    store = StubShopStore(appointments or [], transactions)
    return SchedulingService(store=store, settings=CalendarSettings(**settings))


def test_available_slots_uses_store_and_settings():
    """Buffer and default duration come from the calendar settings."""
    service = _build_service(
        appointments=[_appointment("a", "10:00", "11:00")],
        buffer_time_minutes=15,
        default_appointment_duration=60,
    )

    slots = asyncio.run(service.available_slots("shop-1", TUESDAY))

    labels = [str(slot) for slot in slots]
    assert labels[0] == "11:30"
    assert labels[-1] == "16:00"
    assert "09:00" not in labels  # 09:00-10:00 ends inside the 09:45 buffer


def test_available_slots_duration_override_and_now():
    service = _build_service()

    slots = asyncio.run(
        service.available_slots(
            "shop-1", TUESDAY, duration_minutes=45, now=Now.of(TUESDAY, "15:45")
        )
    )

    assert [str(slot) for slot in slots] == ["16:00", "16:15"]


def test_check_booking_accepts_free_window():
    service = _build_service(appointments=[_appointment("a", "10:00", "11:00")])

    result = asyncio.run(
        service.check_booking("shop-1", AppointmentWindow.create(TUESDAY, "11:00", "12:00"))
    )

    assert result.ok
    assert result.reason is None
    assert result.message == "Time slot is available"


def test_check_booking_rejections():
    """Each failure mode is reported as a result, not raised."""
    service = _build_service(appointments=[_appointment("a", "10:00", "11:00")])

    def run(window, now=None):
        return asyncio.run(service.check_booking("shop-1", window, now=now)).reason

    assert run(AppointmentWindow.create(TUESDAY, "10:30", "11:30")) is BookingRejection.CONFLICT
    assert run(AppointmentWindow.create(TUESDAY, "16:30", "17:30")) is BookingRejection.OUT_OF_HOURS
    assert run(AppointmentWindow.create("2024-01-07", "10:00", "11:00")) is BookingRejection.OUT_OF_HOURS
    assert run(AppointmentWindow.create(TUESDAY, "12:00", "12:00")) is BookingRejection.INVALID_RANGE
    assert run(
        AppointmentWindow.create(TUESDAY, "12:00", "13:00"), now=Now.of(TUESDAY, "12:30")
    ) is BookingRejection.IN_PAST


def test_check_booking_reschedule_excludes_self():
    service = _build_service(appointments=[_appointment("a", "10:00", "11:00")])

    result = asyncio.run(
        service.check_booking(
            "shop-1", AppointmentWindow.create(TUESDAY, "10:30", "11:30", exclude_id="a")
        )
    )

    assert result.ok


def test_check_booking_honours_buffer():
    service = _build_service(appointments=[_appointment("a", "10:00", "11:00")], buffer_time_minutes=10)

    result = asyncio.run(
        service.check_booking("shop-1", AppointmentWindow.create(TUESDAY, "11:00", "12:00"))
    )

    assert result.reason is BookingRejection.CONFLICT
    assert "conflicts" in result.message


def test_each_call_fetches_fresh_snapshot():
    """No caching between calls: the store is queried every time."""
    store = StubShopStore([])
    service = SchedulingService(store=store)
    window = AppointmentWindow.create(TUESDAY, "10:00", "11:00")

    asyncio.run(service.check_booking("shop-1", window))
    asyncio.run(service.check_booking("shop-1", window))

    assert store.calls.count(("appointments", "shop-1", TUESDAY)) == 2


def test_order_balance():
    transactions = {
        "COR-25-0162": [
            PaymentTransaction(id="1", amount_cents=10000, refunded_amount_cents=5000, type=TransactionType.PAYMENT),
            PaymentTransaction(id="2", amount_cents=-5000, type=TransactionType.REFUND),
        ]
    }
    service = _build_service(transactions=transactions)

    summary = asyncio.run(service.order_balance("COR-25-0162", 10000))

    assert summary.status is PaymentStatus.PARTIAL
    assert summary_to_dict(summary) == {
        "totalPaid": 10000,
        "totalRefunded": 5000,
        "netPaid": 5000,
        "amountDue": 5000,
        "percentage": 50,
        "status": "partial",
    }


def test_check_window_without_service():
    working_hours = WorkingHours(
        [WorkingHoursRule(day_of_week=2, open_time=parse_time("09:00"), close_time=parse_time("17:00"))]
    )

    result = check_window(AppointmentWindow.create(TUESDAY, "09:00", "17:00"), working_hours, [])

    assert result.ok
