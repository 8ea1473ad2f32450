"""
Domain layer - Pure business logic without external dependencies.
"""

from .conflicts import has_conflict
from .models import (
    AppointmentStatus,
    AppointmentWindow,
    ExistingAppointment,
    PaymentTransaction,
    SlotRequest,
    TimeInterval,
    TransactionType,
    WorkingHoursRule,
)
from .payments import PaymentStatus, PaymentSummary, calculate
from .slot_generator import SlotGenerator, generate_slots
from .status import TemporalStatus, classify
from .timeutils import Now, TimeOfDay, parse_date, parse_time
from .working_hours import WorkingHours, is_open_at, is_window_within_hours

__all__ = [
    "AppointmentStatus",
    "AppointmentWindow",
    "ExistingAppointment",
    "Now",
    "PaymentStatus",
    "PaymentSummary",
    "PaymentTransaction",
    "SlotGenerator",
    "SlotRequest",
    "TemporalStatus",
    "TimeInterval",
    "TimeOfDay",
    "TransactionType",
    "WorkingHours",
    "WorkingHoursRule",
    "calculate",
    "classify",
    "generate_slots",
    "has_conflict",
    "is_open_at",
    "is_window_within_hours",
    "parse_date",
    "parse_time",
]
