"""
Conflict detection between a proposed window and booked appointments.
"""

from typing import Iterable, Iterator

from .models import AppointmentWindow, ExistingAppointment


def blocking_appointments(
    window: AppointmentWindow,
    existing: Iterable[ExistingAppointment]
) -> Iterator[ExistingAppointment]:
    """
    Appointments that can collide with ``window``.

    Same date only, cancelled and no-show appointments skipped, and the
    appointment being edited excluded.
    """
    for appointment in existing:
        if appointment.date != window.date:
            continue
        if not appointment.blocks_time:
            continue
        if window.exclude_id is not None and appointment.id == window.exclude_id:
            continue
        yield appointment


def has_conflict(
    window: AppointmentWindow,
    existing: Iterable[ExistingAppointment],
    buffer_minutes: int = 0
) -> bool:
    """
    Check whether ``window`` overlaps any blocking appointment.

    Intervals are half-open, so back-to-back appointments do not conflict
    and a zero-length window never conflicts. With ``buffer_minutes`` each
    existing appointment is padded to [start - buffer, end + buffer).
    """
    if buffer_minutes < 0:
        raise ValueError(f"buffer_minutes must not be negative, got {buffer_minutes}")

    candidate = window.interval()
    if candidate.is_empty:
        return False

    for appointment in blocking_appointments(window, existing):
        occupied = appointment.interval()
        if buffer_minutes:
            occupied = occupied.padded(buffer_minutes)
        # An unpadded point appointment stays empty and overlaps nothing.
        if candidate.overlaps(occupied):
            return True

    return False
