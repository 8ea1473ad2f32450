"""
Core business logic for computing bookable appointment slots.

Pure domain logic without any external dependencies (no database, no I/O).
The result is recomputed on every call because the set of existing
appointments may have changed since the last one.
"""

from typing import List, Optional

from .conflicts import has_conflict
from .models import AppointmentWindow, SlotRequest
from .timeutils import Now, TimeOfDay

DEFAULT_GRANULARITY_MINUTES = 30


class SlotGenerator:
    """
    Calculates the start times a client may book on a given day.

    Algorithm:
    1. Closed day -> no slots
    2. Walk candidate starts from opening time in granularity steps up to
       ``close - duration``; if that last fitting start is off the grid it
       is still offered
    3. Drop candidates that overlap an existing appointment, or its
       buffer-padded interval when a buffer is configured
    4. Optionally drop candidates that have already started
    """

    def __init__(self, granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES):
        if granularity_minutes <= 0:
            raise ValueError(f"granularity_minutes must be greater than zero, got {granularity_minutes}")
        self.granularity_minutes = granularity_minutes

    def generate(self, request: SlotRequest, now: Optional[Now] = None) -> List[TimeOfDay]:
        """
        Generate offerable slot start times for ``request.date``.

        Args:
            request: Day, opening hours, duration, buffer and booked appointments
            now: When given, slots that already started are not offered

        Returns:
            Slot start times in ascending order
        """
        rule = request.working_hours
        if rule.is_closed:
            return []

        if now is not None and request.date < now.date:
            return []

        slots: List[TimeOfDay] = []
        for start in self._candidate_starts(request):
            if now is not None and request.date == now.date and start < now.time.minutes:
                continue
            if self._is_offerable(request, start):
                slots.append(TimeOfDay(start))

        return slots

    def _candidate_starts(self, request: SlotRequest) -> List[int]:
        """
        Grid-aligned starts from opening, plus the last start that still fits.

        Example (open 09:00, close 17:00, 45 minutes):
        09:00, 09:30, ..., 16:00, 16:15
        """
        open_minutes = request.working_hours.open_time.minutes
        close_minutes = request.working_hours.close_time.minutes
        latest_start = close_minutes - request.duration_minutes

        if latest_start < open_minutes:
            return []

        starts = list(range(open_minutes, latest_start + 1, self.granularity_minutes))
        if starts[-1] != latest_start:
            starts.append(latest_start)

        return starts

    def _is_offerable(self, request: SlotRequest, start: int) -> bool:
        end = start + request.duration_minutes
        if end > request.working_hours.close_time.minutes:
            return False

        window = AppointmentWindow(
            date=request.date,
            start_time=TimeOfDay(start),
            end_time=TimeOfDay(end),
        )

        if has_conflict(window, request.existing):
            return False

        if request.buffer_minutes > 0 and has_conflict(
            window, request.existing, buffer_minutes=request.buffer_minutes
        ):
            return False

        return True


def generate_slots(
    request: SlotRequest,
    now: Optional[Now] = None,
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
) -> List[TimeOfDay]:
    return SlotGenerator(granularity_minutes=granularity_minutes).generate(request, now=now)
