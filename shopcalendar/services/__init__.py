"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .scheduler import (
    BookingCheck,
    BookingRejection,
    SchedulingService,
    ShopDataProtocol,
    check_window,
)

__all__ = [
    "BookingCheck",
    "BookingRejection",
    "SchedulingService",
    "ShopDataProtocol",
    "check_window",
]
