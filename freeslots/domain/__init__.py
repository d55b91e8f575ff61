"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    AuthenticationError,
    CalendarAPIError,
    EmptyParticipantSetError,
    FreeSlotsError,
    InvalidConfigError,
    InvalidIntervalError,
    ResponderError,
)
from .models import BusyEvent, FreeInterval, TimeInterval, TimeSlot, WorkWindow
from .slot_calculator import (
    SlotCalculator,
    compute_free_slots,
    derive_free_intervals,
    intersect_free_slots,
)

__all__ = [
    "AuthenticationError",
    "BusyEvent",
    "CalendarAPIError",
    "EmptyParticipantSetError",
    "FreeInterval",
    "FreeSlotsError",
    "InvalidConfigError",
    "InvalidIntervalError",
    "ResponderError",
    "SlotCalculator",
    "TimeInterval",
    "TimeSlot",
    "WorkWindow",
    "compute_free_slots",
    "derive_free_intervals",
    "intersect_free_slots",
]
