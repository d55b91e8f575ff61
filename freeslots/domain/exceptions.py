"""
Domain-specific exception hierarchy for the free slot finder.
"""


class FreeSlotsError(Exception):
    """Base class for all application-level errors."""


class InvalidIntervalError(FreeSlotsError, ValueError):
    """Raised when a time interval does not start strictly before it ends."""


class InvalidConfigError(FreeSlotsError, ValueError):
    """Raised when a working window or duration threshold is unusable."""


class EmptyParticipantSetError(FreeSlotsError, ValueError):
    """Raised when common free time is requested for zero participants."""


class CalendarAPIError(FreeSlotsError):
    """Raised when calendar data cannot be fetched or parsed."""


class AuthenticationError(FreeSlotsError):
    """Raised when authentication or token handling fails."""


class ResponderError(FreeSlotsError):
    """Raised when the language model does not produce a usable answer."""
