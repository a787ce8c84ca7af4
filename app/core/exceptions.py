# app/core/exceptions.py
"""Scheduling error taxonomy shared by services and the HTTP layer"""


class SchedulingError(Exception):
    """Base class for availability and booking errors"""


class ConfigurationError(SchedulingError, ValueError):
    """A ScheduleConfig that must not be saved or used for slot generation"""

    def __init__(self, message: str, problems=None):
        super().__init__(message)
        self.problems = list(problems or [message])


class MalformedSlotToken(SchedulingError, ValueError):
    """A time token that cannot be read as HH:MM (dropped by the normalizer)"""

    def __init__(self, token):
        super().__init__(f"Malformed slot token: {token!r}")
        self.token = token


class SlotConflictError(SchedulingError):
    """The requested slot was taken between listing and booking"""

    retryable = True

    def __init__(self, business_id, target_date, slot_time: str):
        super().__init__(
            f"Slot {target_date} {slot_time} is no longer available"
        )
        self.business_id = business_id
        self.target_date = target_date
        self.slot_time = slot_time


class BookingLockedError(SchedulingError):
    """The booking is inside the change cutoff or no longer confirmed"""

    def __init__(self, booking_id, action: str):
        super().__init__(f"Booking {booking_id} can no longer be {action}")
        self.booking_id = booking_id
        self.action = action
