# ===== app/services/availability/booking_window_policy.py =====
"""Time-based rules for changing an existing booking"""
from datetime import datetime, timedelta
from typing import Optional

import pytz

from app.services.availability.schedule_config import Booking

DEFAULT_CUTOFF_MINUTES = 60


def booking_datetime(booking: Booking, timezone: str) -> datetime:
    """Booking start as an aware datetime in the business timezone"""
    tz = pytz.timezone(timezone)
    return tz.localize(datetime.combine(booking.date, booking.time))


def can_modify(
        booking: Booking,
        now: datetime,
        timezone: str = "UTC",
        cutoff_minutes: int = DEFAULT_CUTOFF_MINUTES,
) -> bool:
    """
    True when the booking is confirmed and starts at least `cutoff_minutes`
    after `now`. A naive `now` is read as business local time.
    """
    if not booking.is_confirmed:
        return False

    start = booking_datetime(booking, timezone)
    if now.tzinfo is None:
        now = pytz.timezone(timezone).localize(now)

    return start - now >= timedelta(minutes=cutoff_minutes)


def is_cancellable(
        booking: Booking,
        now: datetime,
        timezone: str = "UTC",
        cutoff_minutes: Optional[int] = None,
) -> bool:
    return can_modify(
        booking, now, timezone,
        DEFAULT_CUTOFF_MINUTES if cutoff_minutes is None else cutoff_minutes
    )


def is_editable(
        booking: Booking,
        now: datetime,
        timezone: str = "UTC",
        cutoff_minutes: Optional[int] = None,
) -> bool:
    return can_modify(
        booking, now, timezone,
        DEFAULT_CUTOFF_MINUTES if cutoff_minutes is None else cutoff_minutes
    )
