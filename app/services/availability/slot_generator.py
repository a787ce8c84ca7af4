# ===== app/services/availability/slot_generator.py =====
"""
Slot Generation

Turns a ScheduleConfig into the bookable "HH:MM" slots for one day,
considering:
- Weekday rules and blocked dates
- Lunch breaks
- Past days and slots already started (business local time)
- Existing confirmed bookings

All intervals are half-open [start, end).
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from app.services.availability.schedule_config import (
    Booking,
    ScheduleConfig,
    format_time,
    to_minutes,
)

logger = logging.getLogger(__name__)


def _overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a


def business_now(config: ScheduleConfig, now: Optional[datetime] = None) -> datetime:
    """
    Current time as a naive datetime on the business's local clock.

    A naive `now` is assumed to already be local.
    """
    tz = config.tz
    if now is None:
        return datetime.now(tz).replace(tzinfo=None)
    if now.tzinfo is None:
        return now
    return now.astimezone(tz).replace(tzinfo=None)


def generate(
        target_date: date,
        config: ScheduleConfig,
        blocked_dates: Iterable[date] = (),
        existing_bookings: Iterable[Booking] = (),
        service_duration_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
) -> List[str]:
    """
    Generate the bookable slot starts for one day.

    Args:
        target_date: day to generate slots for
        config: the business's ScheduleConfig
        blocked_dates: extra closures, merged with config.blocked_dates
        existing_bookings: bookings on target_date (non-confirmed ones are ignored)
        service_duration_minutes: length of the service, defaults to the granularity
        now: reference time, defaults to the current time in the business timezone

    Returns:
        list[str]: ascending "HH:MM" slot starts, possibly empty
    """
    day = config.day_for(target_date)
    if not day.enabled:
        return []

    if config.is_blocked(target_date) or target_date in set(blocked_dates):
        return []

    problems = day.problems()
    if problems:
        logger.warning(
            f"Invalid schedule for {target_date:%A} treated as closed: {'; '.join(problems)}"
        )
        return []

    step = config.slot_granularity_minutes
    if step <= 0:
        logger.warning(f"Invalid slot granularity {step}, no slots generated")
        return []

    duration = service_duration_minutes if service_duration_minutes else step

    day_start = to_minutes(day.start)
    day_end = to_minutes(day.end)

    lunch = None
    if day.lunch_enabled:
        lunch = (to_minutes(day.lunch_start), to_minutes(day.lunch_end))

    busy = [
        (booking.start_minutes, booking.end_minutes)
        for booking in existing_bookings
        if booking.is_confirmed and booking.date == target_date
    ]

    local_now = business_now(config, now)
    if target_date < local_now.date():
        return []

    cutoff = None
    if local_now.date() == target_date:
        cutoff = local_now

    slots = []
    candidate = day_start
    while candidate < day_end:
        candidate_end = candidate + duration

        available = candidate_end <= day_end

        if available and lunch and _overlaps(candidate, candidate_end, *lunch):
            available = False

        if available and cutoff is not None:
            slot_start = datetime.combine(target_date, time()) + timedelta(minutes=candidate)
            if slot_start <= cutoff:
                available = False

        if available and any(_overlaps(candidate, candidate_end, b_start, b_end) for b_start, b_end in busy):
            available = False

        if available:
            slots.append(format_time(time(candidate // 60, candidate % 60)))

        candidate += step

    return slots
