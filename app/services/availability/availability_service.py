# ===== app/services/availability/availability_service.py =====
"""
Availability orchestration.

Reads a business's stored schedule, blocked dates and confirmed bookings,
and runs the slot generator against them. Also validates and persists
schedule changes, and re-checks a slot right before a booking is written.
"""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import ConfigurationError, SlotConflictError
from app.models.appointment import Appointment
from app.models.availability import BlockedDate
from app.models.business import Business, BusinessHours
from app.models.service import Service
from app.services.availability import slot_generator
from app.services.availability.availability_normalizer import (
    AvailabilityResponse,
    build_from_slots,
    parse_slot_token,
)
from app.services.availability.schedule_config import (
    Booking,
    BookingStatus,
    DaySchedule,
    ScheduleConfig,
    Weekday,
    format_time,
    parse_time,
)

logger = logging.getLogger(__name__)


def validate_schedule_config(config: ScheduleConfig) -> ScheduleConfig:
    """Raise ConfigurationError listing every problem; return the config unchanged otherwise"""
    problems = config.problems()
    if problems:
        raise ConfigurationError(
            "Invalid schedule configuration: " + "; ".join(problems),
            problems=problems,
        )
    return config


class AvailabilityService:
    """Availability and schedule operations for one business at a time"""

    # ------------------------------------------------------------------
    # Collaborator reads
    # ------------------------------------------------------------------

    @staticmethod
    def get_business(db: Session, business_id: UUID) -> Business:
        business = db.query(Business).filter(
            Business.id == business_id,
            Business.is_active == True
        ).first()
        if not business:
            raise LookupError(f"Business {business_id} not found")
        return business

    @staticmethod
    def load_schedule_config(db: Session, business_id: UUID) -> ScheduleConfig:
        """Build the ScheduleConfig from stored hours and blocked dates"""
        settings = get_settings()
        business = AvailabilityService.get_business(db, business_id)

        rows = {row.day_of_week: row for row in business.hours}
        fallback = DaySchedule(
            enabled=True,
            start=parse_time(settings.DEFAULT_OPEN_TIME),
            end=parse_time(settings.DEFAULT_CLOSE_TIME),
        )

        days = []
        for weekday in Weekday:
            row = rows.get(int(weekday))
            if row is None:
                days.append(fallback)
                continue
            days.append(DaySchedule(
                enabled=not row.is_closed,
                start=parse_time(row.open_time),
                end=parse_time(row.close_time),
                lunch_enabled=bool(row.lunch_enabled),
                lunch_start=parse_time(row.lunch_start) if row.lunch_start else None,
                lunch_end=parse_time(row.lunch_end) if row.lunch_end else None,
            ))

        return ScheduleConfig(
            days=tuple(days),
            slot_granularity_minutes=business.slot_granularity_minutes or settings.DEFAULT_SLOT_GRANULARITY_MINUTES,
            blocked_dates=frozenset(blocked.date for blocked in business.blocked_dates),
            timezone=business.timezone or settings.DEFAULT_TIMEZONE,
        )

    @staticmethod
    def get_confirmed_bookings(
            db: Session,
            business_id: UUID,
            target_date: date,
            exclude_booking_id: Optional[UUID] = None
    ) -> List[Booking]:
        query = db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.appointment_date == target_date,
            Appointment.status == BookingStatus.CONFIRMED.value
        )
        if exclude_booking_id:
            query = query.filter(Appointment.id != exclude_booking_id)

        return [Booking.from_appointment(appt) for appt in query.all()]

    @staticmethod
    def resolve_service_duration(
            db: Session,
            business_id: UUID,
            service_id: Optional[UUID],
            config: ScheduleConfig
    ) -> int:
        """Service length in minutes, the slot granularity when unknown"""
        if not service_id:
            return config.slot_granularity_minutes

        service = db.query(Service).filter(
            Service.id == service_id,
            Service.business_id == business_id,
            Service.is_active == True
        ).first()
        if not service:
            raise LookupError(f"Service {service_id} not found")

        return service.duration or config.slot_granularity_minutes

    # ------------------------------------------------------------------
    # Slot queries
    # ------------------------------------------------------------------

    @staticmethod
    def generate_slots(
            db: Session,
            business_id: UUID,
            target_date: date,
            service_id: Optional[UUID] = None,
            exclude_booking_id: Optional[UUID] = None,
            duration_minutes: Optional[int] = None,
            now: Optional[datetime] = None
    ) -> List[str]:
        config = validate_schedule_config(
            AvailabilityService.load_schedule_config(db, business_id)
        )
        if duration_minutes is None:
            duration_minutes = AvailabilityService.resolve_service_duration(
                db, business_id, service_id, config
            )
        bookings = AvailabilityService.get_confirmed_bookings(
            db, business_id, target_date, exclude_booking_id
        )

        return slot_generator.generate(
            target_date,
            config,
            existing_bookings=bookings,
            service_duration_minutes=duration_minutes,
            now=now,
        )

    @staticmethod
    def get_available_slots(
            db: Session,
            business_id: UUID,
            target_date: date,
            service_id: Optional[UUID] = None,
            exclude_booking_id: Optional[UUID] = None,
            now: Optional[datetime] = None
    ) -> AvailabilityResponse:
        """Bookable slots for one day in canonical form"""
        slots = AvailabilityService.generate_slots(
            db, business_id, target_date,
            service_id=service_id,
            exclude_booking_id=exclude_booking_id,
            now=now,
        )
        logger.info(f"Generated {len(slots)} slots for business {business_id} on {target_date}")
        return build_from_slots(slots)

    @staticmethod
    def ensure_slot_available(
            db: Session,
            business_id: UUID,
            target_date: date,
            slot_time: str,
            duration_minutes: Optional[int] = None,
            service_id: Optional[UUID] = None,
            exclude_booking_id: Optional[UUID] = None,
            now: Optional[datetime] = None
    ) -> str:
        """
        Re-run slot generation right before a write.

        Returns the normalized "HH:MM" slot, raises SlotConflictError when
        it is no longer offered.
        """
        hour, minute = parse_slot_token(slot_time)
        normalized = f"{hour}:{minute}"

        slots = AvailabilityService.generate_slots(
            db, business_id, target_date,
            service_id=service_id,
            exclude_booking_id=exclude_booking_id,
            duration_minutes=duration_minutes,
            now=now,
        )
        if normalized not in slots:
            logger.warning(f"Slot {target_date} {normalized} unavailable for business {business_id}")
            raise SlotConflictError(business_id, target_date, normalized)

        return normalized

    # ------------------------------------------------------------------
    # Configuration writes
    # ------------------------------------------------------------------

    @staticmethod
    def save_schedule_config(
            db: Session,
            business_id: UUID,
            config: ScheduleConfig
    ) -> ScheduleConfig:
        """Validate, then replace the stored weekly hours and blocked dates"""
        validate_schedule_config(config)
        business = AvailabilityService.get_business(db, business_id)

        rows = {row.day_of_week: row for row in business.hours}
        for weekday in Weekday:
            day = config.day_for(weekday)
            row = rows.get(int(weekday))
            if row is None:
                row = BusinessHours(business_id=business.id, day_of_week=int(weekday))
                business.hours.append(row)

            row.is_closed = not day.enabled
            row.open_time = format_time(day.start)
            row.close_time = format_time(day.end)
            row.lunch_enabled = day.lunch_enabled
            row.lunch_start = format_time(day.lunch_start) if day.lunch_start else None
            row.lunch_end = format_time(day.lunch_end) if day.lunch_end else None

        business.slot_granularity_minutes = config.slot_granularity_minutes
        business.timezone = config.timezone

        existing = {blocked.date: blocked for blocked in business.blocked_dates}
        for blocked_date, blocked in existing.items():
            if blocked_date not in config.blocked_dates:
                business.blocked_dates.remove(blocked)
        for blocked_date in sorted(config.blocked_dates - set(existing)):
            business.blocked_dates.append(BlockedDate(business_id=business.id, date=blocked_date))

        try:
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error saving schedule for business {business_id}: {e}")
            raise

        logger.info(f"Saved schedule for business {business_id}")
        return AvailabilityService.load_schedule_config(db, business_id)

    @staticmethod
    def list_blocked_dates(db: Session, business_id: UUID) -> List[BlockedDate]:
        AvailabilityService.get_business(db, business_id)
        return db.query(BlockedDate).filter(
            BlockedDate.business_id == business_id
        ).order_by(BlockedDate.date.asc()).all()

    @staticmethod
    def _find_blocked_date(db: Session, business_id: UUID, blocked_date: date) -> Optional[BlockedDate]:
        return db.query(BlockedDate).filter(
            BlockedDate.business_id == business_id,
            BlockedDate.date == blocked_date
        ).first()

    @staticmethod
    def add_blocked_date(
            db: Session,
            business_id: UUID,
            blocked_date: date,
            reason: Optional[str] = None
    ) -> BlockedDate:
        """Block a date; adding an already blocked date updates its reason"""
        AvailabilityService.get_business(db, business_id)

        blocked = AvailabilityService._find_blocked_date(db, business_id, blocked_date)
        if blocked:
            blocked.reason = reason or blocked.reason
        else:
            blocked = BlockedDate(business_id=business_id, date=blocked_date, reason=reason)
            db.add(blocked)

        try:
            db.commit()
            db.refresh(blocked)
        except IntegrityError:
            # Blocked concurrently; keep the stored row
            db.rollback()
            logger.info(f"{blocked_date} already blocked for business {business_id}")
            blocked = AvailabilityService._find_blocked_date(db, business_id, blocked_date)
            if blocked is None:
                raise
            if reason:
                blocked.reason = reason
                db.commit()
                db.refresh(blocked)
        except Exception as e:
            db.rollback()
            logger.error(f"Error blocking {blocked_date} for business {business_id}: {e}")
            raise

        return blocked

    @staticmethod
    def remove_blocked_date(db: Session, business_id: UUID, blocked_date: date) -> bool:
        AvailabilityService.get_business(db, business_id)

        try:
            deleted = db.query(BlockedDate).filter(
                BlockedDate.business_id == business_id,
                BlockedDate.date == blocked_date
            ).delete()
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error unblocking {blocked_date} for business {business_id}: {e}")
            raise

        return deleted > 0
