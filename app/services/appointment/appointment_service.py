# ============================================================================
# app/services/appointment/appointment_service.py
# ============================================================================
"""Service for booking, rescheduling, cancelling and completing appointments"""
from datetime import date, datetime
from typing import Optional
from uuid import UUID
import logging

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import BookingLockedError, SlotConflictError
from app.models.appointment import Appointment
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.availability import booking_window_policy
from app.services.availability.availability_normalizer import parse_slot_token
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.schedule_config import Booking, BookingStatus

logger = logging.getLogger(__name__)


def _aware_now(timezone: str, now: Optional[datetime]) -> datetime:
    tz = pytz.timezone(timezone)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return tz.localize(now)
    return now


class AppointmentService:
    """Handles appointment write operations"""

    @staticmethod
    def _commit_slot(db: Session, appointment: Appointment) -> Appointment:
        """Commit a confirmed slot; a lost race on the unique slot index becomes SlotConflictError"""
        slot = (appointment.business_id, appointment.appointment_date, appointment.appointment_time)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Concurrent booking for {slot[1]} {slot[2]}: {e.orig}")
            raise SlotConflictError(*slot)
        db.refresh(appointment)
        return appointment

    @staticmethod
    def create_appointment(
            db: Session,
            business_id: UUID,
            appointment_date: date,
            appointment_time: str,
            customer_name: str,
            customer_phone: Optional[str] = None,
            service_id: Optional[UUID] = None,
            notes: str = "",
            now: Optional[datetime] = None
    ) -> Appointment:
        """Create a confirmed appointment after re-checking the slot"""
        config = AvailabilityService.load_schedule_config(db, business_id)
        duration = AvailabilityService.resolve_service_duration(db, business_id, service_id, config)

        slot = AvailabilityService.ensure_slot_available(
            db, business_id, appointment_date, appointment_time,
            duration_minutes=duration,
            now=now,
        )

        appointment = Appointment(
            business_id=business_id,
            service_id=service_id,
            customer_name=customer_name,
            customer_phone=customer_phone,
            appointment_date=appointment_date,
            appointment_time=slot,
            duration_minutes=duration,
            status=BookingStatus.CONFIRMED.value,
            notes=notes,
        )

        db.add(appointment)
        appointment = AppointmentService._commit_slot(db, appointment)
        logger.info(f"Booked appointment {appointment.id} at {appointment_date} {slot} for business {business_id}")
        return appointment

    @staticmethod
    def update_appointment(
            db: Session,
            business_id: UUID,
            appointment_id: UUID,
            appointment_date: Optional[date] = None,
            appointment_time: Optional[str] = None,
            service_id: Optional[UUID] = None,
            notes: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Appointment:
        """Reschedule or change an appointment while it is still editable"""
        appointment = AppointmentQueryService.find_appointment(db, business_id, appointment_id)
        config = AvailabilityService.load_schedule_config(db, business_id)
        current = _aware_now(config.timezone, now)

        if not booking_window_policy.is_editable(
                Booking.from_appointment(appointment), current, config.timezone,
                get_settings().BOOKING_CHANGE_CUTOFF_MINUTES
        ):
            raise BookingLockedError(appointment_id, "edited")

        target_date = appointment_date or appointment.appointment_date
        target_time = appointment.appointment_time
        if appointment_time:
            hour, minute = parse_slot_token(appointment_time)
            target_time = f"{hour}:{minute}"
        target_service = service_id or appointment.service_id

        rescheduling = (
            target_date != appointment.appointment_date
            or target_time != appointment.appointment_time
            or target_service != appointment.service_id
        )

        if rescheduling:
            duration = AvailabilityService.resolve_service_duration(db, business_id, target_service, config)
            slot = AvailabilityService.ensure_slot_available(
                db, business_id, target_date, target_time,
                duration_minutes=duration,
                exclude_booking_id=appointment.id,
                now=current,
            )
            appointment.appointment_date = target_date
            appointment.appointment_time = slot
            appointment.service_id = target_service
            appointment.duration_minutes = duration

        if notes is not None:
            appointment.notes = notes

        appointment = AppointmentService._commit_slot(db, appointment)
        logger.info(f"Updated appointment {appointment.id} (rescheduled={rescheduling})")
        return appointment

    @staticmethod
    def cancel_appointment(
            db: Session,
            business_id: UUID,
            appointment_id: UUID,
            reason: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Appointment:
        appointment = AppointmentQueryService.find_appointment(db, business_id, appointment_id)
        business = AvailabilityService.get_business(db, business_id)
        current = _aware_now(business.timezone, now)

        if not booking_window_policy.is_cancellable(
                Booking.from_appointment(appointment), current, business.timezone,
                get_settings().BOOKING_CHANGE_CUTOFF_MINUTES
        ):
            raise BookingLockedError(appointment_id, "cancelled")

        appointment.status = BookingStatus.CANCELLED.value
        appointment.cancelled_at = current
        appointment.cancellation_reason = reason

        try:
            db.commit()
            db.refresh(appointment)
        except Exception as e:
            db.rollback()
            logger.error(f"Error cancelling appointment {appointment_id}: {e}")
            raise

        logger.info(f"Cancelled appointment {appointment_id}")
        return appointment

    @staticmethod
    def complete_appointment(
            db: Session,
            business_id: UUID,
            appointment_id: UUID,
            now: Optional[datetime] = None
    ) -> Appointment:
        """Mark a confirmed appointment as done"""
        appointment = AppointmentQueryService.find_appointment(db, business_id, appointment_id)
        if appointment.status != BookingStatus.CONFIRMED.value:
            raise BookingLockedError(appointment_id, "completed")

        business = AvailabilityService.get_business(db, business_id)
        appointment.status = BookingStatus.COMPLETED.value
        appointment.completed_at = _aware_now(business.timezone, now)

        try:
            db.commit()
            db.refresh(appointment)
        except Exception as e:
            db.rollback()
            logger.error(f"Error completing appointment {appointment_id}: {e}")
            raise

        return appointment
