# ============================================================================
# FILE: app/services/appointment/appointment_query_service.py
# Pure read logic - no FastAPI dependencies, fully testable
# ============================================================================
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import Optional, Dict, Any
from uuid import UUID
import pytz

from app.config.settings import get_settings
from app.models.appointment import Appointment
from app.services.availability import booking_window_policy
from app.services.availability.schedule_config import Booking


class AppointmentQueryService:
    """Read-side appointment logic."""

    @staticmethod
    def find_appointment(
            db: Session,
            business_id: UUID,
            appointment_id: UUID
    ) -> Appointment:
        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.business_id == business_id
        ).first()

        if not appointment:
            raise LookupError(f"Appointment {appointment_id} not found")
        return appointment

    @staticmethod
    def list_appointments(
            db: Session,
            business_id: UUID,
            timezone: str,
            target_date: Optional[date] = None,
            status: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """List appointments ordered by date and time, optionally for one day."""
        query = db.query(Appointment).filter(Appointment.business_id == business_id)

        if target_date:
            query = query.filter(Appointment.appointment_date == target_date)
        if status:
            query = query.filter(Appointment.status == status)

        appointments = query.order_by(
            Appointment.appointment_date.asc(),
            Appointment.appointment_time.asc()
        ).all()

        return {
            "business_id": str(business_id),
            "filters": {
                "date": target_date.isoformat() if target_date else None,
                "status": status
            },
            "total_appointments": len(appointments),
            "appointments": [
                AppointmentQueryService.serialize_appointment(appt, timezone, now)
                for appt in appointments
            ]
        }

    @staticmethod
    def get_appointment_by_id(
            db: Session,
            business_id: UUID,
            appointment_id: UUID,
            timezone: str,
            now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        appointment = AppointmentQueryService.find_appointment(db, business_id, appointment_id)
        return AppointmentQueryService.serialize_appointment(appointment, timezone, now)

    @staticmethod
    def serialize_appointment(
            appt: Appointment,
            timezone: str,
            now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Helper to serialize an appointment; edit/cancel flags are computed per call."""
        settings = get_settings()
        booking = Booking.from_appointment(appt)
        reference = now or datetime.now(pytz.timezone(timezone))

        return {
            "id": str(appt.id),
            "business_id": str(appt.business_id),
            "service_id": str(appt.service_id) if appt.service_id else None,
            "customer_name": appt.customer_name,
            "customer_phone": appt.customer_phone,
            "date": appt.appointment_date.isoformat(),
            "time": appt.appointment_time,
            "duration_minutes": appt.duration_minutes,
            "status": appt.status,
            "notes": appt.notes,
            "can_edit": booking_window_policy.is_editable(
                booking, reference, timezone, settings.BOOKING_CHANGE_CUTOFF_MINUTES
            ),
            "can_cancel": booking_window_policy.is_cancellable(
                booking, reference, timezone, settings.BOOKING_CHANGE_CUTOFF_MINUTES
            ),
            "cancelled_at": appt.cancelled_at.isoformat() if appt.cancelled_at else None,
            "cancellation_reason": appt.cancellation_reason,
            "completed_at": appt.completed_at.isoformat() if appt.completed_at else None,
        }
