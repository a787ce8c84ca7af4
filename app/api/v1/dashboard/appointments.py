
# ============================================================================
# FILE: app/api/v1/dashboard/appointments.py
# Appointment endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from app.api.dependencies import get_business_or_404, to_http_exception
from app.config.database import get_db
from app.core.exceptions import SchedulingError
from app.models.business import Business
from app.schemas.appointment import (
    AppointmentCancelRequest,
    AppointmentCreateRequest,
    AppointmentUpdateRequest,
)
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.appointment_service import AppointmentService

router = APIRouter(prefix="/businesses/{business_id}/appointments", tags=["dashboard-appointments"])

SERVICE_ERRORS = (SchedulingError, LookupError, ValueError)


@router.get("")
async def list_appointments(
        date: Optional[date] = Query(None, description="Only appointments on this day"),
        status: Optional[str] = Query(None, description="Filter by status (confirmed, completed, cancelled)"),
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    """
    Get appointments for the business, ordered by date and time.
    Each entry says whether it can still be edited or cancelled.
    """
    return AppointmentQueryService.list_appointments(
        db=db,
        business_id=business.id,
        timezone=business.timezone,
        target_date=date,
        status=status
    )


@router.post("", status_code=201)
async def create_appointment(
        request: AppointmentCreateRequest,
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    """
    Book a slot. The slot is re-checked right before saving; a slot taken
    in the meantime returns 409 and the client should refresh availability.
    """
    try:
        appointment = AppointmentService.create_appointment(
            db=db,
            business_id=business.id,
            appointment_date=request.date,
            appointment_time=request.time,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            service_id=request.service_id,
            notes=request.notes
        )
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

    return AppointmentQueryService.serialize_appointment(appointment, business.timezone)


@router.get("/{appointment_id}")
async def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    try:
        return AppointmentQueryService.get_appointment_by_id(
            db=db,
            business_id=business.id,
            appointment_id=appointment_id,
            timezone=business.timezone
        )
    except LookupError as e:
        raise to_http_exception(e)


@router.patch("/{appointment_id}")
async def update_appointment(
        request: AppointmentUpdateRequest,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    """Reschedule an appointment; locked within the change cutoff."""
    try:
        appointment = AppointmentService.update_appointment(
            db=db,
            business_id=business.id,
            appointment_id=appointment_id,
            appointment_date=request.date,
            appointment_time=request.time,
            service_id=request.service_id,
            notes=request.notes
        )
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

    return AppointmentQueryService.serialize_appointment(appointment, business.timezone)


@router.post("/{appointment_id}/cancel")
async def cancel_appointment(
        request: Optional[AppointmentCancelRequest] = None,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    """Cancel an appointment; locked within the change cutoff."""
    try:
        appointment = AppointmentService.cancel_appointment(
            db=db,
            business_id=business.id,
            appointment_id=appointment_id,
            reason=request.reason if request else None
        )
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

    return AppointmentQueryService.serialize_appointment(appointment, business.timezone)


@router.post("/{appointment_id}/complete")
async def complete_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    try:
        appointment = AppointmentService.complete_appointment(
            db=db,
            business_id=business.id,
            appointment_id=appointment_id
        )
    except SERVICE_ERRORS as e:
        raise to_http_exception(e)

    return AppointmentQueryService.serialize_appointment(appointment, business.timezone)
