# ============================================================================
# FILE: app/api/v1/public/availability.py
# Public slot query - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID
import logging

from app.api.dependencies import get_business_or_404, to_http_exception
from app.config.database import get_db
from app.core.exceptions import SchedulingError
from app.models.business import Business
from app.schemas.availability import AvailabilityResponseSchema
from app.services.availability.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses/{business_id}", tags=["public-availability"])


@router.get("/availability", response_model=AvailabilityResponseSchema)
async def get_availability(
        date: date = Query(..., description="Day to list slots for, YYYY-MM-DD"),
        service_id: Optional[UUID] = Query(None, description="Size slots for this service's duration"),
        exclude_booking_id: Optional[UUID] = Query(None, description="Booking being rescheduled"),
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    """
    Bookable slots for one day, as a flat list and grouped by hour.
    """
    try:
        availability = AvailabilityService.get_available_slots(
            db,
            business.id,
            date,
            service_id=service_id,
            exclude_booking_id=exclude_booking_id,
        )
    except (SchedulingError, LookupError, ValueError) as e:
        raise to_http_exception(e)

    return AvailabilityResponseSchema.from_domain(availability)
