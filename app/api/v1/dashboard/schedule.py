# ============================================================================
# FILE: app/api/v1/dashboard/schedule.py
# Weekly hours and blocked dates - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import List
import logging

from app.api.dependencies import get_business_or_404, to_http_exception
from app.config.database import get_db
from app.config.settings import get_settings
from app.core.exceptions import ConfigurationError
from app.models.business import Business
from app.schemas.schedule import (
    BlockedDateRequest,
    BlockedDateResponse,
    ScheduleConfigRequest,
    ScheduleConfigResponse,
)
from app.services.availability.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses/{business_id}", tags=["dashboard-schedule"])


# ============================================================================
# Weekly schedule
# ============================================================================

@router.get("/schedule", response_model=ScheduleConfigResponse)
async def get_schedule(
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    """Current weekly hours, slot spacing, timezone and blocked dates."""
    config = AvailabilityService.load_schedule_config(db, business.id)
    return ScheduleConfigResponse.from_domain(business.id, config)


@router.put("/schedule", response_model=ScheduleConfigResponse)
async def update_schedule(
        request: ScheduleConfigRequest,
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    """
    Replace the weekly schedule.

    Invalid hours (start after end, lunch outside working hours, ...) are
    rejected with 422 and nothing is saved.
    """
    settings = get_settings()
    try:
        config = request.to_domain(
            default_timezone=business.timezone or settings.DEFAULT_TIMEZONE,
            fallback_start=settings.DEFAULT_OPEN_TIME,
            fallback_end=settings.DEFAULT_CLOSE_TIME,
        )
        saved = AvailabilityService.save_schedule_config(db, business.id, config)
    except ConfigurationError as e:
        logger.info(f"Rejected schedule for business {business.id}: {e}")
        raise to_http_exception(e)

    return ScheduleConfigResponse.from_domain(business.id, saved)


# ============================================================================
# Blocked dates
# ============================================================================

@router.get("/blocked-dates", response_model=List[BlockedDateResponse])
async def list_blocked_dates(
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    return AvailabilityService.list_blocked_dates(db, business.id)


@router.post("/blocked-dates", response_model=BlockedDateResponse, status_code=201)
async def add_blocked_date(
        request: BlockedDateRequest,
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    """Close the business for a whole day (holiday, vacation)."""
    return AvailabilityService.add_blocked_date(db, business.id, request.date, request.reason)


@router.delete("/blocked-dates/{blocked_date}")
async def remove_blocked_date(
        blocked_date: date = Path(..., description="Date to reopen, YYYY-MM-DD"),
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    if not AvailabilityService.remove_blocked_date(db, business.id, blocked_date):
        raise HTTPException(
            status_code=404,
            detail=f"{blocked_date.isoformat()} is not blocked"
        )
    return {"success": True, "date": blocked_date.isoformat()}
