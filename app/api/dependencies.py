# ============================================================================
# FILE: app/api/dependencies.py
# Shared route dependencies and error translation
# ============================================================================
from fastapi import Depends, HTTPException, Path
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from app.config.database import get_db
from app.core.exceptions import (
    BookingLockedError,
    ConfigurationError,
    SchedulingError,
    SlotConflictError,
)
from app.models.business import Business
from app.services.availability.availability_service import AvailabilityService

logger = logging.getLogger(__name__)


def get_business_or_404(
        business_id: UUID = Path(..., description="The business ID"),
        db: Session = Depends(get_db)
) -> Business:
    """
    Resolve the business named in the path.

    The caller identity is authenticated upstream; routes are scoped by
    business only.
    """
    try:
        return AvailabilityService.get_business(db, business_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


def to_http_exception(exc: Exception) -> HTTPException:
    """Map service-layer errors to HTTP responses"""
    if isinstance(exc, SlotConflictError):
        return HTTPException(
            status_code=409,
            detail={
                "error": "slot_conflict",
                "message": str(exc),
                "retryable": exc.retryable,
            },
        )
    if isinstance(exc, BookingLockedError):
        return HTTPException(
            status_code=409,
            detail={"error": "booking_locked", "message": str(exc)},
        )
    if isinstance(exc, ConfigurationError):
        return HTTPException(
            status_code=422,
            detail={"error": "invalid_schedule", "problems": exc.problems},
        )
    if isinstance(exc, LookupError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (SchedulingError, ValueError)):
        return HTTPException(status_code=422, detail=str(exc))

    logger.error(f"Unhandled error: {exc}")
    return HTTPException(status_code=500, detail="Internal error")
