# ============================================================================
# FILE: app/api/v1/dashboard/business.py
# Business registration and lookup
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from app.api.dependencies import get_business_or_404
from app.config.database import get_db
from app.config.settings import get_settings
from app.models.business import Business
from app.schemas.business import BusinessCreateRequest, BusinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses", tags=["dashboard-business"])


@router.post("", response_model=BusinessResponse, status_code=201)
async def create_business(
        request: BusinessCreateRequest,
        db: Session = Depends(get_db)
):
    """
    Register a business. Until a schedule is saved it opens every day
    with the default hours.
    """
    settings = get_settings()
    business = Business(
        name=request.name,
        phone_number=request.phone_number,
        timezone=request.timezone or settings.DEFAULT_TIMEZONE,
        slot_granularity_minutes=request.slot_granularity_minutes or settings.DEFAULT_SLOT_GRANULARITY_MINUTES,
    )

    db.add(business)
    try:
        db.commit()
        db.refresh(business)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating business: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create business: {str(e)}"
        )

    logger.info(f"Created business {business.id}")
    return business


@router.get("/{business_id}", response_model=BusinessResponse)
async def get_business(business: Business = Depends(get_business_or_404)):
    return business
