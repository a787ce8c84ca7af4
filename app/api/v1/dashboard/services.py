# ============================================================================
# FILE: app/api/v1/dashboard/services.py
# Service catalog - durations drive the slot length
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from app.api.dependencies import get_business_or_404
from app.config.database import get_db
from app.models.business import Business
from app.models.service import Service
from app.schemas.business import ServiceCreate, ServiceResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/businesses/{business_id}/services", tags=["dashboard-services"])


@router.get("", response_model=List[ServiceResponse])
async def list_services(
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    return db.query(Service).filter(
        Service.business_id == business.id,
        Service.is_active == True
    ).order_by(Service.display_order, Service.name).all()


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(
        service_data: ServiceCreate,
        business: Business = Depends(get_business_or_404),
        db: Session = Depends(get_db)
):
    service = Service(
        business_id=business.id,
        name=service_data.name,
        description=service_data.description,
        price=service_data.price,
        duration=service_data.duration,
        display_order=service_data.display_order,
        is_active=True
    )

    db.add(service)
    try:
        db.commit()
        db.refresh(service)
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating service: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to create service: {str(e)}")

    logger.info(f"Created service {service.id} for business {business.id}")
    return service
