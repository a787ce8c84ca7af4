"""Health checks"""
from datetime import datetime

import pytz
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import get_settings

health_router = APIRouter()


@health_router.get("")
async def health_check():
    return {"status": "healthy", "service": "barbershop-availability"}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Database reachability plus the scheduling defaults the slot
    generator falls back to.
    """
    settings = get_settings()
    checks = {"database": "unknown", "default_timezone": "unknown"}

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {e}"

    try:
        local_now = datetime.now(pytz.timezone(settings.DEFAULT_TIMEZONE))
        checks["default_timezone"] = "healthy"
    except pytz.UnknownTimeZoneError:
        local_now = None
        checks["default_timezone"] = f"unknown timezone {settings.DEFAULT_TIMEZONE!r}"

    healthy = all(value == "healthy" for value in checks.values())
    return {
        **checks,
        "overall": "healthy" if healthy else "degraded",
        "business_local_time": local_now.isoformat() if local_now else None,
        "booking_change_cutoff_minutes": settings.BOOKING_CHANGE_CUTOFF_MINUTES,
    }
