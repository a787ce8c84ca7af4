"""
API v1 router setup
Organized into: public and dashboard routes
"""
from fastapi import APIRouter

from app.api.v1.dashboard import appointments, business, schedule, services
from app.api.v1.public import availability

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES
# ============================================================================
api_v1_router.include_router(
    availability.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES (caller identity resolved upstream)
# ============================================================================
api_v1_router.include_router(
    business.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)
api_v1_router.include_router(
    services.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)
api_v1_router.include_router(
    schedule.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)
api_v1_router.include_router(
    appointments.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "sections": {
            "public": "Slot availability per business and day",
            "dashboard": "Business, services, weekly schedule, blocked dates and appointments"
        }
    }
