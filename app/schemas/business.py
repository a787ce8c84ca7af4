"""
Pydantic schemas for Business and Service validation and serialization
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

import pytz


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class BusinessCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=20)
    timezone: Optional[str] = None
    slot_granularity_minutes: Optional[int] = Field(None, gt=0)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        if v is None:
            return v
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone {v!r}")
        return v


class ServiceCreate(BaseModel):
    """Request model for creating a service"""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, gt=0, description="Duration in minutes")
    display_order: int = Field(default=0)


# ============================================================================
# Response Schemas (for outgoing data)
# ============================================================================

class BusinessResponse(BaseModel):
    id: UUID
    name: str
    phone_number: Optional[str] = None
    timezone: str
    slot_granularity_minutes: int
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServiceResponse(BaseModel):
    id: UUID
    business_id: UUID
    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[int] = None
    formatted_duration: str
    is_active: bool
    display_order: int

    class Config:
        from_attributes = True
