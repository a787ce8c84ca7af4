# app/schemas/appointment.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
import datetime as dt
from uuid import UUID

from app.core.exceptions import MalformedSlotToken
from app.services.availability.availability_normalizer import parse_slot_token


def _check_slot(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        hour, minute = parse_slot_token(v)
    except MalformedSlotToken as e:
        raise ValueError(str(e))
    return f"{hour}:{minute}"


class AppointmentCreateRequest(BaseModel):
    """Appointment booking request"""
    date: dt.date = Field(..., description="Appointment date, YYYY-MM-DD")
    time: str = Field(..., description="Slot start, HH:MM")
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_phone: Optional[str] = Field(None, max_length=30)
    service_id: Optional[UUID] = None
    notes: str = Field("", description="Additional notes")

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return _check_slot(v)


class AppointmentUpdateRequest(BaseModel):
    """Reschedule request - only send what changes"""
    date: Optional[dt.date] = None
    time: Optional[str] = None
    service_id: Optional[UUID] = None
    notes: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return _check_slot(v)


class AppointmentCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
