# app/schemas/availability.py
from pydantic import BaseModel, Field
from typing import Dict, List

from app.services.availability.availability_normalizer import AvailabilityResponse


class AvailabilityResponseSchema(BaseModel):
    """Bookable slots for one day, as a flat list and grouped by hour"""
    horarios: List[str] = Field(default_factory=list, description="Ascending HH:MM slot starts")
    horas: List[str] = Field(default_factory=list, description="Hours that have at least one slot")
    minutos_por_hora: Dict[str, List[str]] = Field(default_factory=dict, description="Minutes offered per hour")

    @classmethod
    def from_domain(cls, availability: AvailabilityResponse) -> "AvailabilityResponseSchema":
        return cls(**availability.to_wire())
