# app/models/__init__.py
from .base import Base
from .business import Business, BusinessHours
from .availability import BlockedDate
from .service import Service
from .appointment import Appointment

__all__ = [
    "Base",
    "Business",
    "BusinessHours",
    "BlockedDate",
    "Service",
    "Appointment",
]
