# app/schemas/__init__.py
from .availability import AvailabilityResponseSchema

from .schedule import (
    DayScheduleSchema,
    ScheduleConfigRequest,
    ScheduleConfigResponse,
    BlockedDateRequest,
    BlockedDateResponse
)

from .appointment import (
    AppointmentCreateRequest,
    AppointmentUpdateRequest,
    AppointmentCancelRequest
)

from .business import (
    BusinessCreateRequest,
    BusinessResponse,
    ServiceCreate,
    ServiceResponse
)

__all__ = [
    "AvailabilityResponseSchema",
    "DayScheduleSchema",
    "ScheduleConfigRequest",
    "ScheduleConfigResponse",
    "BlockedDateRequest",
    "BlockedDateResponse",
    "AppointmentCreateRequest",
    "AppointmentUpdateRequest",
    "AppointmentCancelRequest",
    "BusinessCreateRequest",
    "BusinessResponse",
    "ServiceCreate",
    "ServiceResponse",
]
