# app/schemas/schedule.py
"""
Pydantic schemas for weekly schedule configuration
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, List
import datetime as dt

from app.core.exceptions import ConfigurationError
from app.services.availability.schedule_config import (
    DaySchedule,
    ScheduleConfig,
    Weekday,
    parse_time,
)


def _check_time(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        parse_time(value)
    except ConfigurationError as e:
        raise ValueError(str(e))
    return value


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class DayScheduleSchema(BaseModel):
    """Working hours for one weekday"""
    enabled: bool = True
    start: str = Field("09:00", description="Opening time, HH:MM")
    end: str = Field("19:00", description="Closing time, HH:MM")
    lunch_enabled: bool = False
    lunch_start: Optional[str] = Field(None, description="Lunch break start, HH:MM")
    lunch_end: Optional[str] = Field(None, description="Lunch break end, HH:MM")

    @field_validator("start", "end", "lunch_start", "lunch_end")
    @classmethod
    def validate_time(cls, v):
        return _check_time(v)

    def to_domain(self) -> DaySchedule:
        return DaySchedule.from_dict(self.model_dump())


class ScheduleConfigRequest(BaseModel):
    """
    Full schedule replacement. Weekdays left out of `weekly_schedule`
    open with the default hours.
    """
    weekly_schedule: Dict[str, DayScheduleSchema] = Field(default_factory=dict)
    slot_granularity_minutes: int = Field(30, description="Candidate slot spacing in minutes")
    blocked_dates: List[dt.date] = Field(default_factory=list)
    timezone: Optional[str] = None

    @field_validator("weekly_schedule")
    @classmethod
    def validate_weekday_keys(cls, v):
        for key in v.keys():
            try:
                Weekday.from_key(key)
            except ConfigurationError as e:
                raise ValueError(str(e))
        return v

    def to_domain(
            self,
            default_timezone: str,
            fallback_start: str,
            fallback_end: str
    ) -> ScheduleConfig:
        return ScheduleConfig.from_weekly_mapping(
            {key: day.to_domain() for key, day in self.weekly_schedule.items()},
            slot_granularity_minutes=self.slot_granularity_minutes,
            blocked_dates=self.blocked_dates,
            timezone=self.timezone or default_timezone,
            fallback_start=fallback_start,
            fallback_end=fallback_end,
        )


class BlockedDateRequest(BaseModel):
    date: dt.date
    reason: Optional[str] = Field(None, max_length=200)


# ============================================================================
# Response Schemas (for outgoing data)
# ============================================================================

class ScheduleConfigResponse(BaseModel):
    business_id: str
    weekly_schedule: Dict[str, DayScheduleSchema]
    slot_granularity_minutes: int
    blocked_dates: List[dt.date]
    timezone: str

    @classmethod
    def from_domain(cls, business_id, config: ScheduleConfig) -> "ScheduleConfigResponse":
        return cls(
            business_id=str(business_id),
            weekly_schedule={
                key: DayScheduleSchema(**value)
                for key, value in config.to_weekly_mapping().items()
            },
            slot_granularity_minutes=config.slot_granularity_minutes,
            blocked_dates=sorted(config.blocked_dates),
            timezone=config.timezone,
        )


class BlockedDateResponse(BaseModel):
    date: dt.date
    reason: Optional[str] = None

    class Config:
        from_attributes = True
