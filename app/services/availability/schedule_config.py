# ===== app/services/availability/schedule_config.py =====
"""
Value types for a business's working-hour rules.

Pure domain code - no database or FastAPI dependencies.
"""
import re
from dataclasses import dataclass, field, replace
from datetime import date, time
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

import pytz

from app.core.exceptions import ConfigurationError

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{1,2})\s*$")


class Weekday(IntEnum):
    """Closed set of weekdays, values match date.weekday()"""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def key(self) -> str:
        return self.name.lower()

    @classmethod
    def from_key(cls, key: str) -> "Weekday":
        try:
            return cls[str(key).strip().upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown weekday key: {key!r}")

    @classmethod
    def of(cls, target_date: date) -> "Weekday":
        return cls(target_date.weekday())


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def parse_time(value: Union[str, time]) -> time:
    """Parse "H:M" / "HH:MM" into a time, raising ConfigurationError"""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)

    match = _TIME_RE.match(str(value)) if value is not None else None
    if not match:
        raise ConfigurationError(f"Invalid time {value!r}, expected HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ConfigurationError(f"Invalid time {value!r}, expected HH:MM")
    return time(hour, minute)


def format_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def to_minutes(value: time) -> int:
    """Minutes since midnight"""
    return value.hour * 60 + value.minute


def _optional_time(value) -> Optional[time]:
    if value is None or value == "":
        return None
    return parse_time(value)


_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off", ""}


def _as_flag(value, name: str) -> bool:
    """Read a boolean flag, accepting "true"/"false" style strings"""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ConfigurationError(f"Invalid value for {name}: {value!r}, expected true or false")


@dataclass(frozen=True)
class DaySchedule:
    """Working window for one weekday, with an optional lunch break"""
    enabled: bool
    start: time
    end: time
    lunch_enabled: bool = False
    lunch_start: Optional[time] = None
    lunch_end: Optional[time] = None

    @classmethod
    def closed(cls, start: time = time(9, 0), end: time = time(19, 0)) -> "DaySchedule":
        return cls(enabled=False, start=start, end=end)

    @classmethod
    def from_dict(cls, data: Mapping) -> "DaySchedule":
        """Build from the wire shape (camelCase or snake_case keys)"""
        def pick(*names, default=None):
            for name in names:
                if name in data and data[name] is not None:
                    return data[name]
            return default

        return cls(
            enabled=_as_flag(pick("enabled", default=True), "enabled"),
            start=parse_time(pick("start", default="09:00")),
            end=parse_time(pick("end", default="19:00")),
            lunch_enabled=_as_flag(pick("lunch_enabled", "lunchEnabled", default=False), "lunch_enabled"),
            lunch_start=_optional_time(pick("lunch_start", "lunchStart")),
            lunch_end=_optional_time(pick("lunch_end", "lunchEnd")),
        )

    def to_dict(self) -> Dict:
        return {
            "enabled": self.enabled,
            "start": format_time(self.start),
            "end": format_time(self.end),
            "lunch_enabled": self.lunch_enabled,
            "lunch_start": format_time(self.lunch_start) if self.lunch_start else None,
            "lunch_end": format_time(self.lunch_end) if self.lunch_end else None,
        }

    def problems(self) -> List[str]:
        """Invariant violations, empty for a usable day"""
        if not self.enabled:
            return []

        problems = []
        if self.start >= self.end:
            problems.append(
                f"start {format_time(self.start)} must be before end {format_time(self.end)}"
            )

        if self.lunch_enabled:
            if self.lunch_start is None or self.lunch_end is None:
                problems.append("lunch break enabled without lunch_start and lunch_end")
            else:
                if self.lunch_start >= self.lunch_end:
                    problems.append(
                        f"lunch_start {format_time(self.lunch_start)} must be before "
                        f"lunch_end {format_time(self.lunch_end)}"
                    )
                if self.lunch_start < self.start or self.lunch_end > self.end:
                    problems.append(
                        f"lunch break {format_time(self.lunch_start)}-{format_time(self.lunch_end)} "
                        f"outside working hours {format_time(self.start)}-{format_time(self.end)}"
                    )
        return problems

    def is_valid(self) -> bool:
        return not self.problems()


@dataclass(frozen=True)
class ScheduleConfig:
    """
    Weekly working-hour rules for one business.

    `days` is indexed by Weekday, so there is always exactly one
    DaySchedule per weekday.
    """
    days: Tuple[DaySchedule, ...]
    slot_granularity_minutes: int = 30
    blocked_dates: FrozenSet[date] = field(default_factory=frozenset)
    timezone: str = "UTC"

    def __post_init__(self):
        if len(self.days) != len(Weekday):
            raise ConfigurationError(
                f"Schedule needs {len(Weekday)} weekdays, got {len(self.days)}"
            )
        object.__setattr__(self, "days", tuple(self.days))
        object.__setattr__(self, "blocked_dates", frozenset(self.blocked_dates))

    def day_for(self, when: Union[Weekday, date]) -> DaySchedule:
        if isinstance(when, date):
            when = Weekday.of(when)
        return self.days[int(when)]

    def is_blocked(self, target_date: date) -> bool:
        return target_date in self.blocked_dates

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    def with_blocked_dates(self, blocked_dates: Iterable[date]) -> "ScheduleConfig":
        return replace(self, blocked_dates=frozenset(blocked_dates))

    def problems(self) -> List[str]:
        problems = []
        for weekday in Weekday:
            for problem in self.days[weekday].problems():
                problems.append(f"{weekday.key}: {problem}")

        if not isinstance(self.slot_granularity_minutes, int) or self.slot_granularity_minutes <= 0:
            problems.append(
                f"slot_granularity_minutes must be a positive integer, got {self.slot_granularity_minutes!r}"
            )

        try:
            pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError:
            problems.append(f"unknown timezone {self.timezone!r}")

        return problems

    def to_weekly_mapping(self) -> Dict[str, Dict]:
        return {weekday.key: self.days[weekday].to_dict() for weekday in Weekday}

    @classmethod
    def from_weekly_mapping(
            cls,
            mapping: Optional[Mapping[str, Union[DaySchedule, Mapping]]],
            slot_granularity_minutes: int = 30,
            blocked_dates: Iterable[date] = (),
            timezone: str = "UTC",
            fallback_start: str = "09:00",
            fallback_end: str = "19:00",
    ) -> "ScheduleConfig":
        """
        Build from {"monday": {...}, ...} in any key order.

        Weekdays missing from the mapping open with the fallback hours and
        no lunch break.
        """
        fallback = DaySchedule(
            enabled=True,
            start=parse_time(fallback_start),
            end=parse_time(fallback_end),
        )

        days: List[DaySchedule] = [fallback] * len(Weekday)
        for key, value in (mapping or {}).items():
            weekday = Weekday.from_key(key)
            if isinstance(value, DaySchedule):
                days[weekday] = value
            else:
                days[weekday] = DaySchedule.from_dict(value or {})

        return cls(
            days=tuple(days),
            slot_granularity_minutes=slot_granularity_minutes,
            blocked_dates=frozenset(blocked_dates),
            timezone=timezone,
        )

    @classmethod
    def from_legacy(
            cls,
            start: str,
            end: str,
            slot_granularity_minutes: int = 30,
            blocked_dates: Iterable[date] = (),
            timezone: str = "UTC",
    ) -> "ScheduleConfig":
        """Flat opening/closing hours applied to every weekday"""
        return cls.from_weekly_mapping(
            None,
            slot_granularity_minutes=slot_granularity_minutes,
            blocked_dates=blocked_dates,
            timezone=timezone,
            fallback_start=start,
            fallback_end=end,
        )


@dataclass(frozen=True)
class Booking:
    """Read-only view of a stored appointment used by the engine"""
    id: object
    date: date
    time: time
    duration_minutes: int
    status: BookingStatus = BookingStatus.CONFIRMED

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @classmethod
    def from_appointment(cls, appointment) -> "Booking":
        return cls(
            id=appointment.id,
            date=appointment.appointment_date,
            time=parse_time(appointment.appointment_time),
            duration_minutes=appointment.duration_minutes or 0,
            status=BookingStatus(appointment.status),
        )
