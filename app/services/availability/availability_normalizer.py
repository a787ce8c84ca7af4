# ===== app/services/availability/availability_normalizer.py =====
"""
Availability payload normalization.

Availability travels in two shapes: a flat list of "HH:MM" strings
("horarios") or an hour -> minutes map ("minutos_por_hora", with an
optional "horas" index). normalize() turns either one into a single
AvailabilityResponse whose three views always agree.

Every token is zero-padded to two digits, so plain string comparison
sorts times correctly. Keep that true if the representation changes.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from app.core.exceptions import MalformedSlotToken

logger = logging.getLogger(__name__)

SLOTS_KEYS = ("horarios", "slots")
HOURS_KEYS = ("horas", "hoursIndex", "hours_index")
MINUTES_KEYS = ("minutos_por_hora", "minutosPorHora", "minutesByHour", "minutes_by_hour")


@dataclass(frozen=True)
class AvailabilityResponse:
    """Canonical availability for one day"""
    slots: Tuple[str, ...] = ()
    hours_index: Tuple[str, ...] = ()
    minutes_by_hour: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "AvailabilityResponse":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.slots

    def to_wire(self) -> Dict[str, Any]:
        return {
            "horarios": list(self.slots),
            "horas": list(self.hours_index),
            "minutos_por_hora": {
                hour: list(minutes) for hour, minutes in self.minutes_by_hour.items()
            },
        }

    def as_raw_input(self) -> Dict[str, Any]:
        return self.to_wire()


def _pad2(value: Any, upper: int) -> str:
    text = str(value).strip()
    # isdigit alone also accepts superscripts and other non-ASCII digits
    if not (text.isascii() and text.isdigit()):
        raise MalformedSlotToken(value)
    number = int(text)
    if number > upper:
        raise MalformedSlotToken(value)
    return f"{number:02d}"


def _pad_hour(value: Any) -> str:
    return _pad2(value, 23)


def _pad_minute(value: Any) -> str:
    return _pad2(value, 59)


def parse_slot_token(token: Any) -> Tuple[str, str]:
    """
    Split a "H:M" token into zero-padded (hour, minute), or raise MalformedSlotToken.

    A trailing seconds part ("09:00:00") is accepted and ignored.
    """
    if token is None or isinstance(token, bool):
        raise MalformedSlotToken(token)

    parts = str(token).strip().split(":")
    if len(parts) not in (2, 3) or not all(part.strip() for part in parts):
        raise MalformedSlotToken(token)

    try:
        if len(parts) == 3:
            _pad_minute(parts[2])
        return _pad_hour(parts[0]), _pad_minute(parts[1])
    except MalformedSlotToken:
        raise MalformedSlotToken(token)


def join_slot(hour: Any, minute: Any) -> str:
    """Join an hour and minute picker value into "HH:MM", "" if either is missing"""
    if hour in (None, "") or minute in (None, ""):
        return ""
    try:
        return f"{_pad_hour(hour)}:{_pad_minute(minute)}"
    except MalformedSlotToken:
        return ""


def split_slot(slot: Any) -> Tuple[str, str]:
    """Split "H:M" into zero-padded parts; a missing or bad part comes back as ""."""
    parts = str(slot or "").split(":")
    hour = parts[0].strip() if parts else ""
    minute = parts[1].strip() if len(parts) > 1 else ""

    def safe(value, pad):
        if not value:
            return ""
        try:
            return pad(value)
        except MalformedSlotToken:
            return ""

    return safe(hour, _pad_hour), safe(minute, _pad_minute)


def _first(raw: Mapping, keys: Iterable[str]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def normalize_slots(slots: Iterable[Any]) -> List[str]:
    """Normalize, de-duplicate and sort a flat slot list, dropping malformed tokens"""
    normalized = set()
    for token in slots:
        try:
            hour, minute = parse_slot_token(token)
        except MalformedSlotToken as e:
            logger.debug(f"Dropping slot token: {e}")
            continue
        normalized.add(f"{hour}:{minute}")
    return sorted(normalized)


def _build(minutes_by_hour: Dict[str, Iterable[str]], hours_index: Iterable[str]) -> AvailabilityResponse:
    hours = tuple(hours_index)
    minutes = {hour: tuple(minutes_by_hour[hour]) for hour in hours}
    slots = tuple(f"{hour}:{minute}" for hour in hours for minute in minutes[hour])
    return AvailabilityResponse(slots=slots, hours_index=hours, minutes_by_hour=minutes)


def build_from_slots(slots: Iterable[Any]) -> AvailabilityResponse:
    """Group a flat slot list by hour"""
    grouped: Dict[str, set] = {}
    for slot in normalize_slots(slots):
        hour, minute = slot.split(":")
        grouped.setdefault(hour, set()).add(minute)

    hours = sorted(grouped)
    return _build({hour: sorted(grouped[hour]) for hour in hours}, hours)


def _normalize_minutes_map(raw_map: Mapping) -> Dict[str, List[str]]:
    result: Dict[str, set] = {}
    for raw_hour, raw_minutes in raw_map.items():
        if not isinstance(raw_minutes, (list, tuple)):
            continue
        try:
            hour = _pad_hour(raw_hour)
        except MalformedSlotToken as e:
            logger.debug(f"Dropping hour key: {e}")
            continue

        for raw_minute in raw_minutes:
            try:
                result.setdefault(hour, set()).add(_pad_minute(raw_minute))
            except MalformedSlotToken as e:
                logger.debug(f"Dropping minute under hour {hour}: {e}")

    return {hour: sorted(minutes) for hour, minutes in result.items() if minutes}


def normalize(raw: Optional[Mapping]) -> AvailabilityResponse:
    """
    Reconcile a raw availability payload into an AvailabilityResponse.

    - Only a flat list: minutes_by_hour is derived from it.
    - A minutes map (optionally with an hour index): the map is the
      source of truth and the flat list is rebuilt from it.

    Never raises on bad input; malformed fragments are dropped.
    """
    if not isinstance(raw, Mapping):
        return AvailabilityResponse.empty()

    raw_slots = _as_list(_first(raw, SLOTS_KEYS))
    raw_hours = _as_list(_first(raw, HOURS_KEYS))
    raw_map = _first(raw, MINUTES_KEYS)

    if not isinstance(raw_map, Mapping) or not raw_map:
        return build_from_slots(raw_slots)

    minutes_by_hour = _normalize_minutes_map(raw_map)

    candidates = set()
    for raw_hour in raw_hours:
        try:
            candidates.add(_pad_hour(raw_hour))
        except MalformedSlotToken as e:
            logger.debug(f"Dropping hour index entry: {e}")

    if not candidates:
        candidates = set(minutes_by_hour)

    hours = sorted(hour for hour in candidates if minutes_by_hour.get(hour))
    return _build(minutes_by_hour, hours)
