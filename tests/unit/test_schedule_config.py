from datetime import date, time
from types import SimpleNamespace

import pytest

from app.core.exceptions import ConfigurationError
from app.services.availability.schedule_config import (
    Booking,
    BookingStatus,
    DaySchedule,
    ScheduleConfig,
    Weekday,
    format_time,
    parse_time,
    to_minutes,
)


def test_parse_time_accepts_unpadded_input():
    assert parse_time("9:5") == time(9, 5)
    assert parse_time(" 18:30 ") == time(18, 30)
    assert parse_time(time(7, 45, 12)) == time(7, 45)


@pytest.mark.parametrize("value", ["9", "24:00", "12:60", "", "ab:cd", None])
def test_parse_time_rejects_garbage(value):
    with pytest.raises(ConfigurationError):
        parse_time(value)


def test_format_and_minutes():
    assert format_time(time(9, 5)) == "09:05"
    assert to_minutes(time(10, 30)) == 630


def test_weekday_keys():
    assert Weekday.from_key("Monday") is Weekday.MONDAY
    assert Weekday.SUNDAY.key == "sunday"
    # 2024-01-01 was a Monday
    assert Weekday.of(date(2024, 1, 1)) is Weekday.MONDAY
    assert Weekday.of(date(2024, 1, 7)) is Weekday.SUNDAY


def test_unknown_weekday_key():
    with pytest.raises(ConfigurationError):
        Weekday.from_key("funday")


def test_day_schedule_problems():
    assert DaySchedule(enabled=True, start=time(9), end=time(18)).is_valid()

    inverted = DaySchedule(enabled=True, start=time(18), end=time(9))
    assert not inverted.is_valid()

    lunch_outside = DaySchedule(
        enabled=True, start=time(9), end=time(12),
        lunch_enabled=True, lunch_start=time(12), lunch_end=time(13),
    )
    assert any("outside working hours" in p for p in lunch_outside.problems())

    lunch_missing = DaySchedule(enabled=True, start=time(9), end=time(12), lunch_enabled=True)
    assert lunch_missing.problems() == ["lunch break enabled without lunch_start and lunch_end"]

    lunch_inverted = DaySchedule(
        enabled=True, start=time(9), end=time(18),
        lunch_enabled=True, lunch_start=time(13), lunch_end=time(12),
    )
    assert not lunch_inverted.is_valid()


def test_disabled_day_is_never_invalid():
    assert DaySchedule(enabled=False, start=time(18), end=time(9)).is_valid()


def test_day_schedule_from_dict_accepts_camel_case():
    day = DaySchedule.from_dict({
        "enabled": True,
        "start": "8:00",
        "end": "17:00",
        "lunchEnabled": True,
        "lunchStart": "12:00",
        "lunchEnd": "13:00",
    })
    assert day.start == time(8, 0)
    assert day.lunch_enabled
    assert day.lunch_start == time(12, 0)
    assert day.to_dict()["lunch_end"] == "13:00"


def test_day_schedule_from_dict_reads_string_flags():
    day = DaySchedule.from_dict({"enabled": "false", "start": "09:00", "end": "18:00", "lunchEnabled": "0"})
    assert not day.enabled
    assert not day.lunch_enabled

    day = DaySchedule.from_dict({"enabled": " True ", "start": "09:00", "end": "18:00", "lunch_enabled": 0})
    assert day.enabled
    assert not day.lunch_enabled

    with pytest.raises(ConfigurationError):
        DaySchedule.from_dict({"enabled": "maybe", "start": "09:00", "end": "18:00"})
    with pytest.raises(ConfigurationError):
        DaySchedule.from_dict({"enabled": 2, "start": "09:00", "end": "18:00"})


def test_schedule_config_requires_every_weekday():
    with pytest.raises(ConfigurationError):
        ScheduleConfig(days=(DaySchedule.closed(),) * 6)


def test_from_weekly_mapping_fills_missing_days():
    config = ScheduleConfig.from_weekly_mapping(
        {"sunday": {"enabled": False}, "monday": {"start": "10:00", "end": "16:00"}},
        timezone="America/Sao_Paulo",
    )

    assert not config.day_for(Weekday.SUNDAY).enabled
    assert config.day_for(Weekday.MONDAY).start == time(10, 0)
    tuesday = config.day_for(Weekday.TUESDAY)
    assert tuesday.enabled
    assert (tuesday.start, tuesday.end) == (time(9, 0), time(19, 0))
    assert config.day_for(date(2024, 1, 1)) == config.day_for(Weekday.MONDAY)


def test_from_legacy_applies_hours_to_every_day():
    config = ScheduleConfig.from_legacy("08:00", "12:00", blocked_dates=[date(2024, 12, 25)])
    assert all(day.start == time(8) and day.end == time(12) for day in config.days)
    assert config.is_blocked(date(2024, 12, 25))
    assert not config.is_blocked(date(2024, 12, 26))


def test_schedule_config_problems_are_prefixed_by_weekday():
    config = ScheduleConfig.from_weekly_mapping(
        {"friday": {"start": "19:00", "end": "09:00"}},
        slot_granularity_minutes=0,
        timezone="Mars/Olympus",
    )
    problems = config.problems()

    assert any(p.startswith("friday:") for p in problems)
    assert any("slot_granularity_minutes" in p for p in problems)
    assert any("unknown timezone" in p for p in problems)


def test_weekly_mapping_round_trip():
    config = ScheduleConfig.from_weekly_mapping({"saturday": {"start": "08:00", "end": "13:00"}})
    mapping = config.to_weekly_mapping()

    assert list(mapping) == [weekday.key for weekday in Weekday]
    assert ScheduleConfig.from_weekly_mapping(mapping) == config


def test_with_blocked_dates_returns_a_copy():
    config = ScheduleConfig.from_legacy("09:00", "18:00")
    blocked = config.with_blocked_dates([date(2024, 5, 1)])

    assert blocked.is_blocked(date(2024, 5, 1))
    assert not config.is_blocked(date(2024, 5, 1))


def test_booking_from_appointment():
    appointment = SimpleNamespace(
        id="a1",
        appointment_date=date(2024, 1, 1),
        appointment_time="10:30",
        duration_minutes=45,
        status="cancelled",
    )
    booking = Booking.from_appointment(appointment)

    assert booking.status is BookingStatus.CANCELLED
    assert not booking.is_confirmed
    assert (booking.start_minutes, booking.end_minutes) == (630, 675)
