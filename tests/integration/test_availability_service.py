import uuid
from datetime import date, datetime, time

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import ConfigurationError, SlotConflictError
from app.models import Appointment, BlockedDate, BusinessHours, Service
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.schedule_config import ScheduleConfig, Weekday

DAY = date(2099, 3, 2)
EARLIER = datetime(2099, 3, 1, 8, 0)

MORNING_WITH_LUNCH = {
    weekday.key: {
        "start": "09:00",
        "end": "12:00",
        "lunch_enabled": True,
        "lunch_start": "10:00",
        "lunch_end": "10:30",
    }
    for weekday in Weekday
}


def save_morning(db, business, **kwargs):
    config = ScheduleConfig.from_weekly_mapping(MORNING_WITH_LUNCH, timezone="UTC", **kwargs)
    return AvailabilityService.save_schedule_config(db, business.id, config)


def book(db, business, at, minutes=30, status="confirmed", on=DAY):
    appointment = Appointment(
        business_id=business.id,
        customer_name="Cliente",
        appointment_date=on,
        appointment_time=at,
        duration_minutes=minutes,
        status=status,
    )
    db.add(appointment)
    db.commit()
    return appointment


def test_unknown_business(db_session):
    with pytest.raises(LookupError):
        AvailabilityService.get_business(db_session, uuid.uuid4())


def test_default_schedule_opens_every_day(db_session, business):
    config = AvailabilityService.load_schedule_config(db_session, business.id)

    assert config.timezone == "UTC"
    assert config.slot_granularity_minutes == 30
    assert all(day.enabled for day in config.days)
    assert all((day.start, day.end) == (time(9), time(19)) for day in config.days)


def test_save_and_load_schedule(db_session, business):
    mapping = dict(MORNING_WITH_LUNCH, sunday={"enabled": False})
    config = ScheduleConfig.from_weekly_mapping(
        mapping,
        slot_granularity_minutes=15,
        blocked_dates=[DAY],
        timezone="America/Sao_Paulo",
    )

    saved = AvailabilityService.save_schedule_config(db_session, business.id, config)

    assert saved == config
    assert db_session.query(BusinessHours).filter_by(business_id=business.id).count() == 7
    assert not saved.day_for(Weekday.SUNDAY).enabled
    assert saved.day_for(Weekday.MONDAY).lunch_start == time(10, 0)


def test_save_replaces_blocked_dates(db_session, business):
    save_morning(db_session, business, blocked_dates=[DAY, date(2099, 3, 3)])
    saved = save_morning(db_session, business, blocked_dates=[date(2099, 3, 4)])

    assert saved.blocked_dates == frozenset([date(2099, 3, 4)])
    assert db_session.query(BlockedDate).filter_by(business_id=business.id).count() == 1


def test_invalid_schedule_is_not_saved(db_session, business):
    config = ScheduleConfig.from_weekly_mapping(
        {"monday": {"start": "18:00", "end": "09:00"}},
        timezone="UTC",
    )

    with pytest.raises(ConfigurationError) as exc_info:
        AvailabilityService.save_schedule_config(db_session, business.id, config)

    assert exc_info.value.problems[0].startswith("monday:")
    assert db_session.query(BusinessHours).count() == 0


def test_available_slots_for_a_day(db_session, business):
    save_morning(db_session, business)

    availability = AvailabilityService.get_available_slots(db_session, business.id, DAY, now=EARLIER)

    assert availability.slots == ("09:00", "09:30", "10:30", "11:00", "11:30")
    assert availability.hours_index == ("09", "10", "11")
    assert availability.minutes_by_hour["10"] == ("30",)


def test_confirmed_bookings_are_excluded(db_session, business):
    save_morning(db_session, business)
    taken = book(db_session, business, "09:30")
    book(db_session, business, "11:00", status="cancelled")

    slots = AvailabilityService.generate_slots(db_session, business.id, DAY, now=EARLIER)
    assert slots == ["09:00", "10:30", "11:00", "11:30"]

    rescheduling = AvailabilityService.generate_slots(
        db_session, business.id, DAY, exclude_booking_id=taken.id, now=EARLIER
    )
    assert "09:30" in rescheduling


def test_blocked_day_has_no_slots(db_session, business):
    save_morning(db_session, business)
    AvailabilityService.add_blocked_date(db_session, business.id, DAY, "Feriado")

    assert AvailabilityService.get_available_slots(db_session, business.id, DAY, now=EARLIER).is_empty


def test_service_duration_sizes_slots(db_session, business):
    save_morning(db_session, business)
    service = Service(business_id=business.id, name="Corte + Barba", duration=60)
    db_session.add(service)
    db_session.commit()

    slots = AvailabilityService.generate_slots(
        db_session, business.id, DAY, service_id=service.id, now=EARLIER
    )

    assert slots == ["09:00", "10:30", "11:00"]


def test_unknown_service(db_session, business):
    with pytest.raises(LookupError):
        AvailabilityService.generate_slots(
            db_session, business.id, DAY, service_id=uuid.uuid4(), now=EARLIER
        )


def test_stored_invalid_hours_are_refused(db_session, business):
    for weekday in Weekday:
        db_session.add(BusinessHours(
            business_id=business.id,
            day_of_week=int(weekday),
            open_time="19:00",
            close_time="09:00",
        ))
    db_session.commit()

    with pytest.raises(ConfigurationError):
        AvailabilityService.generate_slots(db_session, business.id, DAY, now=EARLIER)


def test_ensure_slot_available(db_session, business):
    save_morning(db_session, business)
    book(db_session, business, "11:00")

    assert AvailabilityService.ensure_slot_available(
        db_session, business.id, DAY, "9:30", now=EARLIER
    ) == "09:30"

    for taken in ("11:00", "10:00", "12:00"):
        with pytest.raises(SlotConflictError) as exc_info:
            AvailabilityService.ensure_slot_available(db_session, business.id, DAY, taken, now=EARLIER)
        assert exc_info.value.retryable


def test_blocked_date_crud(db_session, business):
    AvailabilityService.add_blocked_date(db_session, business.id, DAY, "Feriado")
    updated = AvailabilityService.add_blocked_date(db_session, business.id, DAY, "Carnaval")

    blocked = AvailabilityService.list_blocked_dates(db_session, business.id)
    assert [(b.date, b.reason) for b in blocked] == [(DAY, "Carnaval")]
    assert updated.reason == "Carnaval"

    assert AvailabilityService.remove_blocked_date(db_session, business.id, DAY) is True
    assert AvailabilityService.remove_blocked_date(db_session, business.id, DAY) is False
    assert AvailabilityService.list_blocked_dates(db_session, business.id) == []


def test_concurrently_blocked_date_returns_the_stored_row(db_session, business, monkeypatch):
    db_session.add(BlockedDate(business_id=business.id, date=DAY, reason="Feriado"))
    db_session.commit()
    find = AvailabilityService._find_blocked_date
    calls = []

    def find_after_race(db, business_id, blocked_date):
        # The first lookup misses the row written by the other request
        calls.append(blocked_date)
        return None if len(calls) == 1 else find(db, business_id, blocked_date)

    monkeypatch.setattr(AvailabilityService, "_find_blocked_date", staticmethod(find_after_race))

    blocked = AvailabilityService.add_blocked_date(db_session, business.id, DAY, "Carnaval")

    assert blocked.reason == "Carnaval"
    stored = db_session.query(BlockedDate).filter_by(business_id=business.id).all()
    assert [(b.date, b.reason) for b in stored] == [(DAY, "Carnaval")]


def test_failed_unblock_is_rolled_back(db_session, business, monkeypatch):
    AvailabilityService.add_blocked_date(db_session, business.id, DAY, "Feriado")

    def broken_commit():
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(db_session, "commit", broken_commit)

    with pytest.raises(SQLAlchemyError):
        AvailabilityService.remove_blocked_date(db_session, business.id, DAY)

    monkeypatch.undo()
    assert [b.date for b in AvailabilityService.list_blocked_dates(db_session, business.id)] == [DAY]
