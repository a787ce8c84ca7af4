import uuid
from datetime import date, datetime

import pytest

from app.core.exceptions import BookingLockedError, SlotConflictError
from app.models import Appointment, Service
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.appointment_service import AppointmentService
from app.services.availability.availability_service import AvailabilityService
from app.services.availability.schedule_config import ScheduleConfig

DAY = date(2099, 3, 2)
EARLIER = datetime(2099, 3, 1, 8, 0)


@pytest.fixture
def morning(db_session, business):
    config = ScheduleConfig.from_legacy("09:00", "12:00", timezone="UTC")
    AvailabilityService.save_schedule_config(db_session, business.id, config)
    return business


def create(db, business, at="10:00", **kwargs):
    kwargs.setdefault("now", EARLIER)
    return AppointmentService.create_appointment(
        db, business.id, DAY, at, customer_name="João", customer_phone="+5511999990000", **kwargs
    )


def test_create_appointment(db_session, morning):
    appointment = create(db_session, morning, at="9:30", notes="Primeira vez")

    assert appointment.status == "confirmed"
    assert appointment.appointment_time == "09:30"
    assert appointment.duration_minutes == 30
    assert appointment.notes == "Primeira vez"

    slots = AvailabilityService.generate_slots(db_session, morning.id, DAY, now=EARLIER)
    assert "09:30" not in slots


def test_create_uses_service_duration(db_session, morning):
    service = Service(business_id=morning.id, name="Corte + Barba", duration=60)
    db_session.add(service)
    db_session.commit()

    appointment = create(db_session, morning, at="10:00", service_id=service.id)

    assert appointment.duration_minutes == 60
    slots = AvailabilityService.generate_slots(db_session, morning.id, DAY, now=EARLIER)
    assert slots == ["09:00", "09:30", "11:00", "11:30"]


def test_taken_slot_is_refused(db_session, morning):
    create(db_session, morning, at="10:00")

    with pytest.raises(SlotConflictError):
        create(db_session, morning, at="10:00")


def test_past_slot_is_refused(db_session, morning):
    with pytest.raises(SlotConflictError):
        create(db_session, morning, at="09:00", now=datetime(2099, 3, 2, 9, 10))


def test_past_date_is_refused(db_session, morning):
    with pytest.raises(SlotConflictError):
        create(db_session, morning, at="11:00", now=datetime(2099, 3, 3, 8, 0))

    assert db_session.query(Appointment).filter_by(business_id=morning.id).count() == 0


def test_lost_race_becomes_slot_conflict(db_session, morning, monkeypatch):
    create(db_session, morning, at="10:00")
    # Both requests passed the re-check; the second one loses at commit time
    monkeypatch.setattr(
        AvailabilityService, "ensure_slot_available", staticmethod(lambda *args, **kwargs: "10:00")
    )

    with pytest.raises(SlotConflictError):
        create(db_session, morning, at="10:00")

    confirmed = db_session.query(Appointment).filter_by(business_id=morning.id, status="confirmed")
    assert confirmed.count() == 1


def test_cancel_frees_the_slot(db_session, morning):
    appointment = create(db_session, morning, at="10:00")

    cancelled = AppointmentService.cancel_appointment(
        db_session, morning.id, appointment.id, reason="Imprevisto", now=EARLIER
    )

    assert cancelled.status == "cancelled"
    assert cancelled.cancellation_reason == "Imprevisto"
    assert cancelled.cancelled_at is not None
    assert "10:00" in AvailabilityService.generate_slots(db_session, morning.id, DAY, now=EARLIER)

    # the freed slot can be booked again
    assert create(db_session, morning, at="10:00").status == "confirmed"


def test_cancel_cutoff(db_session, morning):
    appointment = create(db_session, morning, at="10:00")

    with pytest.raises(BookingLockedError):
        AppointmentService.cancel_appointment(
            db_session, morning.id, appointment.id, now=datetime(2099, 3, 2, 9, 1)
        )

    cancelled = AppointmentService.cancel_appointment(
        db_session, morning.id, appointment.id, now=datetime(2099, 3, 2, 9, 0)
    )
    assert cancelled.status == "cancelled"

    with pytest.raises(BookingLockedError):
        AppointmentService.cancel_appointment(db_session, morning.id, appointment.id, now=EARLIER)


def test_reschedule(db_session, morning):
    appointment = create(db_session, morning, at="10:00")

    moved = AppointmentService.update_appointment(
        db_session, morning.id, appointment.id, appointment_time="11:30", now=EARLIER
    )

    assert moved.appointment_time == "11:30"
    slots = AvailabilityService.generate_slots(db_session, morning.id, DAY, now=EARLIER)
    assert "10:00" in slots
    assert "11:30" not in slots


def test_reschedule_into_own_interval(db_session, morning):
    service = Service(business_id=morning.id, name="Corte + Barba", duration=60)
    db_session.add(service)
    db_session.commit()
    appointment = create(db_session, morning, at="10:00", service_id=service.id)

    moved = AppointmentService.update_appointment(
        db_session, morning.id, appointment.id, appointment_time="10:30", now=EARLIER
    )

    assert moved.appointment_time == "10:30"


def test_reschedule_onto_taken_slot(db_session, morning):
    create(db_session, morning, at="11:00")
    appointment = create(db_session, morning, at="10:00")

    with pytest.raises(SlotConflictError):
        AppointmentService.update_appointment(
            db_session, morning.id, appointment.id, appointment_time="11:00", now=EARLIER
        )

    db_session.refresh(appointment)
    assert appointment.appointment_time == "10:00"


def test_notes_only_update_inside_the_day(db_session, morning):
    appointment = create(db_session, morning, at="11:00")

    updated = AppointmentService.update_appointment(
        db_session, morning.id, appointment.id, notes="Trazer foto", now=datetime(2099, 3, 2, 9, 30)
    )

    assert updated.notes == "Trazer foto"
    assert updated.appointment_time == "11:00"


def test_edit_cutoff(db_session, morning):
    appointment = create(db_session, morning, at="10:00")

    with pytest.raises(BookingLockedError):
        AppointmentService.update_appointment(
            db_session, morning.id, appointment.id, appointment_time="11:00",
            now=datetime(2099, 3, 2, 9, 30)
        )


def test_complete(db_session, morning):
    appointment = create(db_session, morning, at="10:00")

    completed = AppointmentService.complete_appointment(db_session, morning.id, appointment.id)
    assert completed.status == "completed"
    assert completed.completed_at is not None

    with pytest.raises(BookingLockedError):
        AppointmentService.complete_appointment(db_session, morning.id, appointment.id)


def test_unknown_appointment(db_session, morning):
    with pytest.raises(LookupError):
        AppointmentService.cancel_appointment(db_session, morning.id, uuid.uuid4())


def test_list_appointments(db_session, morning):
    late = create(db_session, morning, at="11:00")
    early = create(db_session, morning, at="09:00")
    AppointmentService.cancel_appointment(db_session, morning.id, late.id, now=EARLIER)

    listing = AppointmentQueryService.list_appointments(
        db_session, morning.id, "UTC", target_date=DAY, now=datetime(2099, 3, 2, 8, 30)
    )

    assert listing["total_appointments"] == 2
    assert [a["time"] for a in listing["appointments"]] == ["09:00", "11:00"]
    first, second = listing["appointments"]
    assert first["id"] == str(early.id)
    assert (first["can_edit"], first["can_cancel"]) == (False, False)
    assert (second["can_edit"], second["can_cancel"]) == (False, False)

    confirmed = AppointmentQueryService.list_appointments(
        db_session, morning.id, "UTC", status="confirmed", now=EARLIER
    )
    assert confirmed["total_appointments"] == 1
    assert confirmed["appointments"][0]["can_cancel"] is True
