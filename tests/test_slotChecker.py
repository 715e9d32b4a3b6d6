from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from models import db, Booking
from slotChecker import find_active_booking, is_available

SLOT_DATE = date(2025, 6, 1)


@pytest.fixture
def add_booking(patient, doctor):
    def _add_booking(status="confirmed", time="10:00", doctor_id=None, day=SLOT_DATE):
        booking = Booking(
            patient_id=patient.id,
            doctor_id=doctor_id or doctor.id,
            appointment_date=day,
            appointment_time=time,
            status=status,
            patient_name=patient.full_name,
            patient_phone=patient.phone,
            consultation_fee=doctor.consultation_fee,
        )
        db.session.add(booking)
        db.session.commit()
        return booking

    return _add_booking


def test_empty_slot_is_available(doctor):
    assert is_available(doctor.id, SLOT_DATE, "10:00")


@pytest.mark.parametrize("status", ["pending", "confirmed"])
def test_active_booking_occupies_slot(add_booking, doctor, status):
    booking = add_booking(status=status)
    assert not is_available(doctor.id, SLOT_DATE, "10:00")
    assert find_active_booking(doctor.id, SLOT_DATE, "10:00").id == booking.id


@pytest.mark.parametrize("status", ["cancelled", "completed", "no_show"])
def test_inactive_booking_leaves_slot_free(add_booking, doctor, status):
    add_booking(status=status)
    assert is_available(doctor.id, SLOT_DATE, "10:00")


def test_time_is_compared_as_exact_string(add_booking, doctor):
    add_booking(time="14:30")
    assert not is_available(doctor.id, SLOT_DATE, "14:30")
    assert is_available(doctor.id, SLOT_DATE, "2:30 PM")
    assert is_available(doctor.id, SLOT_DATE, "14:30 ")


def test_slot_is_per_doctor_and_date(add_booking, doctor, other_doctor):
    add_booking()
    assert is_available(other_doctor.id, SLOT_DATE, "10:00")
    assert is_available(doctor.id, date(2025, 6, 2), "10:00")


def test_storage_rejects_second_active_booking(add_booking):
    add_booking(status="confirmed")
    with pytest.raises(IntegrityError):
        add_booking(status="pending")
    db.session.rollback()


def test_storage_allows_active_booking_next_to_cancelled_ones(add_booking, doctor):
    add_booking(status="cancelled")
    add_booking(status="cancelled")
    add_booking(status="confirmed")
    assert Booking.query.filter_by(doctor_id=doctor.id).count() == 3
