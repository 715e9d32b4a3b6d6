from models import Booking
from bookingStatus import ACTIVE_STATUSES


def find_active_booking(doctor_id, appointment_date, appointment_time):
    """
    Returns the pending/confirmed booking holding the slot, if any.
    The time is matched as an exact string ("14:30" != "2:30 PM").
    """
    return Booking.query.filter(
        Booking.doctor_id == doctor_id,
        Booking.appointment_date == appointment_date,
        Booking.appointment_time == appointment_time,
        Booking.status.in_(ACTIVE_STATUSES),
    ).first()


def is_available(doctor_id, appointment_date, appointment_time):
    # advisory only: the uq_booking_active_slot index decides under concurrent inserts
    return find_active_booking(doctor_id, appointment_date, appointment_time) is None
