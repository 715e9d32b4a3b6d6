from flask import current_app
from sqlalchemy.exc import IntegrityError
from models import db, Booking, Clinic, Doctor, User
from appUtils import PAYMENT_METHODS, validate_date, validate_email, validate_mobile
from activityService import create_activity, send_booking_confirmation
from errors import BadRequest, Conflict, NotFound
from slotChecker import is_available
import accessGuard as guard
import bookingStatus

SLOT_TAKEN_MSG = "This time slot is already booked"
UPDATABLE_FIELDS = {
    "diagnosis": "diagnosis",
    "prescription": "prescription",
    "notes": "notes",
}


def _as_id(value, field):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{field} is required and must be an id")


def _optional_str(data, key):
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise BadRequest(f"{key} must be a string")
    return value


def _commit_or_conflict(message=SLOT_TAKEN_MSG):
    # the partial unique index rejects a second active booking for the same slot
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        current_app.logger.info(f"[booking] Integrity error treated as slot conflict: {e.orig}")
        raise Conflict(message)


def _load_booking(booking_id):
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    return booking


def merge_patient_details(submitted, patient):
    """
    Builds the contact snapshot stored on the booking. Values typed into the
    form win; anything missing falls back to the patient's profile.
    """
    submitted = submitted or {}
    if not isinstance(submitted, dict):
        raise BadRequest("patientDetails must be an object")

    name = _optional_str(submitted, "patientName") or _optional_str(submitted, "name")
    email = _optional_str(submitted, "email")
    if email and not validate_email(email):
        raise BadRequest("Invalid email. Please provide a correct format (example@domain.com).")
    phone = _optional_str(submitted, "phone")
    if phone and not validate_mobile(phone):
        raise BadRequest("Invalid mobile. Enter a 10-digit number starting with 6,7,8,9.")

    age = submitted.get("age")
    if age is not None:
        try:
            age = int(age)
        except (TypeError, ValueError):
            raise BadRequest("age must be a number")

    return {
        "patient_name": (name or patient.full_name).strip(),
        "patient_email": (email or patient.email).strip(),
        "patient_phone": (phone or patient.phone).strip(),
        "patient_age": age,
        "patient_gender": _optional_str(submitted, "gender"),
    }


# ======================================
# Create
# ======================================

def create_booking(actor, data):
    guard.require_access(actor, guard.CREATE)

    doctor_id = _as_id(data.get("doctorId"), "doctorId")
    appointment_date = validate_date(data.get("appointmentDate"))
    if not appointment_date:
        raise BadRequest("Invalid appointmentDate. Use YYYY-MM-DD.")
    appointment_time = data.get("appointmentTime")
    if not isinstance(appointment_time, str) or not appointment_time.strip():
        raise BadRequest("appointmentTime is required")
    payment_method = data.get("paymentMethod") or "card"
    if payment_method not in PAYMENT_METHODS:
        raise BadRequest(f"Invalid paymentMethod. Expected one of: {', '.join(PAYMENT_METHODS)}")
    is_emergency = data.get("isEmergency")
    if is_emergency is None:
        is_emergency = False
    if not isinstance(is_emergency, bool):
        raise BadRequest("isEmergency must be true or false")
    symptoms = _optional_str(data, "symptoms")
    reason_for_visit = _optional_str(data, "reasonForVisit")

    patient = actor
    if guard.is_staff(actor):
        patient = db.session.get(User, _as_id(data.get("patientId"), "patientId"))
        if not patient or patient.role != guard.PATIENT:
            raise NotFound("Patient not found")

    doctor = db.session.get(Doctor, doctor_id)
    if not doctor:
        raise NotFound("Doctor not found")

    clinic = None
    if data.get("clinicId") is not None:
        clinic = db.session.get(Clinic, _as_id(data.get("clinicId"), "clinicId"))
        if not clinic:
            raise NotFound("Clinic not found")

    if not is_available(doctor.id, appointment_date, appointment_time):
        raise Conflict(SLOT_TAKEN_MSG)

    booking = Booking(
        patient_id=patient.id,
        doctor_id=doctor.id,
        clinic_id=clinic.id if clinic else None,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        symptoms=symptoms,
        reason_for_visit=reason_for_visit,
        is_emergency=is_emergency,
        consultation_fee=doctor.consultation_fee,
        payment_method=payment_method,
        status=bookingStatus.INITIAL_STATUS,
        **merge_patient_details(data.get("patientDetails"), patient),
    )
    db.session.add(booking)
    _commit_or_conflict()

    current_app.logger.info(f"[create_booking] {booking.booking_ref} doctor={doctor.id} "
                            f"slot={appointment_date} {appointment_time} patient={patient.id}")

    create_activity(
        "appointment_booked",
        f"New appointment booked with Dr. {doctor.name}",
        actor,
        target_id=booking.id,
        target_model="Booking",
    )
    send_booking_confirmation(booking)
    return booking


# ======================================
# Read
# ======================================

def get_booking(actor, booking_id):
    booking = _load_booking(booking_id)
    guard.require_access(actor, guard.READ, booking)
    return booking


def _status_filter(query, status, allow_all=False):
    if not status or (allow_all and status == "all"):
        return query
    bookingStatus.validate_status(status)
    return query.filter(Booking.status == status)


def list_all_bookings(actor, status=None, page=1, limit=50):
    guard.require_access(actor, guard.LIST_ALL)
    query = _status_filter(Booking.query, status, allow_all=True)
    query = query.order_by(Booking.appointment_date.desc(), Booking.appointment_time.desc(), Booking.id.desc())
    return query.paginate(page=page, per_page=limit, error_out=False)


def list_patient_bookings(actor, user_id, status=None, page=1, limit=10):
    guard.require_access(actor, guard.LIST_PATIENT, user_id)
    query = _status_filter(Booking.query.filter(Booking.patient_id == user_id), status)
    query = query.order_by(Booking.appointment_date.desc(), Booking.appointment_time.desc(), Booking.id.desc())
    return query.paginate(page=page, per_page=limit, error_out=False)


def list_doctor_bookings(actor, doctor_id, date=None, status=None, page=1, limit=20):
    guard.require_access(actor, guard.LIST_DOCTOR, doctor_id)
    query = Booking.query.filter(Booking.doctor_id == doctor_id)
    if date:
        day = validate_date(date)
        if not day:
            raise BadRequest("Invalid date. Use YYYY-MM-DD.")
        query = query.filter(Booking.appointment_date == day)
    query = _status_filter(query, status)
    query = query.order_by(Booking.appointment_date.asc(), Booking.appointment_time.asc(), Booking.id.asc())
    return query.paginate(page=page, per_page=limit, error_out=False)


def enrich_for_patient(booking):
    """Booking as shown on the patient's own bookings page."""
    data = booking.to_dict(include=("doctor", "clinic"))
    data.update({
        "doctorName": f"Dr. {booking.doctor.name}",
        "specialization": booking.doctor.specialization,
        "date": booking.appointment_date.isoformat(),
        "time": booking.appointment_time,
        "fee": booking.consultation_fee,
        "diagnosis": booking.diagnosis or "Pending consultation",
        "prescription": booking.prescription or "To be provided after consultation",
    })
    return data


# ======================================
# Update / Cancel
# ======================================

def update_booking(actor, booking_id, data):
    booking = _load_booking(booking_id)
    guard.require_access(actor, guard.UPDATE, booking)

    status = data.get("status")
    fields = {attr: _optional_str(data, key) for key, attr in UPDATABLE_FIELDS.items() if data.get(key) is not None}
    follow_up = data.get("followUpDate")
    if status is None and not fields and follow_up is None:
        raise BadRequest("Nothing to update")
    if follow_up is not None:
        follow_up = validate_date(follow_up)
        if not follow_up:
            raise BadRequest("Invalid followUpDate. Use YYYY-MM-DD.")

    previous = booking.status
    if status is not None:
        bookingStatus.check_transition(booking.status, status, guard.participant_of(actor, booking))
        booking.status = status
    for attr, value in fields.items():
        setattr(booking, attr, value)
    if follow_up is not None:
        booking.follow_up_date = follow_up

    _commit_or_conflict()

    current_app.logger.info(f"[update_booking] {booking.booking_ref} {previous} -> {booking.status} by user {actor.id}")

    if status is not None and status != previous:
        create_activity(
            f"appointment_{status}",
            f"Appointment {status} for booking {booking.booking_ref}",
            actor,
            target_id=booking.id,
            target_model="Booking",
            metadata={"from": previous, "to": status},
        )
    else:
        create_activity(
            "booking_updated",
            f"Booking {booking.booking_ref} updated",
            actor,
            target_id=booking.id,
            target_model="Booking",
            metadata={"fields": sorted(fields) + (["follow_up_date"] if follow_up is not None else [])},
        )
    return booking


def cancel_booking(actor, booking_id, reason=None):
    booking = _load_booking(booking_id)
    guard.require_access(actor, guard.CANCEL, booking)
    if reason is not None and not isinstance(reason, str):
        raise BadRequest("reason must be a string")
    if booking.status == bookingStatus.CANCELLED:
        return booking

    bookingStatus.check_transition(booking.status, bookingStatus.CANCELLED, guard.participant_of(actor, booking))
    booking.status = bookingStatus.CANCELLED
    booking.notes = reason or "Cancelled by user"
    _commit_or_conflict()

    current_app.logger.info(f"[cancel_booking] {booking.booking_ref} cancelled by user {actor.id}")

    create_activity(
        "appointment_cancelled",
        f"Appointment cancelled for booking {booking.booking_ref}",
        actor,
        target_id=booking.id,
        target_model="Booking",
    )
    return booking
