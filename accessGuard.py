from errors import Forbidden

PATIENT = "patient"
DOCTOR = "doctor"
ADMIN = "admin"
SUPERUSER = "superuser"

ROLES = (PATIENT, DOCTOR, ADMIN, SUPERUSER)
STAFF_ROLES = (ADMIN, SUPERUSER)

READ = "read"
LIST_PATIENT = "list_patient"
LIST_DOCTOR = "list_doctor"
LIST_ALL = "list_all"
UPDATE = "update"
CANCEL = "cancel"
CREATE = "create"


def is_staff(actor):
    return actor.role in STAFF_ROLES


def is_booking_patient(actor, booking):
    return actor.role == PATIENT and booking.patient_id == actor.id


def is_booking_doctor(actor, booking):
    return actor.role == DOCTOR and actor.doctor_id is not None and booking.doctor_id == actor.doctor_id


# ======================================
# Capability matrix
# ======================================
# Each operation maps to the rules that grant it. A rule receives the actor
# and the operation target: a Booking for per-booking operations, a user id
# or doctor id for the list operations, nothing for create/list-all.

CAPABILITIES = {
    READ: (
        lambda actor, booking: is_booking_patient(actor, booking),
        lambda actor, booking: is_booking_doctor(actor, booking),
        lambda actor, booking: is_staff(actor),
    ),
    LIST_PATIENT: (
        lambda actor, user_id: actor.id == user_id,
        lambda actor, user_id: is_staff(actor),
    ),
    LIST_DOCTOR: (
        lambda actor, doctor_id: actor.role == DOCTOR and actor.doctor_id == doctor_id,
        lambda actor, doctor_id: is_staff(actor),
    ),
    LIST_ALL: (
        lambda actor, target: is_staff(actor),
    ),
    UPDATE: (
        lambda actor, booking: is_booking_doctor(actor, booking),
        lambda actor, booking: is_staff(actor),
    ),
    CANCEL: (
        lambda actor, booking: is_booking_patient(actor, booking),
        lambda actor, booking: is_booking_doctor(actor, booking),
        lambda actor, booking: is_staff(actor),
    ),
    # staff may book on a patient's behalf
    CREATE: (
        lambda actor, target: actor.role == PATIENT,
        lambda actor, target: is_staff(actor),
    ),
}


def can_access(actor, operation, target=None):
    if actor is None or not actor.is_active:
        return False
    rules = CAPABILITIES.get(operation)
    if rules is None:
        raise ValueError(f"Unknown operation: {operation}")
    return any(rule(actor, target) for rule in rules)


def require_access(actor, operation, target=None):
    if not can_access(actor, operation, target):
        raise Forbidden()


def participant_of(actor, booking):
    """How the actor relates to the booking, as used by the status machine."""
    if is_staff(actor):
        return "admin"
    if is_booking_doctor(actor, booking):
        return "doctor"
    if is_booking_patient(actor, booking):
        return "patient"
    return None
