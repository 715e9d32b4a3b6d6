from errors import Forbidden, InvalidStatus, Conflict

PENDING = "pending"
CONFIRMED = "confirmed"
COMPLETED = "completed"
CANCELLED = "cancelled"
NO_SHOW = "no_show"

STATUSES = (PENDING, CONFIRMED, COMPLETED, CANCELLED, NO_SHOW)
ACTIVE_STATUSES = (PENDING, CONFIRMED)
TERMINAL_STATUSES = (COMPLETED, CANCELLED, NO_SHOW)

# bookings skip PENDING: there is no payment step to wait for
INITIAL_STATUS = CONFIRMED

# target status -> participants allowed to move an active booking there
TRANSITIONS = {
    COMPLETED: {"doctor"},
    CANCELLED: {"patient", "doctor"},
    NO_SHOW: {"doctor"},
}


def validate_status(status):
    if status not in STATUSES:
        raise InvalidStatus(f"Invalid status. Expected one of: {', '.join(STATUSES)}")
    return status


def is_active(status):
    return status in ACTIVE_STATUSES


def is_terminal(status):
    return status in TERMINAL_STATUSES


def check_transition(current, target, participant):
    """
    Validates moving a booking from `current` to `target`.

    `participant` is how the actor relates to the booking: "patient",
    "doctor" or "admin". Admins may move a booking anywhere. Everyone
    else is limited to the TRANSITIONS table and cannot leave a terminal
    state.
    """
    validate_status(target)
    if participant == "admin":
        return
    if is_terminal(current):
        if current == target:
            return
        raise Conflict(f"Booking is already {current}")
    if current == target:
        return
    if participant not in TRANSITIONS.get(target, set()):
        raise Forbidden()
