from enum import Enum


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    INVALID_STATUS = "invalid_status"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INVALID_STATUS: 400,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INTERNAL: 500,
}


class BookingError(Exception):
    """Base error for every failure reported back to the caller."""

    kind = ErrorKind.INTERNAL
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self):
        return HTTP_STATUS[self.kind]

    def to_dict(self):
        return {"success": False, "message": self.message, "error": self.kind.value}


class NotFound(BookingError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class Conflict(BookingError):
    kind = ErrorKind.CONFLICT
    default_message = "Request conflicts with the current booking state"


class Forbidden(BookingError):
    # never carries details about which check failed
    kind = ErrorKind.FORBIDDEN
    default_message = "Access denied"

    def __init__(self):
        super().__init__()


class InvalidStatus(BookingError):
    kind = ErrorKind.INVALID_STATUS
    default_message = "Invalid status"


class BadRequest(BookingError):
    kind = ErrorKind.BAD_REQUEST
    default_message = "Invalid request"


class Unauthorized(BookingError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Authentication required"
