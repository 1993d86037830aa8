"""Error taxonomy for album access decisions.

Services raise these; ``yearbook.main`` renders them as
``{"error": kind, "detail": message}`` with the matching status code.
"""


class AccessError(Exception):
    """Base class for every error the access engine reports to callers."""

    kind = "error"
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AccessError):
    kind = "unauthenticated"
    status_code = 401
    default_message = "Authentication required"


class Forbidden(AccessError):
    kind = "forbidden"
    status_code = 403
    default_message = "Forbidden"


class NotFound(AccessError):
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class Conflict(AccessError):
    kind = "conflict"
    status_code = 409
    default_message = "Conflict"


class CapacityExceeded(AccessError):
    kind = "capacity_exceeded"
    status_code = 409
    default_message = "Album is full and cannot accept more registrations"


class Gone(AccessError):
    kind = "gone"
    status_code = 410
    default_message = "No longer available"


class InvalidOperation(AccessError):
    kind = "invalid_operation"
    status_code = 400
    default_message = "Operation not allowed"


class InvalidInput(AccessError):
    kind = "invalid_input"
    status_code = 400
    default_message = "Invalid input"


class Internal(AccessError):
    kind = "internal"
    status_code = 500
    default_message = "Internal server error"
