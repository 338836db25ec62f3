"""
Attendance error taxonomy.

Every failure here is an expected, user-facing outcome of a single rejected
operation. Each carries a stable machine-readable ``code``, a user-readable
``message`` and the HTTP status the API layer renders it with.
"""


class AttendanceError(Exception):
    """Base class for rejected attendance operations."""

    code = "attendance_error"
    message = "Attendance operation rejected"
    status_code = 400

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.code}


class InvalidCode(AttendanceError):
    """No session matches the submitted code."""
    code = "invalid_code"
    message = "Invalid attendance code"
    status_code = 404


class SessionExpired(AttendanceError):
    """The session exists but its window has closed."""
    code = "session_expired"
    message = "This attendance code has expired"
    status_code = 410


class AlreadySigned(AttendanceError):
    """The student already holds a record for this session."""
    code = "already_signed"
    message = "You already signed this session"
    status_code = 409


class DeviceReused(AttendanceError):
    """The device fingerprint is attached to another student's record."""
    code = "device_reused"
    message = "This device was already used by another student for this session"
    status_code = 409


class UsernameTaken(AttendanceError):
    code = "username_taken"
    message = "Username already taken"
    status_code = 409
