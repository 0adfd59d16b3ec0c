"""
Errors raised by the planner service. The HTTP layer maps each to {"error": message}.
"""
from typing import Optional


class PlannerError(Exception):
    """Base class: carries the HTTP status and the client-facing message."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingRequiredData(PlannerError):
    """A required field is absent or empty."""

    status_code = 400
    default_message = "Missing required data"


class InvalidData(PlannerError):
    """A field has the wrong shape (e.g. marks is not a list)."""

    status_code = 400
    default_message = "Invalid data"


class StudentNotFound(PlannerError):
    """No plan has been generated for this student name."""

    status_code = 404
    default_message = "Student not found"
