# interview_schedule/errors.py
"""
Application error taxonomy.

Every error that crosses the HTTP boundary is rendered as
{"errorCode": ..., "message": ...} by the handlers in main.py.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "An internal error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"errorCode": self.code, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.details:
            body["details"] = self.details
        return body


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You are not allowed to access this resource"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "The request conflicts with the current state"


class RateLimitError(AppError):
    status_code = 429
    code = "RATE_LIMITED"
    default_message = "Too many requests, please try again later"

    def __init__(self, reset_at_ms: int, retry_after: int):
        super().__init__()
        self.reset_at_ms = reset_at_ms
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["retryAfter"] = self.retry_after
        return body


class InternalError(AppError):
    pass


class SlotOverlapError(InternalError):
    """Two available slots of the same owner/day/format overlap."""
    default_message = "Availability data is inconsistent"


SLOT_UNAVAILABLE_MESSAGE = "This slot is no longer available, please choose another."
