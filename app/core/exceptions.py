"""Application errors.

Every error renders the same JSON envelope::

    {"success": false, "error": {"code": ..., "message": ..., "details": {...}}}
"""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base class; subclasses set ``status_code``, ``code`` and a default message."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(status_code=self.status_code, detail=self.envelope())

    def envelope(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": {"code": self.code, "message": self.message, "details": self.details},
        }


class AuthenticationError(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTH_FAILED"
    default_message = "Authentication failed"

    def __init__(self, message: str | None = None):
        super().__init__(message)


class PermissionDeniedError(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"
    default_message = "Permission denied"

    def __init__(self, message: str | None = None, required_role: str | None = None):
        super().__init__(message, {"required_role": required_role} if required_role else None)


class NotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", identifier: str | None = None):
        super().__init__(
            f"{resource} not found",
            {"identifier": identifier} if identifier else None,
        )


class ConflictError(AppException):
    """The record clashes with one that already exists."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Record already exists"


class AcademicYearNotSetError(AppException):
    """Raised by session-bound operations until an academic year is configured."""

    status_code = status.HTTP_409_CONFLICT
    code = "ACADEMIC_YEAR_NOT_SET"
    default_message = "Academic year is not set. Set the new academic year to continue."

    def __init__(self):
        super().__init__()


class ValidationError(AppException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"
    default_message = "Validation error"


class UploadError(AppException):
    code = "UPLOAD_FAILED"
    default_message = "Upload failed"
