"""
Helpdesk error taxonomy.

Every failure a request can recover from is raised as a ``HelpdeskError``
subclass; the application maps it to an HTTP status and a JSON body of the
form ``{"detail": ..., "error_code": ..., "errors": [...]}``.
"""

from __future__ import annotations

from typing import Iterable, Optional


class HelpdeskError(Exception):
    """Base error with an HTTP status and a machine-readable code."""

    status_code: int = 400
    error_code: str = "HELPDESK_ERROR"

    def __init__(self, message: str, errors: Optional[Iterable[str]] = None):
        self.message = message
        self.errors = list(errors) if errors else [message]
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "error_code": self.error_code,
            "errors": self.errors,
        }


class Unauthenticated(HelpdeskError):
    status_code = 401
    error_code = "UNAUTHENTICATED"


class Forbidden(HelpdeskError):
    status_code = 403
    error_code = "FORBIDDEN"


class NotFound(HelpdeskError):
    status_code = 404
    error_code = "NOT_FOUND"


class ValidationFailed(HelpdeskError):
    status_code = 400
    error_code = "VALIDATION_FAILED"


class InvalidSelection(ValidationFailed):
    error_code = "INVALID_SELECTION"


class InvalidFieldValue(ValidationFailed):
    error_code = "INVALID_FIELD_VALUE"


class MissingRequiredField(ValidationFailed):
    error_code = "MISSING_REQUIRED_FIELD"


class UnknownField(ValidationFailed):
    error_code = "UNKNOWN_FIELD"


class DuplicateField(ValidationFailed):
    error_code = "DUPLICATE_FIELD"


class MissingProfileData(ValidationFailed):
    error_code = "MISSING_PROFILE_DATA"


class InvalidAssignee(ValidationFailed):
    error_code = "INVALID_ASSIGNEE"


class NoChanges(ValidationFailed):
    error_code = "NO_CHANGES"


class Conflict(HelpdeskError):
    status_code = 409
    error_code = "CONFLICT"


class DependencyError(HelpdeskError):
    status_code = 409
    error_code = "DEPENDENCY_ERROR"
