"""
Error taxonomy shared by the services, the HTTP API and the client.
"""
from enum import Enum
from typing import Dict, List, Optional

__all__ = [
    "ErrorCategory",
    "SurveyError",
    "SurveyValidationError",
    "PersistenceError",
    "NetworkError",
    "ApiError",
    "UnexpectedError",
    "category_for_status",
]


class ErrorCategory(str, Enum):
    """Failure categories the client maps to user-facing messages."""
    NETWORK = "network"
    BAD_REQUEST = "bad_request"
    UNPROCESSABLE = "unprocessable"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER = "server"
    UNKNOWN = "unknown"

    @property
    def is_client_error(self) -> bool:
        return self in (
            ErrorCategory.BAD_REQUEST,
            ErrorCategory.UNPROCESSABLE,
            ErrorCategory.FORBIDDEN,
            ErrorCategory.NOT_FOUND,
        )


def category_for_status(status_code: int) -> ErrorCategory:
    """Map an HTTP status code to an error category."""
    if status_code == 400:
        return ErrorCategory.BAD_REQUEST
    if status_code == 422:
        return ErrorCategory.UNPROCESSABLE
    if status_code in (401, 403):
        return ErrorCategory.FORBIDDEN
    if status_code == 404:
        return ErrorCategory.NOT_FOUND
    if 400 <= status_code < 500:
        return ErrorCategory.BAD_REQUEST
    if status_code >= 500:
        return ErrorCategory.SERVER
    return ErrorCategory.UNKNOWN


class SurveyError(Exception):
    """Base class for survey errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN


class SurveyValidationError(SurveyError):
    """Submission rejected by field validation. Never retried."""

    category = ErrorCategory.BAD_REQUEST

    def __init__(self, field_errors: Dict[str, List[str]]):
        self.field_errors = field_errors
        super().__init__("One or more validation errors occurred.")


class PersistenceError(SurveyError):
    """Storage failure, surfaced to callers as a generic retryable error."""

    category = ErrorCategory.SERVER

    def __init__(self, message: str = "Storage operation failed."):
        super().__init__(message)


class NetworkError(SurveyError):
    """Transport failure before any response was received."""

    category = ErrorCategory.NETWORK


class ApiError(SurveyError):
    """Non-success HTTP response."""

    def __init__(self, status_code: int, message: str = "", body: Optional[Dict] = None):
        self.status_code = status_code
        self.body = body or {}
        self.category = category_for_status(status_code)
        super().__init__(f"{status_code}: {message}" if message else str(status_code))


class UnexpectedError(SurveyError):
    """Anything that fits no other category."""

    category = ErrorCategory.UNKNOWN
