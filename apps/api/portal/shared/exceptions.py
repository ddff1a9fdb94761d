# apps/api/portal/shared/exceptions.py
from typing import Optional

from fastapi import HTTPException, status


class BaseHTTPException(HTTPException):
    """
    HTTPException with a class-level status code and default message.

    Subclasses override ``status_code`` and ``message``; a custom message can
    still be passed per instance.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"
    retryable: bool = False

    def __init__(
        self, message: Optional[str] = None, headers: Optional[dict[str, str]] = None
    ) -> None:
        super().__init__(
            status_code=self.status_code,
            detail=message or self.message,
            headers=headers,
        )


# Authentication & Authorization Exceptions
class InvalidTokenError(HTTPException):
    def __init__(self, message: str = "Missing or invalid token") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=message)


class NotAuthorizedError(HTTPException):
    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=message)


class NotOrganisationMemberError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this organisation",
        )


# Resource Not Found Exceptions
class ResourceNotFoundError(BaseHTTPException):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


# Validation / Request Exceptions
class InvalidDataError(HTTPException):
    def __init__(self, message: str = "Invalid request data") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class QueryValidationError(BaseHTTPException):
    """Raised for malformed pagination, filter or sort parameters."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid query parameters"


# Infrastructure Exceptions
class BackingStoreUnavailableError(BaseHTTPException):
    """Raised when the database times out or cannot be reached. Safe to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Failed to load data, please retry"
    retryable = True

    def __init__(
        self, message: Optional[str] = None, retry_after: Optional[int] = None
    ) -> None:
        headers = {"Retry-After": str(retry_after)} if retry_after else None
        super().__init__(message, headers=headers)
