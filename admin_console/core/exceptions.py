"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        self.resource = resource
        self.identifier = identifier
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class RequestError(AppException):
    """Backend request failed (transport error, HTTP error or rejected envelope)."""

    def __init__(
        self,
        detail: str = "Request to the backend failed",
        upstream_status: int | None = None,
        is_network_error: bool = False,
    ) -> None:
        self.upstream_status = upstream_status
        self.is_network_error = is_network_error
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class InvalidBookingStatus(AppException):
    """Invalid booking status for operation."""

    def __init__(self, detail: str = "This operation is not allowed for the current booking status") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidTransition(AppException):
    """State transition not allowed from the current status."""

    def __init__(self, detail: str = "This transition is not allowed from the current status") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class MutationInProgress(AppException):
    """Another mutation on the same resource is still in flight."""

    def __init__(self, detail: str = "Another update is already in progress. Please wait.") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
