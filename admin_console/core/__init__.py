"""Core utilities: exceptions, network error helpers, logging and middleware."""

from admin_console.core.exceptions import (
    AppException,
    InvalidBookingStatus,
    InvalidTransition,
    MutationInProgress,
    NotFoundError,
    RequestError,
    ValidationError,
)
from admin_console.core.network import (
    extract_error_message,
    is_network_error,
    network_error_message,
)

__all__ = [
    "AppException",
    "InvalidBookingStatus",
    "InvalidTransition",
    "MutationInProgress",
    "NotFoundError",
    "RequestError",
    "ValidationError",
    "extract_error_message",
    "is_network_error",
    "network_error_message",
]
