"""Pydantic view models and wire adapters."""

from admin_console.schemas.booking import (
    AssignProviderRequest,
    BookingDetail,
    BookingList,
    BookingSummary,
    CancelBookingRequest,
    UpdateBookingStatusRequest,
)
from admin_console.schemas.common import ConsoleModel, Pagination
from admin_console.schemas.provider import (
    AccountActionRequest,
    DocumentVerification,
    KycDocument,
    ProviderDetail,
    ProviderList,
    ProviderStats,
    ProviderStatusChange,
    ProviderSummary,
    RejectProviderRequest,
    VerifyDocumentRequest,
)

__all__ = [
    "AccountActionRequest",
    "AssignProviderRequest",
    "BookingDetail",
    "BookingList",
    "BookingSummary",
    "CancelBookingRequest",
    "ConsoleModel",
    "DocumentVerification",
    "KycDocument",
    "Pagination",
    "ProviderDetail",
    "ProviderList",
    "ProviderStats",
    "ProviderStatusChange",
    "ProviderSummary",
    "RejectProviderRequest",
    "UpdateBookingStatusRequest",
    "VerifyDocumentRequest",
]
