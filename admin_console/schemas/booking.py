"""Booking view models and the wire adapter that builds them."""

from datetime import datetime
from typing import Any

from pydantic import Field, computed_field, field_validator

from admin_console.domain.booking_state import BookingAction, available_actions
from admin_console.domain.status import (
    BookingStatus,
    PaymentStatus,
    StatusVocabulary,
    display_label,
    parse_booking_status,
    parse_payment_status,
)
from admin_console.schemas.common import ConsoleModel, Pagination

NOT_AVAILABLE = "N/A"


def _nested(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _first(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return default


def _format_address(address: Any) -> str:
    if isinstance(address, dict):
        return _first(address.get("full_address"), address.get("address_line1"), default=NOT_AVAILABLE)
    return _first(address, default=NOT_AVAILABLE)


def _time_of_day(value: str) -> str:
    """HH:MM from an ISO timestamp, or the first five characters of a plain time."""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%H:%M")
    except ValueError:
        return value[:5]


def _booking_date_time(data: dict[str, Any]) -> str:
    scheduled_date = data.get("scheduled_date")
    if not scheduled_date:
        return data.get("created_at") or ""
    if data.get("scheduled_time"):
        return f"{scheduled_date} {data['scheduled_time']}"
    if data.get("scheduled_time_start"):
        return f"{scheduled_date} {_time_of_day(data['scheduled_time_start'])}"
    return str(scheduled_date)


class BookingStatusView(ConsoleModel):
    """Adds badge labels and the admin actions derived from ``status``."""

    status: BookingStatus
    status_raw: str

    @computed_field
    @property
    def status_label(self) -> str:
        return display_label(self.status_raw, StatusVocabulary.BOOKING)

    @computed_field
    @property
    def allowed_actions(self) -> list[BookingAction]:
        return sorted(available_actions(self.status), key=lambda action: action.value)


class BookingSummary(BookingStatusView):
    """Row in the bookings list."""

    id: str
    user_name: str = NOT_AVAILABLE
    provider_name: str = NOT_AVAILABLE
    service: str = NOT_AVAILABLE
    date_time: str = ""
    amount: float = 0
    payment_type: str = NOT_AVAILABLE
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_status_raw: str = "pending"
    address: str = NOT_AVAILABLE
    phone: str = NOT_AVAILABLE
    user_id: str | None = None
    provider_id: str | None = None
    service_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    notes: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "BookingSummary":
        user = _nested(data, "user")
        provider = _nested(data, "provider")
        status_raw = data.get("status") or "pending"
        payment_status_raw = data.get("payment_status") or "pending"
        return cls(
            id=str(_first(data.get("booking_id"), data.get("id"), default="")),
            user_name=_first(user.get("name"), data.get("user_name"), default=NOT_AVAILABLE),
            provider_name=_first(
                provider.get("name"),
                data.get("provider_name"),
                provider.get("business_name"),
                default=NOT_AVAILABLE,
            ),
            service=_first(data.get("service"), data.get("service_name"), default=NOT_AVAILABLE),
            date_time=_booking_date_time(data),
            status=parse_booking_status(status_raw),
            status_raw=status_raw,
            amount=_first(data.get("amount"), default=0),
            payment_type=_first(data.get("payment_method"), data.get("payment_type"), default=NOT_AVAILABLE),
            payment_status=parse_payment_status(payment_status_raw),
            payment_status_raw=payment_status_raw,
            address=_format_address(data.get("address")),
            phone=_first(user.get("phone"), data.get("phone"), default=NOT_AVAILABLE),
            user_id=_first(user.get("user_id"), data.get("user_id")),
            provider_id=_first(provider.get("provider_id"), data.get("provider_id")),
            service_id=data.get("service_id"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            notes=data.get("notes"),
        )


class BookingList(ConsoleModel):
    bookings: list[BookingSummary]
    pagination: Pagination

    @classmethod
    def from_wire(cls, data: dict[str, Any] | None) -> "BookingList":
        data = data or {}
        return cls(
            bookings=[BookingSummary.from_wire(row) for row in data.get("bookings") or []],
            pagination=Pagination.from_wire(data.get("pagination")),
        )


class BookingUser(ConsoleModel):
    user_id: str = ""
    name: str = NOT_AVAILABLE
    email: str | None = None
    phone: str | None = None


class BookingProvider(ConsoleModel):
    provider_id: str = ""
    name: str = NOT_AVAILABLE
    email: str | None = None
    phone: str | None = None
    assignment_status: str | None = None
    assignment_id: str | None = None


class SubService(ConsoleModel):
    sub_service_id: str = ""
    name: str = NOT_AVAILABLE
    category: str | None = None


class Bucket(ConsoleModel):
    bucket_id: str = ""
    name: str = NOT_AVAILABLE


class BookingItem(ConsoleModel):
    """Service line item. Read-only once the booking exists."""

    service_name: str = NOT_AVAILABLE
    sub_service: SubService | None = None
    bucket: Bucket | None = None
    quantity: int = 1
    unit_price: float = 0
    total_price: float = 0


class BookingPricing(ConsoleModel):
    subtotal: float = 0
    tax: float = 0
    discount: float = 0
    total: float = 0


class BookingPayment(ConsoleModel):
    payment_id: str = ""
    status: PaymentStatus
    status_raw: str
    gateway: str | None = None
    amount: float = 0

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> PaymentStatus:
        return parse_payment_status(value)

    @computed_field
    @property
    def status_label(self) -> str:
        return display_label(self.status_raw, StatusVocabulary.PAYMENT)


class ChangedBy(ConsoleModel):
    name: str = NOT_AVAILABLE
    role: str | None = None


class StatusHistoryEntry(ConsoleModel):
    """One backend-recorded status change."""

    status: BookingStatus
    status_raw: str
    changed_at: str | None = None
    changed_by: ChangedBy | None = None
    reason: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> BookingStatus:
        return parse_booking_status(value)

    @computed_field
    @property
    def status_label(self) -> str:
        return display_label(self.status_raw, StatusVocabulary.BOOKING)


def _with_raw_status(data: dict[str, Any] | None) -> dict[str, Any] | None:
    if not data:
        return None
    return {**data, "status": data.get("status"), "status_raw": data.get("status") or ""}


class BookingDetail(BookingStatusView):
    """Full booking as shown on the detail screen."""

    booking_id: str
    user: BookingUser | None = None
    provider: BookingProvider | None = None
    address: Any = None
    scheduled_date: str | None = None
    scheduled_time_start: str | None = None
    scheduled_time_end: str | None = None
    items: list[BookingItem] = Field(default_factory=list)
    pricing: BookingPricing | None = None
    payment: BookingPayment | None = None
    status_history: list[StatusHistoryEntry] = Field(default_factory=list)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "BookingDetail":
        status_raw = data.get("status") or ""
        return cls.model_validate(
            {
                **data,
                "booking_id": str(_first(data.get("booking_id"), data.get("id"), default="")),
                "status": parse_booking_status(status_raw),
                "status_raw": status_raw,
                "items": [item for item in data.get("items") or [] if isinstance(item, dict)],
                "payment": _with_raw_status(data.get("payment")),
                "status_history": [
                    _with_raw_status(entry)
                    for entry in data.get("status_history") or []
                    if isinstance(entry, dict) and entry
                ],
            }
        )


class CancelBookingRequest(ConsoleModel):
    """Schema for cancelling a booking. A blank reason uses the default."""

    reason: str | None = Field(None, max_length=500)


class UpdateBookingStatusRequest(ConsoleModel):
    """Schema for an admin status edit. ``status`` may be a UI token or a backend value."""

    status: str = Field(..., min_length=1)
    reason: str | None = Field(None, max_length=500)


class AssignProviderRequest(ConsoleModel):
    provider_id: str = Field(..., min_length=1)
    notes: str | None = Field(None, max_length=1000)
