"""Booking and payment status vocabularies.

The console speaks two dialects for each vocabulary: lower-case UI tokens
used by filters and badges (``in-progress``, ``paid``) and the backend's
upper-case enum values (``IN_PROGRESS``, ``SUCCESS``). The tables below map
between them. Tokens missing from a table pass through untouched so a new
backend value is shown as-is instead of being dropped.
"""

from enum import Enum


class StatusVocabulary(str, Enum):
    """Independent status vocabularies known to the normalizer."""

    BOOKING = "booking"
    PAYMENT = "payment"


class BookingStatus(str, Enum):
    """Backend booking status."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    RESCHEDULED = "RESCHEDULED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"


class PaymentStatus(str, Enum):
    """Backend payment status."""

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


BOOKING_UI_TO_BACKEND: dict[str, str] = {
    "pending": BookingStatus.PENDING.value,
    "accepted": BookingStatus.ACTIVE.value,
    "in-progress": BookingStatus.IN_PROGRESS.value,
    "completed": BookingStatus.COMPLETED.value,
    "cancelled": BookingStatus.CANCELED.value,
}

PAYMENT_UI_TO_BACKEND: dict[str, str] = {
    "pending": PaymentStatus.PENDING.value,
    "paid": PaymentStatus.SUCCESS.value,
    "failed": PaymentStatus.FAILED.value,
    "refunded": PaymentStatus.REFUNDED.value,
    "partially-paid": PaymentStatus.PARTIALLY_REFUNDED.value,
}

_UI_TO_BACKEND = {
    StatusVocabulary.BOOKING: BOOKING_UI_TO_BACKEND,
    StatusVocabulary.PAYMENT: PAYMENT_UI_TO_BACKEND,
}

_BACKEND_TO_UI = {
    vocabulary: {backend: ui for ui, backend in table.items()}
    for vocabulary, table in _UI_TO_BACKEND.items()
}

BOOKING_LABELS: dict[BookingStatus, str] = {
    BookingStatus.PENDING: "Pending",
    BookingStatus.ACTIVE: "Accepted",
    BookingStatus.IN_PROGRESS: "In Progress",
    BookingStatus.COMPLETED: "Completed",
    BookingStatus.CANCELED: "Cancelled",
    BookingStatus.RESCHEDULED: "Rescheduled",
    BookingStatus.FAILED: "Failed",
}

PAYMENT_LABELS: dict[PaymentStatus, str] = {
    PaymentStatus.PENDING: "Pending",
    PaymentStatus.SUCCESS: "Paid",
    PaymentStatus.FAILED: "Failed",
    PaymentStatus.REFUNDED: "Refunded",
    PaymentStatus.PARTIALLY_REFUNDED: "Partially Paid",
    PaymentStatus.CANCELLED: "Cancelled",
}


def _normalize_key(raw: str) -> str:
    return raw.strip().upper().replace("-", "_").replace(" ", "_")


def _alias_table(ui_table: dict[str, str], extra: dict[str, str]) -> dict[str, str]:
    aliases = {_normalize_key(ui): backend for ui, backend in ui_table.items()}
    aliases.update(extra)
    return aliases


# Spellings seen on the wire that differ from the enum value
_BOOKING_ALIASES = _alias_table(BOOKING_UI_TO_BACKEND, {"CANCELLED": "CANCELED"})
_PAYMENT_ALIASES = _alias_table(PAYMENT_UI_TO_BACKEND, {"CANCELED": "CANCELLED"})


def to_backend(token: str, vocabulary: StatusVocabulary = StatusVocabulary.BOOKING) -> str:
    """Translate a UI token to the backend enum value; unknown tokens pass through."""
    if not token:
        return token
    return _UI_TO_BACKEND[vocabulary].get(token.strip().lower(), token)


def to_frontend(token: str, vocabulary: StatusVocabulary = StatusVocabulary.BOOKING) -> str:
    """Translate a backend enum value to the UI token; unknown tokens pass through."""
    if not token:
        return token
    return _BACKEND_TO_UI[vocabulary].get(token.strip().upper(), token)


def parse_booking_status(raw: "str | BookingStatus | None") -> BookingStatus:
    """Parse any casing or spelling of a booking status. Never raises."""
    if isinstance(raw, BookingStatus):
        return raw
    if not raw:
        return BookingStatus.UNKNOWN
    key = _normalize_key(raw)
    key = _BOOKING_ALIASES.get(key, key)
    try:
        return BookingStatus(key)
    except ValueError:
        return BookingStatus.UNKNOWN


def parse_payment_status(raw: "str | PaymentStatus | None") -> PaymentStatus:
    """Parse any casing or spelling of a payment status. Never raises."""
    if isinstance(raw, PaymentStatus):
        return raw
    if not raw:
        return PaymentStatus.UNKNOWN
    key = _normalize_key(raw)
    key = _PAYMENT_ALIASES.get(key, key)
    try:
        return PaymentStatus(key)
    except ValueError:
        return PaymentStatus.UNKNOWN


def display_label(raw: str, vocabulary: StatusVocabulary = StatusVocabulary.BOOKING) -> str:
    """Badge text for a raw backend status.

    Values the console does not know are returned verbatim.
    """
    if vocabulary == StatusVocabulary.PAYMENT:
        payment = parse_payment_status(raw)
        return PAYMENT_LABELS.get(payment, raw)
    booking = parse_booking_status(raw)
    return BOOKING_LABELS.get(booking, raw)
