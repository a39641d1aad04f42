"""Booking transition gate."""

from enum import Enum

from admin_console.core.exceptions import InvalidBookingStatus
from admin_console.domain.status import BookingStatus, parse_booking_status

DEFAULT_CANCEL_REASON = "Cancelled by admin"
DEFAULT_UPDATE_REASON = "Updated by admin"


class BookingAction(str, Enum):
    """Admin actions offered on a booking."""

    CANCEL = "cancel"
    EDIT = "edit"
    REASSIGN = "reassign"


TERMINAL_BOOKING_STATUSES = frozenset({BookingStatus.CANCELED, BookingStatus.COMPLETED})

# Actions offered while a booking is not terminal. Terminal bookings get none.
OPEN_BOOKING_ACTIONS = frozenset({BookingAction.CANCEL, BookingAction.EDIT, BookingAction.REASSIGN})


def is_terminal(status: str | BookingStatus | None) -> bool:
    return parse_booking_status(status) in TERMINAL_BOOKING_STATUSES


def available_actions(status: str | BookingStatus | None) -> frozenset[BookingAction]:
    if is_terminal(status):
        return frozenset()
    return OPEN_BOOKING_ACTIONS


def can_cancel(status: str | BookingStatus | None) -> bool:
    return BookingAction.CANCEL in available_actions(status)


def can_edit(status: str | BookingStatus | None) -> bool:
    return BookingAction.EDIT in available_actions(status)


def can_reassign(status: str | BookingStatus | None) -> bool:
    return BookingAction.REASSIGN in available_actions(status)


def assert_booking_action(status: str | BookingStatus | None, action: BookingAction) -> None:
    """Raise if ``action`` is not offered for a booking in ``status``."""
    if action not in available_actions(status):
        parsed = parse_booking_status(status)
        label = parsed.value.lower() if parsed != BookingStatus.UNKNOWN else str(status)
        raise InvalidBookingStatus(
            f"Cannot {action.value} {label} bookings. "
            "Only pending, accepted, or in-progress bookings can be changed."
        )


def resolve_cancel_reason(reason: str | None) -> str:
    """Cancellation reason sent to the backend; blank falls back to the default."""
    if reason is None or not reason.strip():
        return DEFAULT_CANCEL_REASON
    return reason.strip()
