"""Booking operations against the marketplace backend.

Calls only. The transition gate lives in ``admin_console.domain.booking_state``
and is applied by callers (screens and API routes) before a mutation.
"""

import logging

from admin_console.domain.booking_state import DEFAULT_UPDATE_REASON, resolve_cancel_reason
from admin_console.domain.status import StatusVocabulary, to_backend
from admin_console.schemas.booking import BookingDetail, BookingList
from admin_console.services.backend_client import BackendClient, adapt
from admin_console.services.query import FilterState, to_query_params

logger = logging.getLogger(__name__)

BOOKINGS_PATH = "/admin/bookings"


class BookingService:
    """Service for admin booking operations."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def list_bookings(self, filters: FilterState) -> BookingList:
        response = await self.client.get(
            BOOKINGS_PATH,
            params=to_query_params(filters, StatusVocabulary.BOOKING),
            error_message="An error occurred while fetching bookings",
        )
        return adapt(BookingList.from_wire, response.data, "bookings list")

    async def get_booking(self, booking_id: str) -> BookingDetail:
        response = await self.client.get(
            f"{BOOKINGS_PATH}/{booking_id}",
            error_message="An error occurred while fetching booking details",
            resource="Booking",
            resource_id=booking_id,
        )
        data = response.data or {}
        booking = data.get("booking", data) if isinstance(data, dict) else {}
        return adapt(BookingDetail.from_wire, booking, "booking")

    async def cancel_booking(self, booking_id: str, reason: str | None = None) -> str:
        """Cancel a booking with a single backend call.

        Args:
            booking_id: Booking to cancel
            reason: Cancellation reason; blank uses the default admin reason

        Returns:
            Backend confirmation message
        """
        resolved = resolve_cancel_reason(reason)
        logger.info(f"Cancelling booking {booking_id} (reason: {resolved!r})")
        response = await self.client.post(
            f"{BOOKINGS_PATH}/{booking_id}/cancel",
            json_body={"reason": resolved},
            error_message="Failed to cancel booking",
            resource="Booking",
            resource_id=booking_id,
        )
        return response.message or "Booking cancelled successfully"

    async def update_booking_status(
        self,
        booking_id: str,
        status: str,
        reason: str | None = None,
    ) -> str:
        """Set a booking's status; UI tokens are translated to backend values."""
        backend_status = to_backend(status, StatusVocabulary.BOOKING).upper()
        logger.info(f"Updating booking {booking_id} status to {backend_status}")
        response = await self.client.put(
            f"{BOOKINGS_PATH}/{booking_id}/status",
            json_body={"status": backend_status, "reason": reason or DEFAULT_UPDATE_REASON},
            error_message="Failed to update booking status",
            resource="Booking",
            resource_id=booking_id,
        )
        return response.message or "Booking status updated successfully"

    async def assign_provider(
        self,
        booking_id: str,
        provider_id: str,
        notes: str | None = None,
    ) -> str:
        logger.info(f"Assigning provider {provider_id} to booking {booking_id}")
        response = await self.client.post(
            f"{BOOKINGS_PATH}/{booking_id}/assign",
            json_body={"provider_id": provider_id, "notes": notes or None},
            error_message="Failed to assign provider",
            resource="Booking",
            resource_id=booking_id,
        )
        return response.message or "Provider assigned successfully"
