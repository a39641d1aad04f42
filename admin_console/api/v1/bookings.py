"""Admin booking endpoints."""

import logging
from datetime import date

from fastapi import APIRouter, Query

from admin_console.api.deps import BookingServiceDep
from admin_console.core.exceptions import InvalidBookingStatus
from admin_console.domain.booking_state import BookingAction, assert_booking_action
from admin_console.schemas.booking import (
    AssignProviderRequest,
    BookingDetail,
    BookingList,
    CancelBookingRequest,
    UpdateBookingStatusRequest,
)
from admin_console.services.query import ALL, FilterState

logger = logging.getLogger(__name__)

router = APIRouter()


def _require(booking: BookingDetail, action: BookingAction) -> None:
    try:
        assert_booking_action(booking.status, action)
    except InvalidBookingStatus:
        logger.warning(f"Refused {action.value} on booking {booking.booking_id} ({booking.status_raw})")
        raise


@router.get("", response_model=BookingList)
async def list_bookings(
    service: BookingServiceDep,
    search: str = Query(default=""),
    status_filter: str = Query(default=ALL, alias="status"),
    payment_status: str = Query(default=ALL),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
) -> BookingList:
    """List bookings with search, status, payment and date-range filters."""
    filters = FilterState(
        search=search,
        status=status_filter,
        payment_status=payment_status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        **({"page_size": limit} if limit else {}),
    )
    return await service.list_bookings(filters)


@router.get("/{booking_id}", response_model=BookingDetail)
async def get_booking(booking_id: str, service: BookingServiceDep) -> BookingDetail:
    """Get booking details with items, payment and status history."""
    return await service.get_booking(booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingDetail)
async def cancel_booking(
    booking_id: str,
    request: CancelBookingRequest,
    service: BookingServiceDep,
) -> BookingDetail:
    """Cancel an open booking and return it as refetched from the backend."""
    booking = await service.get_booking(booking_id)
    _require(booking, BookingAction.CANCEL)

    await service.cancel_booking(booking_id, request.reason)
    return await service.get_booking(booking_id)


@router.put("/{booking_id}/status", response_model=BookingDetail)
async def update_booking_status(
    booking_id: str,
    request: UpdateBookingStatusRequest,
    service: BookingServiceDep,
) -> BookingDetail:
    """Change the status of an open booking."""
    booking = await service.get_booking(booking_id)
    _require(booking, BookingAction.EDIT)

    await service.update_booking_status(booking_id, request.status, request.reason)
    return await service.get_booking(booking_id)


@router.post("/{booking_id}/assign", response_model=BookingDetail)
async def assign_provider(
    booking_id: str,
    request: AssignProviderRequest,
    service: BookingServiceDep,
) -> BookingDetail:
    """Assign a different provider to an open booking."""
    booking = await service.get_booking(booking_id)
    _require(booking, BookingAction.REASSIGN)

    await service.assign_provider(booking_id, request.provider_id, request.notes)
    return await service.get_booking(booking_id)
