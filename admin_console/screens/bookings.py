"""Bookings list and booking detail screen controllers."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from admin_console.core.exceptions import AppException, NotFoundError
from admin_console.domain.account_state import ConfirmationPrompt, ConfirmationStyle
from admin_console.domain.booking_state import (
    BookingAction,
    assert_booking_action,
    can_cancel,
    resolve_cancel_reason,
)
from admin_console.domain.status import BookingStatus
from admin_console.schemas.booking import BookingDetail, BookingSummary
from admin_console.schemas.common import Pagination
from admin_console.screens.base import (
    BOOKINGS_ROUTE,
    ConsoleContext,
    FlowResult,
    FlowStage,
    Screen,
)
from admin_console.services.query import Debouncer, FilterState

logger = logging.getLogger(__name__)

CANCEL_PROMPT = ConfirmationPrompt(
    title="Cancel Booking",
    description="Are you sure you want to cancel this booking? This action cannot be undone.",
    confirm_label="Cancel Booking",
    style=ConfirmationStyle.DESTRUCTIVE,
)


class CancellationFlow:
    """guard → confirm → reason → mutate for a single booking.

    ``active`` is held from the guard until the flow ends, dialog included,
    so a second run started meanwhile stops at the guard. ``in_flight`` is
    true only for the backend call. Both are cleared on every exit.
    """

    def __init__(self, ctx: ConsoleContext) -> None:
        self.ctx = ctx
        self.active = False
        self.in_flight = False

    async def run(
        self,
        booking_id: str,
        status: BookingStatus | str | None,
        reason: str | None = None,
    ) -> FlowResult:
        if self.active:
            return FlowResult.stopped(FlowStage.GUARD)
        try:
            assert_booking_action(status, BookingAction.CANCEL)
        except AppException as exc:
            logger.warning(f"Cancel refused for booking {booking_id}: {exc.message}")
            return FlowResult.stopped(FlowStage.GUARD, exc.message)

        self.active = True
        try:
            if reason is None:
                answer = await self.ctx.dialogs.confirm(CANCEL_PROMPT, ask_reason=True)
                if not answer.confirmed:
                    return FlowResult.stopped(FlowStage.CONFIRM)
                reason = answer.reason
            resolved = resolve_cancel_reason(reason)
            return await self._mutate(booking_id, resolved)
        finally:
            self.active = False

    async def _mutate(self, booking_id: str, reason: str) -> FlowResult:
        self.in_flight = True
        try:
            message = await self.ctx.bookings.cancel_booking(booking_id, reason)
        except AppException as exc:
            return FlowResult.stopped(FlowStage.MUTATE, exc.message)
        finally:
            self.in_flight = False
        return FlowResult.done(message=message, value=reason)


class BookingListScreen(Screen):
    """Filterable, paginated bookings list.

    Filter edits update state immediately; only the fetch is debounced.
    Responses that are not from the most recent request are discarded.
    """

    def __init__(self, ctx: ConsoleContext, filters: FilterState | None = None, debounce: float | None = None) -> None:
        super().__init__(ctx)
        self.filters = filters or FilterState()
        self.bookings: list[BookingSummary] = []
        self.pagination = Pagination()
        self.cancellation = CancellationFlow(ctx)
        self.updating_booking_id: str | None = None
        self._debouncer: Debouncer[FilterState] = Debouncer(self._fetch, debounce)
        self._request_seq = 0

    def unmount(self) -> None:
        self._debouncer.cancel()
        super().unmount()

    async def refresh(self) -> None:
        await self._fetch(self.filters)

    def set_filters(self, **changes: Any) -> None:
        self.filters = self.filters.with_changes(**changes)
        self._debouncer.trigger(self.filters)

    async def settle(self) -> None:
        """Wait for any pending debounced fetch."""
        await self._debouncer.wait()

    async def go_to_page(self, page: int) -> None:
        self.filters = self.filters.with_page(page)
        await self.refresh()

    async def _fetch(self, filters: FilterState) -> None:
        self._request_seq += 1
        seq = self._request_seq
        self.loading = True
        try:
            result = await self.ctx.bookings.list_bookings(filters)
        except AppException as exc:
            if seq == self._request_seq:
                self.apply(lambda: self._set_error(exc.message))
            return
        if seq != self._request_seq:
            logger.debug(f"Discarding stale bookings response #{seq}")
            return

        def update() -> None:
            self.bookings = result.bookings
            self.pagination = result.pagination
            self.error = None
            self.loading = False

        self.apply(update)

    def _set_error(self, message: str) -> None:
        self.error = message
        self.loading = False

    def find(self, booking_id: str) -> BookingSummary | None:
        for booking in self.bookings:
            if booking.id == booking_id:
                return booking
        return None

    def can_cancel(self, booking: BookingSummary) -> bool:
        return can_cancel(booking.status) and not self.cancellation.active

    async def cancel_booking(self, booking_id: str, reason: str | None = None) -> FlowResult:
        booking = self.find(booking_id)
        if booking is None:
            return FlowResult.stopped(FlowStage.GUARD, "Booking not found")
        result = await self.cancellation.run(booking_id, booking.status, reason)
        if result.ok:
            await self.refresh()
            if self.error:
                result.warning = self.error
                self.apply(lambda: self._mark_cancelled(booking_id))
        return result

    def _mark_cancelled(self, booking_id: str) -> None:
        self.bookings = [
            booking.model_copy(update={"status": BookingStatus.CANCELED, "status_raw": BookingStatus.CANCELED.value})
            if booking.id == booking_id
            else booking
            for booking in self.bookings
        ]

    async def update_status(self, booking_id: str, status: str, reason: str | None = None) -> FlowResult:
        return await self._guarded_mutation(
            booking_id,
            BookingAction.EDIT,
            lambda: self.ctx.bookings.update_booking_status(booking_id, status, reason),
        )

    async def assign_provider(self, booking_id: str, provider_id: str, notes: str | None = None) -> FlowResult:
        return await self._guarded_mutation(
            booking_id,
            BookingAction.REASSIGN,
            lambda: self.ctx.bookings.assign_provider(booking_id, provider_id, notes),
        )

    async def _guarded_mutation(
        self,
        booking_id: str,
        action: BookingAction,
        call: Callable[[], Awaitable[str]],
    ) -> FlowResult:
        booking = self.find(booking_id)
        if booking is None:
            return FlowResult.stopped(FlowStage.GUARD, "Booking not found")
        if self.updating_booking_id is not None:
            return FlowResult.stopped(FlowStage.GUARD)
        try:
            assert_booking_action(booking.status, action)
        except AppException as exc:
            logger.warning(f"{action.value} refused for booking {booking_id}: {exc.message}")
            return FlowResult.stopped(FlowStage.GUARD, exc.message)

        self.updating_booking_id = booking_id
        try:
            message = await call()
        except AppException as exc:
            return FlowResult.stopped(FlowStage.MUTATE, exc.message)
        finally:
            self.updating_booking_id = None

        await self.refresh()
        return FlowResult.done(message=message)


class BookingDetailScreen(Screen):
    """Single booking with its history and the cancel control."""

    def __init__(self, ctx: ConsoleContext, booking_id: str) -> None:
        super().__init__(ctx)
        self.booking_id = booking_id
        self.booking: BookingDetail | None = None
        self.not_found = False
        self.cancellation = CancellationFlow(ctx)

    @property
    def is_cancelling(self) -> bool:
        return self.cancellation.in_flight

    @property
    def cancel_offered(self) -> bool:
        return self.booking is not None and can_cancel(self.booking.status)

    @property
    def cancel_enabled(self) -> bool:
        return self.cancel_offered and not self.cancellation.active

    async def refresh(self) -> None:
        self.loading = True
        try:
            booking = await self.ctx.bookings.get_booking(self.booking_id)
        except NotFoundError:
            self.apply(self._mark_not_found)
            return
        except AppException as exc:
            self.apply(lambda: self._set_error(exc.message))
            return

        def update() -> None:
            self.booking = booking
            self.not_found = False
            self.error = None
            self.loading = False

        self.apply(update)

    def _mark_not_found(self) -> None:
        self.booking = None
        self.not_found = True
        self.loading = False

    def _set_error(self, message: str) -> None:
        self.error = message
        self.loading = False

    def _mark_cancelled(self) -> None:
        if self.booking is not None:
            self.booking = self.booking.model_copy(
                update={"status": BookingStatus.CANCELED, "status_raw": BookingStatus.CANCELED.value}
            )

    async def cancel(self, reason: str | None = None) -> FlowResult:
        """Run the cancellation flow; navigates back to the list on success only."""
        if self.booking is None:
            return FlowResult.stopped(FlowStage.GUARD, "Booking not loaded")

        result = await self.cancellation.run(self.booking_id, self.booking.status, reason)
        if not result.ok:
            if result.error and result.stage == FlowStage.MUTATE:
                self.apply(lambda: setattr(self, "error", result.error))
            return result

        await self.refresh()
        if self.error:
            # The cancel itself went through; never offer it again on stale data
            logger.warning(f"Booking {self.booking_id} cancelled but refetch failed: {self.error}")
            result.warning = self.error
            self.apply(self._mark_cancelled)

        if self.mounted:
            self.ctx.navigator.go(BOOKINGS_ROUTE)
        return result
