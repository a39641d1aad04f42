from admin_console.screens.base import (
    BOOKINGS_ROUTE,
    PROVIDERS_ROUTE,
    ConsoleContext,
    DialogResult,
    FlowResult,
    FlowStage,
    Screen,
)
from admin_console.screens.bookings import BookingDetailScreen, BookingListScreen, CancellationFlow
from admin_console.screens.providers import ProviderDetailScreen, ProviderListScreen

__all__ = [
    "BOOKINGS_ROUTE",
    "PROVIDERS_ROUTE",
    "BookingDetailScreen",
    "BookingListScreen",
    "CancellationFlow",
    "ConsoleContext",
    "DialogResult",
    "FlowResult",
    "FlowStage",
    "ProviderDetailScreen",
    "ProviderListScreen",
    "Screen",
]
