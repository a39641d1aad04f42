from admin_console.services.backend_client import BackendClient, BackendResponse
from admin_console.services.booking_service import BookingService
from admin_console.services.provider_service import ProviderService, compute_provider_stats
from admin_console.services.query import Debouncer, FilterState, to_query_params

__all__ = [
    "BackendClient",
    "BackendResponse",
    "BookingService",
    "Debouncer",
    "FilterState",
    "ProviderService",
    "compute_provider_stats",
    "to_query_params",
]
