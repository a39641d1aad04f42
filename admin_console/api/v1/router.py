"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from admin_console.api.v1 import bookings, providers

api_router = APIRouter()

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Providers and KYC
api_router.include_router(providers.router, prefix="/providers", tags=["Providers"])
