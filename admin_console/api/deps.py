"""API dependencies: backend client, services and mutation locks."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, Request

from admin_console.core.exceptions import MutationInProgress
from admin_console.services.backend_client import BackendClient
from admin_console.services.booking_service import BookingService
from admin_console.services.provider_service import ProviderService


class VerificationLocks:
    """One lock per provider; a second verification while one runs is refused."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        if lock.locked():
            raise MutationInProgress("A KYC verification is already in progress for this provider")
        try:
            async with lock:
                yield
        finally:
            # Nobody ever waits on these locks, so a released one can go
            if not lock.locked() and self._locks.get(key) is lock:
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


def get_backend_client(request: Request) -> BackendClient:
    """Backend client created in the application lifespan."""
    return request.app.state.backend_client


def get_verification_locks(request: Request) -> VerificationLocks:
    return request.app.state.verification_locks


def get_booking_service(
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> BookingService:
    return BookingService(client)


def get_provider_service(
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> ProviderService:
    return ProviderService(client)


BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
ProviderServiceDep = Annotated[ProviderService, Depends(get_provider_service)]
VerificationLocksDep = Annotated[VerificationLocks, Depends(get_verification_locks)]
