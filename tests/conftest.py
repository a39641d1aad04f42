"""Shared fixtures: a fake marketplace backend behind httpx.MockTransport."""

import json
from collections import defaultdict
from typing import Any

import httpx
import pytest

from admin_console.domain.account_state import ConfirmationPrompt
from admin_console.screens.base import ConsoleContext, DialogResult
from admin_console.services.backend_client import BackendClient
from admin_console.services.booking_service import BookingService
from admin_console.services.provider_service import ProviderService

BACKEND_URL = "http://backend.test/api/v1"
BACKEND_PREFIX = "/api/v1"


def envelope(data: Any = None, message: str = "OK", status: int = 1) -> dict[str, Any]:
    return {"status": status, "message": message, "data": data if data is not None else {}}


class FakeBackend:
    """Canned responses keyed by (method, path); records every request.

    Responses queued for a route are served in order; the last one repeats.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = defaultdict(list)
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, body: Any = None, status_code: int = 200) -> None:
        self.routes[(method, path)].append(httpx.Response(status_code, json=body))

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self.routes[(method, path)].append(exc)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(BACKEND_PREFIX)
        queue = self.routes.get((request.method, path))
        if not queue:
            return httpx.Response(404, json={"status": 0, "message": f"No route for {path}"})
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path.removeprefix(BACKEND_PREFIX) == path
        ]

    @staticmethod
    def body(request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content or b"{}")


class ScriptedDialogs:
    """Answers confirmation dialogs from a preset script."""

    def __init__(self, confirmed: bool = True, reason: str | None = None) -> None:
        self.confirmed = confirmed
        self.reason = reason
        self.prompts: list[ConfirmationPrompt] = []

    async def confirm(self, prompt: ConfirmationPrompt, *, ask_reason: bool = False) -> DialogResult:
        self.prompts.append(prompt)
        return DialogResult(confirmed=self.confirmed, reason=self.reason if ask_reason else None)


class RecordingNavigator:
    def __init__(self) -> None:
        self.routes: list[str] = []

    def go(self, route: str) -> None:
        self.routes.append(route)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def client(backend: FakeBackend):
    client = BackendClient(
        base_url=BACKEND_URL,
        token="test-token",
        transport=httpx.MockTransport(backend.handler),
    )
    yield client
    await client.close()


@pytest.fixture
def booking_service(client: BackendClient) -> BookingService:
    return BookingService(client)


@pytest.fixture
def provider_service(client: BackendClient) -> ProviderService:
    return ProviderService(client)


@pytest.fixture
def dialogs() -> ScriptedDialogs:
    return ScriptedDialogs()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def ctx(booking_service, provider_service, dialogs, navigator) -> ConsoleContext:
    return ConsoleContext(
        bookings=booking_service,
        providers=provider_service,
        dialogs=dialogs,
        navigator=navigator,
    )
