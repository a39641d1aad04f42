"""Screen controller plumbing: context, flow results and mount tracking."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from admin_console.domain.account_state import ConfirmationPrompt
from admin_console.services.booking_service import BookingService
from admin_console.services.provider_service import ProviderService

logger = logging.getLogger(__name__)

BOOKINGS_ROUTE = "/admin/bookings"
PROVIDERS_ROUTE = "/admin/providers"


@dataclass
class DialogResult:
    confirmed: bool
    reason: str | None = None


class Dialogs(Protocol):
    """Confirmation dialogs owned by the UI."""

    async def confirm(self, prompt: ConfirmationPrompt, *, ask_reason: bool = False) -> DialogResult:
        ...


class Navigator(Protocol):
    def go(self, route: str) -> None:
        ...


@dataclass
class ConsoleContext:
    """Everything a screen needs, passed in explicitly.

    Lives as long as the screens that hold it; nothing here is process-wide.
    """

    bookings: BookingService
    providers: ProviderService
    dialogs: Dialogs
    navigator: Navigator


class FlowStage(str, Enum):
    """Named stages of a guarded mutation."""

    GUARD = "guard"
    CONFIRM = "confirm"
    REASON = "reason"
    MUTATE = "mutate"
    REFRESH = "refresh"
    NAVIGATE = "navigate"
    DONE = "done"


@dataclass
class FlowResult:
    """Outcome of a flow: where it stopped and why."""

    ok: bool
    stage: FlowStage
    error: str | None = None
    message: str | None = None
    value: Any = None
    # Set when the mutation went through but a later step did not
    warning: str | None = None

    @classmethod
    def done(cls, message: str | None = None, value: Any = None) -> "FlowResult":
        return cls(ok=True, stage=FlowStage.DONE, message=message, value=value)

    @classmethod
    def stopped(cls, stage: FlowStage, error: str | None = None) -> "FlowResult":
        return cls(ok=False, stage=stage, error=error)

    @property
    def dismissed(self) -> bool:
        """The admin backed out of the confirmation dialog."""
        return not self.ok and self.stage == FlowStage.CONFIRM and self.error is None


class Screen:
    """Base screen controller.

    Results of requests that finish after :meth:`unmount` are dropped.
    """

    def __init__(self, ctx: ConsoleContext) -> None:
        self.ctx = ctx
        self.mounted = False
        self.loading = False
        self.error: str | None = None

    async def mount(self) -> None:
        self.mounted = True
        await self.refresh()

    def unmount(self) -> None:
        self.mounted = False

    async def refresh(self) -> None:
        raise NotImplementedError

    def apply(self, update: Callable[[], None]) -> bool:
        """Run ``update`` against screen state unless the screen is gone."""
        if not self.mounted:
            logger.debug(f"{type(self).__name__} unmounted; dropping result")
            return False
        update()
        return True
