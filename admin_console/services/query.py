"""List filter state and its translation to backend query parameters."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from typing import Any, Generic, TypeVar

from admin_console.config import settings
from admin_console.domain.status import StatusVocabulary, to_backend

logger = logging.getLogger(__name__)

# UI sentinel for "no filter"
ALL = "all"
DATE_FORMAT = "%Y-%m-%d"

T = TypeVar("T")


def _default_page_size() -> int:
    return settings.default_page_size


@dataclass(frozen=True)
class FilterState:
    """Ephemeral per-screen filter state. Never persisted."""

    search: str = ""
    status: str = ALL
    payment_status: str = ALL
    kyc_status: str = ALL
    category_id: str = ALL
    date_from: date | None = None
    date_to: date | None = None
    page: int = 1
    page_size: int = field(default_factory=_default_page_size)

    def with_changes(self, **changes: Any) -> "FilterState":
        """Return a new state; changing anything but ``page`` goes back to page 1."""
        names = {f.name for f in fields(self)}
        unknown = set(changes) - names
        if unknown:
            raise TypeError(f"Unknown filter fields: {', '.join(sorted(unknown))}")

        filter_changed = any(
            getattr(self, name) != value for name, value in changes.items() if name != "page"
        )
        updated = replace(self, **changes)
        if filter_changed:
            return replace(updated, page=1)
        return replace(updated, page=max(1, updated.page))

    def with_page(self, page: int) -> "FilterState":
        return replace(self, page=max(1, page))


def _is_set(value: str | None) -> bool:
    return bool(value and value.strip() and value.strip().lower() != ALL)


def format_date(value: date | datetime) -> str:
    return value.strftime(DATE_FORMAT)


def to_query_params(
    filters: FilterState,
    status_vocabulary: StatusVocabulary | None = StatusVocabulary.BOOKING,
) -> dict[str, str | int]:
    """Build backend query parameters from filter state.

    ``"all"`` and blank values are dropped. Status filters go through the
    status normalizer (providers pass ``status_vocabulary=None`` and send
    their status as-is). Dates are sent only when both bounds are set.
    """
    params: dict[str, str | int] = {
        "page": max(1, filters.page),
        "limit": filters.page_size,
    }

    if _is_set(filters.search):
        params["search"] = filters.search.strip()

    if _is_set(filters.status):
        status = filters.status.strip()
        params["status"] = to_backend(status, status_vocabulary) if status_vocabulary else status

    if _is_set(filters.payment_status):
        params["payment_status"] = to_backend(filters.payment_status.strip(), StatusVocabulary.PAYMENT)

    if _is_set(filters.kyc_status):
        params["kyc_status"] = filters.kyc_status.strip()

    if _is_set(filters.category_id):
        params["category_id"] = filters.category_id.strip()

    if filters.date_from is not None and filters.date_to is not None:
        params["start_date"] = format_date(filters.date_from)
        params["end_date"] = format_date(filters.date_to)

    return params


class Debouncer(Generic[T]):
    """Coalesce rapid triggers so only the last value within ``delay`` fires.

    Once the callback has started it is no longer cancelled by new triggers.
    """

    def __init__(self, callback: Callable[[T], Awaitable[None]], delay: float | None = None) -> None:
        self.delay = settings.filter_debounce_seconds if delay is None else delay
        self._callback = callback
        self._timer: asyncio.Task | None = None
        self._last: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def trigger(self, value: T) -> None:
        self.cancel()
        self._timer = asyncio.create_task(self._fire(value))
        self._last = self._timer

    async def _fire(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        self._timer = None
        await self._callback(value)

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def wait(self) -> None:
        """Wait for the most recent trigger to fire (or be cancelled)."""
        if self._last is None:
            return
        await asyncio.wait({self._last})
        if self._last.cancelled():
            logger.debug("Debounced call was cancelled")
            return
        self._last.result()
