"""Providers list and provider profile screen controllers."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from admin_console.core.exceptions import AppException, NotFoundError
from admin_console.domain.account_state import (
    AccountAction,
    ConfirmationPrompt,
    ConfirmationStyle,
    assert_account_action,
    available_account_actions,
    confirmation_for,
)
from admin_console.domain.kyc_state import (
    DocumentAction,
    KycStatus,
    assert_document_action,
    is_actionable,
    validate_rejection_reason,
)
from admin_console.schemas.common import Pagination
from admin_console.schemas.provider import (
    KycDocument,
    ProviderDetail,
    ProviderStats,
    ProviderStatusChange,
    ProviderSummary,
)
from admin_console.screens.base import ConsoleContext, FlowResult, FlowStage, Screen
from admin_console.services.provider_service import compute_provider_stats
from admin_console.services.query import Debouncer, FilterState

logger = logging.getLogger(__name__)

REJECT_DOCUMENT_PROMPT = ConfirmationPrompt(
    title="Reject Document",
    description="Please provide a reason for rejecting this document.",
    confirm_label="Reject",
    style=ConfirmationStyle.DESTRUCTIVE,
)
APPROVE_PROVIDER_PROMPT = ConfirmationPrompt(
    title="Approve Provider",
    description="Approve this provider's KYC verification?",
    confirm_label="Approve",
    style=ConfirmationStyle.SUCCESS,
)
REJECT_PROVIDER_PROMPT = ConfirmationPrompt(
    title="Reject Provider",
    description="Please provide a reason for rejecting this provider's KYC verification.",
    confirm_label="Reject",
    style=ConfirmationStyle.DESTRUCTIVE,
)


class ProviderListScreen(Screen):
    """Filterable providers list with KPI cards."""

    def __init__(self, ctx: ConsoleContext, filters: FilterState | None = None, debounce: float | None = None) -> None:
        super().__init__(ctx)
        self.filters = filters or FilterState()
        self.providers: list[ProviderSummary] = []
        self.pagination = Pagination()
        self.stats = ProviderStats(total_providers=0, pending_approvals=0, top_rated_providers=0, new_this_month=0)
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
        await self._debouncer.wait()

    async def go_to_page(self, page: int) -> None:
        self.filters = self.filters.with_page(page)
        await self.refresh()

    async def _fetch(self, filters: FilterState) -> None:
        self._request_seq += 1
        seq = self._request_seq
        self.loading = True
        try:
            result = await self.ctx.providers.list_providers(filters)
        except AppException as exc:
            if seq == self._request_seq:
                self.apply(lambda: self._set_error(exc.message))
            return
        if seq != self._request_seq:
            logger.debug(f"Discarding stale providers response #{seq}")
            return

        def update() -> None:
            self.providers = result.providers
            self.pagination = result.pagination
            self.stats = compute_provider_stats(result.providers)
            self.error = None
            self.loading = False

        self.apply(update)

    def _set_error(self, message: str) -> None:
        self.error = message
        self.loading = False


class ProviderDetailScreen(Screen):
    """Provider profile: account actions, KYC documents and aggregate KYC.

    ``loading_document_id`` locks the whole document list while one
    verification is in flight. Every successful mutation refetches the
    provider; failures leave the last fetched state on screen.
    """

    def __init__(self, ctx: ConsoleContext, provider_id: str) -> None:
        super().__init__(ctx)
        self.provider_id = provider_id
        self.provider: ProviderDetail | None = None
        self.not_found = False
        self.loading_document_id: str | None = None
        self.status_updating = False
        self.kyc_updating = False

    async def refresh(self) -> None:
        self.loading = True
        try:
            provider = await self.ctx.providers.get_provider(self.provider_id)
        except NotFoundError:
            self.apply(self._mark_not_found)
            return
        except AppException as exc:
            self.apply(lambda: self._set_error(exc.message))
            return

        def update() -> None:
            self.provider = provider
            self.not_found = False
            self.error = None
            self.loading = False

        self.apply(update)

    def _mark_not_found(self) -> None:
        self.provider = None
        self.not_found = True
        self.loading = False

    def _set_error(self, message: str) -> None:
        self.error = message
        self.loading = False

    def _fail(self, stage: FlowStage, message: str) -> FlowResult:
        self.apply(lambda: setattr(self, "error", message))
        return FlowResult.stopped(stage, message)

    # Account status

    @property
    def account_actions(self) -> list[AccountAction]:
        if self.provider is None or self.status_updating:
            return []
        return available_account_actions(self.provider.status)

    async def change_account_status(self, action: AccountAction, confirmed: bool = False) -> FlowResult:
        """confirm → mutate → refetch for block, suspend and activate.

        ``status_updating`` is held from the guard on, so the actions stay
        disabled while the confirmation is open.
        """
        if self.provider is None or self.status_updating:
            return FlowResult.stopped(FlowStage.GUARD)
        try:
            target = assert_account_action(self.provider.status, action)
        except AppException as exc:
            logger.warning(f"Account {action.value} refused for provider {self.provider_id}: {exc.message}")
            return FlowResult.stopped(FlowStage.GUARD, exc.message)

        self.status_updating = True
        try:
            if not confirmed:
                answer = await self.ctx.dialogs.confirm(confirmation_for(action, self.provider.name))
                if not answer.confirmed:
                    return FlowResult.stopped(FlowStage.CONFIRM)
            try:
                change = await self.ctx.providers.update_provider_status(self.provider_id, target)
            except AppException as exc:
                return self._fail(FlowStage.MUTATE, exc.message)
        finally:
            self.status_updating = False

        await self.refresh()
        return FlowResult.done(message=change.message, value=change)

    # KYC documents

    def can_act_on(self, document: KycDocument) -> bool:
        return is_actionable(document.verification_status) and self.loading_document_id is None

    async def approve_document(self, document_id: str) -> FlowResult:
        return await self._verify(document_id, DocumentAction.APPROVE)

    async def reject_document(self, document_id: str, reason: str | None = None) -> FlowResult:
        if self.loading_document_id is not None:
            return FlowResult.stopped(FlowStage.GUARD)
        if reason is None:
            answer = await self.ctx.dialogs.confirm(REJECT_DOCUMENT_PROMPT, ask_reason=True)
            if not answer.confirmed:
                return FlowResult.stopped(FlowStage.CONFIRM)
            reason = answer.reason
        try:
            reason = validate_rejection_reason(reason)
        except AppException as exc:
            return FlowResult.stopped(FlowStage.REASON, exc.message)
        return await self._verify(document_id, DocumentAction.REJECT, reason)

    async def _verify(self, document_id: str, action: DocumentAction, reason: str | None = None) -> FlowResult:
        if self.loading_document_id is not None:
            logger.debug(f"Verification of {self.loading_document_id} in flight; ignoring {document_id}")
            return FlowResult.stopped(FlowStage.GUARD)
        document = self.provider.document(document_id) if self.provider else None
        if document is None:
            return FlowResult.stopped(FlowStage.GUARD, "Document not found")
        try:
            assert_document_action(document.verification_status, action)
        except AppException as exc:
            logger.warning(f"KYC {action.value} refused for document {document_id}: {exc.message}")
            return FlowResult.stopped(FlowStage.GUARD, exc.message)

        self.loading_document_id = document_id
        try:
            verification = await self.ctx.providers.verify_kyc_document(document_id, action, reason)
        except AppException as exc:
            return self._fail(FlowStage.MUTATE, exc.message)
        finally:
            self.loading_document_id = None

        await self.refresh()
        return FlowResult.done(message=verification.message, value=verification)

    # Aggregate KYC

    @property
    def can_approve_kyc(self) -> bool:
        return self.provider is not None and not self.kyc_updating and self.provider.kyc_status != KycStatus.APPROVED

    @property
    def can_reject_kyc(self) -> bool:
        return self.provider is not None and not self.kyc_updating and self.provider.kyc_status != KycStatus.REJECTED

    async def approve_kyc(self, confirmed: bool = False) -> FlowResult:
        if not self.can_approve_kyc:
            return FlowResult.stopped(FlowStage.GUARD)
        self.kyc_updating = True
        try:
            if not confirmed:
                answer = await self.ctx.dialogs.confirm(APPROVE_PROVIDER_PROMPT)
                if not answer.confirmed:
                    return FlowResult.stopped(FlowStage.CONFIRM)
            return await self._change_kyc(lambda: self.ctx.providers.approve_provider(self.provider_id))
        finally:
            self.kyc_updating = False

    async def reject_kyc(self, reason: str | None = None) -> FlowResult:
        if not self.can_reject_kyc:
            return FlowResult.stopped(FlowStage.GUARD)
        self.kyc_updating = True
        try:
            if reason is None:
                answer = await self.ctx.dialogs.confirm(REJECT_PROVIDER_PROMPT, ask_reason=True)
                if not answer.confirmed:
                    return FlowResult.stopped(FlowStage.CONFIRM)
                reason = answer.reason
            try:
                cleaned = validate_rejection_reason(reason)
            except AppException as exc:
                return FlowResult.stopped(FlowStage.REASON, exc.message)
            return await self._change_kyc(lambda: self.ctx.providers.reject_provider(self.provider_id, cleaned))
        finally:
            self.kyc_updating = False

    async def _change_kyc(self, call: Callable[[], Awaitable[ProviderStatusChange]]) -> FlowResult:
        """Run a claimed aggregate KYC change, then refetch."""
        try:
            change = await call()
        except AppException as exc:
            return self._fail(FlowStage.MUTATE, exc.message)

        await self.refresh()
        return FlowResult.done(message=change.message, value=change)
