"""Provider and KYC operations against the marketplace backend."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from admin_console.domain.account_state import ProviderStatus
from admin_console.domain.kyc_state import DocumentAction, KycStatus, validate_rejection_reason
from admin_console.schemas.provider import (
    DocumentVerification,
    ProviderDetail,
    ProviderList,
    ProviderStats,
    ProviderStatusChange,
    ProviderSummary,
)
from admin_console.services.backend_client import BackendClient, adapt
from admin_console.services.query import FilterState, to_query_params

logger = logging.getLogger(__name__)

PROVIDERS_PATH = "/admin/providers"
KYC_DOCUMENTS_PATH = "/providers/kyc/documents"

TOP_RATED_THRESHOLD = 4.5


class ProviderService:
    """Service for admin provider operations."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def list_providers(self, filters: FilterState) -> ProviderList:
        response = await self.client.get(
            PROVIDERS_PATH,
            params=to_query_params(filters, status_vocabulary=None),
            error_message="An error occurred while fetching providers",
        )
        return adapt(ProviderList.from_wire, response.data, "providers list")

    async def get_provider(self, provider_id: str) -> ProviderDetail:
        response = await self.client.get(
            f"{PROVIDERS_PATH}/{provider_id}",
            error_message="Failed to fetch provider details",
            resource="Provider",
            resource_id=provider_id,
        )
        data = response.data or {}
        provider = data.get("provider", data) if isinstance(data, dict) else {}
        return adapt(ProviderDetail.from_wire, provider, "provider")

    async def update_provider_status(self, provider_id: str, status: ProviderStatus) -> ProviderStatusChange:
        logger.info(f"Updating provider {provider_id} status to {status.value}")
        response = await self.client.put(
            f"{PROVIDERS_PATH}/{provider_id}/status",
            json_body={"status": status.value},
            error_message="Failed to update provider status",
            resource="Provider",
            resource_id=provider_id,
        )
        return ProviderStatusChange.from_wire(
            {"provider_id": provider_id, "status": status.value, **(response.data or {})},
            message=response.message,
        )

    async def verify_kyc_document(
        self,
        document_id: str,
        action: DocumentAction,
        rejection_reason: str | None = None,
    ) -> DocumentVerification:
        """Approve or reject one KYC document.

        A rejection without a non-blank reason raises ``ValidationError``
        before any request is made.
        """
        body: dict[str, str] = {"action": action.value}
        if action == DocumentAction.REJECT:
            body["rejection_reason"] = validate_rejection_reason(rejection_reason)

        logger.info(f"Verifying KYC document {document_id}: {action.value}")
        response = await self.client.post(
            f"{KYC_DOCUMENTS_PATH}/{document_id}/verify",
            json_body=body,
            error_message="Failed to verify KYC document",
            resource="KYC document",
            resource_id=document_id,
            strict_envelope=True,
        )
        return DocumentVerification.from_wire(
            {"document_id": document_id, **(response.data or {})},
            message=response.message,
        )

    async def approve_provider(self, provider_id: str) -> ProviderStatusChange:
        """Approve the provider's KYC as a whole."""
        logger.info(f"Approving provider {provider_id} KYC")
        response = await self.client.post(
            f"{PROVIDERS_PATH}/{provider_id}/approve",
            error_message="Failed to approve provider",
            resource="Provider",
            resource_id=provider_id,
            strict_envelope=True,
        )
        return ProviderStatusChange.from_wire(
            {"provider_id": provider_id, **(response.data or {})},
            message=response.message,
        )

    async def reject_provider(self, provider_id: str, reason: str | None) -> ProviderStatusChange:
        """Reject the provider's KYC as a whole. ``reason`` is mandatory."""
        cleaned = validate_rejection_reason(reason)
        logger.info(f"Rejecting provider {provider_id} KYC")
        response = await self.client.post(
            f"{PROVIDERS_PATH}/{provider_id}/reject",
            json_body={"reason": cleaned},
            error_message="Failed to reject provider",
            resource="Provider",
            resource_id=provider_id,
        )
        return ProviderStatusChange.from_wire(
            {"provider_id": provider_id, **(response.data or {})},
            message=response.message,
        )


def compute_provider_stats(
    providers: Iterable[ProviderSummary],
    now: datetime | None = None,
) -> ProviderStats:
    """KPI counts over an already fetched provider list."""
    now = now or datetime.now(UTC)
    start_of_month = datetime(now.year, now.month, 1, tzinfo=UTC)

    total = pending = top_rated = new_this_month = 0
    for provider in providers:
        total += 1
        if provider.kyc_status == KycStatus.PENDING:
            pending += 1
        if provider.rating >= TOP_RATED_THRESHOLD:
            top_rated += 1
        joined = _parse_timestamp(provider.joined_at)
        if joined is not None and joined >= start_of_month:
            new_this_month += 1

    return ProviderStats(
        total_providers=total,
        pending_approvals=pending,
        top_rated_providers=top_rated,
        new_this_month=new_this_month,
    )


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
