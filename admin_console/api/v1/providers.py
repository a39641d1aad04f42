"""Admin provider and KYC endpoints."""

import logging

from fastapi import APIRouter, Query

from admin_console.api.deps import ProviderServiceDep, VerificationLocksDep
from admin_console.core.exceptions import InvalidTransition, NotFoundError
from admin_console.domain.account_state import assert_account_action
from admin_console.domain.kyc_state import DocumentAction, assert_document_action, validate_rejection_reason
from admin_console.schemas.provider import (
    AccountActionRequest,
    ProviderDetail,
    ProviderList,
    ProviderStats,
    RejectProviderRequest,
    VerifyDocumentRequest,
)
from admin_console.services.provider_service import compute_provider_stats
from admin_console.services.query import ALL, FilterState

logger = logging.getLogger(__name__)

router = APIRouter()


def _filters(
    search: str,
    status_filter: str,
    kyc_status: str,
    category_id: str,
    page: int,
    limit: int | None,
) -> FilterState:
    return FilterState(
        search=search,
        status=status_filter,
        kyc_status=kyc_status,
        category_id=category_id,
        page=page,
        **({"page_size": limit} if limit else {}),
    )


@router.get("", response_model=ProviderList)
async def list_providers(
    service: ProviderServiceDep,
    search: str = Query(default=""),
    status_filter: str = Query(default=ALL, alias="status"),
    kyc_status: str = Query(default=ALL),
    category_id: str = Query(default=ALL),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
) -> ProviderList:
    """List providers with search, status, KYC and category filters."""
    filters = _filters(search, status_filter, kyc_status, category_id, page, limit)
    return await service.list_providers(filters)


@router.get("/stats", response_model=ProviderStats)
async def provider_stats(
    service: ProviderServiceDep,
    search: str = Query(default=""),
    status_filter: str = Query(default=ALL, alias="status"),
    kyc_status: str = Query(default=ALL),
    category_id: str = Query(default=ALL),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
) -> ProviderStats:
    """KPI counts over the providers page the same filters would show."""
    filters = _filters(search, status_filter, kyc_status, category_id, page, limit)
    result = await service.list_providers(filters)
    return compute_provider_stats(result.providers)


@router.get("/{provider_id}", response_model=ProviderDetail)
async def get_provider(provider_id: str, service: ProviderServiceDep) -> ProviderDetail:
    """Get provider profile with KYC documents."""
    return await service.get_provider(provider_id)


@router.post("/{provider_id}/status", response_model=ProviderDetail)
async def change_provider_status(
    provider_id: str,
    request: AccountActionRequest,
    service: ProviderServiceDep,
) -> ProviderDetail:
    """Block, suspend or activate a provider account."""
    provider = await service.get_provider(provider_id)
    try:
        target = assert_account_action(provider.status, request.action)
    except InvalidTransition:
        logger.warning(f"Refused {request.action.value} on provider {provider_id} ({provider.status.value})")
        raise

    await service.update_provider_status(provider_id, target)
    return await service.get_provider(provider_id)


@router.post("/{provider_id}/approve", response_model=ProviderDetail)
async def approve_provider(provider_id: str, service: ProviderServiceDep) -> ProviderDetail:
    """Approve the provider's KYC as a whole."""
    await service.approve_provider(provider_id)
    return await service.get_provider(provider_id)


@router.post("/{provider_id}/reject", response_model=ProviderDetail)
async def reject_provider(
    provider_id: str,
    request: RejectProviderRequest,
    service: ProviderServiceDep,
) -> ProviderDetail:
    """Reject the provider's KYC as a whole. A reason is required."""
    await service.reject_provider(provider_id, request.reason)
    return await service.get_provider(provider_id)


@router.post("/{provider_id}/kyc/documents/{document_id}/verify", response_model=ProviderDetail)
async def verify_kyc_document(
    provider_id: str,
    document_id: str,
    request: VerifyDocumentRequest,
    service: ProviderServiceDep,
    locks: VerificationLocksDep,
) -> ProviderDetail:
    """Approve or reject one pending KYC document.

    Only one verification per provider runs at a time; a concurrent request
    gets 409.
    """
    reason = request.rejection_reason
    if request.action == DocumentAction.REJECT:
        reason = validate_rejection_reason(reason)

    async with locks.hold(provider_id):
        provider = await service.get_provider(provider_id)
        document = provider.document(document_id)
        if document is None:
            raise NotFoundError("KYC document", document_id)
        try:
            assert_document_action(document.verification_status, request.action)
        except InvalidTransition:
            logger.warning(
                f"Refused {request.action.value} on KYC document {document_id} "
                f"({document.verification_status.value})"
            )
            raise

        await service.verify_kyc_document(document_id, request.action, reason)
        return await service.get_provider(provider_id)
