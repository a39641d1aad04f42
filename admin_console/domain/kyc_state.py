"""KYC document state machine and provider-level KYC roll-up."""

from collections.abc import Iterable
from enum import Enum

from admin_console.core.exceptions import InvalidTransition, ValidationError


class DocumentStatus(str, Enum):
    """Verification status of a single KYC document."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    UNKNOWN = "UNKNOWN"


class DocumentAction(str, Enum):
    """Admin action on a KYC document, as sent to the backend."""

    APPROVE = "approve"
    REJECT = "reject"


class KycStatus(str, Enum):
    """Provider-level KYC status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    UNDER_REVIEW = "under-review"
    UNKNOWN = "unknown"


DOCUMENT_TRANSITIONS = {
    DocumentStatus.PENDING: {DocumentStatus.VERIFIED, DocumentStatus.REJECTED},
    DocumentStatus.VERIFIED: set(),
    DocumentStatus.REJECTED: set(),
    DocumentStatus.UNKNOWN: set(),
}

ACTION_TARGETS = {
    DocumentAction.APPROVE: DocumentStatus.VERIFIED,
    DocumentAction.REJECT: DocumentStatus.REJECTED,
}

_DOCUMENT_ALIASES = {
    "APPROVED": DocumentStatus.VERIFIED,
    "VERIFIED": DocumentStatus.VERIFIED,
    "REJECTED": DocumentStatus.REJECTED,
    "PENDING": DocumentStatus.PENDING,
}

_KYC_ALIASES = {
    "PENDING": KycStatus.PENDING,
    "APPROVED": KycStatus.APPROVED,
    "VERIFIED": KycStatus.APPROVED,
    "REJECTED": KycStatus.REJECTED,
    "UNDER_REVIEW": KycStatus.UNDER_REVIEW,
    "IN_REVIEW": KycStatus.UNDER_REVIEW,
}


def _key(raw: str) -> str:
    return raw.strip().upper().replace("-", "_").replace(" ", "_")


def parse_document_status(raw: str | DocumentStatus | None) -> DocumentStatus:
    if isinstance(raw, DocumentStatus):
        return raw
    if not raw:
        return DocumentStatus.UNKNOWN
    return _DOCUMENT_ALIASES.get(_key(raw), DocumentStatus.UNKNOWN)


def parse_kyc_status(raw: str | KycStatus | None) -> KycStatus:
    if isinstance(raw, KycStatus):
        return raw
    if not raw:
        return KycStatus.UNKNOWN
    return _KYC_ALIASES.get(_key(raw), KycStatus.UNKNOWN)


def is_actionable(status: str | DocumentStatus | None) -> bool:
    """Approve/reject is only offered on pending documents."""
    return parse_document_status(status) == DocumentStatus.PENDING


def assert_document_transition(current: str | DocumentStatus | None, target: DocumentStatus) -> None:
    parsed = parse_document_status(current)
    allowed = DOCUMENT_TRANSITIONS.get(parsed, set())
    if target not in allowed:
        raise InvalidTransition(
            f"Invalid KYC document transition: {parsed.value} → {target.value}"
        )


def assert_document_action(current: str | DocumentStatus | None, action: DocumentAction) -> None:
    assert_document_transition(current, ACTION_TARGETS[action])


def validate_rejection_reason(reason: str | None) -> str:
    """Return the trimmed rejection reason or raise if it is empty."""
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError(
            "Rejection reason is required",
            errors=[{"field": "rejection_reason", "message": "Rejection reason is required"}],
        )
    return cleaned


def aggregate_kyc_status(statuses: Iterable[str | DocumentStatus | None]) -> KycStatus:
    """Roll document statuses up to a provider-level KYC status.

    - no documents: pending
    - any rejected: rejected
    - all verified: approved
    - some verified, rest pending: under-review
    - otherwise: pending
    """
    parsed = [parse_document_status(status) for status in statuses]
    if not parsed:
        return KycStatus.PENDING
    if DocumentStatus.REJECTED in parsed:
        return KycStatus.REJECTED
    if all(status == DocumentStatus.VERIFIED for status in parsed):
        return KycStatus.APPROVED
    if DocumentStatus.VERIFIED in parsed:
        return KycStatus.UNDER_REVIEW
    return KycStatus.PENDING
