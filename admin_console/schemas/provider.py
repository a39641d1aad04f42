"""Provider view models and the wire adapter that builds them."""

from typing import Any

from pydantic import Field, computed_field

from admin_console.domain.account_state import (
    AccountAction,
    ProviderStatus,
    available_account_actions,
    parse_provider_status,
)
from admin_console.domain.kyc_state import (
    DocumentAction,
    DocumentStatus,
    KycStatus,
    aggregate_kyc_status,
    is_actionable,
    parse_document_status,
    parse_kyc_status,
)
from admin_console.schemas.common import ConsoleModel, Pagination


def _first(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return default


def _wire_status(data: dict[str, Any]) -> ProviderStatus:
    if data.get("status"):
        return parse_provider_status(data["status"])
    if "is_active" in data and data["is_active"] is not None:
        return ProviderStatus.ACTIVE if data["is_active"] else ProviderStatus.INACTIVE
    return ProviderStatus.UNKNOWN


def _jobs_completed(data: dict[str, Any]) -> int:
    stats = data.get("stats") if isinstance(data.get("stats"), dict) else {}
    return int(
        _first(
            stats.get("completed_jobs"),
            data.get("jobs_completed"),
            data.get("total_jobs"),
            data.get("jobs"),
            default=0,
        )
    )


def _earnings(value: Any) -> float:
    if isinstance(value, dict):
        return float(value.get("total_net") or 0)
    return float(value or 0)


class ServiceCategory(ConsoleModel):
    category_id: str = ""
    name: str = "N/A"


class KycDocument(ConsoleModel):
    """A single KYC document and its verification state."""

    document_id: str
    document_type: str
    verification_status: DocumentStatus
    file_url: str | None = None
    uploaded_at: str | None = None
    verified_at: str | None = None
    rejection_reason: str | None = None

    @computed_field
    @property
    def actionable(self) -> bool:
        return is_actionable(self.verification_status)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "KycDocument":
        return cls(
            document_id=str(_first(data.get("document_id"), data.get("public_id"), data.get("id"), default="")),
            document_type=_first(data.get("document_type"), data.get("type"), default="UNKNOWN"),
            verification_status=parse_document_status(
                _first(data.get("verification_status"), data.get("status"))
            ),
            file_url=_first(data.get("file_url"), data.get("url")),
            uploaded_at=data.get("uploaded_at"),
            verified_at=data.get("verified_at"),
            rejection_reason=data.get("rejection_reason"),
        )


class ProviderSummary(ConsoleModel):
    """Row in the providers list."""

    provider_id: str
    name: str
    email: str | None = None
    phone: str | None = None
    status: ProviderStatus
    kyc_status: KycStatus
    rating: float = 0
    jobs_completed: int = 0
    earnings: float = 0
    joined_at: str | None = None
    service_categories: list[ServiceCategory] = Field(default_factory=list)

    @computed_field
    @property
    def available_actions(self) -> list[AccountAction]:
        return available_account_actions(self.status)

    @staticmethod
    def _wire_fields(data: dict[str, Any]) -> dict[str, Any]:
        user = data.get("user") if isinstance(data.get("user"), dict) else {}
        kyc = data.get("kyc") if isinstance(data.get("kyc"), dict) else {}
        return {
            "provider_id": str(_first(data.get("provider_id"), data.get("id"), default="")),
            "name": _first(data.get("business_name"), data.get("name"), user.get("name"), default="N/A"),
            "email": _first(data.get("email"), user.get("email")),
            "phone": _first(data.get("phone"), user.get("phone")),
            "status": _wire_status(data),
            "kyc_status": parse_kyc_status(_first(data.get("kyc_status"), kyc.get("status"))),
            "rating": _first(data.get("rating"), default=0),
            "jobs_completed": _jobs_completed(data),
            "earnings": _earnings(data.get("earnings")),
            "joined_at": _first(data.get("joined_at"), data.get("created_at")),
            "service_categories": [
                category for category in data.get("service_categories") or [] if isinstance(category, dict)
            ],
        }

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "ProviderSummary":
        return cls.model_validate(cls._wire_fields(data))


class ProviderStatsSnapshot(ConsoleModel):
    total_jobs: int = 0
    completed_jobs: int = 0
    cancelled_jobs: int = 0
    total_earnings: float = 0
    pending_payout: float = 0
    rating: float = 0
    quality_score: float = 0
    reviews_count: int = 0


class ProviderDetail(ProviderSummary):
    """Provider with KYC documents, as shown on the profile screen."""

    kyc_documents: list[KycDocument] = Field(default_factory=list)
    stats: ProviderStatsSnapshot | None = None
    is_available: bool | None = None

    @computed_field
    @property
    def derived_kyc_status(self) -> KycStatus:
        return aggregate_kyc_status(doc.verification_status for doc in self.kyc_documents)

    def document(self, document_id: str) -> KycDocument | None:
        for doc in self.kyc_documents:
            if doc.document_id == document_id:
                return doc
        return None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "ProviderDetail":
        kyc = data.get("kyc") if isinstance(data.get("kyc"), dict) else {}
        documents = kyc.get("documents") or data.get("kyc_documents") or []
        stats = data.get("stats") if isinstance(data.get("stats"), dict) else None
        return cls.model_validate(
            {
                **cls._wire_fields(data),
                "kyc_documents": [KycDocument.from_wire(doc) for doc in documents if isinstance(doc, dict)],
                "stats": stats,
                "is_available": data.get("is_available"),
            }
        )


class ProviderList(ConsoleModel):
    providers: list[ProviderSummary]
    pagination: Pagination

    @classmethod
    def from_wire(cls, data: dict[str, Any] | None) -> "ProviderList":
        data = data or {}
        return cls(
            providers=[ProviderSummary.from_wire(row) for row in data.get("providers") or []],
            pagination=Pagination.from_wire(data.get("pagination")),
        )


class ProviderStats(ConsoleModel):
    """KPI cards on the providers screen."""

    total_providers: int
    pending_approvals: int
    top_rated_providers: int
    new_this_month: int


class DocumentVerification(ConsoleModel):
    """Backend acknowledgement of a KYC document verification."""

    document_id: str
    verification_status: DocumentStatus
    verified_at: str | None = None
    message: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any], message: str | None = None) -> "DocumentVerification":
        return cls(
            document_id=str(_first(data.get("document_id"), default="")),
            verification_status=parse_document_status(data.get("status")),
            verified_at=data.get("verified_at"),
            message=message,
        )


class ProviderStatusChange(ConsoleModel):
    """Backend acknowledgement of an account or aggregate KYC status change."""

    provider_id: str
    status: ProviderStatus
    kyc_status: KycStatus | None = None
    rejection_reason: str | None = None
    message: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any], message: str | None = None) -> "ProviderStatusChange":
        return cls(
            provider_id=str(_first(data.get("provider_id"), default="")),
            status=_wire_status(data),
            kyc_status=parse_kyc_status(data["kyc_status"]) if data.get("kyc_status") else None,
            rejection_reason=data.get("rejection_reason"),
            message=message,
        )


class AccountActionRequest(ConsoleModel):
    action: AccountAction


class VerifyDocumentRequest(ConsoleModel):
    action: DocumentAction
    rejection_reason: str | None = Field(None, max_length=500)


class RejectProviderRequest(ConsoleModel):
    reason: str = Field(..., max_length=500)
