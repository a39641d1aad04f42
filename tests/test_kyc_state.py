"""Tests for KYC document transitions and the provider-level roll-up."""

import pytest

from admin_console.core.exceptions import InvalidTransition, ValidationError
from admin_console.domain.kyc_state import (
    DocumentAction,
    DocumentStatus,
    KycStatus,
    aggregate_kyc_status,
    assert_document_action,
    assert_document_transition,
    is_actionable,
    parse_document_status,
    parse_kyc_status,
    validate_rejection_reason,
)


class TestDocumentTransitions:
    @pytest.mark.parametrize("target", [DocumentStatus.VERIFIED, DocumentStatus.REJECTED])
    def test_pending_can_be_decided(self, target):
        assert_document_transition(DocumentStatus.PENDING, target)

    @pytest.mark.parametrize("current", ["VERIFIED", "APPROVED", "REJECTED", "SOMETHING"])
    @pytest.mark.parametrize("action", list(DocumentAction))
    def test_decided_documents_are_final(self, current, action):
        with pytest.raises(InvalidTransition):
            assert_document_action(current, action)

    def test_error_names_both_states(self):
        with pytest.raises(InvalidTransition) as exc_info:
            assert_document_transition("VERIFIED", DocumentStatus.REJECTED)
        assert exc_info.value.message == "Invalid KYC document transition: VERIFIED → REJECTED"

    def test_only_pending_is_actionable(self):
        assert is_actionable("pending")
        assert not is_actionable("VERIFIED")
        assert not is_actionable(None)


class TestParsing:
    def test_approved_document_means_verified(self):
        assert parse_document_status("approved") == DocumentStatus.VERIFIED

    def test_unknown_document_status(self):
        assert parse_document_status("EXPIRED") == DocumentStatus.UNKNOWN

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("pending", KycStatus.PENDING),
            ("VERIFIED", KycStatus.APPROVED),
            ("under-review", KycStatus.UNDER_REVIEW),
            ("IN_REVIEW", KycStatus.UNDER_REVIEW),
            ("", KycStatus.UNKNOWN),
        ],
    )
    def test_parse_kyc_status(self, raw, expected):
        assert parse_kyc_status(raw) == expected


class TestRejectionReason:
    def test_reason_is_trimmed(self):
        assert validate_rejection_reason("  blurry scan ") == "blurry scan"

    @pytest.mark.parametrize("reason", [None, "", "   \n"])
    def test_blank_reason_is_rejected(self, reason):
        with pytest.raises(ValidationError) as exc_info:
            validate_rejection_reason(reason)
        assert exc_info.value.message == "Rejection reason is required"
        assert exc_info.value.errors[0]["field"] == "rejection_reason"


class TestAggregate:
    @pytest.mark.parametrize(
        "statuses,expected",
        [
            ([], KycStatus.PENDING),
            (["PENDING", "PENDING"], KycStatus.PENDING),
            (["VERIFIED", "PENDING"], KycStatus.UNDER_REVIEW),
            (["VERIFIED", "VERIFIED"], KycStatus.APPROVED),
            (["VERIFIED", "REJECTED"], KycStatus.REJECTED),
            (["PENDING", "REJECTED"], KycStatus.REJECTED),
        ],
    )
    def test_roll_up(self, statuses, expected):
        assert aggregate_kyc_status(statuses) == expected
