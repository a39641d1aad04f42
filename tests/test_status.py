"""Tests for status vocabularies and label mapping."""

import pytest

from admin_console.domain.status import (
    BOOKING_UI_TO_BACKEND,
    PAYMENT_UI_TO_BACKEND,
    BookingStatus,
    PaymentStatus,
    StatusVocabulary,
    display_label,
    parse_booking_status,
    parse_payment_status,
    to_backend,
    to_frontend,
)


class TestBookingVocabulary:
    @pytest.mark.parametrize(
        "token,expected",
        [
            ("pending", "PENDING"),
            ("accepted", "ACTIVE"),
            ("in-progress", "IN_PROGRESS"),
            ("completed", "COMPLETED"),
            ("cancelled", "CANCELED"),
        ],
    )
    def test_ui_token_to_backend(self, token, expected):
        assert to_backend(token) == expected

    def test_known_tokens_round_trip(self):
        for token in BOOKING_UI_TO_BACKEND:
            assert to_frontend(to_backend(token)) == token

    def test_lookup_ignores_case_and_whitespace(self):
        assert to_backend("  Accepted ") == "ACTIVE"
        assert to_frontend("active") == "accepted"

    def test_unknown_token_passes_through(self):
        assert to_backend("on-hold") == "on-hold"
        assert to_frontend("RESCHEDULED") == "RESCHEDULED"

    def test_empty_token_is_returned_as_is(self):
        assert to_backend("") == ""


class TestPaymentVocabulary:
    def test_ui_tokens(self):
        assert to_backend("paid", StatusVocabulary.PAYMENT) == "SUCCESS"
        assert to_backend("partially-paid", StatusVocabulary.PAYMENT) == "PARTIALLY_REFUNDED"

    def test_round_trip(self):
        for token in PAYMENT_UI_TO_BACKEND:
            assert to_frontend(to_backend(token, StatusVocabulary.PAYMENT), StatusVocabulary.PAYMENT) == token

    def test_vocabularies_are_separate(self):
        assert to_backend("paid") == "paid"
        assert to_backend("accepted", StatusVocabulary.PAYMENT) == "accepted"


class TestParsing:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("PENDING", BookingStatus.PENDING),
            ("active", BookingStatus.ACTIVE),
            ("accepted", BookingStatus.ACTIVE),
            ("in-progress", BookingStatus.IN_PROGRESS),
            ("In Progress", BookingStatus.IN_PROGRESS),
            ("CANCELLED", BookingStatus.CANCELED),
            ("canceled", BookingStatus.CANCELED),
            ("RESCHEDULED", BookingStatus.RESCHEDULED),
            ("something-else", BookingStatus.UNKNOWN),
            ("", BookingStatus.UNKNOWN),
            (None, BookingStatus.UNKNOWN),
        ],
    )
    def test_parse_booking_status(self, raw, expected):
        assert parse_booking_status(raw) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("SUCCESS", PaymentStatus.SUCCESS),
            ("paid", PaymentStatus.SUCCESS),
            ("partially-paid", PaymentStatus.PARTIALLY_REFUNDED),
            ("CANCELED", PaymentStatus.CANCELLED),
            ("VOIDED", PaymentStatus.UNKNOWN),
        ],
    )
    def test_parse_payment_status(self, raw, expected):
        assert parse_payment_status(raw) == expected

    def test_enum_passes_through(self):
        assert parse_booking_status(BookingStatus.COMPLETED) is BookingStatus.COMPLETED


class TestDisplayLabel:
    def test_known_booking_labels(self):
        assert display_label("ACTIVE") == "Accepted"
        assert display_label("IN_PROGRESS") == "In Progress"
        assert display_label("CANCELED") == "Cancelled"

    def test_known_payment_labels(self):
        assert display_label("SUCCESS", StatusVocabulary.PAYMENT) == "Paid"
        assert display_label("PARTIALLY_REFUNDED", StatusVocabulary.PAYMENT) == "Partially Paid"

    def test_unknown_value_is_shown_verbatim(self):
        assert display_label("ON_HOLD") == "ON_HOLD"
        assert display_label("VOIDED", StatusVocabulary.PAYMENT) == "VOIDED"
