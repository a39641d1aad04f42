"""Tests for the console HTTP surface."""

import httpx
import pytest
from fastapi.testclient import TestClient

from admin_console.api.deps import VerificationLocks, get_verification_locks
from admin_console.core.exceptions import MutationInProgress
from admin_console.main import create_application
from admin_console.services.backend_client import BackendClient
from tests.conftest import BACKEND_URL, FakeBackend, envelope
from tests.factories import booking_detail, booking_row, kyc_document, provider_detail, provider_row

API = "/api/v1"


@pytest.fixture
def api(backend: FakeBackend):
    backend_client = BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(backend.handler))
    app = create_application(backend_client=backend_client)
    with TestClient(app) as test_client:
        yield test_client


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["backend"] == BACKEND_URL
    assert "X-Request-ID" in response.headers
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"


def test_request_id_is_forwarded_to_backend(api, backend):
    backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail()}))

    response = api.get(f"{API}/bookings/bk_1", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"
    assert backend.requests[0].headers["X-Request-ID"] == "req-42"


class TestBookingRoutes:
    def test_list_bookings_passes_translated_filters(self, api, backend):
        backend.add(
            "GET",
            "/admin/bookings",
            envelope({"bookings": [booking_row()], "pagination": {"page": 2, "limit": 5, "total": 6, "total_pages": 2}}),
        )

        response = api.get(
            f"{API}/bookings",
            params={"status": "accepted", "date_from": "2024-05-01", "date_to": "2024-05-31", "page": 2, "limit": 5},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["bookings"][0]["id"] == "bk_1"
        assert body["bookings"][0]["userName"] == "Asha Rao"
        assert body["pagination"]["totalPages"] == 2
        params = backend.requests[0].url.params
        assert params["status"] == "ACTIVE"
        assert params["start_date"] == "2024-05-01"
        assert params["end_date"] == "2024-05-31"
        assert params["page"] == "2"
        assert params["limit"] == "5"

    def test_get_booking(self, api, backend):
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail()}))

        response = api.get(f"{API}/bookings/bk_1")

        assert response.status_code == 200
        assert response.json()["bookingId"] == "bk_1"
        assert response.json()["status"] == "PENDING"

    def test_null_detail_fields_are_not_a_server_error(self, api, backend):
        detail = booking_detail(payment={"payment_id": "pay_1", "status": "PENDING", "amount": None})
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": detail}))

        response = api.get(f"{API}/bookings/bk_1")

        assert response.status_code == 200
        assert response.json()["payment"]["amount"] == 0

    def test_unreadable_booking_is_502(self, api, backend):
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail(items=[{"quantity": "x"}])}))

        response = api.get(f"{API}/bookings/bk_1")

        assert response.status_code == 502
        assert response.json() == {"detail": "Received malformed booking data from the server"}

    def test_missing_booking_is_404(self, api, backend):
        backend.add("GET", "/admin/bookings/nope", {"status": 0, "message": "Not found"}, status_code=404)

        response = api.get(f"{API}/bookings/nope")

        assert response.status_code == 404
        assert response.json() == {"detail": "Booking with ID 'nope' not found"}

    def test_cancel_returns_refetched_booking(self, api, backend):
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail(status="ACTIVE")}))
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail(status="CANCELED")}))
        backend.add("POST", "/admin/bookings/bk_1/cancel", envelope(message="Booking cancelled"))

        response = api.post(f"{API}/bookings/bk_1/cancel", json={"reason": ""})

        assert response.status_code == 200
        assert response.json()["status"] == "CANCELED"
        assert backend.body(backend.calls("POST", "/admin/bookings/bk_1/cancel")[0]) == {"reason": "Cancelled by admin"}
        assert len(backend.calls("GET", "/admin/bookings/bk_1")) == 2

    def test_cancel_terminal_booking_is_409(self, api, backend):
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail(status="COMPLETED")}))

        response = api.post(f"{API}/bookings/bk_1/cancel", json={})

        assert response.status_code == 409
        assert "Cannot cancel completed bookings" in response.json()["detail"]
        assert backend.calls("POST", "/admin/bookings/bk_1/cancel") == []

    def test_backend_rejection_is_502(self, api, backend):
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail()}))
        backend.add("POST", "/admin/bookings/bk_1/cancel", {"status": 0, "message": "Refund service down"})

        response = api.post(f"{API}/bookings/bk_1/cancel", json={"reason": "Duplicate"})

        assert response.status_code == 502
        assert response.json() == {"detail": "Refund service down"}

    def test_update_status(self, api, backend):
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail(status="PENDING")}))
        backend.add("PUT", "/admin/bookings/bk_1/status", envelope())

        response = api.put(f"{API}/bookings/bk_1/status", json={"status": "accepted", "reason": "Confirmed by phone"})

        assert response.status_code == 200
        body = backend.body(backend.calls("PUT", "/admin/bookings/bk_1/status")[0])
        assert body == {"status": "ACTIVE", "reason": "Confirmed by phone"}

    def test_assign_provider(self, api, backend):
        backend.add("GET", "/admin/bookings/bk_1", envelope({"booking": booking_detail(status="ACTIVE")}))
        backend.add("POST", "/admin/bookings/bk_1/assign", envelope())

        response = api.post(f"{API}/bookings/bk_1/assign", json={"provider_id": "prv_7"})

        assert response.status_code == 200
        assert backend.body(backend.calls("POST", "/admin/bookings/bk_1/assign")[0])["provider_id"] == "prv_7"


class TestProviderRoutes:
    def test_list_providers(self, api, backend):
        backend.add("GET", "/admin/providers", envelope({"providers": [provider_row()]}))

        response = api.get(f"{API}/providers", params={"status": "ACTIVE", "kyc_status": "pending"})

        assert response.status_code == 200
        assert response.json()["providers"][0]["providerId"] == "prv_1"
        assert backend.requests[0].url.params["status"] == "ACTIVE"

    def test_stats_route_is_not_a_provider_id(self, api, backend):
        backend.add(
            "GET",
            "/admin/providers",
            envelope({"providers": [provider_row("p1", rating=4.7), provider_row("p2", kyc_status="approved")]}),
        )

        response = api.get(f"{API}/providers/stats")

        assert response.status_code == 200
        assert response.json() == {
            "totalProviders": 2,
            "pendingApprovals": 1,
            "topRatedProviders": 1,
            "newThisMonth": 0,
        }

    def test_block_sends_suspended(self, api, backend):
        backend.add("GET", "/admin/providers/prv_1", envelope({"provider": provider_detail(status="ACTIVE")}))
        backend.add("GET", "/admin/providers/prv_1", envelope({"provider": provider_detail(status="SUSPENDED")}))
        backend.add("PUT", "/admin/providers/prv_1/status", envelope({"status": "SUSPENDED"}))

        response = api.post(f"{API}/providers/prv_1/status", json={"action": "block"})

        assert response.status_code == 200
        assert response.json()["status"] == "SUSPENDED"
        assert backend.body(backend.calls("PUT", "/admin/providers/prv_1/status")[0]) == {"status": "SUSPENDED"}

    def test_invalid_account_action_is_409(self, api, backend):
        backend.add("GET", "/admin/providers/prv_1", envelope({"provider": provider_detail(status="INACTIVE")}))

        response = api.post(f"{API}/providers/prv_1/status", json={"action": "activate"})

        assert response.status_code == 409
        assert backend.calls("PUT", "/admin/providers/prv_1/status") == []

    def test_verify_document(self, api, backend):
        backend.add("GET", "/admin/providers/prv_1", envelope({"provider": provider_detail(documents=[kyc_document("doc_1")])}))
        backend.add(
            "GET",
            "/admin/providers/prv_1",
            envelope({"provider": provider_detail(documents=[kyc_document("doc_1", "VERIFIED")])}),
        )
        backend.add("POST", "/providers/kyc/documents/doc_1/verify", envelope({"status": "VERIFIED"}))

        response = api.post(f"{API}/providers/prv_1/kyc/documents/doc_1/verify", json={"action": "approve"})

        assert response.status_code == 200
        assert response.json()["kycDocuments"][0]["verificationStatus"] == "VERIFIED"

    def test_reject_document_without_reason_is_422(self, api, backend):
        response = api.post(
            f"{API}/providers/prv_1/kyc/documents/doc_1/verify",
            json={"action": "reject", "rejection_reason": "  "},
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Rejection reason is required"
        assert backend.requests == []

    def test_verify_decided_document_is_409(self, api, backend):
        backend.add(
            "GET",
            "/admin/providers/prv_1",
            envelope({"provider": provider_detail(documents=[kyc_document("doc_1", "VERIFIED")])}),
        )

        response = api.post(f"{API}/providers/prv_1/kyc/documents/doc_1/verify", json={"action": "reject", "rejection_reason": "x"})

        assert response.status_code == 409
        assert backend.calls("POST", "/providers/kyc/documents/doc_1/verify") == []

    def test_verify_unknown_document_is_404(self, api, backend):
        backend.add("GET", "/admin/providers/prv_1", envelope({"provider": provider_detail(documents=[])}))

        response = api.post(f"{API}/providers/prv_1/kyc/documents/doc_9/verify", json={"action": "approve"})

        assert response.status_code == 404

    def test_concurrent_verification_is_409(self, api, backend):
        class BusyLocks(VerificationLocks):
            def is_locked(self, key):
                return True

            def hold(self, key):
                raise MutationInProgress("A KYC verification is already in progress for this provider")

        api.app.dependency_overrides[get_verification_locks] = BusyLocks

        response = api.post(f"{API}/providers/prv_1/kyc/documents/doc_1/verify", json={"action": "approve"})

        assert response.status_code == 409
        assert backend.requests == []

    def test_reject_provider_requires_reason(self, api, backend):
        response = api.post(f"{API}/providers/prv_1/reject", json={"reason": " "})

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "rejection_reason"

    def test_network_failure_is_502(self, api, backend):
        backend.fail("GET", "/admin/providers/prv_1", httpx.ConnectError("Connection refused"))

        response = api.get(f"{API}/providers/prv_1")

        assert response.status_code == 502
        assert "Unable to connect to the server" in response.json()["detail"]


async def test_verification_locks_refuse_a_second_holder():
    locks = VerificationLocks()

    async with locks.hold("prv_1"):
        assert locks.is_locked("prv_1")
        with pytest.raises(MutationInProgress):
            async with locks.hold("prv_1"):
                pass
        async with locks.hold("prv_2"):
            assert locks.is_locked("prv_2")

    assert not locks.is_locked("prv_1")
    assert len(locks) == 0


async def test_released_locks_are_dropped_after_a_failure():
    locks = VerificationLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold("prv_1"):
            raise RuntimeError("backend exploded")

    assert len(locks) == 0
    async with locks.hold("prv_1"):
        assert locks.is_locked("prv_1")
