"""API tests for /api/v1/reschedule-requests."""

from datetime import timedelta

import pytest
import ulid

from tutorbook.core.enums import RoleName

BASE = "/api/v1/reschedule-requests"


@pytest.fixture
def family(builder):
    contract = builder.contract(reschedule_count=2)
    session = builder.session(contract)
    return contract, session


def _body(session_id, requested_date, start="16:00", end="17:30"):
    return {
        "booking_id": session_id,
        "requested_date": requested_date.isoformat(),
        "start_time": start,
        "end_time": end,
        "reason": "Exam week",
    }


class TestAuthentication:
    def test_missing_token_is_unauthorized(self, client):
        response = client.get(BASE)
        assert response.status_code == 401
        assert response.json()["status"] == 401

    def test_garbage_token_is_unauthorized(self, client):
        response = client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_unknown_role_is_unauthorized(self, client, auth_headers):
        response = client.get(BASE, headers=auth_headers("u1", "janitor"))
        assert response.status_code == 401

    def test_tutor_cannot_create_requests(self, client, auth_headers, family, next_week):
        _, session = family
        response = client.post(
            BASE,
            json=_body(session.id, next_week),
            headers=auth_headers(session.tutor_id, RoleName.TUTOR),
        )
        assert response.status_code == 403

    def test_parent_cannot_approve(self, client, auth_headers, builder, family):
        contract, session = family
        request = builder.reschedule_request(session)
        response = client.post(
            f"{BASE}/{request.id}/approve",
            headers=auth_headers(contract.parent_id, RoleName.PARENT),
        )
        assert response.status_code == 403


class TestCreateAndDecide:
    def test_create_then_approve(self, client, auth_headers, builder, family, next_week):
        contract, session = family
        staff = builder.staff()

        created = client.post(
            BASE,
            json=_body(session.id, next_week),
            headers=auth_headers(contract.parent_id, RoleName.PARENT),
        )
        assert created.status_code == 201
        request_id = created.json()["request_id"]
        assert created.json()["status"] == "pending"

        detail = client.get(
            f"{BASE}/{request_id}", headers=auth_headers(contract.parent_id, RoleName.PARENT)
        )
        assert detail.status_code == 200
        assert detail.json()["original_session_date"] == session.session_date.isoformat()
        assert detail.json()["requested_tutor_id"] == session.tutor_id

        approved = client.post(
            f"{BASE}/{request_id}/approve",
            json={"note": "ok"},
            headers=auth_headers(staff.id, RoleName.STAFF),
        )
        assert approved.status_code == 200
        body = approved.json()
        assert body["status"] == "approved"
        assert body["reschedule_count"] == 1
        assert body["new_session_id"]

        ledger = client.get(
            f"/api/v1/contracts/{contract.id}/reschedule-ledger",
            headers=auth_headers(staff.id, RoleName.STAFF),
        )
        assert ledger.status_code == 200
        assert [(e["count_before"], e["count_after"]) for e in ledger.json()] == [(2, 1)]

    def test_approve_without_body(self, client, auth_headers, builder, family):
        _, session = family
        request = builder.reschedule_request(session)

        response = client.post(
            f"{BASE}/{request.id}/approve",
            headers=auth_headers(builder.staff().id, RoleName.ADMIN),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Request approved successfully."

    def test_reject(self, client, auth_headers, builder, family):
        _, session = family
        request = builder.reschedule_request(session)

        response = client.post(
            f"{BASE}/{request.id}/reject",
            json={"reason": "Tutor busy"},
            headers=auth_headers(builder.staff().id, RoleName.STAFF),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Request rejected: Tutor busy"

    def test_blank_rejection_reason_is_invalid(self, client, auth_headers, builder, family):
        _, session = family
        request = builder.reschedule_request(session)

        response = client.post(
            f"{BASE}/{request.id}/reject",
            json={"reason": "   "},
            headers=auth_headers(builder.staff().id, RoleName.STAFF),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"


class TestErrorEnvelope:
    def test_invalid_slot_is_bad_request(self, client, auth_headers, family, next_week):
        contract, session = family
        response = client.post(
            BASE,
            json=_body(session.id, next_week, start="15:00", end="16:30"),
            headers=auth_headers(contract.parent_id, RoleName.PARENT),
        )

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Start time must be 16:00, 17:30, 19:00, or 20:30."
        assert body["code"] == "INVALID_SLOT_START"
        assert body["instance"] == BASE

    def test_second_pending_request_is_unprocessable(
        self, client, auth_headers, builder, family, next_week
    ):
        contract, session = family
        builder.reschedule_request(builder.session(contract))

        response = client.post(
            BASE,
            json=_body(session.id, next_week),
            headers=auth_headers(contract.parent_id, RoleName.PARENT),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "PENDING_RESCHEDULE_EXISTS"
        assert response.json()["errors"] == {"contract_id": contract.id}

    def test_past_session_message(self, client, auth_headers, builder, family):
        contract, _ = family
        past = builder.session(contract, session_date=builder.today - timedelta(days=3))

        response = client.post(
            BASE,
            json=_body(past.id, builder.today + timedelta(days=3)),
            headers=auth_headers(contract.parent_id, RoleName.PARENT),
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Cannot reschedule past sessions."

    def test_unknown_request_is_not_found(self, client, auth_headers):
        response = client.get(
            f"{BASE}/{ulid.ULID()}", headers=auth_headers("staff", RoleName.STAFF)
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Reschedule request not found."

    def test_malformed_id_fails_validation(self, client, auth_headers):
        response = client.get(f"{BASE}/not-a-ulid", headers=auth_headers("s", RoleName.STAFF))
        assert response.status_code == 422


class TestListing:
    def test_parent_sees_only_own_requests(self, client, auth_headers, builder, family):
        contract, session = family
        own = builder.reschedule_request(session)
        builder.reschedule_request(builder.session(builder.contract()))

        response = client.get(BASE, headers=auth_headers(contract.parent_id, RoleName.PARENT))

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [own.id]

    def test_staff_filters_by_status(self, client, auth_headers, builder, family):
        _, session = family
        builder.reschedule_request(session)

        pending = client.get(
            BASE, params={"status": "pending"}, headers=auth_headers("s", RoleName.STAFF)
        )
        approved = client.get(
            BASE, params={"status": "approved"}, headers=auth_headers("s", RoleName.STAFF)
        )

        assert len(pending.json()) == 1
        assert approved.json() == []

    def test_available_sub_tutors(self, client, auth_headers, builder):
        sub = builder.tutor()
        contract = builder.contract(substitute_tutor1=sub)
        request = builder.reschedule_request(builder.session(contract))

        response = client.get(
            f"{BASE}/{request.id}/available-sub-tutors",
            headers=auth_headers("s", RoleName.STAFF),
        )

        assert response.status_code == 200
        assert [t["tutor_id"] for t in response.json()["available_tutors"]] == [sub.id]
