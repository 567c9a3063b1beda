"""API tests for /api/v1/sessions and the root health endpoints."""

import pytest
import ulid

from tutorbook.core.enums import RoleName

BASE = "/api/v1/sessions"


@pytest.fixture
def todays_session(builder, today):
    return builder.session(builder.contract(substitute_tutor1=builder.tutor()), session_date=today)


class TestStatusPatch:
    def test_tutor_completes_todays_session(self, client, auth_headers, todays_session):
        response = client.patch(
            f"{BASE}/{todays_session.id}/status",
            json={"status": "completed"},
            headers=auth_headers(todays_session.tutor_id, RoleName.TUTOR),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Session status updated to 'completed'."
        assert body["session"]["status"] == "completed"

    def test_other_tutor_is_forbidden(self, client, auth_headers, builder, todays_session):
        response = client.patch(
            f"{BASE}/{todays_session.id}/status",
            json={"status": "completed"},
            headers=auth_headers(builder.tutor().id, RoleName.TUTOR),
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "You are not the tutor assigned to this session."

    def test_unknown_status_is_bad_request(self, client, auth_headers, todays_session):
        response = client.patch(
            f"{BASE}/{todays_session.id}/status",
            json={"status": "finished"},
            headers=auth_headers(todays_session.tutor_id, RoleName.TUTOR),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_SESSION_STATUS"

    def test_staff_cannot_patch_status(self, client, auth_headers, todays_session):
        response = client.patch(
            f"{BASE}/{todays_session.id}/status",
            json={"status": "completed"},
            headers=auth_headers("s", RoleName.STAFF),
        )
        assert response.status_code == 403


class TestTutorPatch:
    def test_staff_reassigns_to_substitute(self, client, auth_headers, todays_session):
        substitute_id = todays_session.contract.substitute_tutor1_id

        response = client.patch(
            f"{BASE}/{todays_session.id}/tutor",
            json={"new_tutor_id": substitute_id},
            headers=auth_headers("s", RoleName.STAFF),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Session tutor updated successfully."
        assert response.json()["session"]["tutor_id"] == substitute_id

    def test_outside_tutor_is_bad_request(self, client, auth_headers, builder, todays_session):
        response = client.patch(
            f"{BASE}/{todays_session.id}/tutor",
            json={"new_tutor_id": builder.tutor().id},
            headers=auth_headers("s", RoleName.STAFF),
        )
        assert response.status_code == 400

    def test_replacement_tutors(self, client, auth_headers, todays_session):
        response = client.get(
            f"{BASE}/{todays_session.id}/replacement-tutors",
            headers=auth_headers("s", RoleName.STAFF),
        )

        assert response.status_code == 200
        assert response.json()["has_substitute"] is True


class TestSessionReads:
    def test_parent_lists_and_reads_own_sessions(self, client, auth_headers, todays_session):
        parent_id = todays_session.contract.parent_id

        listing = client.get(BASE, headers=auth_headers(parent_id, RoleName.PARENT))
        detail = client.get(
            f"{BASE}/{todays_session.id}", headers=auth_headers(parent_id, RoleName.PARENT)
        )

        assert [s["id"] for s in listing.json()] == [todays_session.id]
        assert detail.status_code == 200

    def test_hidden_session_reads_as_not_found(self, client, auth_headers, builder, todays_session):
        response = client.get(
            f"{BASE}/{todays_session.id}",
            headers=auth_headers(builder.parent().id, RoleName.PARENT),
        )
        assert response.status_code == 404

    def test_unknown_session(self, client, auth_headers):
        response = client.get(f"{BASE}/{ulid.ULID()}", headers=auth_headers("a", RoleName.ADMIN))
        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found."


class TestOperationalEndpoints:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] is True

    def test_prometheus_metrics(self, client):
        response = client.get("/metrics/prometheus")
        assert response.status_code == 200
        assert "tutorbook_service_operations_total" in response.text
