"""
Tests for store failures on every route.

Tests cover:
- Failed commits on write routes (500 error payload)
- Failed queries on read routes (500 error payload with the store message)
"""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from outreach.storage import create_template, find_patient_by_phone


def store_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))


def assert_error_payload(response, message=None):
    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    if message is None:
        assert "database is locked" in data["message"]
    else:
        assert data["message"] == message


@pytest.fixture
def patient_id(client, auth_headers, patient_body, db):
    client.post("/add", json=patient_body, headers=auth_headers)
    return find_patient_by_phone(db, "1234567890").id


class TestWriteFailures:
    """Commits that fail must still produce a response."""

    def test_add_patient(self, client, auth_headers, patient_body, monkeypatch):
        monkeypatch.setattr(Session, "commit", store_down)

        response = client.post("/add", json=patient_body, headers=auth_headers)

        assert_error_payload(response, "Unable to add patient")

    def test_increase_response_count(self, client, auth_headers, patient_id, monkeypatch):
        monkeypatch.setattr(Session, "commit", store_down)
        body = {"phoneNumber": "1234567890", "firstName": "A", "lastName": "B", "language": "en"}

        response = client.put(f"/increaseResponseCount/{patient_id}", json=body, headers=auth_headers)

        assert_error_payload(response, "Unable to update patient")

    def test_status(self, client, auth_headers, patient_id, monkeypatch):
        monkeypatch.setattr(Session, "commit", store_down)

        response = client.post("/status", json={"id": patient_id, "status": False}, headers=auth_headers)

        assert_error_payload(response, "Unable to change patient status")

    def test_new_template(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(Session, "commit", store_down)

        response = client.post(
            "/newTemplate",
            json={"language": "en", "messageTxt": "Hi", "type": "reminder"},
            headers=auth_headers,
        )

        assert_error_payload(response, "Unable to save template")

    def test_delete_template(self, client, db, monkeypatch):
        template = create_template(db, language="en", text="Hi", type="reminder")
        monkeypatch.setattr(Session, "commit", store_down)

        response = client.post("/deleteTemplate", json={"id": template.id})

        assert_error_payload(response, "Unable to delete template")


class TestReadFailures:
    """Queries that fail surface the store message in the error payload."""

    def test_add_patient_phone_lookup(self, client, auth_headers, patient_body, monkeypatch):
        monkeypatch.setattr(Session, "query", store_down)

        response = client.post("/add", json=patient_body, headers=auth_headers)

        assert_error_payload(response)

    def test_templates(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(Session, "query", store_down)

        assert_error_payload(client.get("/templates", headers=auth_headers))

    def test_get_patient(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(Session, "get", store_down)

        assert_error_payload(client.get("/getPatient/abc", headers=auth_headers))

    def test_get_patient_outcomes(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(Session, "query", store_down)

        assert_error_payload(client.get("/getPatientOutcomes/abc", headers=auth_headers))

    def test_get_patient_messages(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(Session, "query", store_down)

        assert_error_payload(client.get("/getPatientMessages/abc", headers=auth_headers))
