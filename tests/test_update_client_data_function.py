"""
Tests for POST /functions/update-client-data.

The function endpoint keeps the {clientId, updatedData} -> {data}|{error}
wire format, authenticates the bearer token itself and maps the fan-out
update's failures to flat error bodies.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from unittest.mock import patch

from dashboard.main import app
from dashboard.services.client_update_service import (
    ClientNotFoundError,
    ClientUpdateError,
    ClientUpdatePermissionError,
    ClientUpdateResult,
)

client = TestClient(app)

URL = "/functions/update-client-data"
AUTH = {"Authorization": "Bearer test-access-token"}


@pytest.fixture
def mock_decode():
    with patch("dashboard.routes.functions.decode_access_token") as mock:
        mock.return_value = {"sub": "auth-user-1", "email": "adviseur@example.nl"}
        yield mock


class TestRequestValidation:

    def test_missing_client_id(self):
        response = client.post(URL, json={"updatedData": {"city": "Delft"}}, headers=AUTH)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing clientId or updatedData"}

    def test_missing_updated_data(self):
        response = client.post(URL, json={"clientId": "client-123"}, headers=AUTH)

        assert response.status_code == 400

    def test_null_updated_data(self):
        response = client.post(URL, json={"clientId": "client-123", "updatedData": None}, headers=AUTH)

        assert response.status_code == 400

    @patch("dashboard.routes.functions.apply_client_update")
    def test_empty_updated_data_returns_current_row(self, mock_apply, mock_decode):
        mock_apply.return_value = ClientUpdateResult(client={"id": "client-123"})

        response = client.post(URL, json={"clientId": "client-123", "updatedData": {}}, headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"data": {"id": "client-123"}}
        assert mock_apply.call_args.kwargs["updated_data"] == {}

    def test_malformed_json(self):
        response = client.post(
            URL,
            content="not json",
            headers={**AUTH, "Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Missing clientId or updatedData"


class TestAuthentication:

    def test_no_authorization_header(self):
        response = client.post(URL, json={"clientId": "client-123", "updatedData": {"city": "Delft"}})

        assert response.status_code == 401
        assert response.json() == {"error": "No authorization header"}

    def test_invalid_token(self, mock_decode):
        mock_decode.side_effect = HTTPException(status_code=401, detail="invalid")

        response = client.post(
            URL,
            json={"clientId": "client-123", "updatedData": {"city": "Delft"}},
            headers=AUTH
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid authentication"}

    def test_non_bearer_header(self):
        response = client.post(
            URL,
            json={"clientId": "client-123", "updatedData": {"city": "Delft"}},
            headers={"Authorization": "Basic abc"}
        )

        assert response.status_code == 401


class TestUpdate:

    @patch("dashboard.routes.functions.apply_client_update")
    def test_success_returns_client_row(self, mock_apply, mock_decode):
        mock_apply.return_value = ClientUpdateResult(
            client={"id": "client-123", "city": "Delft"}
        )

        response = client.post(
            URL,
            json={"clientId": "client-123", "updatedData": {"city": "Delft", "house_id": 9}},
            headers=AUTH
        )

        assert response.status_code == 200
        assert response.json() == {"data": {"id": "client-123", "city": "Delft"}}

        kwargs = mock_apply.call_args.kwargs
        assert kwargs["client_id"] == "client-123"
        assert kwargs["user_id"] == "auth-user-1"
        assert kwargs["email"] == "adviseur@example.nl"
        assert kwargs["updated_data"] == {"city": "Delft", "house_id": 9}

    @patch("dashboard.routes.functions.apply_client_update")
    def test_client_not_found(self, mock_apply, mock_decode):
        mock_apply.side_effect = ClientNotFoundError("Client not found")

        response = client.post(
            URL,
            json={"clientId": "missing", "updatedData": {"city": "Delft"}},
            headers=AUTH
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Client not found"}

    @patch("dashboard.routes.functions.apply_client_update")
    def test_permission_denied(self, mock_apply, mock_decode):
        mock_apply.side_effect = ClientUpdatePermissionError(
            "Permission denied: You are not authorized to update this client"
        )

        response = client.post(
            URL,
            json={"clientId": "client-123", "updatedData": {"city": "Delft"}},
            headers=AUTH
        )

        assert response.status_code == 403
        assert response.json()["error"].startswith("Permission denied")

    @patch("dashboard.routes.functions.apply_client_update")
    def test_client_update_failure(self, mock_apply, mock_decode):
        mock_apply.side_effect = ClientUpdateError("Client update failed: column does not exist")

        response = client.post(
            URL,
            json={"clientId": "client-123", "updatedData": {"bogus": 1}},
            headers=AUTH
        )

        assert response.status_code == 500
        assert "Client update failed" in response.json()["error"]

    @patch("dashboard.routes.functions.apply_client_update")
    def test_missing_service_key(self, mock_apply, mock_decode):
        mock_apply.side_effect = RuntimeError("SUPABASE_SECRET_KEY is not configured")

        response = client.post(
            URL,
            json={"clientId": "client-123", "updatedData": {"city": "Delft"}},
            headers=AUTH
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Server configuration error"}
