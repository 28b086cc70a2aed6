"""
Tests for office and dashboard-user administration endpoints.

Tests cover:
- Super-admin gating (office admins get 403)
- Office list/create/update/deactivate
- Active office options for every dashboard user
- Dashboard user list/create/update/deactivate
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from postgrest.exceptions import APIError

from dashboard.main import app

client = TestClient(app)


@pytest.fixture
def mock_office_client():
    with patch("dashboard.routes.offices.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


@pytest.fixture
def mock_users_client():
    with patch("dashboard.routes.dashboard_users.get_supabase_client") as mock, \
         patch("dashboard.routes.dashboard_users.get_anon_client") as mock_anon:
        mock.return_value = MagicMock()
        mock_anon.return_value = MagicMock()
        yield mock


@pytest.fixture
def office_row():
    return {
        "id": 3,
        "name": "Kantoor Utrecht",
        "city": "Utrecht",
        "is_active": True,
        "advisor_count": 4,
        "created_at": "2025-01-10T09:00:00Z",
        "updated_at": None,
    }


@pytest.fixture
def user_row():
    return {
        "id": "dash-user-9",
        "auth_id": "auth-user-9",
        "email": "nieuw@example.nl",
        "name": "Lisa de Boer",
        "role": "office_admin",
        "office_id": 3,
        "is_active": True,
        "created_at": "2025-02-01T12:00:00Z",
    }


class TestSuperAdminGate:

    def test_office_admin_cannot_list_offices(self, as_office_admin, mock_office_client):
        response = client.get("/offices")

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "forbidden"

    def test_office_admin_cannot_list_users(self, as_office_admin, mock_users_client):
        response = client.get("/admin/users")

        assert response.status_code == 403

    @patch("dashboard.routes.offices.list_active_offices")
    def test_office_admin_can_list_active_offices(self, mock_list, as_office_admin, mock_office_client):
        mock_list.return_value = [{"id": 3, "name": "Kantoor Utrecht"}]

        response = client.get("/offices/active")

        assert response.status_code == 200
        assert response.json() == [{"id": 3, "name": "Kantoor Utrecht"}]


class TestOffices:

    @patch("dashboard.routes.offices.list_offices")
    def test_list_offices(self, mock_list, as_super_admin, mock_office_client, office_row):
        mock_list.return_value = [office_row]

        response = client.get("/offices")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["offices"][0]["advisor_count"] == 4

    @patch("dashboard.routes.offices.create_office")
    def test_create_office(self, mock_create, as_super_admin, mock_office_client, office_row):
        mock_create.return_value = {**office_row, "advisor_count": 0}

        response = client.post("/offices", json={"name": "Kantoor Utrecht", "city": "Utrecht"})

        assert response.status_code == 201
        assert response.json()["status"] == "CREATED"
        assert mock_create.call_args.kwargs == {"name": "Kantoor Utrecht", "city": "Utrecht"}

    def test_update_office_requires_fields(self, as_super_admin, mock_office_client):
        response = client.patch("/offices/3", json={})

        assert response.status_code == 400

    @patch("dashboard.routes.offices.update_office")
    def test_update_office_only_sends_set_fields(self, mock_update, as_super_admin, mock_office_client, office_row):
        mock_update.return_value = {**office_row, "city": "Amersfoort"}

        response = client.patch("/offices/3", json={"city": "Amersfoort"})

        assert response.status_code == 200
        assert mock_update.call_args.kwargs == {"city": "Amersfoort"}

    @patch("dashboard.routes.offices.update_office")
    def test_update_office_not_found(self, mock_update, as_super_admin, mock_office_client):
        mock_update.return_value = None

        response = client.patch("/offices/99", json={"name": "Nergens"})

        assert response.status_code == 404

    @patch("dashboard.routes.offices.deactivate_office")
    def test_deactivate_office(self, mock_deactivate, as_super_admin, mock_office_client, office_row):
        mock_deactivate.return_value = {**office_row, "is_active": False}

        response = client.delete("/offices/3")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "DEACTIVATED"
        assert data["office"]["is_active"] is False


class TestDashboardUsers:

    @patch("dashboard.routes.dashboard_users.list_dashboard_users")
    def test_list_users(self, mock_list, as_super_admin, mock_users_client, user_row):
        mock_list.return_value = [user_row]

        response = client.get("/admin/users")

        assert response.status_code == 200
        assert response.json()["users"][0]["email"] == "nieuw@example.nl"

    @patch("dashboard.routes.dashboard_users.create_dashboard_user")
    def test_create_user(self, mock_create, as_super_admin, mock_users_client, user_row):
        mock_create.return_value = user_row

        response = client.post(
            "/admin/users",
            json={
                "email": "nieuw@example.nl",
                "name": "Lisa de Boer",
                "role": "office_admin",
                "office_id": 3,
            }
        )

        assert response.status_code == 201
        assert response.json()["user"]["auth_id"] == "auth-user-9"

    @patch("dashboard.routes.dashboard_users.create_dashboard_user")
    def test_create_office_admin_without_office(self, mock_create, as_super_admin, mock_users_client):
        mock_create.side_effect = ValueError("office_admin users must be assigned to an office")

        response = client.post(
            "/admin/users",
            json={"email": "nieuw@example.nl", "name": "Lisa de Boer", "role": "office_admin"}
        )

        assert response.status_code == 400

    @patch("dashboard.routes.dashboard_users.create_dashboard_user")
    def test_create_duplicate_user(self, mock_create, as_super_admin, mock_users_client):
        mock_create.side_effect = APIError({
            "message": "duplicate key value violates unique constraint",
            "code": "23505",
            "details": None,
            "hint": None,
        })

        response = client.post(
            "/admin/users",
            json={"email": "nieuw@example.nl", "name": "Lisa de Boer", "role": "super_admin"}
        )

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "user_exists"

    def test_create_user_unknown_role(self, as_super_admin, mock_users_client):
        response = client.post(
            "/admin/users",
            json={"email": "nieuw@example.nl", "name": "Lisa de Boer", "role": "root"}
        )

        assert response.status_code == 422

    @patch("dashboard.routes.dashboard_users.update_dashboard_user")
    def test_update_user_not_found(self, mock_update, as_super_admin, mock_users_client):
        mock_update.return_value = None

        response = client.patch(
            "/admin/users/missing",
            json={"name": "Iemand", "role": "super_admin"}
        )

        assert response.status_code == 404

    def test_cannot_deactivate_self(self, as_super_admin, mock_users_client):
        response = client.delete(f"/admin/users/{as_super_admin.id}")

        assert response.status_code == 400

    @patch("dashboard.routes.dashboard_users.deactivate_dashboard_user")
    def test_deactivate_user(self, mock_deactivate, as_super_admin, mock_users_client, user_row):
        mock_deactivate.return_value = {**user_row, "is_active": False}

        response = client.delete("/admin/users/dash-user-9")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "DEACTIVATED"
        assert data["user"]["is_active"] is False
