"""
Pytest configuration for dashboard backend tests.

Sets up the test environment and shared fixtures: mock Supabase clients and
dashboard-user dependency overrides.
"""
import os
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

# Disable config validation during tests
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")


class MockSupabaseResponse:
    """Mock Supabase API response object."""
    def __init__(self, data: Any = None, count: Optional[int] = None):
        self.data = data
        self.count = count


@pytest.fixture
def supabase_client():
    """Plain MagicMock Supabase client."""
    return MagicMock()


@pytest.fixture
def mock_response():
    """The MockSupabaseResponse class, for building execute() results."""
    return MockSupabaseResponse


@pytest.fixture
def tables() -> Dict[str, MagicMock]:
    """Per-table mocks used by routed_client; filled lazily."""
    return {}


@pytest.fixture
def routed_client(tables):
    """
    Mock Supabase client whose table(name) returns tables[name].

    Tables not configured up front get a fresh MagicMock on first use, whose
    execute() results carry no list data.
    """
    client = MagicMock()
    client.table.side_effect = lambda name: tables.setdefault(name, MagicMock())
    return client


@pytest.fixture
def auth_user():
    from dashboard.auth.dependencies import AuthenticatedUser

    return AuthenticatedUser(
        user_id="auth-user-1",
        access_token="test-access-token",
        email="beheer@example.nl",
    )


@pytest.fixture
def super_admin(auth_user):
    from dashboard.auth.dependencies import DashboardUser

    return DashboardUser(
        id="dash-user-1",
        email="beheer@example.nl",
        name="Anne Bakker",
        role="super_admin",
        office_id=None,
        office_name=None,
        auth=auth_user,
    )


@pytest.fixture
def office_admin(auth_user):
    from dashboard.auth.dependencies import DashboardUser

    return DashboardUser(
        id="dash-user-2",
        email="kantoor@example.nl",
        name="Pieter Smit",
        role="office_admin",
        office_id=3,
        office_name="Kantoor Utrecht",
        auth=auth_user,
    )


@pytest.fixture
def as_super_admin(super_admin):
    """Override get_dashboard_user so requests run as a super admin."""
    from dashboard.auth.dependencies import get_dashboard_user
    from dashboard.main import app

    async def _override():
        return super_admin

    app.dependency_overrides[get_dashboard_user] = _override
    yield super_admin
    app.dependency_overrides.clear()


@pytest.fixture
def as_office_admin(office_admin):
    """Override get_dashboard_user so requests run as an office admin."""
    from dashboard.auth.dependencies import get_dashboard_user
    from dashboard.main import app

    async def _override():
        return office_admin

    app.dependency_overrides[get_dashboard_user] = _override
    yield office_admin
    app.dependency_overrides.clear()
