"""
Service layer for the advisory client dashboard.

Thin glue between routes (HTTP layer) and Supabase:
- Builds PostgREST queries and RPC calls under the caller's RLS scope
- Flattens nested relations into the shapes the dashboard screens use
- Fans client detail edits out over the normalized child tables
"""

from .advisor_service import list_advisors
from .auth_service import fetch_dashboard_user, sign_in, sign_out
from .client_service import (
    create_client,
    delete_client,
    get_client_detail,
    list_clients,
)
from .client_update_service import (
    apply_client_update,
    authorize_client_update,
    partition_update,
    update_client_data,
)
from .dashboard_user_service import (
    create_dashboard_user,
    deactivate_dashboard_user,
    list_dashboard_users,
    update_dashboard_user,
)
from .office_service import (
    create_office,
    deactivate_office,
    list_active_offices,
    list_offices,
    update_office,
)

__all__ = [
    "list_advisors",
    "fetch_dashboard_user",
    "sign_in",
    "sign_out",
    "list_clients",
    "get_client_detail",
    "create_client",
    "delete_client",
    "partition_update",
    "authorize_client_update",
    "update_client_data",
    "apply_client_update",
    "list_dashboard_users",
    "create_dashboard_user",
    "update_dashboard_user",
    "deactivate_dashboard_user",
    "list_offices",
    "list_active_offices",
    "create_office",
    "update_office",
    "deactivate_office",
]
