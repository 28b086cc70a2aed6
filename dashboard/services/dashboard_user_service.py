"""
Dashboard user service.

Manages the staff accounts that may enter the dashboard. A dashboard_users
row links a Supabase Auth account (auth_id) to a role and, for office admins,
an office. Removing access is a soft delete (is_active = false); the auth
account itself is left alone.
"""

import logging
import secrets
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from dashboard.utils.constants import DASHBOARD_ROLES, TABLES

logger = logging.getLogger(__name__)


def validate_role_assignment(role: str, office_id: Optional[int]) -> None:
    """
    Raises:
        ValueError: Unknown role, or an office admin without an office
    """
    if role not in DASHBOARD_ROLES.values():
        raise ValueError(f"Unknown dashboard role '{role}'")
    if role == DASHBOARD_ROLES['OFFICE_ADMIN'] and office_id is None:
        raise ValueError("Office admins must be assigned to an office")


async def list_dashboard_users(supabase_client: Client) -> List[Dict[str, Any]]:
    """Return every dashboard user (active or not), ordered by name."""
    result = (
        supabase_client.table(TABLES['DASHBOARD_USERS'])
        .select("*")
        .order("name")
        .execute()
    )
    users = cast(List[Dict[str, Any]], result.data or [])
    logger.info(f"Found {len(users)} dashboard users")
    return users


async def resolve_auth_id(
    supabase_client: Client,
    anon_client: Client,
    email: str
) -> str:
    """
    Find (or create) the Supabase Auth account for an email.

    Known admin_users keep their id. Anyone else is signed up with a random
    password and is expected to reset it from the confirmation email.

    Raises:
        Exception: If sign-up returns no user
    """
    existing = (
        supabase_client.table(TABLES['ADMIN_USERS'])
        .select("id, email")
        .eq("email", email)
        .limit(1)
        .execute()
    )
    if existing.data:
        row = cast(Dict[str, Any], existing.data[0])
        logger.info(f"Reusing auth account of admin user {row.get('id')}")
        return str(row.get("id"))

    logger.info("No existing account, signing up a new auth user")
    response = anon_client.auth.sign_up({
        "email": email,
        "password": secrets.token_urlsafe(32),
    })

    if response.user is None:
        raise Exception("Could not create an auth account for this email")

    return str(response.user.id)


async def create_dashboard_user(
    supabase_client: Client,
    anon_client: Client,
    email: str,
    name: str,
    role: str,
    office_id: Optional[int] = None
) -> Dict[str, Any]:
    """
    Grant dashboard access to an email address.

    Args:
        supabase_client: Authenticated (super admin) Supabase client
        anon_client: Unauthenticated client used for sign-up
        email: Staff email
        name: Display name
        role: 'super_admin' or 'office_admin'
        office_id: Required for office admins

    Raises:
        ValueError: Invalid role/office combination
    """
    validate_role_assignment(role, office_id)

    auth_id = await resolve_auth_id(supabase_client, anon_client, email)

    user_data = {
        "auth_id": auth_id,
        "email": email,
        "name": name,
        "role": role,
        "office_id": office_id,
    }

    logger.info(f"Creating dashboard user with role={role}, office_id={office_id}")

    result = supabase_client.table(TABLES['DASHBOARD_USERS']).insert(user_data).execute()

    if not result.data or len(result.data) == 0:
        raise Exception("Failed to create dashboard user: no data returned")

    created = cast(Dict[str, Any], result.data[0])
    logger.info(f"Dashboard user created successfully: {created.get('id')}")
    return created


async def update_dashboard_user(
    supabase_client: Client,
    user_id: str,
    **updates: Any
) -> Optional[Dict[str, Any]]:
    """
    Update name, role and/or office of a dashboard user.

    Email and auth_id are not editable.

    Returns:
        The updated row, or None if not found
    """
    if "email" in updates or "auth_id" in updates:
        raise ValueError("Email and auth account cannot be changed")

    if "role" in updates:
        validate_role_assignment(updates["role"], updates.get("office_id"))

    logger.info(f"Updating dashboard user {user_id}: {list(updates.keys())}")

    result = (
        supabase_client.table(TABLES['DASHBOARD_USERS'])
        .update(updates)
        .eq("id", user_id)
        .execute()
    )

    if not result.data or len(result.data) == 0:
        logger.warning(f"Dashboard user {user_id} not found")
        return None

    return cast(Dict[str, Any], result.data[0])


async def deactivate_dashboard_user(
    supabase_client: Client,
    user_id: str
) -> Optional[Dict[str, Any]]:
    """Revoke dashboard access (soft delete)."""
    logger.info(f"Deactivating dashboard user {user_id}")

    result = (
        supabase_client.table(TABLES['DASHBOARD_USERS'])
        .update({"is_active": False})
        .eq("id", user_id)
        .execute()
    )

    if not result.data or len(result.data) == 0:
        logger.warning(f"Dashboard user {user_id} not found")
        return None

    return cast(Dict[str, Any], result.data[0])
