"""
Auth service.

Password login and logout against Supabase Auth, plus the dashboard-user
lookup that decides whether an authenticated account may use the dashboard.
"""

import logging
from typing import Any, Dict, Optional, cast

from supabase import Client

from dashboard.utils.constants import RPC

logger = logging.getLogger(__name__)


async def fetch_dashboard_user(supabase_client: Client) -> Optional[Dict[str, Any]]:
    """
    Fetch the calling user's dashboard_users row via the get_dashboard_user RPC.

    The RPC reads auth.uid() from the client's token, so no user id is passed.

    Returns:
        Dict with id, email, name, role, office_id, office_name, or None if the
        account has no dashboard access.
    """
    result = supabase_client.rpc(RPC['GET_DASHBOARD_USER'], {}).execute()

    rows = result.data or []
    if not isinstance(rows, list) or len(rows) == 0:
        return None

    return cast(Dict[str, Any], rows[0])


async def sign_in(
    supabase_client: Client,
    email: str,
    password: str
) -> Dict[str, Any]:
    """
    Sign in with email and password.

    Args:
        supabase_client: Unauthenticated Supabase client
        email: Account email
        password: Account password (never logged)

    Returns:
        Dict with access_token, refresh_token, expires_in, token_type,
        user_id, email

    Raises:
        ValueError: If Supabase returns no session
        Exception: Provider errors (bad credentials, unconfirmed email) propagate
    """
    logger.info("Password login attempt")

    response = supabase_client.auth.sign_in_with_password(
        {"email": email, "password": password}
    )

    session = response.session
    if session is None or response.user is None:
        raise ValueError("Login failed: no session returned")

    logger.info(f"Login succeeded for user_id={response.user.id}")

    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": session.expires_in,
        "token_type": session.token_type,
        "user_id": str(response.user.id),
        "email": response.user.email,
    }


async def sign_out(supabase_client: Client, access_token: str) -> None:
    """Revoke the session behind access_token (all devices)."""
    supabase_client.auth.admin.sign_out(access_token)
    logger.info("Session signed out")
