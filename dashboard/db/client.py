"""
Supabase client factories.

Three flavours of client are handed out:

1. get_supabase_client(access_token): per-request client carrying the caller's
   JWT. Every table read/write goes through Row Level Security, which is
   where office/role scoping of clients and advisors lives.
2. get_anon_client(): unauthenticated client for password login and sign-up.
3. get_service_role_client(): bypasses RLS. ONLY used by the client fan-out
   update, and only after services.client_update_service has checked that
   the caller may edit the client.
"""

import logging

from dashboard.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: str) -> Client:
    """
    Create an authenticated Supabase client for a specific dashboard user.

    Args:
        access_token: The user's JWT access token from Supabase Auth, as
                      verified in dashboard/auth/dependencies.py.

    Returns:
        An authenticated Supabase client that enforces RLS.

    Example:
        >>> client = get_supabase_client(auth_user.access_token)
        >>> result = client.table("clients").select("id, email").execute()
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    # PostgREST picks the role and auth.uid() from this bearer token
    client.postgrest.auth(access_token)

    logger.debug("Created authenticated Supabase client with user token (RLS enforced)")

    return client


def get_anon_client() -> Client:
    """Create a Supabase client without a user session (login, sign-up)."""
    return create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )


def get_service_role_client() -> Client:
    """
    Create a Supabase client with service_role privileges.

    WARNING: This bypasses RLS. Callers must authorize the request first.

    Returns:
        A Supabase client with service_role privileges.

    Raises:
        RuntimeError: If SUPABASE_SECRET_KEY is not configured.
    """
    if not settings.SUPABASE_SECRET_KEY:
        logger.error("SUPABASE_SECRET_KEY not configured")
        raise RuntimeError("Server configuration error: service role key missing")

    return create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_SECRET_KEY
    )
