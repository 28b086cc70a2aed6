"""
FastAPI dependency functions for authentication and role gating.

Bearer tokens are Supabase access tokens, verified against the project's JWT
Signing Keys (ES256 via JWKS). On top of that, the dashboard only admits
users that have a dashboard_users row; get_dashboard_user resolves it through
the get_dashboard_user RPC, and require_super_admin gates the admin screens.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, status
from jwt import PyJWKClient, decode
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError, PyJWKClientError

from dashboard.config import settings
from dashboard.db.client import get_supabase_client
from dashboard.services.auth_service import fetch_dashboard_user
from dashboard.utils.constants import DASHBOARD_ROLES

logger = logging.getLogger(__name__)

# Fetches and caches Supabase's public signing keys
_jwks_client: PyJWKClient | None = None


@dataclass
class AuthenticatedUser:
    """
    Represents an authenticated Supabase user with their token.

    Attributes:
        user_id: The user's UUID from the JWT token's 'sub' claim
        access_token: The full JWT access token (for creating RLS-scoped clients)
        email: The 'email' claim, if present
    """
    user_id: str
    access_token: str
    email: Optional[str] = None


@dataclass
class DashboardUser:
    """
    A staff member with dashboard access.

    role is 'super_admin' (sees every office, manages users and offices) or
    'office_admin' (scoped to office_id by RLS).
    """
    id: str
    email: str
    name: str
    role: str
    office_id: Optional[int]
    office_name: Optional[str]
    auth: AuthenticatedUser

    @property
    def is_super_admin(self) -> bool:
        return self.role == DASHBOARD_ROLES['SUPER_ADMIN']

    @property
    def is_office_admin(self) -> bool:
        return self.role == DASHBOARD_ROLES['OFFICE_ADMIN']


def get_jwks_client() -> PyJWKClient:
    """
    Get or create the JWKS client instance.

    Raises:
        ValueError: If SUPABASE_URL is not configured
    """
    global _jwks_client

    if _jwks_client is None:
        jwks_url = settings.SUPABASE_JWKS_URL
        if not jwks_url:
            raise ValueError(
                "SUPABASE_URL is not configured. "
                "Cannot construct JWKS URL for JWT verification."
            )

        logger.info(f"Initializing JWKS client with URL: {jwks_url}")
        _jwks_client = PyJWKClient(
            jwks_url,
            cache_keys=True,
            max_cached_keys=16,
        )

    return _jwks_client


def _unauthorized(error: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "details": details}
    )


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an "Authorization: Bearer <token>" header value.

    Raises:
        HTTPException: 401 if the header is missing or malformed
    """
    if not authorization:
        logger.warning("Missing Authorization header")
        raise _unauthorized("unauthorized", "Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("Invalid Authorization header format")
        raise _unauthorized("unauthorized", "Invalid Authorization header format")

    return parts[1]


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify a Supabase access token and return its claims.

    Raises:
        HTTPException: 401 if the token is expired, forged, or unverifiable
    """
    try:
        jwks_client = get_jwks_client()
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        # Supabase tokens are issued by https://<project>.supabase.co/auth/v1
        issuer = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1"

        payload: Dict[str, Any] = decode(
            token,
            signing_key.key,
            algorithms=["ES256"],
            audience="authenticated",
            issuer=issuer,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_aud": True,
                "verify_iss": True,
            }
        )
        return payload

    except ExpiredSignatureError:
        logger.warning("Token has expired")
        raise _unauthorized("token_expired", "Authentication token has expired")

    except PyJWKClientError as e:
        logger.error(f"JWKS client error: {str(e)}")
        raise _unauthorized("jwks_error", "Unable to verify token signature")

    except InvalidTokenError as e:
        logger.warning(f"Invalid token: {str(e)}")
        raise _unauthorized("invalid_token", "Invalid authentication token")

    except Exception as e:
        logger.error(f"Unexpected error during token verification: {str(e)}")
        raise _unauthorized("unauthorized", "Token verification failed")


async def get_authenticated_user(
    authorization: Annotated[str | None, Header()] = None
) -> AuthenticatedUser:
    """
    Verify the bearer token and return the authenticated user with the token.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired

    Usage:
        @router.get("/clients")
        async def list_clients(
            auth_user: AuthenticatedUser = Depends(get_authenticated_user)
        ):
            supabase_client = get_supabase_client(auth_user.access_token)
    """
    token = extract_bearer_token(authorization)
    payload = decode_access_token(token)

    user_id = payload.get("sub")
    if not user_id:
        logger.error("Token payload missing 'sub' claim")
        raise _unauthorized("unauthorized", "Invalid token: missing user ID")

    email = payload.get("email")

    logger.info(f"Token verified successfully for user_id={user_id}")

    return AuthenticatedUser(
        user_id=str(user_id),
        access_token=token,
        email=str(email) if email is not None else None,
    )


async def get_dashboard_user(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> DashboardUser:
    """
    Resolve the caller's dashboard_users row.

    Raises:
        HTTPException: 403 if the account has no (active) dashboard access
    """
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        row = await fetch_dashboard_user(supabase_client)
    except Exception as e:
        logger.error(f"Error fetching dashboard user for {auth_user.user_id}: {e}")
        row = None

    if not row or row.get("is_active") is False:
        logger.warning(f"User {auth_user.user_id} has no dashboard access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "no_dashboard_access",
                "details": "Your account has no dashboard access. Contact your administrator."
            }
        )

    office_id = row.get("office_id")

    return DashboardUser(
        id=str(row.get("id")),
        email=str(row.get("email") or auth_user.email or ""),
        name=str(row.get("name") or ""),
        role=str(row.get("role")),
        office_id=int(office_id) if office_id is not None else None,
        office_name=row.get("office_name"),
        auth=auth_user,
    )


async def require_super_admin(
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)]
) -> DashboardUser:
    """
    Gate admin-only routes (user and office management).

    Raises:
        HTTPException: 403 for office admins
    """
    if not dashboard_user.is_super_admin:
        logger.warning(
            f"Dashboard user {dashboard_user.id} ({dashboard_user.role}) "
            "attempted a super-admin action"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "forbidden",
                "details": "This page is only accessible to super admins"
            }
        )
    return dashboard_user
