"""
Auth API endpoints.

- POST /auth/login  - password login, returns Supabase session tokens
- POST /auth/logout - revoke the current session
- GET  /auth/me     - the calling dashboard user and role flags
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from supabase import AuthApiError

from dashboard.auth.dependencies import (
    AuthenticatedUser,
    DashboardUser,
    get_authenticated_user,
    get_dashboard_user,
)
from dashboard.db.client import get_anon_client
from dashboard.schemas.auth import AuthMeResponse, LoginRequest, LoginResponse, LogoutResponse
from dashboard.services.auth_service import sign_in, sign_out

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with email and password",
    description="""
    Exchange email and password for a Supabase session.

    Use the returned access_token as "Authorization: Bearer <token>" on every
    other endpoint. Failure returns 401 with the provider's message.
    """
)
async def login(request: LoginRequest) -> LoginResponse:
    try:
        session = await sign_in(get_anon_client(), request.email, request.password)
        return LoginResponse(**session)

    except (AuthApiError, ValueError) as e:
        logger.warning(f"Login failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "login_failed", "details": str(e) or "Login failed"}
        )
    except Exception as e:
        logger.error(f"Login error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "login_error", "details": "Login is temporarily unavailable"}
        )


@router.post(
    "/logout",
    response_model=LogoutResponse,
    status_code=status.HTTP_200_OK,
    summary="Log out",
)
async def logout(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> LogoutResponse:
    try:
        await sign_out(get_anon_client(), auth_user.access_token)
        return LogoutResponse(status="SIGNED_OUT")

    except Exception as e:
        logger.error(f"Logout failed for user_id={auth_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "logout_failed", "details": "Failed to sign out"}
        )


@router.get(
    "/me",
    response_model=AuthMeResponse,
    status_code=status.HTTP_200_OK,
    summary="Get the calling dashboard user",
    description="""
    Returns the dashboard user's role and office so the UI can decide which
    screens to show. 403 when the account has no dashboard access.
    """
)
async def get_auth_me(
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)]
) -> AuthMeResponse:
    return AuthMeResponse(
        user_id=dashboard_user.auth.user_id,
        dashboard_user_id=dashboard_user.id,
        email=dashboard_user.email,
        name=dashboard_user.name,
        role=dashboard_user.role,  # type: ignore
        office_id=dashboard_user.office_id,
        office_name=dashboard_user.office_name,
        is_super_admin=dashboard_user.is_super_admin,
        is_office_admin=dashboard_user.is_office_admin,
    )
