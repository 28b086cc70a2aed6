"""
Dashboard user administration endpoints (super admin only).

Grants, edits and revokes dashboard access. Revoking is a soft delete.
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, status
from postgrest.exceptions import APIError

from dashboard.auth.dependencies import DashboardUser, require_super_admin
from dashboard.db.client import get_anon_client, get_supabase_client
from dashboard.schemas.dashboard_users import (
    DashboardUserCreateRequest,
    DashboardUserListResponse,
    DashboardUserMutationResponse,
    DashboardUserResponse,
    DashboardUserUpdateRequest,
)
from dashboard.services.dashboard_user_service import (
    create_dashboard_user,
    deactivate_dashboard_user,
    list_dashboard_users,
    update_dashboard_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin"])


def _to_response(row: Dict[str, Any]) -> DashboardUserResponse:
    created_at = row.get("created_at")
    return DashboardUserResponse(
        id=str(row.get("id")),
        auth_id=str(row.get("auth_id")),
        email=str(row.get("email") or ""),
        name=str(row.get("name") or ""),
        role=row.get("role", "office_admin"),  # type: ignore
        office_id=row.get("office_id"),
        is_active=bool(row.get("is_active", True)),
        created_at=str(created_at) if created_at is not None else None,
    )


@router.get(
    "",
    response_model=DashboardUserListResponse,
    status_code=status.HTTP_200_OK,
    summary="List dashboard users",
)
async def get_dashboard_users(
    admin: Annotated[DashboardUser, Depends(require_super_admin)]
) -> DashboardUserListResponse:
    supabase_client = get_supabase_client(admin.auth.access_token)

    try:
        users = await list_dashboard_users(supabase_client)
        responses = [_to_response(user) for user in users]
        return DashboardUserListResponse(users=responses, count=len(responses))

    except Exception as e:
        logger.error(f"Failed to list dashboard users: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve dashboard users"}
        )


@router.post(
    "",
    response_model=DashboardUserMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grant dashboard access",
    description="""
    Create a dashboard user. If the email has no auth account yet, one is
    created with a random password; the user sets their own via reset.
    """
)
async def create_new_dashboard_user(
    request: DashboardUserCreateRequest,
    admin: Annotated[DashboardUser, Depends(require_super_admin)]
) -> DashboardUserMutationResponse:
    supabase_client = get_supabase_client(admin.auth.access_token)

    try:
        created = await create_dashboard_user(
            supabase_client=supabase_client,
            anon_client=get_anon_client(),
            email=request.email,
            name=request.name,
            role=request.role,
            office_id=request.office_id,
        )
        return DashboardUserMutationResponse(
            status="CREATED",
            user=_to_response(created),
            message="User created"
        )

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(e)}
        )
    except APIError as e:
        if e.code == "23505":  # unique_violation
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "error": "user_exists",
                    "details": "This email already has dashboard access"
                }
            )
        logger.error(f"Database error creating dashboard user: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": e.message or "Failed to create user"}
        )
    except Exception as e:
        logger.error(f"Failed to create dashboard user: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": str(e)}
        )


@router.patch(
    "/{user_id}",
    response_model=DashboardUserMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update dashboard user",
)
async def update_existing_dashboard_user(
    user_id: Annotated[str, Path(description="dashboard_users row UUID")],
    request: DashboardUserUpdateRequest,
    admin: Annotated[DashboardUser, Depends(require_super_admin)]
) -> DashboardUserMutationResponse:
    supabase_client = get_supabase_client(admin.auth.access_token)

    try:
        updated = await update_dashboard_user(
            supabase_client,
            user_id,
            name=request.name,
            role=request.role,
            office_id=request.office_id,
        )

        if not updated:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "not_found", "details": "Dashboard user not found"}
            )

        return DashboardUserMutationResponse(
            status="UPDATED",
            user=_to_response(updated),
            message="User updated"
        )

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(e)}
        )
    except Exception as e:
        logger.error(f"Failed to update dashboard user {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": "Failed to update user"}
        )


@router.delete(
    "/{user_id}",
    response_model=DashboardUserMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Revoke dashboard access",
)
async def deactivate_existing_dashboard_user(
    user_id: Annotated[str, Path(description="dashboard_users row UUID")],
    admin: Annotated[DashboardUser, Depends(require_super_admin)]
) -> DashboardUserMutationResponse:
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": "You cannot deactivate yourself"}
        )

    supabase_client = get_supabase_client(admin.auth.access_token)

    try:
        deactivated = await deactivate_dashboard_user(supabase_client, user_id)

        if not deactivated:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "not_found", "details": "Dashboard user not found"}
            )

        return DashboardUserMutationResponse(
            status="DEACTIVATED",
            user=_to_response(deactivated),
            message="User deactivated"
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to deactivate dashboard user {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "delete_error", "details": "Failed to deactivate user"}
        )
