"""
Office administration endpoints.

Listing active offices is open to every dashboard user (office dropdowns);
everything else requires a super admin.
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, status

from dashboard.auth.dependencies import DashboardUser, get_dashboard_user, require_super_admin
from dashboard.db.client import get_supabase_client
from dashboard.schemas.offices import (
    OfficeCreateRequest,
    OfficeListResponse,
    OfficeMutationResponse,
    OfficeOption,
    OfficeResponse,
    OfficeUpdateRequest,
)
from dashboard.services.office_service import (
    create_office,
    deactivate_office,
    list_active_offices,
    list_offices,
    update_office,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/offices", tags=["offices"])


def _to_response(office: Dict[str, Any]) -> OfficeResponse:
    def _opt_str(v: Any) -> str | None:
        return str(v) if v is not None else None

    return OfficeResponse(
        id=int(office["id"]),
        name=str(office.get("name") or ""),
        city=office.get("city"),
        is_active=bool(office.get("is_active", True)),
        advisor_count=int(office.get("advisor_count", 0)),
        created_at=_opt_str(office.get("created_at")),
        updated_at=_opt_str(office.get("updated_at")),
    )


@router.get(
    "",
    response_model=OfficeListResponse,
    status_code=status.HTTP_200_OK,
    summary="List offices (super admin)",
    description="All offices ordered by name, with the number of advisors per office."
)
async def get_offices(
    admin: Annotated[DashboardUser, Depends(require_super_admin)]
) -> OfficeListResponse:
    supabase_client = get_supabase_client(admin.auth.access_token)

    try:
        offices = await list_offices(supabase_client)
        responses = [_to_response(office) for office in offices]
        return OfficeListResponse(offices=responses, count=len(responses))

    except Exception as e:
        logger.error(f"Failed to list offices: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve offices"}
        )


@router.get(
    "/active",
    response_model=list[OfficeOption],
    status_code=status.HTTP_200_OK,
    summary="List active offices",
)
async def get_active_offices(
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)]
) -> list[OfficeOption]:
    supabase_client = get_supabase_client(dashboard_user.auth.access_token)

    try:
        offices = await list_active_offices(supabase_client)
        return [OfficeOption(id=o["id"], name=o.get("name") or "") for o in offices]

    except Exception as e:
        logger.error(f"Failed to list active offices: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve offices"}
        )


@router.post(
    "",
    response_model=OfficeMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create office (super admin)",
)
async def create_new_office(
    request: OfficeCreateRequest,
    admin: Annotated[DashboardUser, Depends(require_super_admin)]
) -> OfficeMutationResponse:
    supabase_client = get_supabase_client(admin.auth.access_token)

    try:
        created = await create_office(supabase_client, name=request.name, city=request.city)
        return OfficeMutationResponse(
            status="CREATED",
            office=_to_response(created),
            message="Office created"
        )

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(e)}
        )
    except Exception as e:
        logger.error(f"Failed to create office: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": "Failed to create office"}
        )


@router.patch(
    "/{office_id}",
    response_model=OfficeMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update office (super admin)",
)
async def update_existing_office(
    office_id: Annotated[int, Path(description="Office id")],
    request: OfficeUpdateRequest,
    admin: Annotated[DashboardUser, Depends(require_super_admin)]
) -> OfficeMutationResponse:
    updates = request.model_dump(exclude_unset=True)

    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    supabase_client = get_supabase_client(admin.auth.access_token)

    try:
        updated = await update_office(supabase_client, office_id, **updates)

        if not updated:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "not_found", "details": "Office not found"}
            )

        return OfficeMutationResponse(
            status="UPDATED",
            office=_to_response(updated),
            message="Office updated"
        )

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(e)}
        )
    except Exception as e:
        logger.error(f"Failed to update office {office_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": "Failed to update office"}
        )


@router.delete(
    "/{office_id}",
    response_model=OfficeMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Deactivate office (super admin)",
    description="Offices are soft-deleted: is_active is cleared, advisor links stay."
)
async def deactivate_existing_office(
    office_id: Annotated[int, Path(description="Office id")],
    admin: Annotated[DashboardUser, Depends(require_super_admin)]
) -> OfficeMutationResponse:
    supabase_client = get_supabase_client(admin.auth.access_token)

    try:
        office = await deactivate_office(supabase_client, office_id)

        if not office:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "not_found", "details": "Office not found"}
            )

        return OfficeMutationResponse(
            status="DEACTIVATED",
            office=_to_response(office),
            message="Office deactivated"
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to deactivate office {office_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "delete_error", "details": "Failed to deactivate office"}
        )
