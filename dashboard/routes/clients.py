"""
Client API endpoints.

List/search/sort/paginate clients, read the denormalized detail projection,
create clients, save detail edits through the fan-out update, and delete
clients with all of their child rows.

Visibility is decided by RLS on the caller's token; every route additionally
requires an active dashboard user.
"""

import logging
from typing import Annotated, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from postgrest.exceptions import APIError

from dashboard.auth.dependencies import DashboardUser, get_dashboard_user
from dashboard.config import settings
from dashboard.db.client import get_supabase_client
from dashboard.schemas.clients import (
    ClientCreateRequest,
    ClientCreateResponse,
    ClientDeleteResponse,
    ClientDetail,
    ClientListResponse,
    ClientSummary,
    ClientUpdateRequest,
    ClientUpdateResponse,
    SortDirection,
    SortField,
)
from dashboard.services.client_service import (
    create_client,
    delete_client,
    get_client_detail,
    list_clients,
    total_pages,
)
from dashboard.services.client_update_service import (
    ClientNotFoundError,
    ClientUpdateError,
    ClientUpdatePermissionError,
    apply_client_update,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get(
    "",
    response_model=ClientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List clients",
    description="""
    Retrieve one page of clients visible to the dashboard user.

    This endpoint:
    - Searches first name, last name and email (case-insensitive, only
      applied from 2 characters on)
    - Sorts by one of first_name, last_name, email, phone, gender, age
    - Pages with a fixed page size (1-based page numbers)

    Security:
    - Requires valid Authorization Bearer token and dashboard access
    - RLS scopes office admins to their own office's clients
    """
)
async def get_clients(
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)],
    search: str | None = Query(None, max_length=200, description="Search term"),
    sort_field: SortField = Query("last_name", description="Column to sort by"),
    sort_direction: SortDirection = Query("asc", description="asc or desc"),
    page: int = Query(1, ge=1, description="1-based page number"),
) -> ClientListResponse:
    """List clients with search, sort and pagination."""
    logger.info(
        f"Listing clients for dashboard user {dashboard_user.id} "
        f"(page={page}, sort={sort_field} {sort_direction})"
    )

    supabase_client = get_supabase_client(dashboard_user.auth.access_token)
    page_size = settings.CLIENTS_PAGE_SIZE

    try:
        clients, total = await list_clients(
            supabase_client=supabase_client,
            search=search,
            sort_field=sort_field,
            sort_direction=sort_direction,
            page=page,
            page_size=page_size,
        )

        return ClientListResponse(
            clients=[ClientSummary(**client) for client in clients],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size),
            sort_field=sort_field,
            sort_direction=sort_direction,
        )

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(e)}
        )
    except Exception as e:
        logger.error(f"Failed to list clients: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to retrieve clients from database"
            }
        )


@router.post(
    "",
    response_model=ClientCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create client",
    description="""
    Create a new client from the "add client" form.

    First name, last name and email are required. The client's auth account
    is linked later, when they first log into the client app.
    """
)
async def create_new_client(
    request: ClientCreateRequest,
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)]
) -> ClientCreateResponse:
    """Create a client."""
    logger.info(f"Dashboard user {dashboard_user.id} creating a client")

    supabase_client = get_supabase_client(dashboard_user.auth.access_token)

    try:
        created = await create_client(
            supabase_client=supabase_client,
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            phone=request.phone,
            advisor_id=request.advisor_id,
            company=request.company,
            city=request.city,
            country=request.country if request.country is not None else settings.DEFAULT_CLIENT_COUNTRY,
            risk_profile=request.risk_profile,
            gross_income=request.gross_income,
        )

        return ClientCreateResponse(
            status="CREATED",
            client=created,
            message="Client created successfully"
        )

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(e)}
        )
    except APIError as e:
        if e.code == "23505":  # unique_violation
            logger.warning("Client with this email already exists")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "error": "client_exists",
                    "details": "A client with this email already exists"
                }
            )
        logger.error(f"Database error creating client: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": e.message or "Failed to create client"}
        )
    except Exception as e:
        logger.error(f"Failed to create client: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": "Failed to create client"}
        )


@router.get(
    "/{client_id}",
    response_model=ClientDetail,
    status_code=status.HTTP_200_OK,
    summary="Get client detail",
    description="""
    Retrieve the denormalized client projection (client, house, contract,
    insurance, goal, investment, liability, advisor and partner fields).

    Returns 404 if the client does not exist or is not visible to the caller.
    """
)
async def get_client(
    client_id: Annotated[str, Path(description="Client UUID")],
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)]
) -> ClientDetail:
    """Get the client detail projection."""
    logger.info(f"Fetching client {client_id} for dashboard user {dashboard_user.id}")

    supabase_client = get_supabase_client(dashboard_user.auth.access_token)

    try:
        detail = await get_client_detail(supabase_client, client_id)

        if not detail:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={
                    "error": "not_found",
                    "details": "Client not found. You may not have permission to view this client."
                }
            )

        return ClientDetail(**detail)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch client {client_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve client"}
        )


@router.patch(
    "/{client_id}",
    response_model=ClientUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update client",
    description="""
    Save edits from the client detail editor.

    The flat projection fields are routed to clients and its child tables
    (house, contract, insurance, goal, investment, liability, partner).
    Child rows are updated by explicit id, else by the client's existing row,
    else inserted. A failing child write is logged and does not fail the call.
    """
)
async def update_client(
    client_id: Annotated[str, Path(description="Client UUID")],
    request: ClientUpdateRequest,
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)]
) -> ClientUpdateResponse:
    """Run the fan-out update for a client."""
    if not request.updated_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    try:
        outcome = await apply_client_update(
            client_id=client_id,
            updated_data=request.updated_data,
            user_id=dashboard_user.auth.user_id,
            email=dashboard_user.auth.email or dashboard_user.email,
        )

        return ClientUpdateResponse(
            status="UPDATED",
            client=outcome.client,
            message="Client updated successfully"
        )

    except ClientNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": "Client not found"}
        )
    except ClientUpdatePermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "forbidden", "details": str(e)}
        )
    except ClientUpdateError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": str(e)}
        )
    except Exception as e:
        logger.error(f"Failed to update client {client_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": "Failed to update client"}
        )


@router.delete(
    "/{client_id}",
    response_model=ClientDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete client",
    description="""
    Delete a client together with its house objects, contracts, insurances,
    goals, investments, liabilities, partners and pensions
    (delete_client_cascade RPC).
    """
)
async def remove_client(
    client_id: Annotated[str, Path(description="Client UUID")],
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)]
) -> ClientDeleteResponse:
    """Delete a client with cascade."""
    logger.info(f"Dashboard user {dashboard_user.id} deleting client {client_id}")

    supabase_client = get_supabase_client(dashboard_user.auth.access_token)

    try:
        counts: Dict[str, int] = await delete_client(supabase_client, client_id)

        if not counts or not counts.get("client_deleted"):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "not_found", "details": "Client not found"}
            )

        return ClientDeleteResponse(
            status="DELETED",
            message="Client deleted successfully",
            rows_deleted=counts,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete client {client_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "delete_error", "details": "Failed to delete client"}
        )
