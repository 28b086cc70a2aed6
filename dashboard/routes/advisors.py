"""
Advisor API endpoints (read only).
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from dashboard.auth.dependencies import DashboardUser, get_dashboard_user
from dashboard.db.client import get_supabase_client
from dashboard.schemas.advisors import AdvisorListResponse, AdvisorOption
from dashboard.services.advisor_service import list_advisors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/advisors", tags=["advisors"])


@router.get(
    "",
    response_model=AdvisorListResponse,
    status_code=status.HTTP_200_OK,
    summary="List advisors",
    description="Advisors visible to the caller, ordered by name (for the advisor dropdown)."
)
async def get_advisors(
    dashboard_user: Annotated[DashboardUser, Depends(get_dashboard_user)]
) -> AdvisorListResponse:
    supabase_client = get_supabase_client(dashboard_user.auth.access_token)

    try:
        advisors = await list_advisors(supabase_client)
        options = [AdvisorOption(id=a["id"], name=a.get("name")) for a in advisors]
        return AdvisorListResponse(advisors=options, count=len(options))

    except Exception as e:
        logger.error(f"Failed to list advisors: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": "Failed to retrieve advisors"}
        )
