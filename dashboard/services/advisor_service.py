"""
Advisor service.

Read-only: advisors are maintained outside the dashboard. The list feeds the
advisor dropdowns on the client forms.
"""

import logging
from typing import Any, Dict, List, cast

from supabase import Client

from dashboard.utils.constants import TABLES

logger = logging.getLogger(__name__)


async def list_advisors(supabase_client: Client) -> List[Dict[str, Any]]:
    """Return id and name of every visible advisor, ordered by name."""
    result = (
        supabase_client.table(TABLES['ADVISORS'])
        .select("id, name")
        .order("name")
        .execute()
    )

    advisors = cast(List[Dict[str, Any]], result.data or [])
    logger.info(f"Found {len(advisors)} advisors")
    return advisors
