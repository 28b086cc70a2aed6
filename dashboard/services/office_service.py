"""
Office service.

CRUD for offices, the organizational units that scope advisors and office
admins. Offices are never physically deleted; deactivation hides them from
dropdowns while keeping existing advisor links intact.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from dashboard.utils.constants import TABLES

logger = logging.getLogger(__name__)


async def list_offices(supabase_client: Client) -> List[Dict[str, Any]]:
    """
    Return all offices ordered by name, each with an advisor_count.

    Returns:
        List of office dicts with an extra 'advisor_count' key
    """
    result = (
        supabase_client.table(TABLES['OFFICES'])
        .select("*")
        .order("name")
        .execute()
    )
    offices = cast(List[Dict[str, Any]], result.data or [])

    advisors_result = supabase_client.table(TABLES['ADVISORS']).select("office_id").execute()
    counts = Counter(
        advisor.get("office_id")
        for advisor in cast(List[Dict[str, Any]], advisors_result.data or [])
        if advisor.get("office_id") is not None
    )

    logger.info(f"Found {len(offices)} offices")

    return [{**office, "advisor_count": counts.get(office.get("id"), 0)} for office in offices]


async def list_active_offices(supabase_client: Client) -> List[Dict[str, Any]]:
    """Return id and name of active offices (for dropdowns)."""
    result = (
        supabase_client.table(TABLES['OFFICES'])
        .select("id, name")
        .eq("is_active", True)
        .order("name")
        .execute()
    )
    return cast(List[Dict[str, Any]], result.data or [])


async def create_office(
    supabase_client: Client,
    name: str,
    city: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create an office.

    Raises:
        ValueError: If the name is blank
        Exception: If the insert returns no row
    """
    if not name.strip():
        raise ValueError("Office name is required")

    office_data = {
        "name": name.strip(),
        "city": city.strip() if city and city.strip() else None,
    }

    logger.info(f"Creating office '{office_data['name']}'")

    result = supabase_client.table(TABLES['OFFICES']).insert(office_data).execute()

    if not result.data or len(result.data) == 0:
        raise Exception("Failed to create office: no data returned")

    created = cast(Dict[str, Any], result.data[0])
    logger.info(f"Office created successfully: {created.get('id')}")
    return created


async def update_office(
    supabase_client: Client,
    office_id: int,
    **updates: Any
) -> Optional[Dict[str, Any]]:
    """
    Update office fields (name, city, is_active).

    Returns:
        The updated office, or None if not found
    """
    if "name" in updates and not str(updates["name"] or "").strip():
        raise ValueError("Office name cannot be blank")
    if "city" in updates and isinstance(updates["city"], str) and not updates["city"].strip():
        updates["city"] = None

    logger.info(f"Updating office {office_id}: {list(updates.keys())}")

    result = (
        supabase_client.table(TABLES['OFFICES'])
        .update(updates)
        .eq("id", office_id)
        .execute()
    )

    if not result.data or len(result.data) == 0:
        logger.warning(f"Office {office_id} not found")
        return None

    return cast(Dict[str, Any], result.data[0])


async def deactivate_office(supabase_client: Client, office_id: int) -> Optional[Dict[str, Any]]:
    """Soft-delete an office by clearing is_active."""
    logger.info(f"Deactivating office {office_id}")
    return await update_office(supabase_client, office_id, is_active=False)
