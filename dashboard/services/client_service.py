"""
Client service.

Read and write glue for the clients table under RLS: the paginated,
searchable client list, the detail projection (full_client_v2), creation
from the "add client" form, and the cascading delete RPC.

Office scoping is not applied here. RLS on clients/advisors decides which
rows an office admin can see.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple, cast

from supabase import Client

from dashboard.config import settings
from dashboard.utils.constants import CLIENT_SEARCH_FIELDS, CLIENT_SORT_FIELDS, RPC, TABLES

logger = logging.getLogger(__name__)

CLIENT_LIST_COLUMNS = (
    "id, first_name, last_name, email, phone, gender, age, "
    "advisors(name), house_objects(mortgage_amount)"
)

# Characters that would break a PostgREST or=(...) filter expression
_SEARCH_RESERVED = str.maketrans("", "", ',()"\\')


def build_search_filter(search: Optional[str]) -> Optional[str]:
    """
    Build the PostgREST or-filter for a client search term.

    Returns None when the term is shorter than CLIENT_SEARCH_MIN_LENGTH
    (after trimming), in which case no filter is applied.
    """
    if not search:
        return None

    term = search.strip().translate(_SEARCH_RESERVED)
    if len(term) < settings.CLIENT_SEARCH_MIN_LENGTH:
        return None

    return ",".join(f"{column}.ilike.%{term}%" for column in CLIENT_SEARCH_FIELDS)


def flatten_client_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten the nested advisor and house relations of a list row."""
    advisor = row.get("advisors")
    if isinstance(advisor, list):
        advisor = advisor[0] if advisor else None

    houses = row.get("house_objects")
    if isinstance(houses, dict):
        houses = [houses]

    return {
        "id": row.get("id"),
        "first_name": row.get("first_name"),
        "last_name": row.get("last_name"),
        "email": row.get("email"),
        "phone": row.get("phone"),
        "gender": row.get("gender"),
        "age": row.get("age"),
        "advisor_name": advisor.get("name") if advisor else None,
        "mortgage_amount": houses[0].get("mortgage_amount") if houses else None,
    }


async def list_clients(
    supabase_client: Client,
    search: Optional[str] = None,
    sort_field: str = "last_name",
    sort_direction: str = "asc",
    page: int = 1,
    page_size: Optional[int] = None
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Fetch one page of clients visible to the caller.

    Args:
        supabase_client: Authenticated Supabase client
        search: Free-text search over first name, last name and email
        sort_field: One of CLIENT_SORT_FIELDS
        sort_direction: 'asc' or 'desc'
        page: 1-based page number
        page_size: Rows per page (defaults to settings.CLIENTS_PAGE_SIZE)

    Returns:
        Tuple of (flattened client rows, total matching count)

    Raises:
        ValueError: On an unsupported sort field/direction or page < 1
    """
    if sort_field not in CLIENT_SORT_FIELDS:
        raise ValueError(
            f"Cannot sort by '{sort_field}'. Allowed: {', '.join(CLIENT_SORT_FIELDS)}"
        )
    if sort_direction not in ("asc", "desc"):
        raise ValueError("sort_direction must be 'asc' or 'desc'")
    if page < 1:
        raise ValueError("page must be 1 or greater")

    size = page_size or settings.CLIENTS_PAGE_SIZE
    start = (page - 1) * size
    end = start + size - 1

    query = (
        supabase_client.table(TABLES['CLIENTS'])
        .select(CLIENT_LIST_COLUMNS, count="exact")
    )

    search_filter = build_search_filter(search)
    if search_filter:
        logger.debug(f"Applying client search filter (term length={len(search.strip())})")
        query = query.or_(search_filter)

    result = (
        query
        .order(sort_field, desc=(sort_direction == "desc"))
        .range(start, end)
        .execute()
    )

    rows = cast(List[Dict[str, Any]], result.data or [])
    total = int(result.count or 0)

    clients = [flatten_client_row(row) for row in rows]
    logger.info(f"Fetched {len(clients)} clients (page={page}, total={total})")

    return clients, total


def total_pages(total: int, page_size: Optional[int] = None) -> int:
    size = page_size or settings.CLIENTS_PAGE_SIZE
    return math.ceil(total / size) if total else 0


async def get_client_email(supabase_client: Client, client_id: str) -> Optional[str]:
    """Look up a client's email by id. None if absent or hidden by RLS."""
    result = (
        supabase_client.table(TABLES['CLIENTS'])
        .select("email")
        .eq("id", client_id)
        .execute()
    )

    if not result.data:
        return None

    row = cast(Dict[str, Any], result.data[0])
    return row.get("email")


async def get_client_detail(
    supabase_client: Client,
    client_id: str
) -> Optional[Dict[str, Any]]:
    """
    Fetch the denormalized client projection for the detail editor.

    full_client_v2 is keyed on email, so the email is resolved first.

    Returns:
        The projection row, or None if the client is unknown or not visible
    """
    email = await get_client_email(supabase_client, client_id)
    if not email:
        logger.warning(f"Client {client_id} not found or not visible")
        return None

    result = supabase_client.rpc(RPC['FULL_CLIENT'], {"p_email": email}).execute()

    rows = result.data or []
    if not isinstance(rows, list) or len(rows) == 0:
        logger.warning(f"{RPC['FULL_CLIENT']} returned no data for client {client_id}")
        return None

    return cast(Dict[str, Any], rows[0])


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


async def create_client(
    supabase_client: Client,
    first_name: str,
    last_name: str,
    email: str,
    phone: Optional[str] = None,
    advisor_id: Optional[int] = None,
    company: Optional[str] = None,
    city: Optional[str] = None,
    country: Optional[str] = None,
    risk_profile: Optional[str] = None,
    gross_income: Optional[float] = None
) -> Dict[str, Any]:
    """
    Insert a new client.

    supabase_auth_id is left unset: it is linked when the client first logs
    into the client app.

    Raises:
        ValueError: If a required name/email is blank
        Exception: If the insert returns no row
    """
    if not first_name.strip() or not last_name.strip() or not email.strip():
        raise ValueError("First name, last name and email are required")

    client_data = {
        "first_name": first_name.strip(),
        "last_name": last_name.strip(),
        "email": email.strip(),
        "phone": _blank_to_none(phone),
        "advisor_id": advisor_id,
        "company": _blank_to_none(company),
        "city": _blank_to_none(city),
        "country": _blank_to_none(country),
        "risk_profile": _blank_to_none(risk_profile),
        "gross_income": gross_income,
    }

    logger.info(f"Creating client (advisor_id={advisor_id})")

    result = supabase_client.table(TABLES['CLIENTS']).insert(client_data).execute()

    if not result.data or len(result.data) == 0:
        raise Exception("Failed to create client: no data returned")

    created = cast(Dict[str, Any], result.data[0])
    logger.info(f"Client created successfully: {created.get('id')}")

    return created


async def delete_client(supabase_client: Client, client_id: str) -> Dict[str, int]:
    """
    Delete a client and all of its child rows via delete_client_cascade.

    Returns:
        Mapping of table name -> rows removed, as reported by the RPC.
        Empty when the client did not exist (or was not visible).
    """
    logger.info(f"Deleting client {client_id} with cascade")

    result = supabase_client.rpc(
        RPC['DELETE_CLIENT_CASCADE'],
        {"p_client_id": client_id}
    ).execute()

    if not result.data or not isinstance(result.data, list) or len(result.data) == 0:
        logger.warning(f"{RPC['DELETE_CLIENT_CASCADE']} removed nothing for client {client_id}")
        return {}

    rpc_result = cast(Dict[str, Any], result.data[0])
    counts = {
        key: int(value or 0)
        for key, value in rpc_result.items()
        if key.endswith("_deleted")
    }

    logger.info(f"Client {client_id} deleted: {counts}")
    return counts
