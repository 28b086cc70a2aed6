"""
Client fan-out update service.

The client detail editor works on one wide, denormalized row (the
full_client_v2 projection): client columns side by side with the client's
house, contract, insurance, goal, investment, liability and partner fields.
Saving the editor sends that flat mapping back here, and this module
distributes it over the normalized tables:

1. partition_update() splits the payload by owning table and drops the
   projection's computed, read-only columns.
2. The clients row is updated with the client group. Failure is fatal.
3. Every non-empty child group is written with upsert-by-lookup: update the
   row named by the explicit id (scoped to the client), else the client's
   first matching row, else insert a new one.

Child writes are independent. There is no transaction, no conflict detection
and no retry: a failed child write is logged and the remaining groups are
still written.

Writes use the service-role client, so authorize_client_update() MUST be
called first.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, cast

from supabase import Client

from dashboard.db.client import get_service_role_client
from dashboard.utils.constants import DASHBOARD_ROLES, TABLES

logger = logging.getLogger(__name__)


class ClientNotFoundError(Exception):
    """The client id does not exist."""


class ClientUpdatePermissionError(Exception):
    """The caller may not edit this client."""


class ClientUpdateError(Exception):
    """The clients row itself could not be updated."""


@dataclass(frozen=True)
class ChildTable:
    """
    How one group of projection fields maps onto a child table.

    Attributes:
        group: Short name used in logs and results ("house", "goal", ...)
        table: Supabase table name
        id_key: Payload key carrying the explicit row id, if the editor knows it
        fields: Payload key -> table column
        lookup_filters: Extra equality filters used when locating (and set when
                        inserting) the client's row without an explicit id
    """
    group: str
    table: str
    id_key: str
    fields: Mapping[str, str]
    lookup_filters: Mapping[str, Any] = field(default_factory=dict)


CHILD_TABLES: Tuple[ChildTable, ...] = (
    ChildTable(
        group="house",
        table=TABLES['HOUSE_OBJECTS'],
        id_key="house_id",
        fields={
            "is_owner_occupied": "is_owner_occupied",
            "home_value": "home_value",
            "mortgage_amount": "mortgage_amount",
            "mortgage_remaining": "mortgage_remaining",
            "mortgage_interest_rate": "mortgage_interest_rate",
            "annuity_amount": "annuity_amount",
            "annuity_target_amount": "annuity_target_amount",
            "energy_label": "energy_label",
            "current_rent": "current_rent",
        },
    ),
    ChildTable(
        group="contract",
        table=TABLES['CONTRACTS'],
        id_key="contract_id",
        fields={
            "dvo": "dvo",
            "max_loan": "max_loan",
            "is_damage_client": "is_damage_client",
        },
    ),
    ChildTable(
        group="insurance",
        table=TABLES['INSURANCES'],
        id_key="insurance_id",
        fields={
            "disability_percentage": "disability_percentage",
            "death_risk_assurance_amount": "death_risk_assurance_amount",
        },
    ),
    ChildTable(
        group="goal",
        table=TABLES['FINANCIAL_GOALS'],
        id_key="financial_goal_id",
        fields={
            "financial_goal_description": "description",
            "financial_goal_amount": "amount",
            "goal_priority": "goal_priority",
        },
    ),
    ChildTable(
        group="investment",
        table=TABLES['INVESTMENTS'],
        id_key="investment_id",
        fields={"investment_current_value": "current_value"},
    ),
    ChildTable(
        group="liability",
        table=TABLES['LIABILITIES'],
        id_key="liability_id",
        fields={"liability_total_amount": "total_amount"},
    ),
    ChildTable(
        group="partner",
        table=TABLES['PARTNERS'],
        id_key="partner_id",
        fields={"partner_gross_income": "gross_income"},
    ),
)

# Projection columns computed by full_client_v2 or owned by the database
READ_ONLY_FIELDS = frozenset({
    "id",
    "advisor_name",
    "advisor_email",
    "insurance_premiums_total",
    "supabase_auth_id",
    "created_at",
    "updated_at",
})


@dataclass
class PartitionedUpdate:
    """A flat projection payload split by owning table."""
    client_fields: Dict[str, Any] = field(default_factory=dict)
    # group -> {column: value}
    child_values: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    # group -> explicit row id (None when the editor had no row yet)
    child_ids: Dict[str, Any] = field(default_factory=dict)
    dropped_fields: List[str] = field(default_factory=list)


@dataclass
class ChildWriteResult:
    """Outcome of one child-table upsert."""
    group: str
    table: str
    action: str  # "updated", "inserted" or "failed"
    row_id: Any = None
    error: Optional[str] = None


@dataclass
class ClientUpdateResult:
    client: Dict[str, Any]
    child_results: List[ChildWriteResult] = field(default_factory=list)

    @property
    def failed_groups(self) -> List[str]:
        return [r.group for r in self.child_results if r.action == "failed"]


def partition_update(updated_data: Mapping[str, Any]) -> PartitionedUpdate:
    """
    Split a flat projection payload into client columns and child groups.

    A field belongs to a group only when its key is present; an explicit None
    is kept and written as NULL.
    """
    partitioned = PartitionedUpdate()
    claimed = set(READ_ONLY_FIELDS)

    for child in CHILD_TABLES:
        claimed.add(child.id_key)
        claimed.update(child.fields.keys())

        values = {
            column: updated_data[key]
            for key, column in child.fields.items()
            if key in updated_data
        }
        if values:
            partitioned.child_values[child.group] = values
            partitioned.child_ids[child.group] = updated_data.get(child.id_key)

    for key, value in updated_data.items():
        if key in READ_ONLY_FIELDS:
            partitioned.dropped_fields.append(key)
        elif key not in claimed:
            partitioned.client_fields[key] = value

    return partitioned


def _rows(result: Any) -> List[Dict[str, Any]]:
    data = getattr(result, "data", None)
    if not data or not isinstance(data, list):
        return []
    return cast(List[Dict[str, Any]], data)


def upsert_child_row(
    supabase_client: Client,
    child: ChildTable,
    client_id: str,
    values: Dict[str, Any],
    explicit_id: Any = None
) -> ChildWriteResult:
    """
    Update-or-insert one child row for a client.

    Lookup order: explicit id (scoped to client_id), then the client's first
    row matching child.lookup_filters (lowest id), then insert.
    A looked-up row that is gone by the time it is updated is re-inserted.

    Errors are caught and reported in the result; they never propagate.
    """
    try:
        if explicit_id is not None:
            result = (
                supabase_client.table(child.table)
                .update(values)
                .eq("id", explicit_id)
                .eq("client_id", client_id)
                .execute()
            )
            if _rows(result):
                return ChildWriteResult(child.group, child.table, "updated", explicit_id)

            logger.warning(
                f"{child.table} row {explicit_id} not found for client {client_id}, "
                "falling back to lookup"
            )

        query = supabase_client.table(child.table).select("id").eq("client_id", client_id)
        for column, expected in child.lookup_filters.items():
            query = query.eq(column, expected)
        existing = _rows(query.order("id").limit(1).execute())

        if existing:
            row_id = existing[0].get("id")
            result = (
                supabase_client.table(child.table)
                .update(values)
                .eq("id", row_id)
                .execute()
            )
            if _rows(result):
                return ChildWriteResult(child.group, child.table, "updated", row_id)

            logger.warning(
                f"{child.table} row {row_id} disappeared before update for client "
                f"{client_id}, inserting instead"
            )

        insert_data = {**values, **child.lookup_filters, "client_id": client_id}
        inserted = _rows(supabase_client.table(child.table).insert(insert_data).execute())
        row_id = inserted[0].get("id") if inserted else None
        return ChildWriteResult(child.group, child.table, "inserted", row_id)

    except Exception as e:
        logger.error(f"{child.group.capitalize()} update error for client {client_id}: {e}")
        return ChildWriteResult(child.group, child.table, "failed", explicit_id, str(e))


async def authorize_client_update(
    service_client: Client,
    client_id: str,
    user_id: str,
    email: Optional[str] = None
) -> None:
    """
    Check that the caller may edit this client.

    Args:
        service_client: Service-role Supabase client
        client_id: The client UUID
        user_id: Verified auth user id ('sub' claim)
        email: Verified email claim, used for the admin_users lookup

    Allowed: active admin_users entry (by email), active super_admin
    dashboard user, office_admin of the assigned advisor's office, the client
    themself, or the assigned advisor.

    Raises:
        ClientNotFoundError: Unknown client id
        ClientUpdatePermissionError: None of the above applies
    """
    client_rows = _rows(
        service_client.table(TABLES['CLIENTS'])
        .select("supabase_auth_id, advisor_id")
        .eq("id", client_id)
        .execute()
    )
    if not client_rows:
        logger.error(f"Client {client_id} not found for update")
        raise ClientNotFoundError(f"Client {client_id} not found")

    client_row = client_rows[0]

    if client_row.get("supabase_auth_id") == user_id:
        logger.info(f"Permission granted: user {user_id} owns client {client_id}")
        return

    if email:
        admin_rows = _rows(
            service_client.table(TABLES['ADMIN_USERS'])
            .select("is_active")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if admin_rows and admin_rows[0].get("is_active"):
            logger.info(f"Permission granted: {user_id} is an admin user")
            return

    advisor: Dict[str, Any] = {}
    advisor_id = client_row.get("advisor_id")
    if advisor_id is not None:
        advisor_rows = _rows(
            service_client.table(TABLES['ADVISORS'])
            .select("user_id, office_id")
            .eq("id", advisor_id)
            .limit(1)
            .execute()
        )
        advisor = advisor_rows[0] if advisor_rows else {}

    if advisor.get("user_id") == user_id:
        logger.info(f"Permission granted: {user_id} is the assigned advisor")
        return

    dashboard_rows = _rows(
        service_client.table(TABLES['DASHBOARD_USERS'])
        .select("role, office_id, is_active")
        .eq("auth_id", user_id)
        .limit(1)
        .execute()
    )
    if dashboard_rows and dashboard_rows[0].get("is_active"):
        dashboard_user = dashboard_rows[0]
        role = dashboard_user.get("role")
        if role == DASHBOARD_ROLES['SUPER_ADMIN']:
            logger.info(f"Permission granted: {user_id} is a super admin")
            return
        if (
            role == DASHBOARD_ROLES['OFFICE_ADMIN']
            and dashboard_user.get("office_id") is not None
            and dashboard_user.get("office_id") == advisor.get("office_id")
        ):
            logger.info(f"Permission granted: {user_id} administers the client's office")
            return

    logger.warning(f"Permission denied for user {user_id} on client {client_id}")
    raise ClientUpdatePermissionError(
        "Permission denied: You are not authorized to update this client"
    )


async def update_client_data(
    service_client: Client,
    client_id: str,
    updated_data: Mapping[str, Any]
) -> ClientUpdateResult:
    """
    Fan a flat projection payload out over clients and its child tables.

    Args:
        service_client: Service-role Supabase client (caller already authorized)
        client_id: The client UUID
        updated_data: Flat mapping as produced by the detail editor

    Returns:
        ClientUpdateResult with the updated clients row and per-group outcomes

    Raises:
        ClientNotFoundError: The clients row did not come back
        ClientUpdateError: The clients update itself failed
    """
    partitioned = partition_update(updated_data)

    logger.info(
        f"Updating client {client_id}: client fields={sorted(partitioned.client_fields)}, "
        f"child groups={sorted(partitioned.child_values)}"
    )
    if partitioned.dropped_fields:
        logger.debug(f"Ignoring read-only fields: {sorted(partitioned.dropped_fields)}")

    clients_table = service_client.table(TABLES['CLIENTS'])
    try:
        if partitioned.client_fields:
            result = (
                clients_table
                .update(partitioned.client_fields)
                .eq("id", client_id)
                .execute()
            )
        else:
            result = clients_table.select("*").eq("id", client_id).execute()
    except Exception as e:
        logger.error(f"Client update error for {client_id}: {e}")
        raise ClientUpdateError(f"Client update failed: {e}") from e

    rows = _rows(result)
    if not rows:
        raise ClientNotFoundError(f"Client {client_id} not found")

    outcome = ClientUpdateResult(client=rows[0])

    for child in CHILD_TABLES:
        values = partitioned.child_values.get(child.group)
        if not values:
            continue
        outcome.child_results.append(
            upsert_child_row(
                service_client,
                child,
                client_id,
                values,
                partitioned.child_ids.get(child.group),
            )
        )

    if outcome.failed_groups:
        logger.warning(
            f"Client {client_id} updated with failed child groups: {outcome.failed_groups}"
        )
    else:
        logger.info(f"Successfully updated client: {client_id}")

    return outcome


async def apply_client_update(
    client_id: str,
    updated_data: Mapping[str, Any],
    user_id: str,
    email: Optional[str] = None
) -> ClientUpdateResult:
    """
    Authorize the caller, then run the fan-out update with the service role.

    Raises:
        RuntimeError: Service role key not configured
        ClientNotFoundError, ClientUpdatePermissionError, ClientUpdateError
    """
    service_client = get_service_role_client()
    await authorize_client_update(service_client, client_id, user_id, email)
    logger.info(f"Permission granted for user {user_id} to update client {client_id}")
    return await update_client_data(service_client, client_id, updated_data)
