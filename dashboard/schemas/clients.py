"""
Pydantic schemas for client endpoints.

Clients are financial-advisory customers. The list uses a flattened summary
row; the detail editor uses the wide full_client_v2 projection (client
columns plus house, contract, insurance, goal, investment, liability and
partner fields).
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SortField = Literal["first_name", "last_name", "email", "phone", "gender", "age"]
SortDirection = Literal["asc", "desc"]


# --- List ---

class ClientSummary(BaseModel):
    """One row of the client list."""
    id: str = Field(..., description="Client UUID")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    advisor_name: Optional[str] = Field(None, description="Name of the assigned advisor")
    mortgage_amount: Optional[float] = Field(
        None,
        description="Mortgage amount of the client's first house object"
    )


class ClientListResponse(BaseModel):
    """Response for GET /clients."""
    clients: List[ClientSummary] = Field(..., description="Clients on this page")
    total: int = Field(..., description="Total clients matching the search")
    page: int = Field(..., description="1-based page number")
    page_size: int = Field(..., description="Rows per page")
    total_pages: int = Field(..., description="ceil(total / page_size)")
    sort_field: SortField
    sort_direction: SortDirection


# --- Detail ---

class ClientDetail(BaseModel):
    """
    Denormalized client projection returned by full_client_v2.

    Unknown columns are passed through so the editor sees everything the
    projection returns.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    initials: Optional[str] = None
    prefix: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[str] = None
    age: Optional[int] = None
    city: Optional[str] = None
    country: Optional[str] = None
    employment_type: Optional[str] = None
    planning_status: Optional[str] = None
    risk_profile: Optional[str] = None
    gross_income: Optional[float] = None
    net_monthly_income: Optional[float] = None
    net_monthly_spending: Optional[float] = None
    saving_balance: Optional[float] = None
    investment_balance: Optional[float] = None
    pension_income: Optional[float] = None
    retirement_target_age: Optional[int] = None
    monthly_fixed_costs: Optional[float] = None
    monthly_variable_costs: Optional[float] = None
    consumer_credit_amount: Optional[float] = None
    advisor_id: Optional[int] = None

    # House
    house_id: Optional[int] = None
    is_owner_occupied: Optional[bool] = None
    home_value: Optional[float] = None
    mortgage_amount: Optional[float] = None
    mortgage_remaining: Optional[float] = None
    mortgage_interest_rate: Optional[float] = None
    annuity_amount: Optional[float] = None
    annuity_target_amount: Optional[float] = None
    energy_label: Optional[str] = None
    current_rent: Optional[float] = None

    # Contract
    contract_id: Optional[int] = None
    dvo: Optional[float] = None
    max_loan: Optional[float] = None
    is_damage_client: Optional[bool] = None

    # Insurance
    insurance_id: Optional[int] = None
    disability_percentage: Optional[float] = None
    death_risk_assurance_amount: Optional[float] = None
    insurance_premiums_total: Optional[float] = None

    # Financial goal
    financial_goal_id: Optional[int] = None
    financial_goal_description: Optional[str] = None
    financial_goal_amount: Optional[float] = None
    goal_priority: Optional[str] = None

    # Liability / investment
    liability_id: Optional[int] = None
    liability_total_amount: Optional[float] = None
    investment_id: Optional[int] = None
    investment_current_value: Optional[float] = None

    # Advisor / partner (read only)
    advisor_name: Optional[str] = None
    advisor_email: Optional[str] = None
    partner_gross_income: Optional[float] = None


# --- Create ---

class ClientCreateRequest(BaseModel):
    """Request body of the "add client" form."""
    first_name: str = Field(..., min_length=1, max_length=200, examples=["Jan"])
    last_name: str = Field(..., min_length=1, max_length=200, examples=["de Vries"])
    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        pattern=r"^[^@\s]+@[^@\s]+$",
        examples=["jan@example.nl"]
    )
    phone: Optional[str] = Field(None, max_length=50)
    advisor_id: Optional[int] = Field(None, description="Assigned advisor id")
    company: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=200)
    country: Optional[str] = Field(
        None,
        max_length=100,
        description="Defaults to DEFAULT_CLIENT_COUNTRY when omitted"
    )
    risk_profile: Optional[str] = Field(None, max_length=100)
    gross_income: Optional[float] = Field(None, ge=0)


class ClientCreateResponse(BaseModel):
    status: str = Field("CREATED", description="Indicates successful creation")
    client: Dict[str, Any] = Field(..., description="The created clients row")
    message: str = Field(..., examples=["Client created successfully"])


# --- Update (fan-out) ---

class ClientUpdateRequest(BaseModel):
    """
    Flat projection fields to save.

    Keys follow the ClientDetail projection; child-table fields are routed to
    their tables by the fan-out update.
    """
    updated_data: Dict[str, Any] = Field(
        ...,
        description="Changed projection fields",
        examples=[{"phone": "0612345678", "home_value": 425000, "house_id": 9}]
    )


class ClientUpdateResponse(BaseModel):
    status: str = Field("UPDATED", description="Indicates successful update")
    client: Dict[str, Any] = Field(..., description="The updated clients row")
    message: str = Field(..., examples=["Client updated successfully"])


class UpdateClientDataRequest(BaseModel):
    """Body of the update-client-data function endpoint: {clientId, updatedData}."""
    model_config = ConfigDict(populate_by_name=True)

    client_id: Optional[str] = Field(None, alias="clientId")
    updated_data: Optional[Dict[str, Any]] = Field(None, alias="updatedData")


# --- Delete ---

class ClientDeleteResponse(BaseModel):
    status: str = Field("DELETED", description="Indicates successful deletion")
    message: str = Field(..., examples=["Client deleted successfully"])
    rows_deleted: Dict[str, int] = Field(
        default_factory=dict,
        description="Rows removed per table, as reported by delete_client_cascade"
    )
