"""
Pydantic schemas for dashboard user administration (super admin only).
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

DashboardRole = Literal["super_admin", "office_admin"]


class DashboardUserResponse(BaseModel):
    id: str = Field(..., description="dashboard_users row UUID")
    auth_id: str = Field(..., description="Linked Supabase Auth user UUID")
    email: str
    name: str
    role: DashboardRole
    office_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[str] = None


class DashboardUserListResponse(BaseModel):
    users: List[DashboardUserResponse]
    count: int


class DashboardUserCreateRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    name: str = Field(..., min_length=1, max_length=200)
    role: DashboardRole = Field("office_admin")
    office_id: Optional[int] = Field(None, description="Required for office admins")


class DashboardUserUpdateRequest(BaseModel):
    """Name, role and office are saved together, as in the edit dialog."""
    name: str = Field(..., min_length=1, max_length=200)
    role: DashboardRole
    office_id: Optional[int] = None


class DashboardUserMutationResponse(BaseModel):
    status: str = Field(..., examples=["CREATED", "UPDATED", "DEACTIVATED"])
    user: DashboardUserResponse
    message: str
