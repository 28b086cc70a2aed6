"""
Pydantic schemas for office administration endpoints (super admin only).
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class OfficeResponse(BaseModel):
    id: int = Field(..., description="Office id")
    name: str = Field(..., description="Office name")
    city: Optional[str] = Field(None, description="City")
    is_active: bool = Field(True, description="Inactive offices are hidden from dropdowns")
    advisor_count: int = Field(0, description="Advisors linked to this office")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OfficeListResponse(BaseModel):
    offices: List[OfficeResponse]
    count: int


class OfficeOption(BaseModel):
    """Active office for dropdowns."""
    id: int
    name: str


class OfficeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, examples=["Kantoor Utrecht"])
    city: Optional[str] = Field(None, max_length=200, examples=["Utrecht"])


class OfficeUpdateRequest(BaseModel):
    """Partial update; only provided fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    city: Optional[str] = Field(None, max_length=200)
    is_active: Optional[bool] = None


class OfficeMutationResponse(BaseModel):
    status: str = Field(..., examples=["CREATED", "UPDATED", "DEACTIVATED"])
    office: OfficeResponse
    message: str
