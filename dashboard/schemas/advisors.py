"""
Pydantic schemas for advisor endpoints.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class AdvisorOption(BaseModel):
    """Advisor entry for dropdowns."""
    id: int = Field(..., description="Advisor id")
    name: Optional[str] = Field(None, description="Advisor name")


class AdvisorListResponse(BaseModel):
    advisors: List[AdvisorOption]
    count: int
