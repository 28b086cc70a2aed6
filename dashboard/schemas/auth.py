"""
Pydantic schemas for authentication endpoints.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320, examples=["advisor@example.nl"])
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Session tokens from Supabase Auth. Send access_token as a Bearer token."""
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    user_id: str
    email: Optional[str] = None


class LogoutResponse(BaseModel):
    status: str = Field("SIGNED_OUT")


class AuthMeResponse(BaseModel):
    """
    Response for GET /auth/me - the calling dashboard user.

    Used on app boot to decide which screens to show.
    """
    user_id: str = Field(..., description="Auth user UUID (from JWT 'sub' claim)")
    dashboard_user_id: str = Field(..., description="dashboard_users row UUID")
    email: str
    name: str
    role: Literal["super_admin", "office_admin"]
    office_id: Optional[int] = None
    office_name: Optional[str] = None
    is_super_admin: bool
    is_office_admin: bool

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "38f7d540-23fa-497a-8df2-3ab9cbe13da5",
                    "dashboard_user_id": "0b5c3c1e-9d0e-4a57-9a1a-6f6f1c1f2d11",
                    "email": "beheer@example.nl",
                    "name": "Anne Bakker",
                    "role": "office_admin",
                    "office_id": 3,
                    "office_name": "Kantoor Utrecht",
                    "is_super_admin": False,
                    "is_office_admin": True
                }
            ]
        }
    }
