"""Sign-up, sign-in and session schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SignUpRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: str
    name: str
    email: str


class SessionInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    active_organization_id: Optional[str] = Field(default=None, alias="activeOrganizationId")
    expires_at: datetime = Field(alias="expiresAt")


class SessionResponse(BaseModel):
    session: SessionInfo
    user: UserResponse


class AuthResponse(BaseModel):
    user: UserResponse
    message: str
