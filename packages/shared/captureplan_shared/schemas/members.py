"""Membership and invitation schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELED = "canceled"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class InviteRequest(BaseModel):
    """Invite a user by email. Invitations never grant the owner role."""
    email: EmailStr
    role: Literal["member"] = "member"


class MemberRemoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    member_id_or_email: Optional[str] = Field(default=None, alias="memberIdOrEmail")


class AcceptInvitationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    invitation_id: str = Field(..., min_length=1, alias="invitationId")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class MemberUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class MemberResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    organization_id: str = Field(alias="organizationId")
    user_id: str = Field(alias="userId")
    role: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    user: Optional[MemberUser] = None


class MemberListResponse(BaseModel):
    members: List[MemberResponse]


class InvitationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    organization_id: str = Field(alias="organizationId")
    email: str
    role: str
    status: InvitationStatus
    inviter_id: str = Field(alias="inviterId")
    expires_at: datetime = Field(alias="expiresAt")
