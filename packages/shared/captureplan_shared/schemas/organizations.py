"""
Organization-related Pydantic schemas shared between server and client views.

Covers: org creation, active-org switching, the caller's org list and the
mock join flow.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Organization display name")
    slug: str = Field(
        ...,
        min_length=2,
        max_length=50,
        pattern=r"^[a-z0-9][a-z0-9-]*[a-z0-9]$",
        description="URL-safe org identifier",
    )


class SetActiveOrgRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    organization_id: Optional[str] = Field(default=None, alias="organizationId")


class MockJoinRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    organization_id: Optional[str] = Field(default=None, alias="organizationId")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    slug: str
    created_at: datetime = Field(alias="createdAt")


class OrgListItem(BaseModel):
    id: str
    name: str
    slug: str
    role: str  # the requesting user's role in this org


class OrgListResponse(BaseModel):
    organizations: List[OrgListItem]


class JoinableOrg(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    mock_invitation_id: str = Field(alias="mockInvitationId")


class JoinableOrgListResponse(BaseModel):
    organizations: List[JoinableOrg]
