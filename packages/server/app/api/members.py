"""
Member API endpoints.

GET  /api/organizations/{orgId}/members         — List org members
POST /api/organizations/{orgId}/members         — Invite a user by email (Owner only)
POST /api/organizations/{orgId}/members/remove  — Remove a member (Owner only)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.core.auth import (
    OrgAccess,
    Session,
    get_app_settings,
    require_org_owner,
    require_session,
)
from app.core.config import Settings
from app.core.database import Database, require_database
from app.services import members as member_service
from captureplan_shared.schemas.members import (
    InvitationResponse,
    InviteRequest,
    MemberListResponse,
    MemberRemoveRequest,
    MemberResponse,
)

router = APIRouter()


@router.get("", response_model=MemberListResponse)
async def list_members(
    orgId: str,
    session: Session = Depends(require_session),
    database: Database = Depends(require_database),
):
    """List members of the org with their user profile."""
    items = await member_service.list_members(database, orgId, session.user.id)
    return MemberListResponse(members=[MemberResponse(**item) for item in items])


@router.post("", response_model=InvitationResponse)
async def invite_member(
    body: InviteRequest,
    access: OrgAccess = Depends(require_org_owner),
    database: Database = Depends(require_database),
    settings: Settings = Depends(get_app_settings),
):
    """Invite a user by email (Owner only). Invitations grant the member role."""
    invitation = await member_service.create_invitation(
        database,
        access.org_id,
        body.email,
        body.role,
        inviter_id=access.user_id,
        expire_hours=settings.invitation_expire_hours,
    )
    return InvitationResponse(**invitation)


@router.post("/remove")
async def remove_member(
    body: MemberRemoveRequest,
    access: OrgAccess = Depends(require_org_owner),
    database: Database = Depends(require_database),
):
    """Remove a member by member id or email (Owner only)."""
    target = (body.member_id_or_email or "").strip()
    if not target:
        raise HTTPException(status_code=400, detail="memberIdOrEmail is required")

    member = await member_service.remove_member(database, access.org_id, target)
    return {"member": MemberResponse(**member).model_dump(mode="json", by_alias=True)}
