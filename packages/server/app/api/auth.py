"""
Session provider endpoints.

POST /api/auth/sign-up/email                   — Register with email/password
POST /api/auth/sign-in/email                   — Sign in, receive the session cookie
POST /api/auth/sign-out                        — Revoke the session
GET  /api/auth/get-session                     — Current session or null
POST /api/auth/organization/create             — Create an org (creator becomes owner)
POST /api/auth/organization/set-active         — Switch the session's active org
GET  /api/auth/organization/list               — Orgs the caller belongs to
POST /api/auth/organization/accept-invitation  — Join an org through an invitation
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response

from app.core.auth import (
    Session,
    SessionUser,
    clear_session,
    find_member_role,
    get_app_settings,
    get_current_session,
    issue_session,
    require_session,
)
from app.core.config import Settings
from app.core.database import Database, require_database
from app.core.redis import get_revocations
from app.services import members as member_service
from app.services import organizations as org_service
from app.services import users as user_service
from captureplan_shared.schemas.members import AcceptInvitationRequest, InvitationResponse
from captureplan_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgListItem,
    OrgListResponse,
    OrgResponse,
    SetActiveOrgRequest,
)
from captureplan_shared.schemas.users import (
    AuthResponse,
    SessionInfo,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserResponse,
)

log = structlog.get_logger()
router = APIRouter()


async def _reissue(
    response: Response,
    settings: Settings,
    revocations,
    session: Session,
    active_org: Optional[str],
) -> Session:
    """Replace the caller's session with one pointing at ``active_org``."""
    new_session = issue_session(response, settings, session.user, active_org)
    await revocations.revoke(session.jti, session.remaining_seconds())
    return new_session


# ---------------------------------------------------------------------------
# Email/Password
# ---------------------------------------------------------------------------

@router.post("/sign-up/email", response_model=AuthResponse, status_code=201)
async def sign_up(
    body: SignUpRequest,
    response: Response,
    database: Database = Depends(require_database),
    settings: Settings = Depends(get_app_settings),
):
    """Register a new user and sign them in."""
    user = await user_service.create_user(database, body)
    issue_session(response, settings, SessionUser(**user))
    return AuthResponse(user=UserResponse(**user), message="Registration successful")


@router.post("/sign-in/email", response_model=AuthResponse)
async def sign_in(
    body: SignInRequest,
    response: Response,
    database: Database = Depends(require_database),
    settings: Settings = Depends(get_app_settings),
):
    """Authenticate with email/password. The oldest membership becomes active."""
    user = await user_service.authenticate_user(database, body.email, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    orgs = await org_service.list_user_orgs(database, user["id"])
    active_org = orgs[0]["id"] if orgs else None
    issue_session(response, settings, SessionUser(**user), active_org)

    log.info("auth.login_success", user_id=user["id"], active_org=active_org)
    return AuthResponse(user=UserResponse(**user), message="Login successful")


# ---------------------------------------------------------------------------
# Session Management
# ---------------------------------------------------------------------------

@router.post("/sign-out")
async def sign_out(
    response: Response,
    session: Optional[Session] = Depends(get_current_session),
    settings: Settings = Depends(get_app_settings),
    revocations=Depends(get_revocations),
):
    """Invalidate the current session."""
    if session is not None:
        await revocations.revoke(session.jti, session.remaining_seconds())
        log.info("auth.logout", user_id=session.user.id)
    clear_session(response, settings)
    return {"success": True}


@router.get("/get-session", response_model=Optional[SessionResponse])
async def get_session(session: Optional[Session] = Depends(get_current_session)):
    if session is None:
        return None
    return SessionResponse(
        session=SessionInfo(
            user_id=session.user.id,
            active_organization_id=session.active_organization_id,
            expires_at=session.expires_at,
        ),
        user=UserResponse(
            id=session.user.id, name=session.user.name, email=session.user.email
        ),
    )


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

@router.post("/organization/create", response_model=OrgResponse, status_code=201)
async def create_organization(
    body: OrgCreateRequest,
    response: Response,
    session: Session = Depends(require_session),
    database: Database = Depends(require_database),
    settings: Settings = Depends(get_app_settings),
    revocations=Depends(get_revocations),
):
    """Create an organization; it becomes the caller's active organization."""
    org = await org_service.create_org(database, body, session.user.id)
    await _reissue(response, settings, revocations, session, org["id"])
    return OrgResponse(
        id=org["id"], name=org["name"], slug=org["slug"], created_at=org["createdAt"]
    )


@router.post("/organization/set-active")
async def set_active_organization(
    body: SetActiveOrgRequest,
    response: Response,
    session: Session = Depends(require_session),
    database: Database = Depends(require_database),
    settings: Settings = Depends(get_app_settings),
    revocations=Depends(get_revocations),
):
    """Switch the active organization (null clears it). Members only."""
    org_id = (body.organization_id or "").strip() or None
    if org_id is not None and await find_member_role(database, org_id, session.user.id) is None:
        raise HTTPException(
            status_code=403, detail="You are not a member of this organization"
        )
    await _reissue(response, settings, revocations, session, org_id)
    return {"activeOrganizationId": org_id}


@router.get("/organization/list", response_model=OrgListResponse)
async def list_organizations(
    session: Session = Depends(require_session),
    database: Database = Depends(require_database),
):
    rows = await org_service.list_user_orgs(database, session.user.id)
    return OrgListResponse(organizations=[OrgListItem(**row) for row in rows])


@router.post("/organization/accept-invitation")
async def accept_invitation(
    body: AcceptInvitationRequest,
    response: Response,
    session: Session = Depends(require_session),
    database: Database = Depends(require_database),
    settings: Settings = Depends(get_app_settings),
    revocations=Depends(get_revocations),
):
    """Accept an invitation addressed to the caller's email."""
    invitation, joined = await member_service.accept_invitation(
        database, body.invitation_id, session.user.id, session.user.email
    )
    await _reissue(
        response, settings, revocations, session, invitation["organization_id"]
    )
    return {
        "invitation": InvitationResponse(**invitation).model_dump(mode="json", by_alias=True),
        "joined": joined,
    }
