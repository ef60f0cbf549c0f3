"""
Organization join endpoints (stand-in for invitation acceptance).

GET  /api/organizations/mock-join  — Orgs the caller does not own
POST /api/organizations/mock-join  — Join an org as a member, no token check
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException

from app.core.auth import Session, require_session
from app.core.database import Database, get_database
from app.services import organizations as org_service
from captureplan_shared.schemas.organizations import (
    JoinableOrg,
    JoinableOrgListResponse,
    MockJoinRequest,
)

log = structlog.get_logger()
router = APIRouter()


@router.get("/mock-join", response_model=JoinableOrgListResponse)
async def list_joinable_orgs(
    session: Session = Depends(require_session),
    database: Optional[Database] = Depends(get_database),
):
    """Orgs the caller could join, each with a synthetic invitation id."""
    if database is None:
        return JoinableOrgListResponse(organizations=[])

    rows = await org_service.list_joinable_orgs(database, session.user.id)
    return JoinableOrgListResponse(organizations=[JoinableOrg(**row) for row in rows])


@router.post("/mock-join")
async def mock_join(
    body: MockJoinRequest,
    session: Session = Depends(require_session),
    database: Optional[Database] = Depends(get_database),
):
    """Join an org as a plain member. Idempotent for existing members."""
    if database is None:
        raise HTTPException(status_code=500, detail="Database not configured")

    organization_id = (body.organization_id or "").strip()
    if not organization_id:
        raise HTTPException(status_code=400, detail="organizationId is required")

    try:
        joined = await org_service.mock_join(database, organization_id, session.user.id)
    except HTTPException:
        raise
    except Exception as exc:
        log.exception("org.mock_join_failed", org_id=organization_id, user_id=session.user.id)
        message = str(exc) or "Unknown error while joining organization"
        raise HTTPException(status_code=500, detail=f"Mock join failed: {message}")

    if not joined:
        return {"joined": False, "alreadyMember": True}
    return {"joined": True}
