"""
Outline API endpoints (org members only).

GET    /api/organizations/{orgId}/outlines              — List the org's outlines
POST   /api/organizations/{orgId}/outlines              — Create an outline
PATCH  /api/organizations/{orgId}/outlines/{outlineId}  — Partially update an outline
DELETE /api/organizations/{orgId}/outlines/{outlineId}  — Delete an outline
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.core.auth import OrgAccess, require_org_member
from app.core.database import Database, require_database
from app.services import outlines as outline_service
from captureplan_shared.schemas.outlines import (
    OutlineCreate,
    OutlineEnvelope,
    OutlineListResponse,
    OutlineUpdate,
)

router = APIRouter()


@router.get("", response_model=OutlineListResponse)
async def list_outlines(
    access: OrgAccess = Depends(require_org_member),
    database: Database = Depends(require_database),
):
    """All outlines of the org, in insertion (id) order. Paging is client-side."""
    rows = await outline_service.list_outlines(database, access.org_id)
    return {"outlines": rows}


@router.post("", response_model=OutlineEnvelope, status_code=201)
async def create_outline(
    body: OutlineCreate,
    access: OrgAccess = Depends(require_org_member),
    database: Database = Depends(require_database),
):
    outline = await outline_service.create_outline(database, access.org_id, body)
    return {"outline": outline}


@router.patch("/{outlineId}", response_model=OutlineEnvelope)
async def update_outline(
    outlineId: int,
    body: OutlineUpdate,
    access: OrgAccess = Depends(require_org_member),
    database: Database = Depends(require_database),
):
    """Update only the fields present in the body."""
    changes = body.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    outline = await outline_service.update_outline(
        database, access.org_id, outlineId, changes
    )
    if outline is None:
        raise HTTPException(status_code=404, detail="Not found")
    return {"outline": outline}


@router.delete("/{outlineId}")
async def delete_outline(
    outlineId: int,
    access: OrgAccess = Depends(require_org_member),
    database: Database = Depends(require_database),
):
    deleted = await outline_service.delete_outline(database, access.org_id, outlineId)
    if not deleted:
        raise HTTPException(status_code=404, detail="Not found")
    return {"success": True}
