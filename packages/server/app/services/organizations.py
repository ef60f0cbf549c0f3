"""
Organization service — org creation, the caller's org list and mock join.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from app.core.database import Database
from app.models.base import new_id
from captureplan_shared.schemas.common import Role
from captureplan_shared.schemas.organizations import OrgCreateRequest

log = structlog.get_logger()


async def create_org(
    database: Database, req: OrgCreateRequest, creator_id: str
) -> dict:
    """Create an org and make the creator its owner, in one transaction."""
    org = {
        "id": new_id(),
        "name": req.name.strip(),
        "slug": req.slug,
        "createdAt": datetime.now(timezone.utc),
    }
    try:
        async with database.transaction() as tx:
            existing = await tx.query(
                "SELECT id FROM organization WHERE slug = :slug LIMIT 1",
                {"slug": req.slug},
            )
            if existing.first():
                raise HTTPException(status_code=409, detail="Org slug already taken")

            await tx.query(
                """
                INSERT INTO organization (id, name, slug, "createdAt")
                VALUES (:id, :name, :slug, :createdAt)
                """,
                org,
            )
            await tx.query(
                """
                INSERT INTO member (id, "organizationId", "userId", role, "createdAt")
                VALUES (:id, :org_id, :user_id, :role, :created_at)
                """,
                {
                    "id": new_id(),
                    "org_id": org["id"],
                    "user_id": creator_id,
                    "role": Role.OWNER.value,
                    "created_at": org["createdAt"],
                },
            )
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Org slug already taken")

    log.info("org.created", org_id=org["id"], slug=req.slug, creator=creator_id)
    return org


async def get_org(database: Database, org_id: str) -> Optional[dict]:
    result = await database.query(
        'SELECT id, name, slug, "createdAt" FROM organization WHERE id = :org_id LIMIT 1',
        {"org_id": org_id},
    )
    return result.first()


async def list_user_orgs(database: Database, user_id: str) -> list[dict]:
    """List all orgs a user belongs to, with their role, oldest membership first."""
    result = await database.query(
        """
        SELECT organization.id, organization.name, organization.slug, member.role
        FROM organization
        JOIN member ON member."organizationId" = organization.id
        WHERE member."userId" = :user_id
        ORDER BY member."createdAt" ASC
        """,
        {"user_id": user_id},
    )
    return result.rows


async def list_joinable_orgs(database: Database, user_id: str) -> list[dict]:
    """Organizations the user does not own, tagged with a synthetic invitation id.

    Holding the owner role is treated as having created the org.
    """
    result = await database.query(
        """
        SELECT organization.id, organization.name
        FROM organization
        WHERE organization.id NOT IN (
            SELECT "organizationId"
            FROM member
            WHERE "userId" = :user_id AND LOWER(role) = 'owner'
        )
        ORDER BY organization."createdAt" ASC
        """,
        {"user_id": user_id},
    )
    return [
        {
            "id": row["id"],
            "name": row["name"] or "Organization",
            "mock_invitation_id": f"mock-{row['id']}",
        }
        for row in result.rows
    ]


async def mock_join(database: Database, org_id: str, user_id: str) -> bool:
    """Add the user to the org as a plain member.

    Returns False when a membership row already exists. The insert relies on
    the unique (organizationId, userId) constraint, so concurrent joins for
    the same pair create at most one row.
    """
    if await get_org(database, org_id) is None:
        raise HTTPException(status_code=404, detail="Organization not found")

    result = await database.query(
        """
        INSERT INTO member (id, "organizationId", "userId", role, "createdAt")
        VALUES (:id, :org_id, :user_id, :role, :created_at)
        ON CONFLICT ("organizationId", "userId") DO NOTHING
        """,
        {
            "id": new_id(),
            "org_id": org_id,
            "user_id": user_id,
            "role": Role.MEMBER.value,
            "created_at": datetime.now(timezone.utc),
        },
    )
    joined = result.row_count > 0
    log.info("org.mock_join", org_id=org_id, user_id=user_id, joined=joined)
    return joined
