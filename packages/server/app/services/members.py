"""
Member service — member listing, invitations and member removal.

These are the organization capabilities the member routes delegate to. Every
statement is scoped by ``organizationId``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog
from fastapi import HTTPException

from app.core.auth import find_member_role
from app.core.database import Database
from app.models.base import new_id
from captureplan_shared.schemas.common import Role, is_owner_role
from captureplan_shared.schemas.members import InvitationStatus

log = structlog.get_logger()

MEMBER_LIST_LIMIT = 100


def _member_from_row(row: dict) -> dict:
    return {
        "id": row["id"],
        "organization_id": row["organizationId"],
        "user_id": row["userId"],
        "role": row["role"],
        "created_at": row["createdAt"],
        "user": {
            "id": row["userId"],
            "name": row.get("userName"),
            "email": row.get("userEmail"),
        },
    }


def _invitation_from_row(row: dict) -> dict:
    return {
        "id": row["id"],
        "organization_id": row["organizationId"],
        "email": row["email"],
        "role": row["role"],
        "status": row["status"],
        "inviter_id": row["inviterId"],
        "expires_at": row["expiresAt"],
    }


def _as_aware(value) -> datetime:
    """SQLite hands timestamps back as ISO strings; Postgres as datetimes."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

async def list_members(database: Database, org_id: str, caller_id: str) -> list[dict]:
    """Members of ``org_id`` with their user profile.

    The caller must be a member of the org themselves.
    """
    if await find_member_role(database, org_id, caller_id) is None:
        raise HTTPException(status_code=403, detail="You are not a member of this organization")

    result = await database.query(
        """
        SELECT member.id, member."organizationId", member."userId", member.role,
               member."createdAt", "user".name AS "userName", "user".email AS "userEmail"
        FROM member
        JOIN "user" ON "user".id = member."userId"
        WHERE member."organizationId" = :org_id
        ORDER BY member."createdAt" ASC
        LIMIT :limit
        """,
        {"org_id": org_id, "limit": MEMBER_LIST_LIMIT},
    )
    return [_member_from_row(row) for row in result.rows]


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

async def create_invitation(
    database: Database,
    org_id: str,
    email: str,
    role: str,
    inviter_id: str,
    expire_hours: int,
) -> dict:
    """Create (or reuse) a pending invitation for ``email``.

    Nothing is mailed: the invitation is logged for the operator to forward.
    """
    email = email.strip().lower()

    existing_member = await database.query(
        """
        SELECT member.id
        FROM member
        JOIN "user" ON "user".id = member."userId"
        WHERE member."organizationId" = :org_id AND "user".email = :email
        LIMIT 1
        """,
        {"org_id": org_id, "email": email},
    )
    if existing_member.first():
        raise HTTPException(
            status_code=409, detail="User is already a member of this organization"
        )

    now = datetime.now(timezone.utc)
    pending = await database.query(
        """
        SELECT id, "organizationId", email, role, status, "inviterId", "expiresAt"
        FROM invitation
        WHERE "organizationId" = :org_id AND email = :email AND status = :status
        ORDER BY "createdAt" DESC
        """,
        {"org_id": org_id, "email": email, "status": InvitationStatus.PENDING.value},
    )
    for row in pending.rows:
        if _as_aware(row["expiresAt"]) > now:
            log.info("invitation.reused", invitation_id=row["id"], org_id=org_id, email=email)
            return _invitation_from_row(row)

    invitation = {
        "id": new_id(),
        "organizationId": org_id,
        "email": email,
        "role": role,
        "status": InvitationStatus.PENDING.value,
        "inviterId": inviter_id,
        "expiresAt": now + timedelta(hours=expire_hours),
    }
    await database.query(
        """
        INSERT INTO invitation (id, "organizationId", email, role, status, "inviterId",
                                "expiresAt", "createdAt")
        VALUES (:id, :organizationId, :email, :role, :status, :inviterId,
                :expiresAt, :createdAt)
        """,
        {**invitation, "createdAt": now},
    )

    log.info(
        "invitation.created",
        invitation_id=invitation["id"],
        org_id=org_id,
        email=email,
        inviter=inviter_id,
    )
    return _invitation_from_row(invitation)


async def accept_invitation(
    database: Database, invitation_id: str, user_id: str, user_email: str
) -> tuple[dict, bool]:
    """Accept an invitation addressed to the caller.

    Returns (invitation, joined); ``joined`` is False when the caller was
    already a member.
    """
    async with database.transaction() as tx:
        result = await tx.query(
            """
            SELECT id, "organizationId", email, role, status, "inviterId", "expiresAt"
            FROM invitation
            WHERE id = :invitation_id
            LIMIT 1
            """,
            {"invitation_id": invitation_id},
        )
        row = result.first()
        if row is None:
            raise HTTPException(status_code=404, detail="Invitation not found")
        if row["status"] != InvitationStatus.PENDING.value:
            raise HTTPException(status_code=400, detail="Invitation is no longer pending")
        if _as_aware(row["expiresAt"]) <= datetime.now(timezone.utc):
            raise HTTPException(status_code=400, detail="Invitation has expired")
        if row["email"].lower() != user_email.strip().lower():
            raise HTTPException(
                status_code=403, detail="This invitation is addressed to another user"
            )

        inserted = await tx.query(
            """
            INSERT INTO member (id, "organizationId", "userId", role, "createdAt")
            VALUES (:id, :org_id, :user_id, :role, :created_at)
            ON CONFLICT ("organizationId", "userId") DO NOTHING
            """,
            {
                "id": new_id(),
                "org_id": row["organizationId"],
                "user_id": user_id,
                "role": Role.MEMBER.value,
                "created_at": datetime.now(timezone.utc),
            },
        )
        await tx.query(
            "UPDATE invitation SET status = :status WHERE id = :invitation_id",
            {"status": InvitationStatus.ACCEPTED.value, "invitation_id": invitation_id},
        )

    joined = inserted.row_count > 0
    row = {**row, "status": InvitationStatus.ACCEPTED.value}
    log.info(
        "invitation.accepted",
        invitation_id=invitation_id,
        org_id=row["organizationId"],
        user_id=user_id,
        joined=joined,
    )
    return _invitation_from_row(row), joined


# ---------------------------------------------------------------------------
# Removal
# ---------------------------------------------------------------------------

async def remove_member(database: Database, org_id: str, member_id_or_email: str) -> dict:
    """Remove a member of ``org_id`` identified by member id or user email.

    The last owner of an organization cannot be removed.
    """
    value = member_id_or_email.strip()
    async with database.transaction() as tx:
        if "@" in value:
            result = await tx.query(
                """
                SELECT member.id, member."organizationId", member."userId", member.role,
                       member."createdAt", "user".name AS "userName",
                       "user".email AS "userEmail"
                FROM member
                JOIN "user" ON "user".id = member."userId"
                WHERE member."organizationId" = :org_id AND "user".email = :value
                LIMIT 1
                """,
                {"org_id": org_id, "value": value.lower()},
            )
        else:
            result = await tx.query(
                """
                SELECT member.id, member."organizationId", member."userId", member.role,
                       member."createdAt", "user".name AS "userName",
                       "user".email AS "userEmail"
                FROM member
                JOIN "user" ON "user".id = member."userId"
                WHERE member."organizationId" = :org_id AND member.id = :value
                LIMIT 1
                """,
                {"org_id": org_id, "value": value},
            )
        row = result.first()
        if row is None:
            raise HTTPException(status_code=404, detail="Member not found")

        if is_owner_role(row["role"]):
            owners = await tx.query(
                """
                SELECT COUNT(*) AS owners
                FROM member
                WHERE "organizationId" = :org_id AND LOWER(role) = 'owner'
                """,
                {"org_id": org_id},
            )
            if owners.first()["owners"] <= 1:
                raise HTTPException(
                    status_code=400,
                    detail="Cannot remove the only owner of the organization",
                )

        await tx.query(
            'DELETE FROM member WHERE id = :member_id AND "organizationId" = :org_id',
            {"member_id": row["id"], "org_id": org_id},
        )

    log.info("member.removed", org_id=org_id, member_id=row["id"], user_id=row["userId"])
    return _member_from_row(row)
