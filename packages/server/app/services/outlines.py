"""
Outline service — tenant-scoped CRUD for capture-plan sections.

Every statement filters on ``organization_id``; an outline id that belongs
to another organization behaves exactly like a missing one.
"""

from __future__ import annotations

from typing import Optional

import structlog

from app.core.database import Database
from captureplan_shared.schemas.outlines import MAX_INT, OutlineCreate

log = structlog.get_logger()

OUTLINE_COLUMNS = (
    'id, organization_id, header, section_type, status, target, '
    'limit_value AS "limit", reviewer'
)

# Request field -> storage column
UPDATABLE_COLUMNS = {
    "header": "header",
    "section_type": "section_type",
    "status": "status",
    "target": "target",
    "limit": "limit_value",
    "reviewer": "reviewer",
}

def _valid_id(outline_id: int) -> bool:
    """Ids outside the INTEGER column range cannot match a row."""
    return 1 <= outline_id <= MAX_INT


async def list_outlines(database: Database, org_id: str) -> list[dict]:
    result = await database.query(
        f"""
        SELECT {OUTLINE_COLUMNS}
        FROM outlines
        WHERE organization_id = :org_id
        ORDER BY id ASC
        """,
        {"org_id": org_id},
    )
    return result.rows


async def create_outline(database: Database, org_id: str, req: OutlineCreate) -> dict:
    result = await database.query(
        f"""
        INSERT INTO outlines (organization_id, header, section_type, status, target,
                              limit_value, reviewer)
        VALUES (:org_id, :header, :section_type, :status, :target, :limit_value, :reviewer)
        RETURNING {OUTLINE_COLUMNS}
        """,
        {
            "org_id": org_id,
            "header": req.header,
            "section_type": req.section_type.value,
            "status": req.status.value,
            "target": req.target,
            "limit_value": req.limit,
            "reviewer": req.reviewer.value,
        },
    )
    outline = result.first()
    log.info("outline.created", org_id=org_id, outline_id=outline["id"])
    return outline


def build_update(changes: dict) -> tuple[str, dict]:
    """Build the SET clause and bind params for a partial update.

    ``changes`` is keyed by request field name; unknown keys are ignored.
    """
    assignments = []
    params = {}
    for field_name, column in UPDATABLE_COLUMNS.items():
        if field_name in changes:
            assignments.append(f"{column} = :set_{column}")
            params[f"set_{column}"] = changes[field_name]
    return ", ".join(assignments), params


async def update_outline(
    database: Database, org_id: str, outline_id: int, changes: dict
) -> Optional[dict]:
    """Apply ``changes`` to the org's outline; None when no row matched."""
    set_clause, params = build_update(changes)
    if not set_clause:
        raise ValueError("No fields to update")
    if not _valid_id(outline_id):
        return None

    result = await database.query(
        f"""
        UPDATE outlines
        SET {set_clause}
        WHERE organization_id = :org_id AND id = :outline_id
        RETURNING {OUTLINE_COLUMNS}
        """,
        {**params, "org_id": org_id, "outline_id": outline_id},
    )
    outline = result.first()
    if outline is not None:
        log.info(
            "outline.updated",
            org_id=org_id,
            outline_id=outline_id,
            fields=sorted(changes),
        )
    return outline


async def delete_outline(database: Database, org_id: str, outline_id: int) -> bool:
    if not _valid_id(outline_id):
        return False
    result = await database.query(
        "DELETE FROM outlines WHERE organization_id = :org_id AND id = :outline_id",
        {"org_id": org_id, "outline_id": outline_id},
    )
    deleted = result.row_count > 0
    if deleted:
        log.info("outline.deleted", org_id=org_id, outline_id=outline_id)
    return deleted
