#!/usr/bin/env python3
"""Seed a development database with an organization, two users and outlines.

Usage:
    python scripts/seed_dev_data.py --database-url sqlite+aiosqlite:///./captureplan.db

Defaults to CP_DATABASE_URL. Both users sign in with password "password123".
"""

import argparse
import asyncio
from datetime import datetime, timezone

from app.core.auth import hash_password
from app.core.config import get_settings
from app.core.database import Database

# Deterministic IDs for reproducibility
ORG_ID = "00000000-0000-0000-0000-000000000001"
OWNER_ID = "00000000-0000-0000-0000-000000000010"
MEMBER_ID = "00000000-0000-0000-0000-000000000011"
PASSWORD = "password123"

OUTLINES = [
    ("Table of Contents", "TABLE_OF_CONTENTS", "COMPLETED", 1, 2, "ASSIM"),
    ("Executive Summary", "EXECUTIVE_SUMMARY", "IN_PROGRESS", 2, 3, "BINI"),
    ("Technical Approach", "TECHNICAL_APPROACH", "PENDING", 10, 15, "MAMI"),
    ("System Design", "DESIGN", "PENDING", 6, 8, "ASSIM"),
    ("Past Performance", "CAPABILITIES", "PENDING", 4, 5, "BINI"),
]


async def seed(database_url: str) -> None:
    database = Database(database_url)
    await database.init_schema()
    now = datetime.now(timezone.utc)

    async with database.transaction() as tx:
        await tx.query(
            """
            INSERT INTO organization (id, name, slug, "createdAt")
            VALUES (:id, :name, :slug, :created_at)
            ON CONFLICT (id) DO NOTHING
            """,
            {"id": ORG_ID, "name": "Acme Capture", "slug": "acme-capture", "created_at": now},
        )

        for user_id, name, email, role in [
            (OWNER_ID, "Alice Owner", "alice@acme.dev", "owner"),
            (MEMBER_ID, "Bob Member", "bob@acme.dev", "member"),
        ]:
            await tx.query(
                """
                INSERT INTO "user" (id, name, email, "passwordHash", "createdAt")
                VALUES (:id, :name, :email, :password_hash, :created_at)
                ON CONFLICT (id) DO NOTHING
                """,
                {
                    "id": user_id,
                    "name": name,
                    "email": email,
                    "password_hash": hash_password(PASSWORD),
                    "created_at": now,
                },
            )
            await tx.query(
                """
                INSERT INTO member (id, "organizationId", "userId", role, "createdAt")
                VALUES (:id, :org_id, :user_id, :role, :created_at)
                ON CONFLICT ("organizationId", "userId") DO NOTHING
                """,
                {
                    "id": f"member-{user_id}",
                    "org_id": ORG_ID,
                    "user_id": user_id,
                    "role": role,
                    "created_at": now,
                },
            )

        existing = await tx.query(
            "SELECT COUNT(*) AS n FROM outlines WHERE organization_id = :org_id",
            {"org_id": ORG_ID},
        )
        if existing.first()["n"] == 0:
            for header, section_type, status, target, limit, reviewer in OUTLINES:
                await tx.query(
                    """
                    INSERT INTO outlines (organization_id, header, section_type, status,
                                          target, limit_value, reviewer)
                    VALUES (:org_id, :header, :section_type, :status, :target, :limit,
                            :reviewer)
                    """,
                    {
                        "org_id": ORG_ID,
                        "header": header,
                        "section_type": section_type,
                        "status": status,
                        "target": target,
                        "limit": limit,
                        "reviewer": reviewer,
                    },
                )

    await database.dispose()
    print(f"Seeded org {ORG_ID} (alice@acme.dev / bob@acme.dev, password '{PASSWORD}').")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a development database.")
    parser.add_argument(
        "--database-url",
        default=get_settings().database_url,
        help="SQLAlchemy async URL (default: CP_DATABASE_URL)",
    )
    args = parser.parse_args()
    if not args.database_url:
        parser.error("no database URL: pass --database-url or set CP_DATABASE_URL")

    asyncio.run(seed(args.database_url))
