"""
User service — email/password accounts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from app.core.auth import hash_password, verify_password
from app.core.database import Database
from app.models.base import new_id
from captureplan_shared.schemas.users import SignUpRequest

log = structlog.get_logger()

MIN_PASSWORD_LENGTH = 8


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(database: Database, email: str) -> Optional[dict]:
    result = await database.query(
        'SELECT id, name, email, "passwordHash" FROM "user" WHERE email = :email LIMIT 1',
        {"email": _normalize_email(email)},
    )
    return result.first()


async def create_user(database: Database, req: SignUpRequest) -> dict:
    """Create an email/password user. Raises 409 when the email is taken."""
    if len(req.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    email = _normalize_email(req.email)
    if await get_user_by_email(database, email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = {"id": new_id(), "name": req.name.strip(), "email": email}
    try:
        await database.query(
            """
            INSERT INTO "user" (id, name, email, "passwordHash", "createdAt")
            VALUES (:id, :name, :email, :password_hash, :created_at)
            """,
            {
                **user,
                "password_hash": hash_password(req.password),
                "created_at": datetime.now(timezone.utc),
            },
        )
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Email already registered")

    log.info("user.registered", user_id=user["id"], email=email)
    return user


async def authenticate_user(
    database: Database, email: str, password: str
) -> Optional[dict]:
    """Validate credentials and return the user, or None if invalid."""
    row = await get_user_by_email(database, email)
    if row is None or not row.get("passwordHash"):
        return None
    if not verify_password(password, row["passwordHash"]):
        log.warning("auth.login_failure", email=_normalize_email(email), reason="bad_password")
        return None
    return {"id": row["id"], "name": row["name"], "email": row["email"]}
