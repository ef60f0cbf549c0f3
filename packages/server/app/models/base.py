"""Shared column helpers for SQLModel tables.

Column names on the auth tables (``user``, ``organization``, ``member``,
``invitation``) are camelCase to match the session provider's schema; the
``outlines`` table is snake_case.
"""

from datetime import datetime, timezone
import uuid

import sqlalchemy as sa
from sqlmodel import Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def created_at_field():
    return Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
