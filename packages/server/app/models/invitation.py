"""Pending organization invitation (delivered by log, not email)."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import created_at_field, new_id


class Invitation(SQLModel, table=True):
    __tablename__ = "invitation"

    id: str = Field(default_factory=new_id, primary_key=True)
    organizationId: str = Field(foreign_key="organization.id", nullable=False, index=True)
    email: str = Field(nullable=False, index=True)
    role: str = Field(nullable=False, default="member")
    status: str = Field(nullable=False, default="pending")  # pending | accepted | canceled
    inviterId: str = Field(foreign_key="user.id", nullable=False)
    expiresAt: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
    createdAt: datetime = created_at_field()
