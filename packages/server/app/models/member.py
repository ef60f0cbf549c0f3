"""Organization membership (one row per organization/user pair)."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import created_at_field, new_id


class Member(SQLModel, table=True):
    __tablename__ = "member"
    __table_args__ = (
        sa.UniqueConstraint("organizationId", "userId", name="uq_member_org_user"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    organizationId: str = Field(foreign_key="organization.id", nullable=False, index=True)
    userId: str = Field(foreign_key="user.id", nullable=False, index=True)
    role: str = Field(nullable=False, default="member")  # owner | member
    createdAt: datetime = created_at_field()
