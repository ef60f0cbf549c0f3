"""Outline (capture-plan section) model, scoped by organization."""

from typing import Optional

from sqlmodel import Field, SQLModel


class Outline(SQLModel, table=True):
    __tablename__ = "outlines"

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: str = Field(foreign_key="organization.id", nullable=False, index=True)
    header: str = Field(nullable=False)
    section_type: str = Field(nullable=False)
    status: str = Field(nullable=False)
    target: int = Field(nullable=False, default=0)
    limit_value: int = Field(nullable=False, default=0)  # exposed as "limit"
    reviewer: str = Field(nullable=False, default="ASSIM")
