"""Organization model."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from .base import created_at_field, new_id


class Organization(SQLModel, table=True):
    __tablename__ = "organization"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(nullable=False)
    slug: str = Field(unique=True, nullable=False, index=True)
    createdAt: datetime = created_at_field()
