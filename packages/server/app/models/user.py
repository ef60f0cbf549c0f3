"""User model."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from .base import created_at_field, new_id


class User(SQLModel, table=True):
    __tablename__ = "user"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)
    passwordHash: str = Field(nullable=False)  # bcrypt hash
    createdAt: datetime = created_at_field()
