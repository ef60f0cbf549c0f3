"""Outline (capture-plan section) schemas shared between server and client views."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import OutlineStatus, Reviewer, SectionType

# Upper bound of the INTEGER columns backing counts and ids
MAX_INT = 2**31 - 1


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OutlineCreate(BaseModel):
    """Body of POST /organizations/{orgId}/outlines."""

    model_config = ConfigDict(populate_by_name=True)

    header: str = Field(..., min_length=1)
    section_type: SectionType = Field(..., alias="sectionType")
    status: OutlineStatus
    target: int = Field(default=0, ge=0, le=MAX_INT)
    limit: int = Field(default=0, ge=0, le=MAX_INT)
    reviewer: Reviewer = Reviewer.ASSIM


class OutlineUpdate(BaseModel):
    """Partial update; only the fields present in the body are written."""

    model_config = ConfigDict(populate_by_name=True)

    header: Optional[str] = Field(default=None, min_length=1)
    section_type: Optional[SectionType] = Field(default=None, alias="sectionType")
    status: Optional[OutlineStatus] = None
    target: Optional[int] = Field(default=None, ge=0, le=MAX_INT)
    limit: Optional[int] = Field(default=None, ge=0, le=MAX_INT)
    reviewer: Optional[Reviewer] = None

    def changes(self) -> dict:
        """Fields explicitly set to a value, keyed by python name."""
        return self.model_dump(mode="json", exclude_unset=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OutlineRead(BaseModel):
    """An outline row as stored (``limit_value`` is exposed as ``limit``)."""

    id: int
    organization_id: str
    header: str
    section_type: SectionType
    status: OutlineStatus
    target: int
    limit: int
    reviewer: Reviewer


class OutlineEnvelope(BaseModel):
    outline: OutlineRead


class OutlineListResponse(BaseModel):
    outlines: List[OutlineRead]
