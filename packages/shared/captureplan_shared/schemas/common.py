from enum import Enum
from typing import Optional


class Role(str, Enum):
    OWNER = "owner"
    MEMBER = "member"


class SectionType(str, Enum):
    TABLE_OF_CONTENTS = "TABLE_OF_CONTENTS"
    EXECUTIVE_SUMMARY = "EXECUTIVE_SUMMARY"
    TECHNICAL_APPROACH = "TECHNICAL_APPROACH"
    DESIGN = "DESIGN"
    CAPABILITIES = "CAPABILITIES"
    FOCUS_DOCUMENT = "FOCUS_DOCUMENT"
    NARRATIVE = "NARRATIVE"


class OutlineStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class Reviewer(str, Enum):
    ASSIM = "ASSIM"
    BINI = "BINI"
    MAMI = "MAMI"


# Display labels used by the dashboard views
SECTION_TYPE_LABELS: dict[SectionType, str] = {
    SectionType.TABLE_OF_CONTENTS: "Table of Contents",
    SectionType.EXECUTIVE_SUMMARY: "Executive Summary",
    SectionType.TECHNICAL_APPROACH: "Technical Approach",
    SectionType.DESIGN: "Design",
    SectionType.CAPABILITIES: "Capabilities",
    SectionType.FOCUS_DOCUMENT: "Focus Document",
    SectionType.NARRATIVE: "Narrative",
}

STATUS_LABELS: dict[OutlineStatus, str] = {
    OutlineStatus.PENDING: "Pending",
    OutlineStatus.IN_PROGRESS: "In-Progress",
    OutlineStatus.COMPLETED: "Completed",
}


def is_owner_role(role: Optional[str]) -> bool:
    """Stored roles are compared case-insensitively ("owner" / "OWNER")."""
    return (role or "").strip().lower() == Role.OWNER.value
