"""
Stateful dashboard views driven by ``CapturePlanClient``.

``OutlineBoard`` is the outline table of the dashboard and ``TeamRoster`` the
member list of the team page. Both keep their state locally and update it
after the server confirms a change; failures are kept in ``error`` for the
view to display.
"""

from __future__ import annotations

import math
from typing import Optional

import structlog
from pydantic import BaseModel

from .client import ApiError, CapturePlanClient
from .schemas.common import SECTION_TYPE_LABELS, STATUS_LABELS, Role, is_owner_role
from .schemas.outlines import OutlineCreate, OutlineRead, OutlineUpdate

log = structlog.get_logger()

DEFAULT_PAGE_SIZE = 10


class OutlineBoard:
    """Outline rows of the active organization with selection and paging."""

    def __init__(
        self,
        client: CapturePlanClient,
        org_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.client = client
        self.org_id = org_id
        self.rows: list[OutlineRead] = []
        self.selected_ids: set[int] = set()
        self.page_size = page_size
        self.page = 1
        self.error: Optional[str] = None
        self._load_seq = 0

    # --- Loading ---

    async def switch_org(self, org_id: str) -> None:
        """Show ``org_id``; rows of the previous org are dropped before loading."""
        self.org_id = org_id
        await self.reload()

    async def reload(self) -> None:
        self._load_seq += 1
        seq = self._load_seq
        org_id = self.org_id
        self.rows = []
        self.selected_ids.clear()
        self.error = None
        try:
            rows = await self.client.list_outlines(org_id)
        except ApiError as exc:
            if self._is_current(seq, org_id):
                self.error = exc.message
            return

        # The org changed or a newer load started while this request was in flight
        if not self._is_current(seq, org_id):
            log.debug("board.stale_response_dropped", org_id=org_id)
            return
        self.rows = rows
        self.clamp_page()

    def _is_current(self, seq: int, org_id: str) -> bool:
        return seq == self._load_seq and org_id == self.org_id

    # --- Editing ---

    async def save(
        self, form: OutlineCreate, editing_id: Optional[int] = None
    ) -> Optional[OutlineRead]:
        """Create a row, or replace ``editing_id`` with the submitted form."""
        if not form.header.strip():
            return None

        org_id = self.org_id
        self.error = None
        try:
            if editing_id is None:
                outline = await self.client.create_outline(org_id, form)
            else:
                changes = OutlineUpdate(**form.model_dump())
                outline = await self.client.update_outline(org_id, editing_id, changes)
        except ApiError as exc:
            if org_id == self.org_id:
                self.error = exc.message
            return None

        # Saved, but the board now shows another org
        if org_id != self.org_id:
            return outline
        if editing_id is None:
            self.rows.append(outline)
        else:
            self.rows = [outline if row.id == editing_id else row for row in self.rows]
        self.clamp_page()
        return outline

    async def delete(self, outline_id: int) -> bool:
        org_id = self.org_id
        self.error = None
        try:
            await self.client.delete_outline(org_id, outline_id)
        except ApiError as exc:
            if org_id == self.org_id:
                self.error = exc.message
            return False

        if org_id != self.org_id:
            return True
        self.rows = [row for row in self.rows if row.id != outline_id]
        self.selected_ids.discard(outline_id)
        self.clamp_page()
        return True

    # --- Selection ---

    def toggle(self, outline_id: int) -> None:
        if outline_id in self.selected_ids:
            self.selected_ids.remove(outline_id)
        else:
            self.selected_ids.add(outline_id)

    def toggle_all(self) -> None:
        if self.all_selected:
            self.selected_ids.clear()
        else:
            self.selected_ids = {row.id for row in self.rows}

    @property
    def all_selected(self) -> bool:
        return bool(self.rows) and len(self.selected_ids) == len(self.rows)

    # --- Paging ---

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(len(self.rows) / self.page_size))

    def clamp_page(self) -> None:
        self.page = min(max(self.page, 1), self.page_count)

    def set_page_size(self, page_size: int) -> None:
        self.page_size = max(1, page_size)
        self.clamp_page()

    def go_to(self, page: int) -> None:
        self.page = page
        self.clamp_page()

    @property
    def paged_rows(self) -> list[OutlineRead]:
        start = (self.page - 1) * self.page_size
        return self.rows[start:start + self.page_size]


def display_row(row: OutlineRead) -> dict:
    """Table cells for one outline row, with enum values shown as labels."""
    return {
        "id": row.id,
        "header": row.header,
        "section_type": SECTION_TYPE_LABELS[row.section_type],
        "status": STATUS_LABELS[row.status],
        "target": row.target,
        "limit": row.limit,
        "reviewer": row.reviewer.value,
    }


class TeamMember(BaseModel):
    id: str
    name: str
    email: str
    role: str


def _first_present(*values):
    """First value that is not None, as a string."""
    for value in values:
        if value is not None:
            return str(value)
    return ""


def normalize_members(rows: list[dict]) -> list[TeamMember]:
    """Shape API member rows for display."""
    members = []
    for index, row in enumerate(rows):
        user = row.get("user") or {}
        email = _first_present(user.get("email"), row.get("email"), "")
        name = _first_present(user.get("name"), email.split("@")[0]) or "Member"
        role = Role.OWNER if is_owner_role(row.get("role")) else Role.MEMBER
        member_id = _first_present(row.get("id"), email or None, str(index + 1))
        members.append(
            TeamMember(id=member_id, name=name, email=email, role=role.value.upper())
        )
    return members


class TeamRoster:
    """Members of the active organization, as shown on the team page."""

    def __init__(
        self,
        client: CapturePlanClient,
        org_id: str,
        current_user_role: Optional[str] = None,
    ):
        self.client = client
        self.org_id = org_id
        self.current_user_role = current_user_role
        self.members: list[TeamMember] = []
        self.error: Optional[str] = None
        self._load_seq = 0

    @property
    def is_owner(self) -> bool:
        return is_owner_role(self.current_user_role)

    async def switch_org(self, org_id: str, current_user_role: Optional[str] = None) -> None:
        self.org_id = org_id
        self.current_user_role = current_user_role
        await self.reload()

    async def reload(self) -> None:
        self._load_seq += 1
        seq = self._load_seq
        org_id = self.org_id
        self.members = []
        try:
            rows = await self.client.list_members(org_id)
        except ApiError as exc:
            if seq == self._load_seq and org_id == self.org_id:
                self.error = exc.message
            return
        if seq != self._load_seq or org_id != self.org_id:
            return
        self.error = None
        self.members = normalize_members(rows)

    async def invite(self, email: str) -> bool:
        """Invite ``email`` as a member; owners cannot be invited."""
        email = email.strip()
        if not email:
            return False
        try:
            await self.client.invite_member(self.org_id, email)
        except ApiError as exc:
            self.error = exc.message
            return False
        await self.reload()
        return True

    async def remove(self, member: TeamMember) -> bool:
        try:
            await self.client.remove_member(self.org_id, member.id)
        except ApiError as exc:
            self.error = exc.message
            return False
        await self.reload()
        return True
