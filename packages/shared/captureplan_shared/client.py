"""
HTTP client for the Capture Plan API.

Holds the session cookie jar like a browser would and echoes the CSRF cookie
on state-changing requests. Errors surface as ``ApiError`` carrying the
server's ``error`` message, or a generic "Unable to ..." message when the
server is unreachable or answers with something that is not JSON.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from .schemas.outlines import OutlineCreate, OutlineRead, OutlineUpdate

log = structlog.get_logger()

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}


class ApiError(Exception):
    def __init__(self, status: Optional[int], message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class CapturePlanClient:
    """Async API client bound to one signed-in user."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
        csrf_cookie: str = "cp_csrf",
    ):
        self._csrf_cookie = csrf_cookie
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=httpx.Timeout(timeout),
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "CapturePlanClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self, method: str, path: str, action: str, json: Any = None
    ) -> Any:
        headers = {}
        if method not in SAFE_METHODS:
            csrf = self._http.cookies.get(self._csrf_cookie)
            if csrf:
                headers["X-CSRF-Token"] = csrf

        fallback = f"Unable to {action}."
        try:
            resp = await self._http.request(method, f"/api{path}", json=json, headers=headers)
        except httpx.HTTPError as exc:
            log.warning("client.request_failed", path=path, error=str(exc))
            raise ApiError(None, fallback) from exc

        try:
            data = resp.json()
        except ValueError:
            if resp.is_error or resp.content:
                raise ApiError(resp.status_code, fallback)
            return None

        if resp.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiError(resp.status_code, message if isinstance(message, str) else fallback)
        return data

    # --- Session ---

    async def sign_up(self, name: str, email: str, password: str) -> dict:
        body = {"name": name, "email": email, "password": password}
        return await self._request("POST", "/auth/sign-up/email", "sign up", body)

    async def sign_in(self, email: str, password: str) -> dict:
        body = {"email": email, "password": password}
        return await self._request("POST", "/auth/sign-in/email", "sign in", body)

    async def sign_out(self) -> None:
        await self._request("POST", "/auth/sign-out", "sign out")

    async def get_session(self) -> Optional[dict]:
        return await self._request("GET", "/auth/get-session", "load session")

    # --- Organizations ---

    async def create_organization(self, name: str, slug: str) -> dict:
        body = {"name": name, "slug": slug}
        return await self._request(
            "POST", "/auth/organization/create", "create organization", body
        )

    async def set_active_organization(self, org_id: Optional[str]) -> None:
        await self._request(
            "POST",
            "/auth/organization/set-active",
            "switch organization",
            {"organizationId": org_id},
        )

    async def list_organizations(self) -> list[dict]:
        data = await self._request("GET", "/auth/organization/list", "load organizations")
        return data["organizations"]

    async def accept_invitation(self, invitation_id: str) -> dict:
        return await self._request(
            "POST",
            "/auth/organization/accept-invitation",
            "join organization",
            {"invitationId": invitation_id},
        )

    async def joinable_organizations(self) -> list[dict]:
        data = await self._request("GET", "/organizations/mock-join", "load organizations")
        return data["organizations"]

    async def mock_join(self, org_id: str) -> dict:
        return await self._request(
            "POST", "/organizations/mock-join", "join organization", {"organizationId": org_id}
        )

    # --- Outlines ---

    async def list_outlines(self, org_id: str) -> list[OutlineRead]:
        data = await self._request("GET", f"/organizations/{org_id}/outlines", "load outlines")
        return [OutlineRead.model_validate(row) for row in data["outlines"]]

    async def create_outline(self, org_id: str, form: OutlineCreate) -> OutlineRead:
        data = await self._request(
            "POST",
            f"/organizations/{org_id}/outlines",
            "save section",
            form.model_dump(mode="json", by_alias=True),
        )
        return OutlineRead.model_validate(data["outline"])

    async def update_outline(
        self, org_id: str, outline_id: int, changes: OutlineUpdate
    ) -> OutlineRead:
        data = await self._request(
            "PATCH",
            f"/organizations/{org_id}/outlines/{outline_id}",
            "save section",
            changes.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return OutlineRead.model_validate(data["outline"])

    async def delete_outline(self, org_id: str, outline_id: int) -> None:
        await self._request(
            "DELETE", f"/organizations/{org_id}/outlines/{outline_id}", "delete section"
        )

    # --- Members ---

    async def list_members(self, org_id: str) -> list[dict]:
        data = await self._request("GET", f"/organizations/{org_id}/members", "load members")
        return data["members"]

    async def invite_member(self, org_id: str, email: str) -> dict:
        return await self._request(
            "POST",
            f"/organizations/{org_id}/members",
            "invite member",
            {"email": email, "role": "member"},
        )

    async def remove_member(self, org_id: str, member_id_or_email: str) -> dict:
        return await self._request(
            "POST",
            f"/organizations/{org_id}/members/remove",
            "remove member",
            {"memberIdOrEmail": member_id_or_email},
        )
