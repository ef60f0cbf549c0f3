"""
Tests for the mock join flow.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from app.services import organizations as org_service
from conftest import count_members


class TestJoinableOrganizations:
    @pytest.mark.asyncio
    async def test_lists_orgs_not_owned(self, tenants):
        resp = await tenants["clients"]["owner"].get("/api/organizations/mock-join")
        assert resp.status_code == 200
        assert resp.json()["organizations"] == [
            {"id": "org_2", "name": "Org Two", "mockInvitationId": "mock-org_2"}
        ]

    @pytest.mark.asyncio
    async def test_members_still_see_the_org(self, tenants):
        """Only the owner role excludes an org."""
        resp = await tenants["clients"]["member"].get("/api/organizations/mock-join")
        ids = [org["id"] for org in resp.json()["organizations"]]
        assert ids == ["org_1", "org_2"]

    @pytest.mark.asyncio
    async def test_uppercase_owner_role_excluded(self, tenants):
        resp = await tenants["clients"]["other_owner"].get("/api/organizations/mock-join")
        ids = [org["id"] for org in resp.json()["organizations"]]
        assert ids == ["org_1"]

    @pytest.mark.asyncio
    async def test_requires_session(self, client, tenants):
        resp = await client.get("/api/organizations/mock-join")
        assert resp.status_code == 401


class TestMockJoin:
    @pytest.mark.asyncio
    async def test_join_then_idempotent(self, tenants, database):
        outsider = tenants["clients"]["outsider"]
        user_id = tenants["users"]["outsider"]["id"]

        first = await outsider.post(
            "/api/organizations/mock-join", json={"organizationId": "org_1"}
        )
        assert first.status_code == 200
        assert first.json() == {"joined": True}

        second = await outsider.post(
            "/api/organizations/mock-join", json={"organizationId": "org_1"}
        )
        assert second.status_code == 200
        assert second.json() == {"joined": False, "alreadyMember": True}
        assert await count_members(database, "org_1", user_id) == 1

    @pytest.mark.asyncio
    async def test_joined_as_member_with_access(self, tenants):
        outsider = tenants["clients"]["outsider"]
        await outsider.post("/api/organizations/mock-join", json={"organizationId": "org_1"})

        resp = await outsider.get("/api/organizations/org_1/outlines")
        assert resp.status_code == 200

        # Joining never grants owner rights
        resp = await outsider.post(
            "/api/organizations/org_1/members", json={"email": "friend@outside.dev"}
        )
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_existing_owner_not_downgraded(self, tenants, database):
        resp = await tenants["clients"]["owner"].post(
            "/api/organizations/mock-join", json={"organizationId": "org_1"}
        )
        assert resp.json() == {"joined": False, "alreadyMember": True}
        result = await database.query(
            'SELECT role FROM member WHERE "userId" = :user_id',
            {"user_id": tenants["users"]["owner"]["id"]},
        )
        assert result.rows == [{"role": "owner"}]

    @pytest.mark.asyncio
    async def test_repeated_joins_create_one_row(self, tenants, database):
        user_id = tenants["users"]["outsider"]["id"]
        results = [await org_service.mock_join(database, "org_1", user_id) for _ in range(5)]
        assert results.count(True) == 1
        assert await count_members(database, "org_1", user_id) == 1

    @pytest.mark.asyncio
    async def test_unknown_org(self, tenants):
        resp = await tenants["clients"]["outsider"].post(
            "/api/organizations/mock-join", json={"organizationId": "org_404"}
        )
        assert resp.status_code == 404
        assert resp.json() == {"error": "Organization not found"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"organizationId": ""}, {"organizationId": "   "}])
    async def test_organization_id_required(self, tenants, body):
        resp = await tenants["clients"]["outsider"].post("/api/organizations/mock-join", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "organizationId is required"}

    @pytest.mark.asyncio
    async def test_requires_session(self, client, tenants):
        resp = await client.post("/api/organizations/mock-join", json={"organizationId": "org_1"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_store_failure_is_structured(self, tenants):
        with patch.object(
            org_service, "mock_join", AsyncMock(side_effect=RuntimeError("deadlock detected"))
        ):
            resp = await tenants["clients"]["outsider"].post(
                "/api/organizations/mock-join", json={"organizationId": "org_1"}
            )
        assert resp.status_code == 500
        assert resp.json() == {"error": "Mock join failed: deadlock detected"}
