"""
Integration tests for the outline routes.

Tests cover:
- CRUD for org members
- Required fields and defaults on create
- Partial updates
- Tenant isolation (cross-org ids behave like missing rows)
"""

from __future__ import annotations

import pytest

from app.services.outlines import build_update

EXEC_SUMMARY = {
    "header": "Exec Summary",
    "sectionType": "EXECUTIVE_SUMMARY",
    "status": "PENDING",
    "target": 0,
    "limit": 0,
    "reviewer": "ASSIM",
}


async def _count_outlines(database, org_id: str) -> int:
    result = await database.query(
        "SELECT COUNT(*) AS n FROM outlines WHERE organization_id = :org_id",
        {"org_id": org_id},
    )
    return result.first()["n"]


async def _create(client, org_id: str, body: dict = EXEC_SUMMARY) -> dict:
    resp = await client.post(f"/api/organizations/{org_id}/outlines", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()["outline"]


# ---------------------------------------------------------------------------
# Unit tests: partial update builder
# ---------------------------------------------------------------------------

class TestBuildUpdate:
    def test_only_present_fields(self):
        clause, params = build_update({"status": "COMPLETED"})
        assert clause == "status = :set_status"
        assert params == {"set_status": "COMPLETED"}

    def test_limit_maps_to_storage_column(self):
        clause, params = build_update({"limit": 5, "header": "Intro"})
        assert "limit_value = :set_limit_value" in clause
        assert params == {"set_limit_value": 5, "set_header": "Intro"}

    def test_unknown_fields_ignored(self):
        clause, params = build_update({"organization_id": "org_2", "id": 9})
        assert clause == ""
        assert params == {}


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreateOutline:
    @pytest.mark.asyncio
    async def test_create_returns_row_with_integer_id(self, tenants):
        client = tenants["clients"]["owner"]
        resp = await client.post("/api/organizations/org_1/outlines", json=EXEC_SUMMARY)
        assert resp.status_code == 201
        outline = resp.json()["outline"]
        assert isinstance(outline["id"], int)
        assert outline["organization_id"] == "org_1"
        assert outline["header"] == "Exec Summary"
        assert outline["section_type"] == "EXECUTIVE_SUMMARY"
        assert outline["limit"] == 0

    @pytest.mark.asyncio
    async def test_defaults_applied(self, tenants):
        outline = await _create(
            tenants["clients"]["member"],
            "org_1",
            {"header": "Design", "sectionType": "DESIGN", "status": "IN_PROGRESS"},
        )
        assert outline["target"] == 0
        assert outline["limit"] == 0
        assert outline["reviewer"] == "ASSIM"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["header", "sectionType", "status"])
    async def test_missing_required_field(self, tenants, database, missing):
        body = {k: v for k, v in EXEC_SUMMARY.items() if k != missing}
        resp = await tenants["clients"]["owner"].post(
            "/api/organizations/org_1/outlines", json=body
        )
        assert resp.status_code == 400
        assert resp.json()["error"].startswith("Missing required fields")
        assert missing in resp.json()["error"]
        assert await _count_outlines(database, "org_1") == 0

    @pytest.mark.asyncio
    async def test_empty_header_counts_as_missing(self, tenants, database):
        resp = await tenants["clients"]["owner"].post(
            "/api/organizations/org_1/outlines", json={**EXEC_SUMMARY, "header": ""}
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required fields: header"}
        assert await _count_outlines(database, "org_1") == 0

    @pytest.mark.asyncio
    async def test_invalid_enum_value(self, tenants, database):
        resp = await tenants["clients"]["owner"].post(
            "/api/organizations/org_1/outlines",
            json={**EXEC_SUMMARY, "status": "DONE"},
        )
        assert resp.status_code == 400
        assert "status" in resp.json()["error"]
        assert await _count_outlines(database, "org_1") == 0

    @pytest.mark.asyncio
    async def test_oversized_limit_rejected(self, tenants, database):
        resp = await tenants["clients"]["owner"].post(
            "/api/organizations/org_1/outlines",
            json={**EXEC_SUMMARY, "limit": 2**40},
        )
        assert resp.status_code == 400
        assert "limit" in resp.json()["error"]
        assert await _count_outlines(database, "org_1") == 0

    @pytest.mark.asyncio
    async def test_malformed_json(self, tenants):
        resp = await tenants["clients"]["owner"].post(
            "/api/organizations/org_1/outlines",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON body"}

    @pytest.mark.asyncio
    async def test_non_member_cannot_create(self, tenants, database):
        resp = await tenants["clients"]["outsider"].post(
            "/api/organizations/org_1/outlines", json=EXEC_SUMMARY
        )
        assert resp.status_code == 403
        assert await _count_outlines(database, "org_1") == 0

    @pytest.mark.asyncio
    async def test_anonymous_cannot_create(self, client, tenants):
        resp = await client.post("/api/organizations/org_1/outlines", json=EXEC_SUMMARY)
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------

class TestListOutlines:
    @pytest.mark.asyncio
    async def test_list_in_id_order_scoped_to_org(self, tenants):
        owner = tenants["clients"]["owner"]
        first = await _create(owner, "org_1", {**EXEC_SUMMARY, "header": "First"})
        second = await _create(owner, "org_1", {**EXEC_SUMMARY, "header": "Second"})
        await _create(tenants["clients"]["other_owner"], "org_2", {**EXEC_SUMMARY, "header": "Other"})

        resp = await tenants["clients"]["member"].get("/api/organizations/org_1/outlines")
        assert resp.status_code == 200
        outlines = resp.json()["outlines"]
        assert [o["id"] for o in outlines] == [first["id"], second["id"]]
        assert all(o["organization_id"] == "org_1" for o in outlines)

    @pytest.mark.asyncio
    async def test_non_member_cannot_list(self, tenants):
        resp = await tenants["clients"]["other_owner"].get("/api/organizations/org_1/outlines")
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden"}


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

class TestUpdateOutline:
    @pytest.mark.asyncio
    async def test_patch_status_only(self, tenants):
        owner = tenants["clients"]["owner"]
        created = await _create(
            owner, "org_1", {**EXEC_SUMMARY, "target": 3, "limit": 5, "reviewer": "BINI"}
        )

        resp = await owner.patch(
            f"/api/organizations/org_1/outlines/{created['id']}",
            json={"status": "COMPLETED"},
        )
        assert resp.status_code == 200
        outline = resp.json()["outline"]
        assert outline == {**created, "status": "COMPLETED"}

    @pytest.mark.asyncio
    async def test_any_member_may_edit(self, tenants):
        created = await _create(tenants["clients"]["owner"], "org_1")
        resp = await tenants["clients"]["member"].patch(
            f"/api/organizations/org_1/outlines/{created['id']}",
            json={"header": "Executive Summary", "sectionType": "NARRATIVE", "limit": 4},
        )
        assert resp.status_code == 200
        outline = resp.json()["outline"]
        assert outline["header"] == "Executive Summary"
        assert outline["section_type"] == "NARRATIVE"
        assert outline["limit"] == 4

    @pytest.mark.asyncio
    async def test_status_transitions_not_enforced(self, tenants):
        owner = tenants["clients"]["owner"]
        created = await _create(owner, "org_1", {**EXEC_SUMMARY, "status": "COMPLETED"})
        resp = await owner.patch(
            f"/api/organizations/org_1/outlines/{created['id']}",
            json={"status": "PENDING"},
        )
        assert resp.json()["outline"]["status"] == "PENDING"

    @pytest.mark.asyncio
    async def test_empty_patch_rejected(self, tenants):
        owner = tenants["clients"]["owner"]
        created = await _create(owner, "org_1")
        resp = await owner.patch(
            f"/api/organizations/org_1/outlines/{created['id']}", json={}
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "No fields to update"}

    @pytest.mark.asyncio
    async def test_unknown_id_not_found(self, tenants):
        resp = await tenants["clients"]["owner"].patch(
            "/api/organizations/org_1/outlines/9999", json={"status": "COMPLETED"}
        )
        assert resp.status_code == 404
        assert resp.json() == {"error": "Not found"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("outline_id", ["0", "-1", "99999999999999999999999"])
    async def test_out_of_range_id_not_found(self, tenants, outline_id):
        resp = await tenants["clients"]["owner"].patch(
            f"/api/organizations/org_1/outlines/{outline_id}", json={"status": "COMPLETED"}
        )
        assert resp.status_code == 404
        assert resp.json() == {"error": "Not found"}

    @pytest.mark.asyncio
    async def test_cross_org_patch_is_not_found(self, tenants):
        """org_2's owner addresses org_1's row through org_2's path."""
        created = await _create(tenants["clients"]["owner"], "org_1")
        resp = await tenants["clients"]["other_owner"].patch(
            f"/api/organizations/org_2/outlines/{created['id']}",
            json={"header": "Hijacked"},
        )
        assert resp.status_code == 404

        rows = (await tenants["clients"]["owner"].get("/api/organizations/org_1/outlines")).json()
        assert rows["outlines"][0]["header"] == "Exec Summary"


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

class TestDeleteOutline:
    @pytest.mark.asyncio
    async def test_delete(self, tenants, database):
        owner = tenants["clients"]["owner"]
        created = await _create(owner, "org_1")
        resp = await owner.delete(f"/api/organizations/org_1/outlines/{created['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert await _count_outlines(database, "org_1") == 0

    @pytest.mark.asyncio
    async def test_delete_twice_not_found(self, tenants):
        owner = tenants["clients"]["owner"]
        created = await _create(owner, "org_1")
        await owner.delete(f"/api/organizations/org_1/outlines/{created['id']}")
        resp = await owner.delete(f"/api/organizations/org_1/outlines/{created['id']}")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_out_of_range_id_not_found(self, tenants, database):
        await _create(tenants["clients"]["owner"], "org_1")
        resp = await tenants["clients"]["owner"].delete(
            "/api/organizations/org_1/outlines/99999999999999999999999"
        )
        assert resp.status_code == 404
        assert await _count_outlines(database, "org_1") == 1

    @pytest.mark.asyncio
    async def test_cross_org_delete_is_not_found(self, tenants, database):
        created = await _create(tenants["clients"]["owner"], "org_1")
        resp = await tenants["clients"]["other_owner"].delete(
            f"/api/organizations/org_2/outlines/{created['id']}"
        )
        assert resp.status_code == 404
        assert await _count_outlines(database, "org_1") == 1

    @pytest.mark.asyncio
    async def test_non_member_cannot_delete(self, tenants, database):
        created = await _create(tenants["clients"]["owner"], "org_1")
        resp = await tenants["clients"]["outsider"].delete(
            f"/api/organizations/org_1/outlines/{created['id']}"
        )
        assert resp.status_code == 403
        assert await _count_outlines(database, "org_1") == 1
