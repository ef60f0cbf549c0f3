"""
Shared fixtures: the real app wired to an in-memory SQLite store and an
in-memory revocation list.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.database import Database
from app.main import create_app
from app.models.base import new_id

TEST_PASSWORD = "correct-horse-battery"


class MemoryRevocationList:
    """Stand-in for the Redis revocation list."""

    def __init__(self):
        self.revoked: dict[str, int] = {}
        self.closed = False

    async def revoke(self, jti: str, ttl_seconds: int = 3600) -> None:
        self.revoked[jti] = ttl_seconds

    async def is_revoked(self, jti: str) -> bool:
        return jti in self.revoked

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        secret_key="test-secret-key-with-enough-entropy-0123456789",
        cookie_secure=False,
        log_level="warning",
        log_format="text",
    )


@pytest.fixture
async def database():
    db = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.init_schema()
    yield db
    await db.dispose()


@pytest.fixture
def revocations():
    return MemoryRevocationList()


@pytest.fixture
def app(settings, database, revocations):
    return create_app(settings, database=database, revocations=revocations)


@pytest.fixture
async def make_client(app, settings):
    """Factory for independent clients (one cookie jar per simulated user)."""
    clients = []

    def factory() -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

        async def attach_csrf(request):
            csrf = client.cookies.get(settings.csrf_cookie)
            if csrf and request.method not in ("GET", "HEAD", "OPTIONS"):
                request.headers["X-CSRF-Token"] = csrf

        client.event_hooks = {"request": [attach_csrf], "response": []}
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()


@pytest.fixture
def client(make_client):
    return make_client()


async def sign_up(client: AsyncClient, name: str, email: str) -> dict:
    resp = await client.post(
        "/api/auth/sign-up/email",
        json={"name": name, "email": email, "password": TEST_PASSWORD},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["user"]


async def add_org(database: Database, org_id: str, name: str = "Org") -> None:
    await database.query(
        """
        INSERT INTO organization (id, name, slug, "createdAt")
        VALUES (:id, :name, :slug, :created_at)
        """,
        {
            "id": org_id,
            "name": name,
            "slug": org_id.replace("_", "-"),
            "created_at": datetime.now(timezone.utc),
        },
    )


async def add_member(database: Database, org_id: str, user_id: str, role: str) -> str:
    member_id = new_id()
    await database.query(
        """
        INSERT INTO member (id, "organizationId", "userId", role, "createdAt")
        VALUES (:id, :org_id, :user_id, :role, :created_at)
        """,
        {
            "id": member_id,
            "org_id": org_id,
            "user_id": user_id,
            "role": role,
            "created_at": datetime.now(timezone.utc),
        },
    )
    return member_id


async def count_members(database: Database, org_id: str, user_id: str) -> int:
    result = await database.query(
        """
        SELECT COUNT(*) AS n FROM member
        WHERE "organizationId" = :org_id AND "userId" = :user_id
        """,
        {"org_id": org_id, "user_id": user_id},
    )
    return result.first()["n"]


@pytest.fixture
async def tenants(database, make_client):
    """Two orgs: ``org_1`` (owner + member) and ``org_2`` (its own owner) plus an outsider."""
    owner = make_client()
    member = make_client()
    other_owner = make_client()
    outsider = make_client()

    users = {
        "owner": await sign_up(owner, "Olivia Owner", "owner@org1.dev"),
        "member": await sign_up(member, "Mark Member", "member@org1.dev"),
        "other_owner": await sign_up(other_owner, "Oscar Other", "owner@org2.dev"),
        "outsider": await sign_up(outsider, "Nina Nobody", "nobody@outside.dev"),
    }

    await add_org(database, "org_1", "Org One")
    await add_org(database, "org_2", "Org Two")
    owner_member_id = await add_member(database, "org_1", users["owner"]["id"], "owner")
    member_member_id = await add_member(database, "org_1", users["member"]["id"], "member")
    await add_member(database, "org_2", users["other_owner"]["id"], "OWNER")

    yield {
        "users": users,
        "clients": {
            "owner": owner,
            "member": member,
            "other_owner": other_owner,
            "outsider": outsider,
        },
        "member_ids": {"owner": owner_member_id, "member": member_member_id},
    }
