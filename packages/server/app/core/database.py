"""
Database connection and query execution.

Handlers never see the engine directly: they receive the ``Database`` that
``create_app`` attached to ``app.state`` and issue parameterized SQL through
``query`` (one statement, own transaction) or ``transaction`` (several
statements committed together).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import HTTPException, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlmodel import SQLModel


@dataclass
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0

    def first(self) -> Optional[dict[str, Any]]:
        return self.rows[0] if self.rows else None


async def _execute(
    conn: AsyncConnection, sql: str, params: Optional[dict[str, Any]]
) -> QueryResult:
    result = await conn.execute(text(sql), params or {})
    if result.returns_rows:
        rows = [dict(row._mapping) for row in result.all()]
        return QueryResult(rows=rows, row_count=len(rows))
    return QueryResult(row_count=result.rowcount)


class Transaction:
    """Statements issued through one connection inside ``Database.transaction``."""

    def __init__(self, conn: AsyncConnection):
        self._conn = conn

    async def query(self, sql: str, params: Optional[dict[str, Any]] = None) -> QueryResult:
        return await _execute(self._conn, sql, params)


class Database:
    """Pooled SQL store. Build once at startup and share the handle."""

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs: Any):
        self._engine: AsyncEngine = create_async_engine(
            url,
            echo=echo,
            future=True,
            **engine_kwargs,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def query(self, sql: str, params: Optional[dict[str, Any]] = None) -> QueryResult:
        """Run one statement; commits on success, rolls back on error."""
        async with self._engine.begin() as conn:
            return await _execute(conn, sql, params)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """Run several statements atomically."""
        async with self._engine.begin() as conn:
            yield Transaction(conn)

    async def ping(self) -> None:
        await self.query("SELECT 1")

    async def init_schema(self) -> None:
        """Create missing tables from the SQLModel metadata."""
        import app.models  # noqa: F401  populate SQLModel.metadata

        async with self._engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()


def get_database(request: Request) -> Optional[Database]:
    """FastAPI dependency: the store configured for this app, if any."""
    return getattr(request.app.state, "database", None)


def require_database(request: Request) -> Database:
    database = get_database(request)
    if database is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return database
