"""Redis connection management and the JWT revocation list."""

from __future__ import annotations

import redis.asyncio as redis
from fastapi import Request


def create_redis(url: str) -> redis.Redis:
    """Create a Redis client; connections are opened lazily by the pool."""
    return redis.from_url(url, decode_responses=True)


class RedisRevocationList:
    """Revoked session token IDs, kept until the token would have expired."""

    def __init__(self, client: redis.Redis):
        self._client = client

    async def revoke(self, jti: str, ttl_seconds: int = 3600) -> None:
        """Add a JWT ID to the revocation list."""
        await self._client.setex(f"jwt:revoked:{jti}", max(ttl_seconds, 1), "1")

    async def is_revoked(self, jti: str) -> bool:
        """Check if a JWT ID has been revoked."""
        return await self._client.exists(f"jwt:revoked:{jti}") > 0

    async def close(self) -> None:
        await self._client.aclose()


def get_revocations(request: Request):
    """FastAPI dependency: the revocation list attached by ``create_app``."""
    return request.app.state.revocations
