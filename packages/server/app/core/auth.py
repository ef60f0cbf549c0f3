"""
Authentication and Authorization for Capture Plan.

Supports:
- Email/Password credentials (bcrypt)
- Signed JWT session cookie carrying the user and their active organization
- Session revocation list (Redis) for sign-out and session reissue
- Org-scoped authorization dependencies (member / owner)
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import structlog
from fastapi import Depends, HTTPException, Request, Response

from app.core.config import Settings
from app.core.database import Database, get_database
from app.core.redis import get_revocations
from captureplan_shared.schemas.common import is_owner_role

log = structlog.get_logger()


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency: the settings the app was built with."""
    return request.app.state.settings


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    settings: Settings,
    user_id: str,
    name: str,
    email: str,
    active_org: Optional[str],
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str, datetime]:
    """Create a signed session JWT. Returns (token, jti, expires_at)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.session_expire_minutes))
    payload = {
        "sub": user_id,
        "name": name,
        "email": email,
        "active_org": active_org,
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti, exp


def decode_jwt(settings: Settings, token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


# ---------------------------------------------------------------------------
# CSRF Token
# ---------------------------------------------------------------------------

def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

class SessionUser:
    """Identity carried by the session cookie."""

    def __init__(self, id: str, name: str, email: str):
        self.id = id
        self.name = name
        self.email = email


class Session:
    """A validated session: the user plus their optionally active organization."""

    def __init__(
        self,
        user: SessionUser,
        active_organization_id: Optional[str],
        jti: str,
        expires_at: datetime,
    ):
        self.user = user
        self.active_organization_id = active_organization_id
        self.jti = jti
        self.expires_at = expires_at

    @classmethod
    def from_claims(cls, payload: dict) -> "Session":
        user = SessionUser(
            id=payload["sub"],
            name=payload.get("name") or "",
            email=payload.get("email") or "",
        )
        return cls(
            user=user,
            active_organization_id=payload.get("active_org"),
            jti=payload["jti"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    def remaining_seconds(self) -> int:
        return int((self.expires_at - datetime.now(timezone.utc)).total_seconds())


def issue_session(
    response: Response,
    settings: Settings,
    user: SessionUser,
    active_org: Optional[str] = None,
) -> Session:
    """Sign a new session for ``user`` and set the session + CSRF cookies."""
    token, jti, exp = create_jwt(settings, user.id, user.name, user.email, active_org)
    max_age = settings.session_expire_minutes * 60
    response.set_cookie(
        key=settings.session_cookie,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
        max_age=max_age,
    )
    response.set_cookie(
        key=settings.csrf_cookie,
        value=generate_csrf_token(),
        httponly=False,  # JS must read this
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
        max_age=max_age,
    )
    return Session(user=user, active_organization_id=active_org, jti=jti, expires_at=exp)


def clear_session(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.session_cookie, path="/")
    response.delete_cookie(settings.csrf_cookie, path="/")


async def get_current_session(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    revocations=Depends(get_revocations),
) -> Optional[Session]:
    """Resolve the session cookie; None when absent, invalid, expired or revoked."""
    token = request.cookies.get(settings.session_cookie)
    if not token:
        return None
    try:
        payload = decode_jwt(settings, token)
    except jwt.PyJWTError:
        return None

    jti = payload.get("jti")
    if not jti or not payload.get("sub"):
        return None
    if await revocations.is_revoked(jti):
        return None
    return Session.from_claims(payload)


# ---------------------------------------------------------------------------
# Authorization dependencies
# ---------------------------------------------------------------------------

class OrgAccess:
    """Outcome of a successful org membership check."""

    def __init__(self, session: Session, org_id: str, role: str):
        self.session = session
        self.org_id = org_id
        self.role = role
        self.user_id = session.user.id


async def require_session(
    session: Optional[Session] = Depends(get_current_session),
) -> Session:
    """Any authenticated user."""
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session


async def find_member_role(
    database: Database, org_id: str, user_id: str
) -> Optional[str]:
    """The caller's stored role in ``org_id``, or None when not a member."""
    result = await database.query(
        """
        SELECT role
        FROM member
        WHERE "organizationId" = :org_id AND "userId" = :user_id
        LIMIT 1
        """,
        {"org_id": org_id, "user_id": user_id},
    )
    row = result.first()
    return row["role"] if row else None


async def require_org_member(
    orgId: str,
    session: Session = Depends(require_session),
    database: Optional[Database] = Depends(get_database),
) -> OrgAccess:
    """The caller must hold a membership row in ``orgId``.

    Non-members get 403 rather than 404 so org existence cannot be probed.
    """
    if database is None:
        raise HTTPException(status_code=500, detail="Database not configured")

    role = await find_member_role(database, orgId, session.user.id)
    if role is None:
        log.warning("auth.forbidden", org_id=orgId, user_id=session.user.id)
        raise HTTPException(status_code=403, detail="Forbidden")
    return OrgAccess(session=session, org_id=orgId, role=role)


async def require_org_owner(
    access: OrgAccess = Depends(require_org_member),
) -> OrgAccess:
    """Requires the owner role (compared case-insensitively)."""
    if not is_owner_role(access.role):
        log.warning(
            "auth.owner_required",
            org_id=access.org_id,
            user_id=access.user_id,
            role=access.role,
        )
        raise HTTPException(status_code=403, detail="Only owners can manage members")
    return access
