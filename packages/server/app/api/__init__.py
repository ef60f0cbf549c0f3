"""
API Router

Tenant resources are prefixed with /organizations/{orgId}; session provider
endpoints live under /auth.
"""

from fastapi import APIRouter

from . import auth, members, organizations, outlines

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])

router.include_router(
    outlines.router, prefix="/organizations/{orgId}/outlines", tags=["Outlines"]
)
router.include_router(
    members.router, prefix="/organizations/{orgId}/members", tags=["Members"]
)


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "captureplan",
        "version": "0.1.0",
        "endpoints": [
            "/auth",
            "/organizations/mock-join",
            "/organizations/{orgId}/outlines",
            "/organizations/{orgId}/members",
        ],
    }
