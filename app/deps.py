"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Routes never build Google clients themselves; they receive the shared
StudioService, the OAuth client used by the token relay and the access
policy from here, so tests can swap them with app.dependency_overrides.
"""

from fastapi import Depends, HTTPException, status

from app.environments.google.auth.client import GoogleAuthClient
from app.services.access import AccessGrant, AccessPolicy, StaticAccessPolicy
from app.services.studio_service import StudioService, studio_service


def get_studio_service() -> StudioService:
    """The process-wide dashboard facade."""
    return studio_service


def get_google_auth_client() -> GoogleAuthClient:
    """OAuth client configured from settings (token relay)."""
    return GoogleAuthClient()


def get_access_policy() -> AccessPolicy:
    return StaticAccessPolicy()


def get_access_grant(
    service: StudioService = Depends(get_studio_service),
    policy: AccessPolicy = Depends(get_access_policy),
) -> AccessGrant:
    """
    Role and pages of the signed-in user.

    Raises:
        401 Unauthorized: Nobody is signed in
    """
    user = service.get_user()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="請先登入 Google 帳戶",
        )
    return policy.grant_for(user.email)


def require_page(page: str):
    """
    Dependency factory gating a route behind page access.

    Usage:
        @router.get("/projects", dependencies=[Depends(require_page("projects"))])
    """

    def _check(grant: AccessGrant = Depends(get_access_grant)) -> AccessGrant:
        if not grant.allows(page):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="沒有存取此頁面的權限",
            )
        return grant

    return _check
