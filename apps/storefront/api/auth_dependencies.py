"""
Authentication dependencies for FastAPI routes.
"""

import logging
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.services import auth_service, profile_service
from storefront.services.exceptions import AuthProviderError
from storefront.database.db import get_db_session

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "sb-access-token"
FORBIDDEN_MESSAGE = "شما دسترسی لازم برای این عملیات را ندارید"

security = HTTPBearer(auto_error=False)


def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Access token from the Bearer header, falling back to the session cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


async def get_current_user(token: Optional[str] = Depends(get_access_token)) -> dict:
    """
    Dependency to get the current authenticated user from the auth provider.

    Args:
        token: Provider access token

    Returns:
        User dictionary as returned by the provider

    Raises:
        HTTPException: 401 if the token is missing or rejected, 503/504 if the
            provider cannot be reached
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = await auth_service.get_user(token)
    except AuthProviderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    if user is None or not user.get("id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def get_current_user_optional(
    token: Optional[str] = Depends(get_access_token),
) -> Optional[dict]:
    """
    Optional dependency to get the current authenticated user.
    Returns None if no token is provided or the token is invalid.
    """
    if not token:
        return None

    try:
        return await get_current_user(token)
    except HTTPException:
        return None


async def require_user(user: dict = Depends(get_current_user)) -> dict:
    """Require any authenticated user."""
    return user


async def require_admin(
    user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """
    Require an authenticated user whose profile has the admin role.

    Returns the user dict with the profile attached under ``profile``.
    A missing profile is treated as not admin.
    """
    profile = await profile_service.get_profile(session, user["id"])
    if not profile_service.is_admin(profile):
        logger.warning("Non-admin user %s denied admin access", user["id"])
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=FORBIDDEN_MESSAGE,
        )

    return {**user, "profile": profile}
