"""Customer account route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.auth_dependencies import require_user
from storefront.api.routes import UNEXPECTED_ERROR_MESSAGE
from storefront.database.db import get_db_session
from storefront.models.schemas import ProfileResponse
from storefront.services import profile_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/account/profile", response_model=ProfileResponse)
async def get_my_profile(
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Profile of the signed-in user; falls back to auth data when no profile row exists."""
    try:
        profile = await profile_service.get_profile(session, user["id"])
    except Exception as e:
        logger.error(f"Error fetching profile for {user['id']}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)

    metadata = user.get("user_metadata") or {}
    profile = profile or {}
    return {
        "id": user["id"],
        "email": profile.get("email") or user.get("email"),
        "full_name": profile.get("full_name") or metadata.get("full_name"),
        "phone": profile.get("phone") or user.get("phone") or None,
        "role": profile.get("role"),
    }
