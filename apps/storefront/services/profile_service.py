"""
Profile service — reads the per-user ``profiles`` table.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database.models import Profile, ProfileRole

logger = logging.getLogger(__name__)


def _profile_to_dict(profile: Profile) -> Dict:
    return {
        "id": profile.id,
        "full_name": profile.full_name,
        "email": profile.email,
        "phone": profile.phone,
        "role": profile.role,
        "created_at": profile.created_at.isoformat() if profile.created_at else None,
    }


async def get_profile(session: AsyncSession, user_id: str) -> Optional[Dict]:
    """
    Get a user's profile.

    Args:
        session: Database session
        user_id: Auth provider user id

    Returns:
        Profile dictionary or None if the user has no profile row
    """
    result = await session.execute(select(Profile).where(Profile.id == user_id))
    profile = result.scalar_one_or_none()
    return _profile_to_dict(profile) if profile else None


def is_admin(profile: Optional[Dict]) -> bool:
    """Whether a profile dict carries the admin role."""
    return bool(profile) and profile.get("role") == ProfileRole.ADMIN.value
