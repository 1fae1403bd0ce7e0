"""Admin dashboard counters and the database connectivity check."""

from typing import Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database.models import Profile
from storefront.services import category_service, product_service


async def get_dashboard_stats(session: AsyncSession) -> Dict[str, int]:
    """Counts shown on the admin dashboard."""
    return {
        "categories": await category_service.count_categories(session),
        "products": await product_service.count_products(session),
    }


async def check_database(session: AsyncSession) -> int:
    """Read one profile row; returns how many rows came back (0 or 1)."""
    result = await session.execute(select(Profile.id).limit(1))
    return len(result.all())
