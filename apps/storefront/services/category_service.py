"""
Category service — admin CRUD with soft delete and slug maintenance.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database.models import Category
from storefront.services import slug_service
from storefront.utils.slug import generate_slug
from storefront.utils.validation import CATEGORY_RULES, require_slug, validate_fields

logger = logging.getLogger(__name__)


def _category_to_dict(category: Category) -> Dict:
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "created_at": category.created_at.isoformat() if category.created_at else None,
        "updated_at": category.updated_at.isoformat() if category.updated_at else None,
    }


async def _get_active(session: AsyncSession, category_id: str) -> Optional[Category]:
    result = await session.execute(
        select(Category).where(Category.id == category_id, Category.is_active == True)  # noqa: E712
    )
    return result.scalar_one_or_none()


async def list_categories(session: AsyncSession) -> List[Dict]:
    """Return active categories, newest first."""
    result = await session.execute(
        select(Category)
        .where(Category.is_active == True)  # noqa: E712
        .order_by(Category.created_at.desc())
    )
    return [_category_to_dict(c) for c in result.scalars().all()]


async def list_category_options(session: AsyncSession) -> List[Dict]:
    """Return ``{id, name}`` for active categories ordered by name."""
    result = await session.execute(
        select(Category.id, Category.name)
        .where(Category.is_active == True)  # noqa: E712
        .order_by(Category.name.asc())
    )
    return [{"id": row.id, "name": row.name} for row in result.all()]


async def get_category(session: AsyncSession, category_id: str) -> Optional[Dict]:
    """Return an active category, or None."""
    category = await _get_active(session, category_id)
    return _category_to_dict(category) if category else None


async def category_exists(session: AsyncSession, category_id: str) -> bool:
    """Whether an active category with this id exists."""
    result = await session.execute(
        select(Category.id).where(Category.id == category_id, Category.is_active == True)  # noqa: E712
    )
    return result.scalar_one_or_none() is not None


async def count_categories(session: AsyncSession) -> int:
    """Number of active categories."""
    result = await session.execute(
        select(func.count(Category.id)).where(Category.is_active == True)  # noqa: E712
    )
    return result.scalar_one()


async def create_category(
    session: AsyncSession, name: Optional[str], description: Optional[str] = None
) -> Dict:
    """
    Create a category with a slug unique among active categories.

    Args:
        session: Database session
        name: Display name (2-100 characters after trimming)
        description: Optional description (up to 500 characters)

    Returns:
        Created category dict

    Raises:
        FieldValidationError: If a field is invalid or no slug can be derived
        SlugConflictError: If concurrent writers kept taking the slug
    """
    values = validate_fields(CATEGORY_RULES, {"name": name, "description": description})
    base_slug = require_slug(values["name"])

    async def write(slug: str) -> Category:
        category = Category(
            name=values["name"],
            slug=slug,
            description=values["description"],
            is_active=True,
        )
        session.add(category)
        return category

    category = await slug_service.persist_with_unique_slug(session, Category, base_slug, write)
    await session.refresh(category)
    logger.info("Created category %s (%s)", category.id, category.slug)
    return _category_to_dict(category)


async def update_category(
    session: AsyncSession,
    category_id: str,
    name: Optional[str],
    description: Optional[str] = None,
) -> Optional[Dict]:
    """
    Update a category's name and description.

    The slug is recomputed only when the trimmed name changes. If the new
    name yields no usable slug, the old slug is kept.

    Returns:
        Updated category dict, or None if the category does not exist
    """
    values = validate_fields(CATEGORY_RULES, {"name": name, "description": description})

    existing = await _get_active(session, category_id)
    if existing is None:
        return None

    async def write(slug: str) -> str:
        await session.execute(
            update(Category)
            .where(Category.id == category_id)
            .values(name=values["name"], slug=slug, description=values["description"])
        )
        return slug

    base_slug = None
    if (existing.name or "").strip() != values["name"]:
        base_slug = generate_slug(values["name"]) or None

    if base_slug:
        await slug_service.persist_with_unique_slug(
            session, Category, base_slug, write, exclude_id=category_id
        )
    else:
        await write(existing.slug)
        await session.commit()

    await session.refresh(existing)
    return _category_to_dict(existing)


async def delete_category(session: AsyncSession, category_id: str) -> bool:
    """Soft-delete a category. Returns False if no such category."""
    result = await session.execute(
        update(Category).where(Category.id == category_id).values(is_active=False)
    )
    await session.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info("Soft-deleted category %s", category_id)
    return deleted
