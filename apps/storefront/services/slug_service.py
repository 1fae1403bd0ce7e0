"""
Slug persistence: snapshot existing slugs, pick a free one, write, retry.

The pure slug functions in ``storefront.utils.slug`` know nothing about the
database. This module is the boundary that feeds them a snapshot of active
slugs and stores the result. The partial unique index on ``slug`` is the final
arbiter: when a concurrent writer wins the race, the commit fails with an
IntegrityError and the write is retried against a fresh snapshot.
"""

import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.services.exceptions import SlugConflictError
from storefront.utils.slug import generate_unique_slug

logger = logging.getLogger(__name__)

SLUG_WRITE_ATTEMPTS = 3

T = TypeVar("T")


async def get_existing_slugs(
    session: AsyncSession, model, exclude_id: Optional[str] = None
) -> List[str]:
    """
    Return slugs of active rows of ``model``.

    Args:
        session: Database session
        model: ORM class with ``slug``, ``is_active`` and ``id`` columns
        exclude_id: Row to leave out (the record being renamed)

    Returns:
        List of slug strings
    """
    query = select(model.slug).where(model.is_active == True)  # noqa: E712
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    result = await session.execute(query)
    return [slug for slug in result.scalars().all() if slug]


def _slug_index_name(model) -> str:
    return f"idx_{model.__tablename__}_slug_active"


def _is_slug_violation(error: IntegrityError, model) -> bool:
    """True when ``error`` comes from the partial unique index on ``model.slug``."""
    index_name = _slug_index_name(model)
    orig = error.orig
    # asyncpg errors carry the constraint name, sometimes on the wrapped cause
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if getattr(candidate, "constraint_name", None) == index_name:
            return True
    return index_name in str(orig)


async def persist_with_unique_slug(
    session: AsyncSession,
    model,
    base_slug: str,
    write: Callable[[str], Awaitable[T]],
    *,
    exclude_id: Optional[str] = None,
    attempts: int = SLUG_WRITE_ATTEMPTS,
) -> T:
    """
    Store a record under the first free variant of ``base_slug``.

    ``write`` receives the chosen slug and stages the insert or update on
    ``session``; this function commits. On a uniqueness violation the
    transaction is rolled back and the whole read-pick-write cycle repeats.
    Any other integrity error (a missing foreign key, a NOT NULL column) is
    rolled back and re-raised without a retry.

    Args:
        session: Database session
        model: ORM class whose slugs must stay unique
        base_slug: Slug derived from the record name
        write: Async callback staging the row with the given slug
        exclude_id: Row to leave out of the snapshot (rename of an existing row)
        attempts: Maximum number of write attempts

    Returns:
        Whatever ``write`` returned for the successful attempt

    Raises:
        SlugConflictError: If every attempt hit a uniqueness violation
        IntegrityError: If the write broke a constraint other than the slug index
    """
    for attempt in range(1, attempts + 1):
        existing = await get_existing_slugs(session, model, exclude_id)
        slug = generate_unique_slug(base_slug, existing)
        record = await write(slug)
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if not _is_slug_violation(e, model):
                logger.error(
                    "Integrity error writing %s with slug '%s': %s",
                    model.__tablename__,
                    slug,
                    e.orig,
                )
                raise
            logger.warning(
                "Slug '%s' on %s taken concurrently (attempt %d/%d): %s",
                slug,
                model.__tablename__,
                attempt,
                attempts,
                e.orig,
            )
            continue
        return record

    raise SlugConflictError(f"Could not store a unique slug for '{base_slug}'")
