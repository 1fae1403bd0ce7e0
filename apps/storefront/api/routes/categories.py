"""Admin category route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.auth_dependencies import require_admin
from storefront.api.routes import SLUG_CONFLICT_MESSAGE, UNEXPECTED_ERROR_MESSAGE
from storefront.database.db import get_db_session
from storefront.models.schemas import (
    CategoryOption,
    CategoryRequest,
    CategoryResponse,
    DeleteResponse,
)
from storefront.services import category_service
from storefront.services.exceptions import FieldValidationError, SlugConflictError

logger = logging.getLogger(__name__)
router = APIRouter()

CATEGORY_NOT_FOUND = "دسته‌بندی یافت نشد"


@router.get("/api/admin/categories", response_model=List[CategoryResponse])
async def list_categories(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """List active categories, newest first (admin)."""
    try:
        return await category_service.list_categories(session)
    except Exception as e:
        logger.error(f"Error fetching categories: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)


@router.get("/api/admin/categories/options", response_model=List[CategoryOption])
async def list_category_options(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Category id/name pairs for the product form (admin)."""
    try:
        return await category_service.list_category_options(session)
    except Exception as e:
        logger.error(f"Error fetching category options: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)


@router.get("/api/admin/categories/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Get one active category (admin)."""
    try:
        category = await category_service.get_category(session, category_id)
    except Exception as e:
        logger.error(f"Error fetching category {category_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)
    if not category:
        raise HTTPException(status_code=404, detail=CATEGORY_NOT_FOUND)
    return category


@router.post("/api/admin/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    body: CategoryRequest,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a category (admin)."""
    try:
        return await category_service.create_category(session, body.name, body.description)
    except FieldValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except SlugConflictError:
        raise HTTPException(status_code=409, detail=SLUG_CONFLICT_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error creating category: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)


@router.put("/api/admin/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    body: CategoryRequest,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Update a category; renaming regenerates its slug (admin)."""
    try:
        category = await category_service.update_category(
            session, category_id, body.name, body.description
        )
    except FieldValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except SlugConflictError:
        raise HTTPException(status_code=409, detail=SLUG_CONFLICT_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error updating category {category_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)
    if not category:
        raise HTTPException(status_code=404, detail=CATEGORY_NOT_FOUND)
    return category


@router.delete("/api/admin/categories/{category_id}", response_model=DeleteResponse)
async def delete_category(
    category_id: str,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Soft-delete a category (admin)."""
    try:
        deleted = await category_service.delete_category(session, category_id)
    except Exception as e:
        logger.error(f"Unexpected error deleting category {category_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)
    if not deleted:
        raise HTTPException(status_code=404, detail=CATEGORY_NOT_FOUND)
    return {"success": True}
