"""Admin product route handlers (multipart forms with optional image)."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.auth_dependencies import require_admin
from storefront.api.routes import (
    SLUG_CONFLICT_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    UPLOAD_ERROR_MESSAGE,
)
from storefront.database.db import get_db_session
from storefront.models.schemas import DeleteResponse, ProductResponse
from storefront.services import product_service
from storefront.services.exceptions import (
    FieldValidationError,
    ImageValidationError,
    SlugConflictError,
    StorageError,
)
from storefront.services.product_service import ImageUpload

logger = logging.getLogger(__name__)
router = APIRouter()

PRODUCT_NOT_FOUND = "محصول یافت نشد"


async def _read_image(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    """Read an optional upload; browsers send an empty part when no file is chosen."""
    if image is None or not image.filename:
        return None
    data = await image.read()
    if not data:
        return None
    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type or "",
        data=data,
    )


@router.get("/api/admin/products", response_model=List[ProductResponse])
async def list_products(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """List active products with their category, newest first (admin)."""
    try:
        return await product_service.list_products(session)
    except Exception as e:
        logger.error(f"Error fetching products: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)


@router.get("/api/admin/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Get one active product for the edit form (admin)."""
    try:
        product = await product_service.get_product(session, product_id)
    except Exception as e:
        logger.error(f"Error fetching product {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)
    if not product:
        raise HTTPException(status_code=404, detail=PRODUCT_NOT_FOUND)
    return product


@router.post("/api/admin/products", response_model=ProductResponse, status_code=201)
async def create_product(
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    specs: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a product, uploading its image if one is attached (admin)."""
    try:
        return await product_service.create_product(
            session,
            name=name,
            price=price,
            category_id=category_id,
            description=description,
            specs=specs,
            image=await _read_image(image),
        )
    except (FieldValidationError, ImageValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=502, detail=UPLOAD_ERROR_MESSAGE)
    except SlugConflictError:
        raise HTTPException(status_code=409, detail=SLUG_CONFLICT_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error creating product: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)


@router.put("/api/admin/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    specs: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Update a product; a new image replaces the old ones (admin)."""
    try:
        product = await product_service.update_product(
            session,
            product_id,
            name=name,
            price=price,
            category_id=category_id,
            description=description,
            specs=specs,
            image=await _read_image(image),
        )
    except (FieldValidationError, ImageValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=502, detail=UPLOAD_ERROR_MESSAGE)
    except SlugConflictError:
        raise HTTPException(status_code=409, detail=SLUG_CONFLICT_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error updating product {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)
    if not product:
        raise HTTPException(status_code=404, detail=PRODUCT_NOT_FOUND)
    return product


@router.delete("/api/admin/products/{product_id}", response_model=DeleteResponse)
async def delete_product(
    product_id: str,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Soft-delete a product; its images are kept (admin)."""
    try:
        deleted = await product_service.delete_product(session, product_id)
    except Exception as e:
        logger.error(f"Unexpected error deleting product {product_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)
    if not deleted:
        raise HTTPException(status_code=404, detail=PRODUCT_NOT_FOUND)
    return {"success": True}
