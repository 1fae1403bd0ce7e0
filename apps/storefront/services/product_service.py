"""
Product service — admin CRUD, category checks, specs and image handling.

Images are uploaded to the public ``products`` bucket before the row is
written; if the write fails the fresh upload is removed again. Replacing a
product's image deletes the old objects best-effort. Deleting a product is a
soft delete and keeps its images so it can be restored.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.database.models import Product
from storefront.services import category_service, image_service, slug_service, storage_service
from storefront.services.exceptions import FieldValidationError
from storefront.utils.slug import generate_slug
from storefront.utils.validation import PRODUCT_RULES, require_slug, validate_fields

logger = logging.getLogger(__name__)

CATEGORY_NOT_FOUND_MESSAGE = "دسته‌بندی انتخاب شده یافت نشد"


@dataclass
class ImageUpload:
    """An uploaded file as received from the form."""

    filename: str
    content_type: str
    data: bytes


def _bucket() -> str:
    return os.getenv("PRODUCT_IMAGE_BUCKET", "products")


def _product_to_dict(product: Product, include_details: bool = False) -> Dict:
    data = {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "price": float(product.price) if product.price is not None else None,
        "images": list(product.images or []),
        "category_id": product.category_id,
        "created_at": product.created_at.isoformat() if product.created_at else None,
    }
    if include_details:
        data["description"] = product.description
        data["specs"] = product.specs
        data["inventory"] = product.inventory
        data["updated_at"] = product.updated_at.isoformat() if product.updated_at else None
    return data


async def _get_active(session: AsyncSession, product_id: str) -> Optional[Product]:
    result = await session.execute(
        select(Product).where(Product.id == product_id, Product.is_active == True)  # noqa: E712
    )
    return result.scalar_one_or_none()


def _validate(values: Dict[str, Any]) -> Dict[str, Any]:
    return validate_fields(PRODUCT_RULES, values)


async def _require_category(session: AsyncSession, category_id: str) -> None:
    if not await category_service.category_exists(session, category_id):
        raise FieldValidationError("category_id", CATEGORY_NOT_FOUND_MESSAGE)


async def _upload_image(image: ImageUpload) -> str:
    """Validate and upload an image; returns its public URL."""
    image_service.validate_product_image(image.data, image.content_type)
    # ASCII-only key for storage compatibility
    key = f"product-{int(time.time() * 1000)}.{image_service.image_extension(image.filename)}"
    return await storage_service.upload_file(_bucket(), key, image.data, image.content_type)


def _has_image(image: Optional[ImageUpload]) -> bool:
    return image is not None and len(image.data) > 0


async def list_products(session: AsyncSession) -> List[Dict]:
    """Return active products, newest first, with their category id and name."""
    result = await session.execute(
        select(Product)
        .options(selectinload(Product.category))
        .where(Product.is_active == True)  # noqa: E712
        .order_by(Product.created_at.desc())
    )
    products = []
    for p in result.scalars().all():
        data = _product_to_dict(p)
        data["category"] = {"id": p.category.id, "name": p.category.name} if p.category else None
        products.append(data)
    return products


async def get_product(session: AsyncSession, product_id: str) -> Optional[Dict]:
    """Return an active product with description, specs and images, or None."""
    product = await _get_active(session, product_id)
    return _product_to_dict(product, include_details=True) if product else None


async def count_products(session: AsyncSession) -> int:
    """Number of active products."""
    result = await session.execute(
        select(func.count(Product.id)).where(Product.is_active == True)  # noqa: E712
    )
    return result.scalar_one()


async def create_product(
    session: AsyncSession,
    *,
    name: Optional[str],
    price: Any,
    category_id: Optional[str],
    description: Optional[str] = None,
    specs: Any = None,
    image: Optional[ImageUpload] = None,
) -> Dict:
    """
    Create a product.

    Validation order: fields, category, slug, image. The image is uploaded
    only after everything else passed.

    Returns:
        Created product dict

    Raises:
        FieldValidationError: If a field is invalid or the category is missing
        ImageValidationError: If the image is rejected
        StorageError: If the upload fails
        SlugConflictError: If concurrent writers kept taking the slug
    """
    values = _validate(
        {
            "name": name,
            "price": price,
            "category_id": category_id,
            "description": description,
            "specs": specs,
        }
    )
    await _require_category(session, values["category_id"])
    base_slug = require_slug(values["name"])

    images: List[str] = []
    if _has_image(image):
        images = [await _upload_image(image)]

    async def write(slug: str) -> Product:
        product = Product(
            name=values["name"],
            slug=slug,
            description=values["description"],
            price=values["price"],
            category_id=values["category_id"],
            images=images,
            specs=values["specs"],
            inventory=0,
            is_active=True,
        )
        session.add(product)
        return product

    try:
        product = await slug_service.persist_with_unique_slug(session, Product, base_slug, write)
    except Exception:
        logger.error("Error creating product '%s'", values["name"], exc_info=True)
        for url in images:
            await storage_service.delete_by_url(_bucket(), url)
        raise

    await session.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.slug)
    return _product_to_dict(product, include_details=True)


async def update_product(
    session: AsyncSession,
    product_id: str,
    *,
    name: Optional[str],
    price: Any,
    category_id: Optional[str],
    description: Optional[str] = None,
    specs: Any = None,
    image: Optional[ImageUpload] = None,
) -> Optional[Dict]:
    """
    Update a product.

    The slug is recomputed only when the trimmed name changes. A new image
    replaces the image list; the previous objects are removed best-effort.
    Empty specs are stored as an empty object.

    Returns:
        Updated product dict, or None if the product does not exist
    """
    values = _validate(
        {
            "name": name,
            "price": price,
            "category_id": category_id,
            "description": description,
            "specs": specs,
        }
    )

    existing = await _get_active(session, product_id)
    if existing is None:
        return None

    await _require_category(session, values["category_id"])

    old_images = list(existing.images or [])
    images = old_images
    if _has_image(image):
        images = [await _upload_image(image)]

    fields = {
        "name": values["name"],
        "description": values["description"],
        "price": values["price"],
        "category_id": values["category_id"],
        "images": images,
        "specs": values["specs"] if values["specs"] is not None else {},
    }

    async def write(slug: str) -> str:
        await session.execute(
            update(Product).where(Product.id == product_id).values(slug=slug, **fields)
        )
        return slug

    base_slug = None
    if (existing.name or "").strip() != values["name"]:
        base_slug = generate_slug(values["name"]) or None

    try:
        if base_slug:
            await slug_service.persist_with_unique_slug(
                session, Product, base_slug, write, exclude_id=product_id
            )
        else:
            await write(existing.slug)
            await session.commit()
    except Exception:
        logger.error("Error updating product %s", product_id, exc_info=True)
        if images is not old_images:
            for url in images:
                await storage_service.delete_by_url(_bucket(), url)
        raise

    if images is not old_images:
        for url in old_images:
            await storage_service.delete_by_url(_bucket(), url)

    await session.refresh(existing)
    return _product_to_dict(existing, include_details=True)


async def delete_product(session: AsyncSession, product_id: str) -> bool:
    """Soft-delete a product. Images stay in storage. Returns False if no such product."""
    result = await session.execute(
        update(Product).where(Product.id == product_id).values(is_active=False)
    )
    await session.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info("Soft-deleted product %s", product_id)
    return deleted
