"""
SQLAlchemy ORM models for the storefront catalog.
"""

import enum
import uuid
from sqlalchemy import (
    Column,
    Integer,
    Numeric,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    JSON,
    Index,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from storefront.database.db import Base


# Room for the longest name (200) plus a "-N" uniqueness suffix
SLUG_MAX_LENGTH = 255


def _uuid() -> str:
    return str(uuid.uuid4())


class ProfileRole(str, enum.Enum):
    """Profile role enum."""

    CUSTOMER = "customer"
    ADMIN = "admin"


class Profile(Base):
    """Per-user profile row; ``id`` is the auth provider's user id."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    full_name = Column(String(200), nullable=True)
    email = Column(String(320), nullable=True)
    phone = Column(String(30), nullable=True)
    role = Column(String(20), nullable=False, server_default=ProfileRole.CUSTOMER.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Category(Base):
    """Product category. Deleting sets ``is_active`` to false."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    slug = Column(String(SLUG_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, server_default=text("true"), default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    products = relationship("Product", back_populates="category")

    __table_args__ = (
        # Slugs are unique among live rows only; deleted rows may share one
        Index(
            "idx_categories_slug_active",
            "slug",
            unique=True,
            postgresql_where=text("is_active"),
        ),
        Index("idx_categories_is_active", "is_active"),
    )


class Product(Base):
    """Catalog product with image URLs and free-form specs."""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False)
    slug = Column(String(SLUG_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    images = Column(JSON, nullable=False, default=list)  # public storage URLs
    specs = Column(JSON, nullable=True)
    inventory = Column(Integer, nullable=False, server_default="0", default=0)
    is_active = Column(Boolean, nullable=False, server_default=text("true"), default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="products")

    __table_args__ = (
        Index(
            "idx_products_slug_active",
            "slug",
            unique=True,
            postgresql_where=text("is_active"),
        ),
        Index("idx_products_category", "category_id"),
        Index("idx_products_is_active", "is_active"),
    )
