"""
Pydantic models for API request/response validation.

Field rules (lengths, required fields, price, specs JSON) are enforced by
``storefront.utils.validation`` so that create and update share one rule set
and return the same Persian messages; request models here stay permissive.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class CategoryRequest(BaseModel):
    """Create/update category body."""

    name: Optional[str] = None
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    """Category as shown in the admin list and edit form."""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CategoryOption(BaseModel):
    """Category entry for the product form dropdown."""

    id: str
    name: str


class ProductCategory(BaseModel):
    """Category summary nested in product listings."""

    id: str
    name: str


class ProductResponse(BaseModel):
    """Product as shown in the admin list and edit form."""

    id: str
    name: str
    slug: str
    price: Optional[float] = None
    images: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None
    category: Optional[ProductCategory] = None
    description: Optional[str] = None
    specs: Optional[Dict[str, Any]] = None
    inventory: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DeleteResponse(BaseModel):
    """Result of a soft delete."""

    success: bool = True


class LoginRequest(BaseModel):
    """Magic-link login request."""

    email: str


class PasswordLoginRequest(BaseModel):
    """Email and password login request."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Login or logout result."""

    ok: bool = True


class SignupRequest(BaseModel):
    """Sign-up form."""

    email: str
    password: str
    confirm_password: str
    full_name: Optional[str] = None


class SignupResponse(BaseModel):
    """Sign-up result."""

    status: str = "success"


class SessionResponse(BaseModel):
    """Current session, or null when signed out."""

    session: Optional[Dict[str, Any]] = None


class ProfileResponse(BaseModel):
    """Account profile page data."""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None


class DashboardStatsResponse(BaseModel):
    """Admin dashboard counters."""

    categories: int
    products: int


class HealthResponse(BaseModel):
    """Health check result."""

    status: str
    database: Optional[str] = None
