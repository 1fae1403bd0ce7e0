"""
Shared pytest configuration for storefront tests.

No test talks to a real database, auth provider or storage bucket: sessions
are AsyncMocks, provider calls go through httpx.MockTransport and boto3 is
replaced with a MagicMock.

ENV=test is set before the app is imported so the rate limiter is a no-op.
"""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("SITE_URL", "http://localhost:3000")

from io import BytesIO  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402

from storefront.api.main import app  # noqa: E402
from storefront.database.db import get_db_session  # noqa: E402
from storefront.services import auth_service, profile_service  # noqa: E402

ADMIN_USER = {
    "id": "11111111-1111-1111-1111-111111111111",
    "email": "admin@example.com",
    "user_metadata": {"full_name": "مدیر فروشگاه"},
}
CUSTOMER_USER = {
    "id": "22222222-2222-2222-2222-222222222222",
    "email": "customer@example.com",
    "phone": "",
    "user_metadata": {"full_name": "مشتری"},
}


def make_image(width=100, height=100, fmt="PNG"):
    """Create a minimal test image and return its bytes."""
    img = Image.new("RGB", (width, height), color=(255, 0, 0))
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def make_result(scalars=None, scalar=None, rows=None, rowcount=None):
    """Build a fake SQLAlchemy result for ``session.execute``."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = scalars or []
    result.scalar_one_or_none.return_value = scalar
    result.scalar_one.return_value = scalar
    result.all.return_value = rows or []
    result.rowcount = rowcount
    return result


@pytest.fixture
def mock_session():
    """AsyncSession stand-in; ``execute`` returns an empty result by default."""
    session = AsyncMock()
    session.add = MagicMock()
    session.execute.return_value = make_result()
    return session


@pytest.fixture
def client(mock_session):
    """TestClient whose database dependency yields ``mock_session``."""

    async def override_session():
        yield mock_session

    app.dependency_overrides[get_db_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client, monkeypatch):
    """Client authenticated as a user whose profile has the admin role."""

    async def fake_get_user(token):
        return ADMIN_USER if token == "admin-token" else None

    async def fake_get_profile(session, user_id):
        return {"id": user_id, "role": "admin", "full_name": "مدیر فروشگاه"}

    monkeypatch.setattr(auth_service, "get_user", fake_get_user, raising=True)
    monkeypatch.setattr(profile_service, "get_profile", fake_get_profile, raising=True)
    client.headers.update({"Authorization": "Bearer admin-token"})
    return client


@pytest.fixture
def customer_client(client, monkeypatch):
    """Client authenticated as a plain customer."""

    async def fake_get_user(token):
        return CUSTOMER_USER if token == "customer-token" else None

    async def fake_get_profile(session, user_id):
        return {"id": user_id, "role": "customer", "full_name": None, "phone": "09120000000"}

    monkeypatch.setattr(auth_service, "get_user", fake_get_user, raising=True)
    monkeypatch.setattr(profile_service, "get_profile", fake_get_profile, raising=True)
    client.headers.update({"Authorization": "Bearer customer-token"})
    return client
