"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, constants) lives here; every sub-router
imports what it needs from this package.
"""

import os

from fastapi import APIRouter
from slowapi import Limiter
from slowapi.util import get_remote_address

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
if IS_TEST_ENV:
    limiter = Limiter(key_func=get_remote_address)

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = lambda *args, **kwargs: no_op_limit()
else:
    limiter = Limiter(key_func=get_remote_address)

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------
UNEXPECTED_ERROR_MESSAGE = "خطای غیرمنتظره رخ داد. لطفاً دوباره تلاش کنید."
UPLOAD_ERROR_MESSAGE = "خطا در آپلود تصویر. لطفاً دوباره تلاش کنید."
SLUG_CONFLICT_MESSAGE = "نامک تکراری است. لطفاً نام دیگری انتخاب کنید."

# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from storefront.api.routes.auth import router as auth_router  # noqa: E402
from storefront.api.routes.account import router as account_router  # noqa: E402
from storefront.api.routes.admin import router as admin_router  # noqa: E402
from storefront.api.routes.categories import router as categories_router  # noqa: E402
from storefront.api.routes.products import router as products_router  # noqa: E402

router = APIRouter()
router.include_router(auth_router)
router.include_router(account_router)
router.include_router(admin_router)
router.include_router(categories_router)
router.include_router(products_router)
