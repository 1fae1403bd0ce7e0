"""Admin dashboard and health check route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.auth_dependencies import require_admin
from storefront.api.routes import UNEXPECTED_ERROR_MESSAGE
from storefront.database.db import get_db_session
from storefront.models.schemas import DashboardStatsResponse, HealthResponse
from storefront.services import dashboard_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
async def health():
    """Liveness check."""
    return {"status": "ok"}


@router.get("/api/health/database", response_model=HealthResponse)
async def database_health(session: AsyncSession = Depends(get_db_session)):
    """Check that the database answers a simple read."""
    try:
        await dashboard_service.check_database(session)
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Database is not available")
    return {"status": "ok", "database": "ok"}


@router.get("/api/admin/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Counters for the admin dashboard (admin)."""
    try:
        return await dashboard_service.get_dashboard_stats(session)
    except Exception as e:
        logger.error(f"Error computing dashboard stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=UNEXPECTED_ERROR_MESSAGE)
