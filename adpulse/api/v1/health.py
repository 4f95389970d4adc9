"""
Health check endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from adpulse.core.config import settings
from adpulse.core.deps import get_db
from adpulse.tasks import scheduler as scheduler_module

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Process is up; reports whether the background scheduler is running"""
    scheduler = scheduler_module.scheduler
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "scheduler": "running" if scheduler is not None and scheduler.running else "stopped",
    }


@router.get("/health/db")
async def database_health(db: AsyncSession = Depends(get_db)):
    """Round trip to the database"""
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return {
            "status": "unhealthy",
            "database": "disconnected",
            "error": str(e)
        }
    return {
        "status": "healthy",
        "database": "connected"
    }
