"""
API v1 routes
"""
from fastapi import APIRouter

from adpulse.api.v1 import analytics, businesses, campaigns, health, sync

api_router = APIRouter(prefix="/api/v1")

# Include routers
api_router.include_router(businesses.router)
api_router.include_router(sync.router)
api_router.include_router(campaigns.router)
api_router.include_router(analytics.router)

# Health routes (no prefix)
health_router = health.router
