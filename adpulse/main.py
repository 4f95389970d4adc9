"""
AdPulse - FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adpulse.core.config import settings
from adpulse.core.database import init_models
from adpulse.api.v1 import api_router, health_router

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    configure_logging()
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    await init_models()

    # Initialize scheduler if enabled
    if settings.SCHEDULER_ENABLED:
        from adpulse.tasks.scheduler import start_scheduler
        start_scheduler()

    yield

    # Shutdown
    if settings.SCHEDULER_ENABLED:
        from adpulse.tasks.scheduler import stop_scheduler
        stop_scheduler()

    logger.info(f"Shutting down {settings.APP_NAME}")


def create_app() -> FastAPI:
    """Create FastAPI application"""

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Meta ads insight sync and analytics backend",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(api_router)
    app.include_router(health_router)

    return app


# Create app instance
app = create_app()
