"""
AdPulse Configuration
Load settings from environment variables
"""
from functools import lru_cache
from typing import Optional, List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ============================================
    # Application Settings
    # ============================================
    APP_NAME: str = "AdPulse"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"
    PORT: int = 8000

    # ============================================
    # Database Settings
    # ============================================
    POSTGRES_USER: str = "postgres"
    POSTGRES_PWD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "adpulse"
    DATABASE_URL: Optional[str] = None

    @property
    def database_url(self) -> str:
        """Get database URL, construct from parts if not provided"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PWD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def async_database_url(self) -> str:
        """Get async database URL for SQLAlchemy async"""
        url = self.database_url
        return url.replace("postgresql://", "postgresql+asyncpg://")

    # ============================================
    # CORS Settings
    # ============================================
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # ============================================
    # Meta Graph API Settings
    # ============================================
    META_API_VERSION: str = "v19.0"
    META_API_BASE_URL: str = "https://graph.facebook.com"
    META_REQUEST_TIMEOUT_SECONDS: float = 30.0

    @property
    def meta_graph_api_url(self) -> str:
        return f"{self.META_API_BASE_URL}/{self.META_API_VERSION}"

    # ============================================
    # Sync Pipeline Settings
    # ============================================
    SYNC_TIMEOUT_SECONDS: int = 300
    BACKFILL_CONCURRENCY: int = 5
    BACKFILL_DEFAULT_DAYS: int = 30
    ENTITY_UPSERT_CHUNK_SIZE: int = 20
    LEAD_SYNC_CHUNK_SIZE: int = 5

    # Smart sync walks the last N days one at a time to stay under
    # the platform's short-window rate limit
    SMART_SYNC_DAYS: int = 7
    SMART_SYNC_DELAY_SECONDS: float = 1.0
    RATE_LIMIT_BACKOFF_SECONDS: float = 60.0

    # Sync status reconciliation
    SYNC_STATUS_GRACE_SECONDS: int = 60
    SYNC_STALE_MINUTES: int = 15

    # ============================================
    # Scheduler Settings
    # ============================================
    SCHEDULER_ENABLED: bool = True
    AUTO_SYNC_INTERVAL_HOURS: int = 6
    STATUS_RECONCILE_INTERVAL_SECONDS: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from .env


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
