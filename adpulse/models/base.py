"""
Declarative base with created/updated timestamps
"""
from sqlalchemy import Column, DateTime, func

from adpulse.core.database import Base


class TimestampMixin:
    """created_at / updated_at; upserts set updated_at explicitly"""

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class BaseModel(Base, TimestampMixin):
    """Abstract base for every AdPulse table; subclasses name their table"""

    __abstract__ = True
