"""
Business (tracked Meta ad account) model
"""
import uuid

from sqlalchemy import Column, String, Boolean, Text
from sqlalchemy.orm import relationship

from adpulse.models.base import BaseModel


def _new_id() -> str:
    return str(uuid.uuid4())


class Business(BaseModel):
    """An advertiser account being tracked"""

    __tablename__ = "businesses"

    id = Column(String(36), primary_key=True, default=_new_id)

    name = Column(String(255), nullable=False)
    ad_account_id = Column(String(100), unique=True, nullable=False, index=True)  # act_xxx

    # Secret; only ever returned masked
    access_token = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    color_code = Column(String(20), nullable=True)

    # Relationships
    campaigns = relationship("Campaign", back_populates="business", cascade="all, delete-orphan")
    daily_insights = relationship("DailyInsight", back_populates="business", cascade="all, delete-orphan")
    hourly_stats = relationship("HourlyStat", back_populates="business", cascade="all, delete-orphan")
    leads = relationship("Lead", back_populates="business", cascade="all, delete-orphan")

    @property
    def masked_token(self):
        return mask_token(self.access_token)


def mask_token(token):
    """Mask an access token for display, keeping only the last 4 chars"""
    if not token:
        return None
    if len(token) > 4:
        return "••••••••" + token[-4:]
    return "••••"
