"""
Campaign, AdSet, Ad models - mirror the Meta entity hierarchy.
External Meta ids are reused as primary keys.
"""
from sqlalchemy import Column, String, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship

from adpulse.models.base import BaseModel


class Campaign(BaseModel):
    """Meta campaign"""

    __tablename__ = "campaigns"

    id = Column(String(64), primary_key=True)
    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    objective = Column(String(100), nullable=True)
    # Free text: Meta's status vocabulary keeps growing
    status = Column(String(50), nullable=True, index=True)

    # Relationships
    business = relationship("Business", back_populates="campaigns")
    ad_sets = relationship("AdSet", back_populates="campaign", cascade="all, delete-orphan")
    daily_insights = relationship("CampaignDailyInsight", back_populates="campaign", cascade="all, delete-orphan")


class AdSet(BaseModel):
    """Meta ad set"""

    __tablename__ = "ad_sets"

    id = Column(String(64), primary_key=True)
    campaign_id = Column(String(64), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    status = Column(String(50), nullable=True, index=True)

    # Relationships
    campaign = relationship("Campaign", back_populates="ad_sets")
    ads = relationship("Ad", back_populates="ad_set", cascade="all, delete-orphan")
    daily_insights = relationship("AdSetDailyInsight", back_populates="ad_set", cascade="all, delete-orphan")


class Ad(BaseModel):
    """Meta ad with its resolved creative"""

    __tablename__ = "ads"

    id = Column(String(64), primary_key=True)
    ad_set_id = Column(String(64), ForeignKey("ad_sets.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    status = Column(String(50), nullable=True, index=True)

    # ============================================
    # Creative
    # ============================================
    creative_url = Column(Text, nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    creative_type = Column(String(50), nullable=True)
    creative_body = Column(Text, nullable=True)
    creative_title = Column(Text, nullable=True)
    # Asset-feed variants, or the raw creative when its shape is unknown
    creative_dynamic_data = Column(JSON, nullable=True)

    # Relationships
    ad_set = relationship("AdSet", back_populates="ads")
    daily_insights = relationship("AdDailyInsight", back_populates="ad", cascade="all, delete-orphan")
