"""
Daily insight rows (business / campaign / ad set / ad grain) and hourly stats.

Each row holds the platform's full-day (or full-hour) total, so a re-sync
replaces the row instead of adding to it.
"""
from sqlalchemy import Column, Integer, String, Float, Date, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from adpulse.models.base import BaseModel


class InsightMetricsMixin:
    """Metric columns shared by every daily insight grain"""

    spend = Column(Numeric(15, 2), default=0)
    impressions = Column(Integer, default=0)
    clicks = Column(Integer, default=0)

    # Leads, split by messaging destination
    leads = Column(Integer, default=0)
    leads_whatsapp = Column(Integer, default=0)
    leads_instagram = Column(Integer, default=0)
    leads_messenger = Column(Integer, default=0)

    conversions = Column(Integer, default=0)
    revenue = Column(Numeric(15, 2), default=0)

    # Calculated metrics
    ctr = Column(Float, default=0)
    cpm = Column(Float, default=0)
    cpc = Column(Float, default=0)
    cpl = Column(Float, default=0)
    cvr = Column(Float, default=0)
    roas = Column(Float, default=0)


class DailyInsight(BaseModel, InsightMetricsMixin):
    """Business (ad account) level daily totals"""

    __tablename__ = "daily_insights"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    # Account level only
    reach = Column(Integer, default=0)
    frequency = Column(Float, default=0)
    hook_rate = Column(Float, default=0)
    hold_rate = Column(Float, default=0)

    business = relationship("Business", back_populates="daily_insights")

    __table_args__ = (
        UniqueConstraint("business_id", "date", name="uq_daily_insight_business_date"),
    )


class CampaignDailyInsight(BaseModel, InsightMetricsMixin):
    """Campaign level daily totals"""

    __tablename__ = "campaign_daily_insights"

    id = Column(Integer, primary_key=True, index=True)
    campaign_id = Column(String(64), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    campaign = relationship("Campaign", back_populates="daily_insights")

    __table_args__ = (
        UniqueConstraint("campaign_id", "date", name="uq_campaign_insight_campaign_date"),
    )


class AdSetDailyInsight(BaseModel, InsightMetricsMixin):
    """Ad set level daily totals"""

    __tablename__ = "ad_set_daily_insights"

    id = Column(Integer, primary_key=True, index=True)
    ad_set_id = Column(String(64), ForeignKey("ad_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    ad_set = relationship("AdSet", back_populates="daily_insights")

    __table_args__ = (
        UniqueConstraint("ad_set_id", "date", name="uq_adset_insight_adset_date"),
    )


class AdDailyInsight(BaseModel, InsightMetricsMixin):
    """Ad level daily totals"""

    __tablename__ = "ad_daily_insights"

    id = Column(Integer, primary_key=True, index=True)
    ad_id = Column(String(64), ForeignKey("ads.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    ad = relationship("Ad", back_populates="daily_insights")

    __table_args__ = (
        UniqueConstraint("ad_id", "date", name="uq_ad_insight_ad_date"),
    )


class HourlyStat(BaseModel):
    """Account level totals per hour of day (advertiser time zone)"""

    __tablename__ = "hourly_stats"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    hour = Column(Integer, nullable=False)  # 0-23

    spend = Column(Numeric(15, 2), default=0)
    impressions = Column(Integer, default=0)
    clicks = Column(Integer, default=0)
    messaging_conversations = Column(Integer, default=0)

    business = relationship("Business", back_populates="hourly_stats")

    __table_args__ = (
        UniqueConstraint("business_id", "date", "hour", name="uq_hourly_stat_business_date_hour"),
    )
