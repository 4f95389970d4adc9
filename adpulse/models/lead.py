"""
Lead model
"""
from sqlalchemy import Column, String, Text, DateTime, JSON, Enum, ForeignKey
from sqlalchemy.orm import relationship

from adpulse.models.base import BaseModel
from adpulse.models.enums import LeadStatus


class Lead(BaseModel):
    """
    Lead form submission pulled from Meta.

    status and notes are operator state; lead sync never overwrites them.
    """

    __tablename__ = "leads"

    id = Column(String(64), primary_key=True)  # Meta lead id
    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    created_time = Column(DateTime(timezone=True), nullable=True, index=True)

    # Originating ad (not a FK: leads can outlive the ads we track)
    ad_id = Column(String(64), nullable=True, index=True)
    ad_name = Column(String(255), nullable=True)

    # Best-effort contact extraction from field_data
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(100), nullable=True)
    raw_field_data = Column(JSON, nullable=True)

    # ============================================
    # Operator workflow
    # ============================================
    status = Column(Enum(LeadStatus), default=LeadStatus.NEW, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    business = relationship("Business", back_populates="leads")
