"""
Business schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BusinessCreate(BaseModel):
    """Register a new ad account"""
    name: str = Field(..., min_length=1)
    ad_account_id: str = Field(..., min_length=1)
    color_code: str = Field(..., min_length=1)
    access_token: str = Field(..., min_length=1)


class BusinessUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1)
    color_code: Optional[str] = Field(None, min_length=1)
    access_token: Optional[str] = None
    is_active: Optional[bool] = None


class BusinessResponse(BaseModel):
    """Business as returned by the API; the token is never included raw"""
    id: str
    name: str
    ad_account_id: str
    color_code: Optional[str] = None
    is_active: bool
    masked_token: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TestConnectionRequest(BaseModel):
    ad_account_id: str = Field(..., min_length=1)
    access_token: str = Field(..., min_length=1)


class AccountInfo(BaseModel):
    name: Optional[str] = None
    currency: Optional[str] = None
    status: Optional[int] = None
