"""
Business repository
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select

from adpulse.models.business import Business
from adpulse.repositories.base import BaseRepository

UPDATABLE_FIELDS = ("name", "color_code", "is_active", "access_token")


class BusinessRepository(BaseRepository):
    model = Business

    async def list_all(self) -> List[Business]:
        result = await self.session.execute(select(Business).order_by(Business.name))
        return list(result.scalars().all())

    async def list_active(self) -> List[Business]:
        """Active businesses, with or without a token"""
        result = await self.session.execute(
            select(Business).where(Business.is_active.is_(True)).order_by(Business.name)
        )
        return list(result.scalars().all())

    async def get(self, business_id: str) -> Optional[Business]:
        return await self.session.get(Business, business_id)

    async def get_by_ad_account_id(self, ad_account_id: str) -> Optional[Business]:
        result = await self.session.execute(
            select(Business).where(Business.ad_account_id == ad_account_id)
        )
        return result.scalars().first()

    async def create(self, data: Dict[str, Any]) -> Business:
        business = Business(**data)
        self.session.add(business)
        await self.session.flush()
        return business

    async def update(self, business: Business, data: Dict[str, Any]) -> Business:
        """Apply a partial update; keys outside the editable set are ignored"""
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(business, field, data[field])
        await self.session.flush()
        return business

    async def delete(self, business_id: str) -> None:
        """Delete by id; dependent rows go through ON DELETE CASCADE"""
        await self.session.execute(delete(Business).where(Business.id == business_id))
