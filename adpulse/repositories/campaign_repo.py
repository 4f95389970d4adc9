"""
Campaign repository
"""
from typing import Any, Dict

from adpulse.models.campaign import Campaign
from adpulse.repositories.base import BaseRepository


class CampaignRepository(BaseRepository):
    model = Campaign

    async def upsert(self, data: Dict[str, Any]) -> None:
        """Insert or update a campaign keyed on its Meta id"""
        await self._upsert(
            {
                "id": data["id"],
                "business_id": data["business_id"],
                "name": data.get("name") or data["id"],
                "objective": data.get("objective"),
                "status": data.get("status"),
            },
            index_elements=["id"],
        )
