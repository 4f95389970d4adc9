"""
Ad set repository
"""
from typing import Any, Dict

from adpulse.models.campaign import AdSet
from adpulse.repositories.base import BaseRepository


class AdSetRepository(BaseRepository):
    model = AdSet

    async def upsert(self, data: Dict[str, Any]) -> None:
        await self._upsert(
            {
                "id": data["id"],
                "campaign_id": data["campaign_id"],
                "name": data.get("name") or data["id"],
                "status": data.get("status"),
            },
            index_elements=["id"],
        )
