"""
Ad repository
"""
from typing import Any, Dict

from adpulse.models.campaign import Ad
from adpulse.repositories.base import BaseRepository

CREATIVE_COLUMNS = (
    "creative_url",
    "thumbnail_url",
    "creative_type",
    "creative_body",
    "creative_title",
    "creative_dynamic_data",
)


class AdRepository(BaseRepository):
    model = Ad

    async def upsert(self, data: Dict[str, Any]) -> None:
        """Insert or update an ad together with its resolved creative columns"""
        values = {
            "id": data["id"],
            "ad_set_id": data["ad_set_id"],
            "name": data.get("name") or data["id"],
            "status": data.get("status"),
        }
        for column in CREATIVE_COLUMNS:
            values[column] = data.get(column)

        await self._upsert(values, index_elements=["id"])
