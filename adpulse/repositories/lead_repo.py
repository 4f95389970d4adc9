"""
Lead repository
"""
from typing import Any, Dict, List

from adpulse.models.enums import LeadStatus
from adpulse.models.lead import Lead
from adpulse.repositories.base import BaseRepository

# Only these are refreshed on re-sync; status, notes and contact
# fields of an existing lead belong to the operator
RESYNC_COLUMNS = ("ad_name", "created_time")


class LeadRepository(BaseRepository):
    model = Lead

    async def upsert_many(self, leads: List[Dict[str, Any]]) -> int:
        """Insert new leads, refresh ad_name/created_time of known ones"""
        for lead in leads:
            await self._upsert(
                {
                    "id": lead["id"],
                    "business_id": lead["business_id"],
                    "created_time": lead.get("created_time"),
                    "ad_id": lead.get("ad_id"),
                    "ad_name": lead.get("ad_name"),
                    "full_name": lead.get("full_name"),
                    "email": lead.get("email"),
                    "phone": lead.get("phone"),
                    "raw_field_data": lead.get("raw_field_data"),
                    "status": LeadStatus.NEW,
                },
                index_elements=["id"],
                update_columns=RESYNC_COLUMNS,
            )
        return len(leads)
