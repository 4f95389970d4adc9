"""
System setting repository (key/value store)
"""
from typing import Dict, Iterable, Optional

from sqlalchemy import select

from adpulse.models.system import SystemSetting
from adpulse.repositories.base import BaseRepository


class SettingsRepository(BaseRepository):
    model = SystemSetting

    async def get(self, key: str) -> Optional[str]:
        result = await self.session.execute(
            select(SystemSetting.value).where(SystemSetting.key == key)
        )
        return result.scalars().first()

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        """Values for the given keys; missing keys map to None"""
        keys = list(keys)
        result = await self.session.execute(
            select(SystemSetting.key, SystemSetting.value).where(SystemSetting.key.in_(keys))
        )
        found = {key: value for key, value in result.all()}
        return {key: found.get(key) for key in keys}

    async def set(self, key: str, value: Optional[str], category: Optional[str] = None) -> None:
        values = {"key": key, "value": value}
        if category:
            values["category"] = category
        await self._upsert(values, index_elements=["key"], update_columns=["value"])
