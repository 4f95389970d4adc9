"""
Sync Status Register
Process-wide sync state shown by the UI, persisted in system_settings.

    idle -> syncing -> success | failed -> idle (after a grace period)

A `syncing` state that outlives SYNC_STALE_MINUTES is treated as a
crashed run and moved to failed by the reconcile job.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import async_sessionmaker

from adpulse.core.config import settings
from adpulse.models.enums import SyncState
from adpulse.models.system import (
    LAST_SYNC_AT_KEY,
    SYNC_STATUS_KEY,
    SYNC_STATUS_UPDATED_AT_KEY,
)
from adpulse.repositories.settings_repo import SettingsRepository

logger = logging.getLogger(__name__)

SETTING_CATEGORY = "sync"


class SyncStatusSnapshot(BaseModel):
    state: SyncState = SyncState.IDLE
    last_sync_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_state(value: Optional[str]) -> SyncState:
    try:
        return SyncState(value) if value else SyncState.IDLE
    except ValueError:
        return SyncState.IDLE


def next_state(
    snapshot: SyncStatusSnapshot,
    now: datetime,
    grace: timedelta,
    stale_after: timedelta,
) -> SyncState:
    """
    Decide the reconciled state.

    success/failed older than `grace` -> idle
    syncing older than `stale_after` -> failed
    anything else is left alone
    """
    state = snapshot.state
    if state == SyncState.IDLE or snapshot.updated_at is None:
        return state

    age = now - snapshot.updated_at

    if state in (SyncState.SUCCESS, SyncState.FAILED) and age >= grace:
        return SyncState.IDLE
    if state == SyncState.SYNCING and age >= stale_after:
        return SyncState.FAILED
    return state


class SyncStatusRegister:
    """Reads and writes the sync status keys"""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        grace: Optional[timedelta] = None,
        stale_after: Optional[timedelta] = None,
    ):
        self.session_factory = session_factory
        self.grace = grace or timedelta(seconds=settings.SYNC_STATUS_GRACE_SECONDS)
        self.stale_after = stale_after or timedelta(minutes=settings.SYNC_STALE_MINUTES)

    async def read(self) -> SyncStatusSnapshot:
        async with self.session_factory() as session:
            values = await SettingsRepository(session).get_many(
                [SYNC_STATUS_KEY, SYNC_STATUS_UPDATED_AT_KEY, LAST_SYNC_AT_KEY]
            )
        return SyncStatusSnapshot(
            state=_parse_state(values[SYNC_STATUS_KEY]),
            last_sync_at=_parse_time(values[LAST_SYNC_AT_KEY]),
            updated_at=_parse_time(values[SYNC_STATUS_UPDATED_AT_KEY]),
        )

    async def _write(self, state: SyncState, now: Optional[datetime] = None, last_sync: bool = False) -> None:
        now = now or _utcnow()
        async with self.session_factory() as session:
            repo = SettingsRepository(session)
            await repo.set(SYNC_STATUS_KEY, state.value, SETTING_CATEGORY)
            await repo.set(SYNC_STATUS_UPDATED_AT_KEY, now.isoformat(), SETTING_CATEGORY)
            if last_sync:
                await repo.set(LAST_SYNC_AT_KEY, now.isoformat(), SETTING_CATEGORY)
            await session.commit()

    async def mark_syncing(self) -> None:
        await self._write(SyncState.SYNCING)

    async def mark_finished(self, success: bool) -> None:
        """success also records last_sync_at"""
        await self._write(SyncState.SUCCESS if success else SyncState.FAILED, last_sync=success)

    async def reconcile(self, now: Optional[datetime] = None) -> SyncState:
        """Apply next_state to the stored status; returns the resulting state"""
        now = now or _utcnow()
        snapshot = await self.read()
        state = next_state(snapshot, now, self.grace, self.stale_after)

        if state != snapshot.state:
            if state == SyncState.FAILED:
                logger.warning(f"Sync status stuck in syncing since {snapshot.updated_at}, marking failed")
            await self._write(state, now)
        return state


@asynccontextmanager
async def tracked_sync(register: SyncStatusRegister) -> AsyncIterator[None]:
    """syncing on entry, success or failed on exit; exceptions propagate"""
    await register.mark_syncing()
    try:
        yield
    except BaseException:
        await register.mark_finished(success=False)
        raise
    await register.mark_finished(success=True)
