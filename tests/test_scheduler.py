"""
Scheduler job tests (jobs are called directly, the scheduler is not started).
"""
from adpulse.models.enums import SyncState
from adpulse.models.system import AUTO_SYNC_ENABLED_KEY
from adpulse.repositories.settings_repo import SettingsRepository
from adpulse.services.sync.data_sync import SyncRunSummary
from adpulse.services.sync.status import SyncStatusRegister
from adpulse.tasks import scheduler


async def _set(session_factory, key, value):
    async with session_factory() as session:
        await SettingsRepository(session).set(key, value)
        await session.commit()


async def test_auto_sync_enabled_by_default(session_factory):
    assert await scheduler.is_auto_sync_enabled(session_factory)


async def test_auto_sync_disabled_setting(session_factory, monkeypatch):
    await _set(session_factory, AUTO_SYNC_ENABLED_KEY, "false")
    calls = []

    async def fake_sync(session_factory, target_date=None):
        calls.append(target_date)

    monkeypatch.setattr(scheduler, "sync_daily_insights", fake_sync)

    await scheduler.auto_sync_job(session_factory)

    assert calls == []
    assert (await SyncStatusRegister(session_factory).read()).state == SyncState.IDLE


async def test_auto_sync_runs_tracked(session_factory, monkeypatch, sync_day):
    await _set(session_factory, AUTO_SYNC_ENABLED_KEY, "TRUE")

    async def fake_sync(session_factory, target_date=None):
        return SyncRunSummary(day=sync_day, synced=1)

    monkeypatch.setattr(scheduler, "sync_daily_insights", fake_sync)

    await scheduler.auto_sync_job(session_factory)

    assert (await SyncStatusRegister(session_factory).read()).state == SyncState.SUCCESS


async def test_auto_sync_failure_is_logged_not_raised(session_factory, monkeypatch):
    async def broken(session_factory, target_date=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(scheduler, "sync_daily_insights", broken)

    await scheduler.auto_sync_job(session_factory)

    assert (await SyncStatusRegister(session_factory).read()).state == SyncState.FAILED
