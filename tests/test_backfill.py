"""
Tests for the backfill and smart-sync drivers.
"""
import asyncio
from datetime import date, timedelta

import pytest

from adpulse.models import Business
from adpulse.services.sync.backfill import (
    BusinessNotFoundError,
    backfill_business,
    past_days,
    smart_sync,
)
from adpulse.services.sync.data_sync import (
    ACCOUNT_ONLY,
    BusinessSyncResult,
    DataSyncService,
    SyncPhase,
    SyncRunSummary,
)
from tests.helpers.fake_meta import FakeMetaAPI


def test_past_days_most_recent_first():
    days = past_days(3, today=date(2024, 3, 10))
    assert days == [date(2024, 3, 9), date(2024, 3, 8), date(2024, 3, 7)]


def test_past_days_crosses_month_boundary():
    days = past_days(2, today=date(2024, 3, 1))
    assert days == [date(2024, 2, 29), date(2024, 2, 28)]


class TestBackfillBusiness:
    async def test_three_failing_dates_out_of_thirty(self, session_factory, business):
        failing = set(past_days(30)[5:8])
        in_flight = 0
        peak = 0
        seen = []

        async def syncer(b, day):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            try:
                await asyncio.sleep(0)
                seen.append(day)
                if day in failing:
                    raise RuntimeError(f"sync failed for {day}")
                return BusinessSyncResult(
                    business_id=b.id, business_name=b.name, day=day, counts={"account_insights": 1}
                )
            finally:
                in_flight -= 1

        result = await backfill_business(session_factory, business.id, days_back=30, syncer=syncer)

        assert (result.synced, result.failed) == (27, 3)
        assert result.business_name == "Acme Clinic"
        assert len(seen) == 30
        assert peak <= 5

    async def test_failed_phase_and_empty_day_count_as_failed(self, session_factory, business):
        async def syncer(b, day):
            if day == past_days(1)[0]:
                return BusinessSyncResult(
                    business_id=b.id, business_name=b.name, day=day, phases_failed={"account": "boom"}
                )
            return BusinessSyncResult(business_id=b.id, business_name=b.name, day=day)

        result = await backfill_business(session_factory, business.id, days_back=3, syncer=syncer)

        assert (result.synced, result.failed) == (0, 3)

    async def test_account_only_pipeline_writes_rows(self, session_factory, business):
        fake = FakeMetaAPI(account={"spend": "5", "impressions": "50", "clicks": "1"})
        service = DataSyncService(session_factory, api_factory=lambda token: fake)

        outcomes = []

        async def syncer(b, day):
            outcome = await service.sync_business(b, day, ACCOUNT_ONLY)
            outcomes.append(outcome)
            return outcome

        result = await backfill_business(session_factory, business.id, days_back=2, syncer=syncer)

        assert (result.synced, result.failed) == (2, 0)
        assert "fetch_campaigns" not in fake.calls
        assert all(o.phases_completed == [SyncPhase.ACCOUNT] for o in outcomes)

    async def test_unknown_business(self, session_factory):
        with pytest.raises(BusinessNotFoundError):
            await backfill_business(session_factory, "missing", days_back=1)

    async def test_business_without_token_fails_every_date(self, session_factory):
        async with session_factory() as session:
            session.add(Business(id="biz-9", name="Tokenless", ad_account_id="act_9", access_token=None))
            await session.commit()

        calls = []

        async def syncer(b, day):
            calls.append(day)

        result = await backfill_business(session_factory, "biz-9", days_back=4, syncer=syncer)

        assert (result.synced, result.failed) == (0, 4)
        assert calls == []


class _ScriptedService:
    """Stands in for DataSyncService inside sync_daily_insights"""

    def __init__(self, rate_limited_days=(), raising_days=()):
        self.rate_limited_days = set(rate_limited_days)
        self.raising_days = set(raising_days)
        self.days = []

    async def sync_business(self, business, day, phases):
        self.days.append(day)
        if day in self.raising_days:
            raise RuntimeError("(#17) User request limit reached")
        return BusinessSyncResult(
            business_id=business.id,
            business_name=business.name,
            day=day,
            rate_limited=day in self.rate_limited_days,
            phases_failed={"hourly": "limit"} if day in self.rate_limited_days else {},
        )


class TestSmartSync:
    async def test_sequential_days_with_delay(self, session_factory, business):
        today = date(2024, 3, 10)
        service = _ScriptedService()
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        result = await smart_sync(
            session_factory, days=3, delay=1.0, rate_limit_backoff=60,
            sleep=fake_sleep, service=service, today=today,
        )

        assert service.days == [today, today - timedelta(days=1), today - timedelta(days=2)]
        assert sleeps == [1.0, 1.0]
        assert result.synced == 3

    async def test_backs_off_after_rate_limit(self, session_factory, business):
        today = date(2024, 3, 10)
        service = _ScriptedService(
            rate_limited_days=[today],
            raising_days=[today - timedelta(days=1)],
        )
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        result = await smart_sync(
            session_factory, days=3, delay=1.0, rate_limit_backoff=60,
            sleep=fake_sleep, service=service, today=today,
        )

        # Day 1: flagged result, day 2: raised with a rate-limit message
        assert sleeps == [60, 60]
        assert [d.rate_limited for d in result.days] == [True, True, False]
        assert len(result.days) == 3


def test_run_summary_rate_limited_flag():
    summary = SyncRunSummary(day=date(2024, 3, 10))
    assert not summary.rate_limited
