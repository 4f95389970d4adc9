"""
Repository tests: single-query existence checks and idempotent upserts.
"""
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select

from adpulse.models import (
    AdSet,
    Campaign,
    CampaignDailyInsight,
    DailyInsight,
    HourlyStat,
    Lead,
    LeadStatus,
)
from adpulse.repositories import (
    AdRepository,
    AdSetRepository,
    AnalyticsRepository,
    BusinessRepository,
    CampaignRepository,
    LeadRepository,
    SettingsRepository,
)
from tests.helpers.seed import count_rows, seed_synced_tree

DAY = date(2024, 3, 10)


def _mock_session(found_ids):
    session = MagicMock()
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(found_ids)
    session.execute = AsyncMock(return_value=result)
    return session


class TestFindExistingIds:
    @pytest.mark.parametrize("n", [1, 10, 100, 1000])
    @pytest.mark.parametrize("repo_cls", [CampaignRepository, AdSetRepository, AdRepository])
    async def test_one_query_regardless_of_size(self, repo_cls, n):
        ids = [f"id_{i}" for i in range(n)]
        session = _mock_session(ids[::2])

        existing = await repo_cls(session).find_existing_ids(ids)

        assert session.execute.await_count == 1
        assert existing == set(ids[::2])

    async def test_empty_input_issues_no_query(self):
        session = _mock_session([])
        assert await CampaignRepository(session).find_existing_ids([]) == set()
        session.execute.assert_not_awaited()

    async def test_against_database(self, session_factory, business):
        async with session_factory() as session:
            await CampaignRepository(session).upsert({"id": "c1", "business_id": business.id, "name": "One"})
            await session.commit()

        async with session_factory() as session:
            found = await CampaignRepository(session).find_existing_ids(["c1", "c2", None])
        assert found == {"c1"}


class TestEntityUpsert:
    async def test_upsert_updates_in_place(self, session_factory, business):
        async with session_factory() as session:
            repo = CampaignRepository(session)
            await repo.upsert({"id": "c1", "business_id": business.id, "name": "Old", "status": "ACTIVE"})
            await repo.upsert({"id": "c1", "business_id": business.id, "name": "New", "status": "PAUSED"})
            await session.commit()

        async with session_factory() as session:
            rows = (await session.execute(select(Campaign))).scalars().all()
        assert len(rows) == 1
        assert rows[0].name == "New"
        assert rows[0].status == "PAUSED"

    async def test_adset_and_ad_upsert(self, session_factory, business):
        async with session_factory() as session:
            await CampaignRepository(session).upsert({"id": "c1", "business_id": business.id, "name": "C"})
            await AdSetRepository(session).upsert({"id": "s1", "campaign_id": "c1", "name": "S"})
            await AdRepository(session).upsert({
                "id": "a1",
                "ad_set_id": "s1",
                "name": "A",
                "creative_type": "VIDEO",
                "creative_dynamic_data": {"bodies": [{"text": "x"}]},
            })
            await session.commit()

        async with session_factory() as session:
            adset = await session.get(AdSet, "s1")
            ad = await AdRepository(session).find_existing_ids(["a1"])
        assert adset.campaign_id == "c1"
        assert ad == {"a1"}


class TestAnalyticsRepository:
    async def test_daily_insight_is_replaced_not_summed(self, session_factory, business):
        first = {"spend": 100, "impressions": 1000, "clicks": 50, "leads": 10, "ctr": 5.0, "reach": 800}
        second = {"spend": 120, "impressions": 1100, "clicks": 55, "leads": 11, "ctr": 5.0, "reach": 900}

        async with session_factory() as session:
            repo = AnalyticsRepository(session)
            await repo.upsert_daily_insight(business.id, DAY, first)
            await session.commit()

        async with session_factory() as session:
            await AnalyticsRepository(session).upsert_daily_insight(business.id, DAY, second)
            await session.commit()

        async with session_factory() as session:
            rows = (await session.execute(select(DailyInsight))).scalars().all()

        assert len(rows) == 1
        assert float(rows[0].spend) == 120
        assert rows[0].impressions == 1100
        assert rows[0].leads == 11
        assert rows[0].reach == 900

    async def test_same_payload_twice_is_idempotent(self, session_factory, business):
        async with session_factory() as session:
            await CampaignRepository(session).upsert({"id": "c1", "business_id": business.id, "name": "C"})
            await session.commit()

        payload = {"spend": 10, "impressions": 100, "clicks": 5, "leads": 1}
        for _ in range(2):
            async with session_factory() as session:
                await AnalyticsRepository(session).upsert_campaign_insight("c1", DAY, payload)
                await session.commit()

        async with session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(CampaignDailyInsight))
            row = (await session.execute(select(CampaignDailyInsight))).scalars().one()

        assert count == 1
        assert row.clicks == 5
        assert row.leads_whatsapp == 0

    async def test_hourly_stats(self, session_factory, business):
        rows = [
            {"business_id": business.id, "date": DAY, "hour": h, "spend": 1.5, "impressions": 10,
             "clicks": 1, "messaging_conversations": h}
            for h in range(3)
        ]
        async with session_factory() as session:
            repo = AnalyticsRepository(session)
            assert await repo.upsert_hourly_stats(rows) == 3
            rows[1]["messaging_conversations"] = 42
            await repo.upsert_hourly_stats(rows)
            await session.commit()

        async with session_factory() as session:
            stats = (await session.execute(select(HourlyStat).order_by(HourlyStat.hour))).scalars().all()

        assert [s.hour for s in stats] == [0, 1, 2]
        assert stats[1].messaging_conversations == 42


class TestLeadRepository:
    async def test_resync_keeps_operator_fields(self, session_factory, business):
        lead = {
            "id": "lead1",
            "business_id": business.id,
            "ad_id": "a1",
            "ad_name": "Old ad",
            "full_name": "Ana",
            "email": "ana@example.com",
        }
        async with session_factory() as session:
            await LeadRepository(session).upsert_many([lead])
            await session.commit()

        async with session_factory() as session:
            stored = await session.get(Lead, "lead1")
            stored.status = LeadStatus.CONTACTED
            stored.notes = "Called twice"
            await session.commit()

        async with session_factory() as session:
            await LeadRepository(session).upsert_many([{**lead, "ad_name": "Renamed ad", "full_name": "Changed"}])
            await session.commit()

        async with session_factory() as session:
            stored = await session.get(Lead, "lead1")

        assert stored.ad_name == "Renamed ad"
        assert stored.full_name == "Ana"
        assert stored.status == LeadStatus.CONTACTED
        assert stored.notes == "Called twice"


class TestSettingsRepository:
    async def test_set_get_and_overwrite(self, session_factory):
        async with session_factory() as session:
            repo = SettingsRepository(session)
            await repo.set("sync_status", "syncing", "sync")
            await repo.set("sync_status", "success", "sync")
            await session.commit()

        async with session_factory() as session:
            repo = SettingsRepository(session)
            assert await repo.get("sync_status") == "success"
            assert await repo.get_many(["sync_status", "missing"]) == {"sync_status": "success", "missing": None}


class TestBusinessRepository:
    async def test_delete_cascades_to_synced_rows(self, session_factory, business):
        await seed_synced_tree(session_factory, business.id)
        assert all(n > 0 for n in (await count_rows(session_factory)).values())

        async with session_factory() as session:
            await BusinessRepository(session).delete(business.id)
            await session.commit()

        counts = await count_rows(session_factory)
        assert counts == {table: 0 for table in counts}

    async def test_delete_leaves_other_businesses(self, session_factory, business):
        async with session_factory() as session:
            await BusinessRepository(session).create({
                "id": "biz-2", "name": "Other", "ad_account_id": "act_2", "access_token": "tok2",
            })
            await session.commit()
        await seed_synced_tree(session_factory, business.id)
        await seed_synced_tree(session_factory, "biz-2", prefix="other-")

        async with session_factory() as session:
            await BusinessRepository(session).delete(business.id)
            await session.commit()

        async with session_factory() as session:
            assert await session.get(Campaign, "c1") is None
            assert await session.get(Campaign, "other-c1") is not None
            assert await session.scalar(select(func.count()).select_from(Lead)) == 3
