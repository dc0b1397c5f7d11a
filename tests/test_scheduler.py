from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from gastobot.services.scheduler import SWEEP_JOB_ID, create_scheduler, sweep_stale_drafts


class TestCreateScheduler:
    def test_adds_sweep_job(self, store):
        scheduler = create_scheduler(store, ttl_minutes=60, interval_minutes=10)
        job = scheduler.get_job(SWEEP_JOB_ID)
        assert job is not None
        assert job.args == (store, 60)

    def test_disabled_when_ttl_zero(self, store):
        scheduler = create_scheduler(store, ttl_minutes=0, interval_minutes=10)
        assert scheduler.get_jobs() == []


class TestSweepStaleDrafts:
    @pytest.mark.asyncio
    async def test_removes_abandoned_drafts(self, store):
        store.begin(1).updated_at = datetime.now(timezone.utc) - timedelta(hours=3)
        store.begin(2)

        removed = await sweep_stale_drafts(store, ttl_minutes=60)

        assert removed == 1
        assert 1 not in store
        assert 2 in store

    @pytest.mark.asyncio
    async def test_errors_are_logged_not_raised(self):
        broken_store = MagicMock()
        broken_store.evict_stale.side_effect = RuntimeError("boom")

        assert await sweep_stale_drafts(broken_store, ttl_minutes=60) == 0
