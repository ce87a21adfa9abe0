from __future__ import annotations

import asyncio

import pytest

from iptv_aggregator.config import settings
from iptv_aggregator.services.scheduler_service import UpdateScheduler


def test_scheduler_stays_idle_without_cron(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "update_cron", None)
    scheduler = UpdateScheduler()

    scheduler.start()

    assert scheduler.is_running() is False
    assert scheduler.get_next_run_time() is None


def test_scheduler_registers_cron_job() -> None:
    async def scenario() -> None:
        scheduler = UpdateScheduler()
        scheduler.start("0 */6 * * *")
        try:
            assert scheduler.is_running() is True
            next_run = scheduler.get_next_run_time()
            assert next_run is not None
            assert next_run.hour % 6 == 0
            assert next_run.minute == 0
        finally:
            scheduler.shutdown()

        assert scheduler.is_running() is False

    asyncio.run(scenario())
