import logging
from datetime import datetime
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from iptv_aggregator.config import settings
from iptv_aggregator.services.aggregation_service import run_aggregation
from iptv_aggregator.services.run_coordinator import get_run_coordinator


logger = logging.getLogger(__name__)

JOB_ID = "playlist_update"


class UpdateScheduler:
    """Scheduler for periodic playlist updates"""

    def __init__(self):
        self.scheduler: AsyncIOScheduler | None = None

    async def _update_job(self) -> None:
        """Background job that runs one aggregation"""
        logger.info("Scheduled playlist update triggered")
        try:
            result = await get_run_coordinator().execute(run_aggregation)
            if "error" in result:
                logger.error(f"Scheduled update failed: {result['error']}")
        except Exception as e:
            logger.error(f"Exception in scheduled update: {e}", exc_info=True)

    def start(self, cron_expression: str | None = None) -> None:
        """Start the scheduler when a cron expression is configured"""
        cron_expression = cron_expression or settings.update_cron
        if not cron_expression:
            logger.info("No update schedule configured, scheduler not started")
            return

        if self.scheduler and self.scheduler.running:
            logger.warning("Scheduler already running")
            return

        try:
            trigger = CronTrigger.from_crontab(cron_expression)
        except (ValueError, KeyError) as exc:
            logger.error("Invalid cron expression '%s': %s", cron_expression, exc)
            raise

        self.scheduler = AsyncIOScheduler(timezone='UTC')
        self.scheduler.add_job(
            self._update_job,
            trigger=trigger,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=settings.update_misfire_grace_sec
        )

        self.scheduler.start()
        next_time = self.get_next_run_time()
        logger.info(
            "Scheduler started. Next update: %s",
            next_time.isoformat() if next_time else "unknown"
        )

    def shutdown(self) -> None:
        """Shutdown the scheduler"""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler stopped")
            self.scheduler = None

    def is_running(self) -> bool:
        return bool(self.scheduler and self.scheduler.running)

    def get_next_run_time(self) -> datetime | None:
        """Get next scheduled update time"""
        if not self.scheduler:
            return None
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None


update_scheduler = UpdateScheduler()
